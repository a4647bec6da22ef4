"""Step sweeps: move an instrument through a list of setpoints.

A `StepSweep` calls its setter for each point, then its measurement
callable, and collects the `(setpoint, measurement)` pairs. Setpoints are
either given explicitly or generated on a linear grid with
`generate_abscissa`.

`PulseWidthStep` and `PulseDelayStep` are step sweeps whose setter drives a
pulse generator channel.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from labsweep.sweep.resolver import generate_abscissa
from labsweep.types.errors import InvalidConfiguration
from labsweep.types.sweep import SweepRange


class StepSweep:
    """Step a setter through setpoints, measuring after each step.

    Parameters
    ----------
    setter : Callable[[float], None]
        Moves the instrument to a setpoint
    points : Sequence[float], optional
        Explicit setpoints. Mutually exclusive with `sweep_range`.
    sweep_range : SweepRange, optional
        Linear range to step through with `num_points` points
    num_points : int, optional
        Number of points on the linear grid
    filename_extension : str, optional
        Prefix used when naming per-point output, e.g. "Pulsewidth="
    """

    filename_extension = "Step="

    def __init__(
        self,
        setter: Callable[[float], None],
        points: Optional[Sequence[float]] = None,
        sweep_range: Optional[SweepRange] = None,
        num_points: Optional[int] = None,
        filename_extension: Optional[str] = None,
    ):
        if (points is None) == (sweep_range is None):
            raise InvalidConfiguration("Give exactly one of points or sweep_range")
        if points is not None:
            if len(points) == 0:
                raise InvalidConfiguration("Step sweep needs at least one point")
            self.points = np.asarray(points, dtype=float)
        else:
            if num_points is None:
                raise InvalidConfiguration("num_points is required with sweep_range")
            self.points = generate_abscissa(sweep_range, num_points)
        self.setter = setter
        if filename_extension is not None:
            self.filename_extension = filename_extension

    def __len__(self) -> int:
        return len(self.points)

    def point_label(self, value: float) -> str:
        """Label for a setpoint, e.g. 'Pulsewidth=1e-06'."""
        return f"{self.filename_extension}{value:g}"

    def go_to(self, value: float) -> None:
        self.setter(value)

    def run(self, measure: Callable[[], Any]) -> List[Tuple[float, Any]]:
        """Run the sweep.

        Parameters
        ----------
        measure : Callable[[], Any]
            Called once after each setpoint

        Returns
        -------
        list[tuple[float, Any]]
            `(setpoint, measurement)` in sweep order
        """
        results = []
        for i, value in enumerate(self.points):
            value = float(value)
            self.go_to(value)
            data = measure()
            logger.info(f"[{i + 1}/{len(self)}] {self.point_label(value)}: {data}")
            results.append((value, data))
        return results


class PulseWidthStep(StepSweep):
    """Pulse width sweep on one channel of a pulse generator.

    The instrument must provide
    `set_pulsewidth(channel=..., value=..., constant_delay=...)`.
    """

    filename_extension = "Pulsewidth="

    def __init__(self, instrument, channel: int = 1, constant_delay: float = 0, **kwargs):
        self.instrument = instrument
        self.channel = channel
        self.constant_delay = constant_delay
        super().__init__(setter=self._pulsewidth_setter, **kwargs)

    def _pulsewidth_setter(self, value: float) -> None:
        self.instrument.set_pulsewidth(
            channel=self.channel, value=value, constant_delay=self.constant_delay
        )


class PulseDelayStep(StepSweep):
    """Pulse delay sweep on one channel of a pulse generator.

    The instrument must provide
    `set_pulsedelay(channel=..., value=..., constant_width=...)`.
    """

    filename_extension = "Pulsedelay="

    def __init__(self, instrument, channel: int = 1, constant_width: float = 0, **kwargs):
        self.instrument = instrument
        self.channel = channel
        self.constant_width = constant_width
        super().__init__(setter=self._pulsedelay_setter, **kwargs)

    def _pulsedelay_setter(self, value: float) -> None:
        self.instrument.set_pulsedelay(
            channel=self.channel, value=value, constant_width=self.constant_width
        )
