"""Role interfaces that wrap devices and provide role-specific functionality.

Interfaces wrap a device implementing a role protocol and expose a clean,
documented API to sweeps and scripts. They may add logic on top of the plain
device calls; the spectrum analyzer interface, for example, builds the X-trace
from the frequency span and a resolved point count.

Example
-------
Using a device through its role interface:

    sa = SPECTRUM_ANALYZER.get_interface(MockSpectrumAnalyzer())
    freqs, powers = sa.get_trace_xy()

See Also
--------
labsweep.types.protocols : Protocol definitions
labsweep.types.roles : Role definitions and validation
labsweep.sweep.resolver : Point count resolution
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np

from labsweep.device.device import Device
from labsweep.types.protocols import MagnetSupplyProtocol, SpectrumAnalyzerProtocol
from labsweep.types.sweep import Heuristic, PointCountCapability, SweepRange

if TYPE_CHECKING:
    from labsweep.sweep.resolver import Observer, SweepPointResolver


class RoleInterface:
    """Base class for role-specific interfaces.

    Attributes
    ----------
    _device : Device
        The wrapped device instance
    """

    def __init__(self, device: Device):
        self._device = device

    @property
    def device(self) -> Device:
        return self._device


class SpectrumAnalyzerInterface(RoleInterface):
    """Interface for spectrum analyzer functionality.

    Wraps a device implementing SpectrumAnalyzerProtocol. Y-traces come from
    the device; X-traces are computed from the current frequency span and the
    number of sweep points, which is resolved with whichever strategy the
    device's point-count capability allows.

    Typical usage:
    ```python
    sa = SPECTRUM_ANALYZER.get_interface(device)
    sa.set_frequency_start(1e6)
    sa.set_frequency_stop(3e9)
    freqs, powers = sa.get_trace_xy(trace=1)
    ```
    """

    def __init__(
        self,
        device: SpectrumAnalyzerProtocol,
        observer: Optional[Observer] = None,
    ):
        """Initialize the spectrum analyzer interface.

        Parameters
        ----------
        device : SpectrumAnalyzerProtocol
            Device implementing the SpectrumAnalyzerProtocol
        observer : Callable[[str], None], optional
            Receives point-count diagnostics, see SweepPointResolver
        """
        # lazy import, avoids circular import with labsweep.sweep
        from labsweep.sweep.resolver import SweepPointResolver

        super().__init__(device)
        self._resolver = SweepPointResolver(
            query_point_count=device.get_sweep_points, observer=observer
        )
        # set by get_trace_y, the following X-trace belongs to that sweep
        self._trace_in_cycle = False

    @property
    def resolver(self) -> SweepPointResolver:
        return self._resolver

    @property
    def capability(self) -> PointCountCapability:
        return self._device.get_point_count_capability()

    def get_sweep_range(self) -> SweepRange:
        """Current frequency span as a SweepRange (Hz)."""
        return SweepRange(
            start=self._device.get_frequency_start(),
            stop=self._device.get_frequency_stop(),
        )

    def set_frequency_start(self, freq: float) -> None:
        self._device.set_frequency_start(freq)

    def set_frequency_stop(self, freq: float) -> None:
        self._device.set_frequency_stop(freq)

    def set_sweep_points(self, points: int) -> None:
        self._device.set_sweep_points(points)
        self._new_cycle()

    def _new_cycle(self) -> None:
        self._resolver.begin_cycle()
        self._trace_in_cycle = False

    def get_x_points_number(self, trace: int = 1, timeout: Optional[float] = None) -> int:
        """Number of points in a sweep.

        Uses the hardwired value if the device has one, the hardware query if
        the device supports it, and otherwise measures a full Y-trace and
        counts its points. After `get_trace_y` the value belongs to that
        trace and is reused; without one every call resolves afresh.
        """
        if not self._trace_in_cycle:
            self._resolver.begin_cycle()
        return self._resolver.resolve_point_count(
            self.capability,
            lambda: len(self._device.get_trace_y(trace, timeout)),
        )

    def get_trace_y(self, trace: int = 1, timeout: Optional[float] = None) -> np.ndarray:
        """Perform a single sweep and return the Y points of a trace.

        Starts a new acquisition cycle. For heuristic devices the trace length
        is remembered as the point count, so a following `get_trace_x` does
        not sweep again.
        """
        self._new_cycle()
        trace_y = np.asarray(self._device.get_trace_y(trace, timeout), dtype=float)
        capability = self.capability
        if isinstance(capability, Heuristic):
            self._resolver.record_point_count(len(trace_y), str(capability))
        self._trace_in_cycle = True
        return trace_y

    def get_trace_x(self, trace: int = 1, timeout: Optional[float] = None) -> np.ndarray:
        """Return the X points (frequencies in Hz) of a trace."""
        count = self.get_x_points_number(trace, timeout)
        return self._resolver.generate_abscissa(self.get_sweep_range(), count)

    def get_trace_xy(
        self, trace: int = 1, timeout: Optional[float] = None, strict: bool = False
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Perform a single sweep and return `(frequencies, values)`.

        Parameters
        ----------
        trace : int, optional
            Trace number (1..3), by default 1
        timeout : float, optional
            Timeout for the sweep in seconds. Defaults to the connection's
            timeout.
        strict : bool, optional
            Raise InconsistentPointCount if the trace length disagrees with
            the queried/hardwired point count, by default False

        Returns
        -------
        tuple[np.ndarray, np.ndarray]
            X and Y arrays, the first dimension runs over the sweep points
        """
        self._trace_in_cycle = False
        trace_xy = self._resolver.acquire_sweep(
            self.get_sweep_range(),
            self.capability,
            lambda: self._device.get_trace_y(trace, timeout),
            strict=strict,
        )
        self._trace_in_cycle = True
        return trace_xy


class MagnetSupplyInterface(RoleInterface):
    """Interface for magnet power supplies."""

    def __init__(self, device: MagnetSupplyProtocol):
        super().__init__(device)

    def get_current(self) -> float:
        return self._device.get_current()

    def get_sweeprate(self) -> float:
        return self._device.get_sweeprate()

    def hold(self) -> None:
        self._device.set_hold(True)

    def sweep_to(self, target: float, rate: Optional[float] = None) -> None:
        """Start sweeping the output to `target` A.

        Parameters
        ----------
        target : float
            Target current in A
        rate : float, optional
            Sweep rate in A/s. If None, the rate set on the supply is kept.
        """
        if rate is not None:
            self._device.set_sweeprate(rate)
        self._device.set_current(target)
        self._device.set_hold(False)
