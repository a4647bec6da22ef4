"""Heat-then-cool temperature sweep with a threshold heater table.

The sweep runs in two phases:

1. HEATING: the heater output is chosen from a table of temperature
   thresholds (bang-bang, no PID). Once the sensor reaches the upper
   temperature the heater is switched off.
2. COOLING: the sample cools freely. Points are recorded while the sensor is
   at or below the upper temperature, and the sweep ends when it reaches the
   lower temperature.

The controller only needs `get_value(channel) -> float` (sensor temperature
in K) and `set_heater_output(percent)`.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, List, Optional

from loguru import logger

from labsweep.types.errors import InvalidConfiguration, SweepTimeout


class SweepPhase(Enum):
    HEATING = auto()
    COOLING = auto()
    DONE = auto()


@dataclass(frozen=True)
class HeaterStage:
    """One row of the heater table.

    Attributes
    ----------
    upper : float
        Temperature bound (K) of this stage
    output : float
        Heater output in percent of the heater limit (0..99)
    inclusive : bool
        Whether a temperature equal to `upper` still belongs to this stage
    """

    upper: float
    output: float
    inclusive: bool = True

    def contains(self, temperature: float) -> bool:
        if self.inclusive:
            return temperature <= self.upper
        return temperature < self.upper


def default_heater_table() -> List[HeaterStage]:
    return [
        HeaterStage(upper=15.0, output=33.0, inclusive=False),
        HeaterStage(upper=40.0, output=56.0),
        HeaterStage(upper=math.inf, output=70.0),
    ]


@dataclass
class TemperatureSweepConfig:
    """Configuration for a TemperatureSweep.

    Attributes
    ----------
    lower : float
        Temperature (K) at which the cooling phase ends
    upper : float
        Temperature (K) at which the heater is switched off
    interval : float
        Seconds between sensor readings
    sensor_channel : int
        Controller channel of the sensor
    heater_table : list[HeaterStage]
        Stages in increasing `upper` order; the last must cover all
        temperatures
    max_iterations : int, optional
        Abort with SweepTimeout after this many readings. None for no limit.
    """

    lower: float = 0.0
    upper: float = 10.0
    interval: float = 1.0
    sensor_channel: int = 3
    heater_table: List[HeaterStage] = field(default_factory=default_heater_table)
    max_iterations: Optional[int] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        validators = {
            "upper": (self.upper > self.lower, "Upper temperature must exceed lower"),
            "interval": (self.interval >= 0, "Interval cannot be negative"),
            "heater_table": (len(self.heater_table) > 0, "Heater table is empty"),
            "max_iterations": (
                self.max_iterations is None or self.max_iterations > 0,
                "max_iterations must be positive",
            ),
        }
        for param, (valid, message) in validators.items():
            if not valid:
                raise InvalidConfiguration(f"{message} (got {getattr(self, param)})")

        uppers = [stage.upper for stage in self.heater_table]
        if uppers != sorted(uppers):
            raise InvalidConfiguration("Heater table stages must be sorted by temperature")
        if not math.isinf(uppers[-1]):
            raise InvalidConfiguration("Last heater stage must be unbounded (upper=inf)")
        for stage in self.heater_table:
            if not 0 <= stage.output <= 99:
                raise InvalidConfiguration(
                    f"Heater output must be within 0..99 %, got {stage.output}"
                )


@dataclass
class TemperatureRecord:
    phase: SweepPhase
    temperature: float
    heater_output: float
    data: Any = None


class TemperatureSweep:
    """Heat to `config.upper`, then record while cooling to `config.lower`.

    Parameters
    ----------
    controller
        Temperature controller with `get_value(channel)` and
        `set_heater_output(percent)`
    config : TemperatureSweepConfig
        Sweep configuration
    measure : Callable[[], Any], optional
        Called for every recorded point, its result is stored with the point
    sleep : Callable[[float], None], optional
        Waits between readings, by default time.sleep
    """

    def __init__(
        self,
        controller,
        config: TemperatureSweepConfig,
        measure: Optional[Callable[[], Any]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.controller = controller
        self.config = config
        self.measure = measure
        self.sleep = sleep
        self.phase = SweepPhase.HEATING
        self.heater_output = 0.0
        self.records: List[TemperatureRecord] = []

    def heater_output_for(self, temperature: float) -> float:
        for stage in self.config.heater_table:
            if stage.contains(temperature):
                return stage.output
        # unreachable for a validated table, last stage is unbounded
        return self.config.heater_table[-1].output

    def get_value(self) -> float:
        return float(self.controller.get_value(self.config.sensor_channel))

    def _set_heater(self, output: float) -> None:
        if output != self.heater_output:
            logger.debug(f"Heater output {self.heater_output} % -> {output} %")
        self.controller.set_heater_output(output)
        self.heater_output = output

    def _record(self, temperature: float) -> None:
        data = self.measure() if self.measure is not None else None
        self.records.append(
            TemperatureRecord(self.phase, temperature, self.heater_output, data)
        )

    def step(self) -> bool:
        """Take one reading and act on it. Returns True when the sweep is done."""
        temperature = self.get_value()
        upper = self.config.upper

        if self.phase is SweepPhase.HEATING:
            if temperature >= upper:
                self._set_heater(0)
                self.phase = SweepPhase.COOLING
                logger.info(f"Reached {temperature} K, heater off, cooling down")
                return False
            self._set_heater(self.heater_output_for(temperature))
            self._record(temperature)
            return False

        if self.phase is SweepPhase.COOLING:
            if temperature > upper:
                return False
            if temperature <= self.config.lower:
                self.phase = SweepPhase.DONE
                logger.info(f"Reached {temperature} K, temperature sweep done")
                return True
            self._record(temperature)
            return False

        return True

    def run(self) -> List[TemperatureRecord]:
        """Run the sweep to completion and return all recorded points."""
        logger.info(
            f"Temperature sweep {self.config.upper} K -> {self.config.lower} K, "
            f"interval {self.config.interval} s"
        )
        iterations = 0
        while not self.step():
            iterations += 1
            if (
                self.config.max_iterations is not None
                and iterations >= self.config.max_iterations
            ):
                self._set_heater(0)
                raise SweepTimeout(
                    f"Temperature sweep not finished after {iterations} readings "
                    f"(phase {self.phase.name})"
                )
            self.sleep(self.config.interval)
        return self.records

    def cooling_records(self) -> List[TemperatureRecord]:
        return [r for r in self.records if r.phase is SweepPhase.COOLING]
