"""
Sweep orchestration.

- `resolver`: sweep point counts and abscissa generation
- `step`: step an instrument through setpoints, measuring after each
- `temperature`: heat-then-cool temperature sweep

See Also
--------
labsweep.types.sweep : Sweep data model
"""

from .resolver import SweepPointResolver, generate_abscissa, log_observer
from .step import PulseDelayStep, PulseWidthStep, StepSweep
from .temperature import (
    HeaterStage,
    SweepPhase,
    TemperatureRecord,
    TemperatureSweep,
    TemperatureSweepConfig,
    default_heater_table,
)

__all__ = [
    "SweepPointResolver",
    "generate_abscissa",
    "log_observer",
    "StepSweep",
    "PulseWidthStep",
    "PulseDelayStep",
    "HeaterStage",
    "SweepPhase",
    "TemperatureRecord",
    "TemperatureSweep",
    "TemperatureSweepConfig",
    "default_heater_table",
]
