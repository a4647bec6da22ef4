"""
Data model, error taxonomy and the device role system.

1. Sweep data model (sweep.py)
    - SweepRange, point-count capability variants, per-cycle point count cache
2. Errors (errors.py)
    - TransportError, ProtocolError, InvalidConfiguration, InconsistentPointCount
3. Role system
    - Protocols define the methods a device must implement for a role
    - Interfaces wrap devices and add role-level logic
    - Roles connect the two and validate devices

Examples
--------
```python
from labsweep.types import SPECTRUM_ANALYZER, SweepRange, Heuristic
sa = SPECTRUM_ANALYZER.get_interface(device)
```

See Also
--------
labsweep.sweep.resolver : Point count resolution and abscissa generation
labsweep.device : Device implementations
"""

from __future__ import annotations

from .errors import (
    InconsistentPointCount,
    InvalidConfiguration,
    LabsweepError,
    ProtocolError,
    SweepTimeout,
    TransportError,
)
from .sweep import (
    CachedPointCount,
    HardwareFixed,
    HardwareQueryable,
    Heuristic,
    PointCountCapability,
    SweepRange,
    capability_from_profile,
    validate_point_count,
)
from .protocols import MagnetSupplyProtocol, SpectrumAnalyzerProtocol
from .interfaces import MagnetSupplyInterface, RoleInterface, SpectrumAnalyzerInterface
from .roles import (
    MAGNET_SUPPLY,
    PREFIX_TO_ROLE,
    SPECTRUM_ANALYZER,
    DeviceRole,
    MagnetPowerSupply,
    SpectrumAnalyzer,
)

__all__ = [
    "LabsweepError",
    "TransportError",
    "ProtocolError",
    "InvalidConfiguration",
    "InconsistentPointCount",
    "SweepTimeout",
    "SweepRange",
    "HardwareQueryable",
    "HardwareFixed",
    "Heuristic",
    "PointCountCapability",
    "CachedPointCount",
    "capability_from_profile",
    "validate_point_count",
    "SpectrumAnalyzerProtocol",
    "MagnetSupplyProtocol",
    "RoleInterface",
    "SpectrumAnalyzerInterface",
    "MagnetSupplyInterface",
    "DeviceRole",
    "SpectrumAnalyzer",
    "SPECTRUM_ANALYZER",
    "MagnetPowerSupply",
    "MAGNET_SUPPLY",
    "PREFIX_TO_ROLE",
]
