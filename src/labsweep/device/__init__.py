# -*- coding: utf-8 -*-
"""
Hardware device implementations for labsweep.

- Spectrum analyzers (generic SCPI over VISA, mock implementation)
- Magnet power supplies (Oxford Instruments IPS)
- VISA connections, with optional exchange tracing

Each device class derives from the Device base class, allowing consistent
interaction regardless of the specific hardware.

Examples
--------
```python
from labsweep.device import SCPISpectrumAnalyzer
sa = SCPISpectrumAnalyzer("TCPIP0::192.168.1.20::INSTR", hardwired_number_of_x_points=601)
sa.open()
```

See Also
--------
labsweep.types.roles : Device role definitions
"""

from .device import Device
from .connection import TraceConnection, VisaConnection
from .spectrum_analyzer import SCPISpectrumAnalyzer, SpectrumAnalyzerBase
from .magnet import MagnetSupply, OxfordIPS
from .mock import MockSpectrumAnalyzer

__all__ = [
    "Device",
    "VisaConnection",
    "TraceConnection",
    "SpectrumAnalyzerBase",
    "SCPISpectrumAnalyzer",
    "MockSpectrumAnalyzer",
    "MagnetSupply",
    "OxfordIPS",
]
