# -*- coding: utf-8 -*-
"""# labsweep

Laboratory instrument drivers and sweep orchestration.

- [Devices](device/index.html): spectrum analyzer drivers, VISA connections.
- [Sweeps](sweep/index.html): sweep point resolution, step and temperature sweeps.
- [Types](types/index.html): sweep data model, errors, device roles.

Quick example:

```python
from labsweep.device import MockSpectrumAnalyzer
from labsweep.types import SPECTRUM_ANALYZER

sa = SPECTRUM_ANALYZER.get_interface(MockSpectrumAnalyzer(num_points=201))
freqs, powers = sa.get_trace_xy()
```
"""

from ._version import __version__
