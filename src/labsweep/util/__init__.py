# -*- coding: utf-8 -*-
"""
Utility functions and constants for labsweep.

- Logging configuration and management
- Default values (timeouts, terminations, log levels)
- VISA device discovery

Examples
--------
Starting a log for a script:
```python
from labsweep.util import start_log
start_log(log_to_file=True, log_to_stdout=True, log_level="DEBUG")
```

See Also
--------
labsweep.util.logging : Logging configuration
"""

from .check_hw import list_visa_devices
from .defaults import (
    DEFAULT_LOGLEVEL,
    DEFAULT_READ_TERMINATION,
    DEFAULT_TRACE_TIMEOUT,
    DEFAULT_VISA_TIMEOUT,
    DEFAULT_WRITE_TERMINATION,
    TEST_LOGLEVEL,
)
from .logging import (
    clear_log,
    get_log_filename,
    log_default_path,
    shutdown_log,
    start_log,
)

__all__ = [
    "DEFAULT_LOGLEVEL",
    "DEFAULT_READ_TERMINATION",
    "DEFAULT_TRACE_TIMEOUT",
    "DEFAULT_VISA_TIMEOUT",
    "DEFAULT_WRITE_TERMINATION",
    "TEST_LOGLEVEL",
    "clear_log",
    "get_log_filename",
    "list_visa_devices",
    "log_default_path",
    "shutdown_log",
    "start_log",
]
