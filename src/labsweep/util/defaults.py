# -*- coding: utf-8 -*-

DEFAULT_LOGLEVEL = "INFO"
TEST_LOGLEVEL = "TRACE"

DEFAULT_VISA_TIMEOUT = 5.0  # seconds
DEFAULT_READ_TERMINATION = "\n"
DEFAULT_WRITE_TERMINATION = "\n"

DEFAULT_TRACE_TIMEOUT = 60.0  # seconds, a single sweep can be slow at narrow RBW
