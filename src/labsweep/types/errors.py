"""Exception taxonomy for labsweep.

Transport and protocol errors are raised by the connection layer and travel
unchanged through the sweep machinery up to the caller. Configuration and
consistency errors are raised by the sweep machinery itself, before any
arithmetic is attempted on a bad point count.
"""


class LabsweepError(Exception):
    """Base exception for labsweep."""

    pass


class TransportError(LabsweepError):
    """Raised when the communication layer fails (link down, timeout etc.)."""

    pass


class ProtocolError(LabsweepError):
    """Raised when a reply was received but could not be parsed."""

    def __init__(self, message, reply=None):
        super().__init__(message)
        self.reply = reply


class InvalidConfiguration(LabsweepError, ValueError):
    """Raised for an unusable configuration, e.g. a point count below 1."""

    pass


class InconsistentPointCount(LabsweepError):
    """Raised when two sources disagree on the number of sweep points.

    Carries both values so the caller can decide which one to trust.
    """

    def __init__(self, message, expected=None, actual=None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class SweepTimeout(LabsweepError):
    """Raised when a polling sweep does not finish within its iteration limit."""

    pass
