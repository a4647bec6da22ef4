"""VISA connections with error translation and optional exchange tracing.

`VisaConnection` is a thin layer over a pyvisa resource: it sends strings,
reads strings, and parses single-line replies. Communication failures
(`pyvisa.VisaIOError`) become `TransportError`; replies that cannot be parsed
become `ProtocolError`. Nothing is retried here.

`TraceConnection` additionally records every exchange, numbered by
`log_index`, to a dedicated log file and to an in-memory list. This is the
tool for debugging a driver against real hardware.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import List, Optional

import numpy as np
import pyvisa
from loguru import logger

from labsweep.types.errors import ProtocolError, TransportError
from labsweep.util.defaults import (
    DEFAULT_READ_TERMINATION,
    DEFAULT_VISA_TIMEOUT,
    DEFAULT_WRITE_TERMINATION,
)


class VisaConnection:
    """String-in, string-out connection to a VISA instrument.

    Parameters
    ----------
    resource_name : str
        VISA resource address, e.g. "TCPIP0::192.168.1.20::INSTR"
    timeout : float, optional
        Default I/O timeout in seconds
    read_termination, write_termination : str, optional
        Message terminators
    resource_manager : pyvisa.ResourceManager, optional
        Shared resource manager. If None, one is created on open() and
        closed again on close().
    resource : pyvisa.resources.MessageBasedResource, optional
        Already opened resource to use instead of opening one
    """

    def __init__(
        self,
        resource_name: str,
        timeout: float = DEFAULT_VISA_TIMEOUT,
        read_termination: str = DEFAULT_READ_TERMINATION,
        write_termination: str = DEFAULT_WRITE_TERMINATION,
        resource_manager: Optional[pyvisa.ResourceManager] = None,
        resource=None,
    ):
        self.resource_name = resource_name
        self.timeout = timeout
        self.read_termination = read_termination
        self.write_termination = write_termination
        self.rm = resource_manager
        self._owns_rm = False
        self.inst = resource
        if self.inst is not None:
            self._configure()

    def open(self) -> None:
        if self.inst is not None:
            return
        if self.rm is None:
            self.rm = pyvisa.ResourceManager()
            self._owns_rm = True
        try:
            self.inst = self.rm.open_resource(self.resource_name)
        except pyvisa.VisaIOError as e:
            raise TransportError(
                f"Could not open VISA resource {self.resource_name}: {e}"
            ) from e
        self._configure()
        logger.debug(f"Opened VISA resource {self.resource_name}")

    def close(self) -> None:
        if self.inst is not None:
            try:
                self.inst.close()
            except pyvisa.VisaIOError as e:
                logger.warning(f"Error closing {self.resource_name}: {e}")
            self.inst = None
        if self._owns_rm and self.rm is not None:
            self.rm.close()
            self.rm = None
            self._owns_rm = False

    def is_open(self) -> bool:
        return self.inst is not None

    def _configure(self) -> None:
        self.inst.timeout = int(self.timeout * 1000)  # pyvisa uses ms
        self.inst.read_termination = self.read_termination
        self.inst.write_termination = self.write_termination

    @contextmanager
    def _timeout(self, timeout: Optional[float]):
        if timeout is None:
            yield
            return
        previous = self.inst.timeout
        self.inst.timeout = int(timeout * 1000)
        try:
            yield
        finally:
            self.inst.timeout = previous

    def _require_open(self) -> None:
        if self.inst is None:
            raise TransportError(f"Connection to {self.resource_name} is not open")

    ###################################################################
    # raw I/O
    ###################################################################

    def write(self, command: str) -> None:
        self._require_open()
        try:
            self.inst.write(command)
        except pyvisa.VisaIOError as e:
            raise TransportError(f"Write '{command}' to {self.resource_name} failed: {e}") from e

    def read(self, timeout: Optional[float] = None) -> str:
        self._require_open()
        try:
            with self._timeout(timeout):
                return self.inst.read().strip()
        except pyvisa.VisaIOError as e:
            raise TransportError(f"Read from {self.resource_name} failed: {e}") from e

    def query(self, command: str, timeout: Optional[float] = None) -> str:
        self._require_open()
        try:
            with self._timeout(timeout):
                return self.inst.query(command).strip()
        except pyvisa.VisaIOError as e:
            raise TransportError(f"Query '{command}' to {self.resource_name} failed: {e}") from e

    ###################################################################
    # parsed queries
    ###################################################################

    def query_float(self, command: str, timeout: Optional[float] = None) -> float:
        reply = self.query(command, timeout=timeout)
        try:
            return float(reply)
        except ValueError:
            raise ProtocolError(
                f"Expected a number in reply to '{command}', got '{reply}'", reply=reply
            ) from None

    def query_int(self, command: str, timeout: Optional[float] = None) -> int:
        # some instruments answer integer queries in exponent notation, e.g. '+1.001E+03'
        value = self.query_float(command, timeout=timeout)
        if not value.is_integer():
            raise ProtocolError(
                f"Expected an integer in reply to '{command}', got {value}", reply=value
            )
        return int(value)

    def query_floats(self, command: str, timeout: Optional[float] = None) -> np.ndarray:
        """Query a comma separated list of numbers, e.g. an ASCII trace."""
        reply = self.query(command, timeout=timeout)
        if not reply:
            raise ProtocolError(f"Empty reply to '{command}'", reply=reply)
        try:
            return np.array([float(v) for v in reply.split(",")], dtype=float)
        except ValueError:
            raise ProtocolError(
                f"Could not parse numeric list in reply to '{command}'", reply=reply
            ) from None


class TraceConnection(VisaConnection):
    """VisaConnection that records every exchange.

    Parameters
    ----------
    logfile : str, optional
        File that receives one line per exchange. If None, exchanges are
        only kept in `trace` and logged at TRACE level.
    **kwargs
        Passed on to VisaConnection

    Attributes
    ----------
    log_index : int
        Number of exchanges recorded so far
    trace : list[tuple[int, str, str]]
        (index, direction, payload) for each exchange; direction is one of
        "WRITE", "READ", "QUERY", "REPLY"
    """

    def __init__(self, resource_name: str, logfile: Optional[str] = None, **kwargs):
        self.logfile = logfile
        self.log_index = 0
        self.trace: List[tuple[int, str, str]] = []
        self._sink_id = None
        self._log = logger.bind(connection_trace=resource_name)
        if logfile is not None:
            self._sink_id = logger.add(
                logfile,
                level="TRACE",
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {message}",
                filter=lambda record: record["extra"].get("connection_trace")
                == resource_name,
                colorize=False,
            )
        super().__init__(resource_name, **kwargs)

    def _record(self, direction: str, payload: str) -> None:
        self.trace.append((self.log_index, direction, payload))
        self._log.trace(f"{self.log_index} {direction} {payload!r}")

    def write(self, command: str) -> None:
        self._record("WRITE", command)
        try:
            super().write(command)
        finally:
            self.log_index += 1

    def read(self, timeout: Optional[float] = None) -> str:
        reply = super().read(timeout=timeout)
        self._record("READ", reply)
        self.log_index += 1
        return reply

    def query(self, command: str, timeout: Optional[float] = None) -> str:
        self._record("QUERY", command)
        try:
            reply = super().query(command, timeout=timeout)
            self._record("REPLY", reply)
        finally:
            self.log_index += 1
        return reply

    def close(self) -> None:
        super().close()
        if self._sink_id is not None:
            logger.remove(self._sink_id)
            self._sink_id = None
