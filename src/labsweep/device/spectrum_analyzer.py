"""Spectrum analyzer drivers.

`SpectrumAnalyzerBase` holds what every analyzer driver shares: the
hardware capability profile and the cached frequency span.
`SCPISpectrumAnalyzer` drives any analyzer that speaks the common SCPI
subset over VISA.

Hardware capabilities
---------------------
Not all devices implement the full set of SCPI commands. The profile marks
what is available:

- `capable_to_query_number_of_x_points_in_hardware`: device answers
  `[:SENSe]:SWEep:POINts?`. Default True.
- `capable_to_set_number_of_x_points_in_hardware`: device accepts
  `[:SENSe]:SWEep:POINts <n>`. Default True.
- `hardwired_number_of_x_points`: fixed, unchangeable number of points.
  Not set by default.

The profile is turned into a point-count capability once, on construction.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from loguru import logger

from labsweep.device.connection import TraceConnection, VisaConnection
from labsweep.device.device import Device
from labsweep.types.errors import InvalidConfiguration
from labsweep.types.sweep import (
    PointCountCapability,
    capability_from_profile,
    validate_point_count,
)
from labsweep.util.defaults import DEFAULT_TRACE_TIMEOUT, DEFAULT_VISA_TIMEOUT

VALID_TRACES = (1, 2, 3)


class SpectrumAnalyzerBase(Device):
    """Shared capability profile and frequency span cache.

    Subclasses implement the `_query_*` / `_write_*` hooks for the span and
    everything else in SpectrumAnalyzerProtocol.
    """

    def __init__(
        self,
        capable_to_query_number_of_x_points_in_hardware: bool = True,
        capable_to_set_number_of_x_points_in_hardware: bool = True,
        hardwired_number_of_x_points: Optional[int] = None,
        **config_kwargs,
    ):
        super().__init__(
            capable_to_query_number_of_x_points_in_hardware=capable_to_query_number_of_x_points_in_hardware,
            capable_to_set_number_of_x_points_in_hardware=capable_to_set_number_of_x_points_in_hardware,
            hardwired_number_of_x_points=hardwired_number_of_x_points,
            **config_kwargs,
        )
        self._capability = capability_from_profile(
            can_query=capable_to_query_number_of_x_points_in_hardware,
            hardwired_points=hardwired_number_of_x_points,
        )
        self._freq_start: Optional[float] = None
        self._freq_stop: Optional[float] = None
        logger.debug(
            f"{self.__class__.__name__} point count capability: {self._capability}"
        )

    def has_hardwired_number_of_x_points(self) -> bool:
        return self.hardwired_number_of_x_points is not None

    def get_point_count_capability(self) -> PointCountCapability:
        return self._capability

    ###################################################################
    # cached frequency span
    ###################################################################

    def get_frequency_start(self) -> float:
        """Sweep start frequency in Hz, read from the device once."""
        if self._freq_start is None:
            self._freq_start = self._query_frequency_start()
        return self._freq_start

    def set_frequency_start(self, freq: float) -> None:
        self._write_frequency_start(freq)
        self._freq_start = float(freq)

    def get_frequency_stop(self) -> float:
        """Sweep stop frequency in Hz, read from the device once."""
        if self._freq_stop is None:
            self._freq_stop = self._query_frequency_stop()
        return self._freq_stop

    def set_frequency_stop(self, freq: float) -> None:
        self._write_frequency_stop(freq)
        self._freq_stop = float(freq)

    def clear_cache(self) -> None:
        """Forget cached settings, e.g. after the front panel was used."""
        self._freq_start = None
        self._freq_stop = None

    def _check_can_set_points(self, points) -> int:
        points = validate_point_count(points)
        if self.has_hardwired_number_of_x_points():
            if points != self.hardwired_number_of_x_points:
                raise InvalidConfiguration(
                    f"{self.__class__.__name__} has a hardwired number of points "
                    f"({self.hardwired_number_of_x_points}), cannot set {points}"
                )
            return points
        if not self.capable_to_set_number_of_x_points_in_hardware:
            raise InvalidConfiguration(
                f"{self.__class__.__name__} cannot set the number of sweep points"
            )
        return points

    @staticmethod
    def _check_trace(trace: int) -> int:
        if trace not in VALID_TRACES:
            raise InvalidConfiguration(f"Trace must be one of {VALID_TRACES}, got {trace}")
        return trace

    def _query_frequency_start(self) -> float:
        raise NotImplementedError()

    def _write_frequency_start(self, freq: float) -> None:
        raise NotImplementedError()

    def _query_frequency_stop(self) -> float:
        raise NotImplementedError()

    def _write_frequency_stop(self, freq: float) -> None:
        raise NotImplementedError()


class SCPISpectrumAnalyzer(SpectrumAnalyzerBase):
    """Generic swept spectrum analyzer speaking common SCPI over VISA.

    Parameters
    ----------
    visa_addr : str
        VISA resource address
    capable_to_query_number_of_x_points_in_hardware : bool, optional
        Device answers `SENS:SWE:POIN?`, by default True
    capable_to_set_number_of_x_points_in_hardware : bool, optional
        Device accepts `SENS:SWE:POIN <n>`, by default True
    hardwired_number_of_x_points : int, optional
        Fixed number of sweep points, if the device has one
    timeout : float, optional
        Default I/O timeout in seconds
    trace_logfile : str, optional
        If given, every exchange with the device is logged to this file
    connection : VisaConnection, optional
        Pre-built connection (e.g. over a shared resource manager)

    Examples
    --------
    ```python
    sa = SCPISpectrumAnalyzer(
        "TCPIP0::192.168.1.20::INSTR",
        capable_to_query_number_of_x_points_in_hardware=False,
    )
    sa.open()
    y = sa.get_trace_y(trace=1, timeout=30)
    ```
    """

    visa_addr: str
    required_config = {"visa_addr": str}

    def __init__(
        self,
        visa_addr: str,
        capable_to_query_number_of_x_points_in_hardware: bool = True,
        capable_to_set_number_of_x_points_in_hardware: bool = True,
        hardwired_number_of_x_points: Optional[int] = None,
        timeout: float = DEFAULT_VISA_TIMEOUT,
        trace_logfile: Optional[str] = None,
        connection: Optional[VisaConnection] = None,
    ):
        super().__init__(
            capable_to_query_number_of_x_points_in_hardware=capable_to_query_number_of_x_points_in_hardware,
            capable_to_set_number_of_x_points_in_hardware=capable_to_set_number_of_x_points_in_hardware,
            hardwired_number_of_x_points=hardwired_number_of_x_points,
            visa_addr=visa_addr,
        )
        if connection is None:
            if trace_logfile is not None:
                connection = TraceConnection(
                    visa_addr, logfile=trace_logfile, timeout=timeout
                )
            else:
                connection = VisaConnection(visa_addr, timeout=timeout)
        self.conn = connection
        self._idn = ""

    def open(self) -> tuple[bool, str]:
        self.conn.open()
        self._idn = self.conn.query("*IDN?")
        logger.info(f"Connected to spectrum analyzer at {self.visa_addr}: {self._idn}")
        return True, self._idn

    def close(self):
        self.conn.close()
        self.clear_cache()

    def is_connected(self) -> bool:
        return self.conn.is_open()

    ###################################################################
    # frequency span
    ###################################################################

    def _query_frequency_start(self) -> float:
        return self.conn.query_float("SENS:FREQ:STAR?")

    def _write_frequency_start(self, freq: float) -> None:
        self.conn.write(f"SENS:FREQ:STAR {freq:.6f}")

    def _query_frequency_stop(self) -> float:
        return self.conn.query_float("SENS:FREQ:STOP?")

    def _write_frequency_stop(self, freq: float) -> None:
        self.conn.write(f"SENS:FREQ:STOP {freq:.6f}")

    ###################################################################
    # sweep settings
    ###################################################################

    def get_sweep_points(self) -> int:
        return self.conn.query_int("SENS:SWE:POIN?")

    def set_sweep_points(self, points: int) -> None:
        points = self._check_can_set_points(points)
        if self.has_hardwired_number_of_x_points():
            return
        self.conn.write(f"SENS:SWE:POIN {points}")

    def get_sweep_count(self) -> int:
        return self.conn.query_int("SENS:SWE:COUN?")

    def set_sweep_count(self, count: int) -> None:
        self.conn.write(f"SENS:SWE:COUN {int(count)}")

    def get_resolution_bandwidth(self) -> float:
        return self.conn.query_float("SENS:BAND:RES?")

    def set_resolution_bandwidth(self, bw: float) -> None:
        self.conn.write(f"SENS:BAND:RES {bw:.3f}")

    def get_video_bandwidth(self) -> float:
        return self.conn.query_float("SENS:BAND:VID?")

    def set_video_bandwidth(self, bw: float) -> None:
        self.conn.write(f"SENS:BAND:VID {bw:.3f}")

    def get_sweep_time(self) -> float:
        return self.conn.query_float("SENS:SWE:TIME?")

    def set_sweep_time(self, sweep_time: float) -> None:
        self.conn.write(f"SENS:SWE:TIME {sweep_time:.6f}")

    def get_reference_level(self) -> float:
        return self.conn.query_float("DISP:WIND:TRAC:Y:SCAL:RLEV?")

    def set_reference_level(self, level: float) -> None:
        self.conn.write(f"DISP:WIND:TRAC:Y:SCAL:RLEV {level:.2f}")

    def get_power_unit(self) -> str:
        return self.conn.query("UNIT:POW?").upper()

    def set_power_unit(self, unit: str) -> None:
        self.conn.write(f"UNIT:POW {unit.upper()}")

    ###################################################################
    # trace acquisition
    ###################################################################

    def get_trace_y(self, trace: int = 1, timeout: Optional[float] = None) -> np.ndarray:
        """Perform a single sweep and return the Y points of a trace.

        Parameters
        ----------
        trace : int, optional
            Trace number (1..3), by default 1
        timeout : float, optional
            Timeout for the sweep in seconds, by default DEFAULT_TRACE_TIMEOUT
        """
        trace = self._check_trace(trace)
        if timeout is None:
            timeout = DEFAULT_TRACE_TIMEOUT
        self.conn.write("FORM ASC")
        self.conn.write("INIT:CONT OFF")
        self.conn.write("INIT:IMM")
        # blocks until the sweep is done
        self.conn.query("*OPC?", timeout=timeout)
        return self.conn.query_floats(f"TRAC:DATA? TRACE{trace}", timeout=timeout)
