"""Oxford Instruments IPS 120-10 superconducting magnet power supply.

The IPS speaks single-letter ISOBUS commands terminated by a carriage
return. Every command except `Q` is answered with an echo of the command
letter, or with `?<command>` if the supply rejected it.

Examples
--------
```python
ips = OxfordIPS("ASRL1::INSTR")
ips.open()
rate = ips.init_magnet()        # A/s
ips.set_current(2.5)
ips.set_hold(False)             # sweep to 2.5 A
```
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional

from loguru import logger

from labsweep.device.connection import TraceConnection, VisaConnection
from labsweep.device.magnet.magnet import MagnetSupply
from labsweep.types.errors import InvalidConfiguration, ProtocolError
from labsweep.util.defaults import DEFAULT_VISA_TIMEOUT

IPS_TERMINATION = "\r"


class IPSParameter(IntEnum):
    """Parameters readable with `R<n>`."""

    DEMAND_CURRENT = 0  # A
    SUPPLY_VOLTAGE = 1  # V
    MAGNET_CURRENT = 2  # A
    TARGET_CURRENT = 5  # A
    CURRENT_SWEEP_RATE = 6  # A/min
    DEMAND_FIELD = 7  # T
    TARGET_FIELD = 8  # T
    FIELD_SWEEP_RATE = 9  # T/min
    VOLTAGE_LIMIT = 15  # V
    PERSISTENT_CURRENT = 16  # A
    TRIP_CURRENT = 17  # A
    PERSISTENT_FIELD = 18  # T
    TRIP_FIELD = 19  # T
    SWITCH_HEATER_CURRENT = 20  # mA
    SAFE_CURRENT_LIMIT_NEGATIVE = 21  # A
    SAFE_CURRENT_LIMIT_POSITIVE = 22  # A
    LEAD_RESISTANCE = 23  # mOhm
    MAGNET_INDUCTANCE = 24  # H


class IPSActivity(IntEnum):
    HOLD = 0
    TO_SET_POINT = 1
    TO_ZERO = 2
    CLAMP = 4


class IPSControl(IntEnum):
    LOCAL_LOCKED = 0
    REMOTE_LOCKED = 1
    LOCAL_UNLOCKED = 2
    REMOTE_UNLOCKED = 3


class IPSSwitchHeater(IntEnum):
    OFF = 0  # close switch
    ON_IF_MATCHED = 1  # only if magnet current == supply output
    ON_NO_CHECKS = 2


# communications protocol: 0 normal, 2 <LF> after <CR>, 4 extended resolution,
# 6 extended resolution with <LF>
PROTOCOL_MODES = (0, 2, 4, 6)
EXTENDED_RESOLUTION = 4
# display A/T, sweep fast/slow/unaffected
SWEEP_MODES = (0, 1, 4, 5, 8, 9)
# no action, positive, negative, swap
POLARITY_MODES = (0, 1, 2, 3)


def _check_mode(name: str, mode, allowed) -> int:
    if mode not in allowed:
        raise InvalidConfiguration(f"{name} must be one of {tuple(allowed)}, got {mode}")
    return int(mode)


class OxfordIPS(MagnetSupply):
    """Oxford Instruments IPS 120-10 magnet power supply.

    Parameters
    ----------
    visa_addr : str
        VISA resource address, typically a serial or GPIB port
    timeout : float, optional
        I/O timeout in seconds
    trace_logfile : str, optional
        If given, every exchange with the supply is logged to this file
    connection : VisaConnection, optional
        Pre-built connection
    **profile
        use_persistent_mode, can_reverse, can_use_negative_current
    """

    visa_addr: str
    required_config = {"visa_addr": str}

    def __init__(
        self,
        visa_addr: str,
        timeout: float = DEFAULT_VISA_TIMEOUT,
        trace_logfile: Optional[str] = None,
        connection: Optional[VisaConnection] = None,
        **profile,
    ):
        super().__init__(visa_addr=visa_addr, **profile)
        if connection is None:
            conn_kwargs = dict(
                timeout=timeout,
                read_termination=IPS_TERMINATION,
                write_termination=IPS_TERMINATION,
            )
            if trace_logfile is not None:
                connection = TraceConnection(visa_addr, logfile=trace_logfile, **conn_kwargs)
            else:
                connection = VisaConnection(visa_addr, **conn_kwargs)
        self.conn = connection

    def open(self) -> tuple[bool, str]:
        self.conn.open()
        self.set_communications_protocol(EXTENDED_RESOLUTION)
        self.set_control(IPSControl.REMOTE_UNLOCKED)
        logger.info(f"Connected to IPS at {self.visa_addr}")
        return True, f"IPS at {self.visa_addr} in remote control"

    def close(self):
        self.conn.close()

    def is_connected(self) -> bool:
        return self.conn.is_open()

    def init_magnet(self) -> float:
        """Take remote control, put the supply on hold.

        The switch heater is left alone: the previous user may have left the
        magnet in persistent mode.

        Returns
        -------
        float
            Current sweep rate in A/s
        """
        self.set_communications_protocol(EXTENDED_RESOLUTION)
        self.set_control(IPSControl.REMOTE_UNLOCKED)
        self.set_activity(IPSActivity.HOLD)
        return self.get_sweeprate()

    ###################################################################
    # ISOBUS commands
    ###################################################################

    def _command(self, command: str) -> str:
        reply = self.conn.query(command)
        if reply.startswith("?"):
            raise ProtocolError(f"IPS rejected command '{command}'", reply=reply)
        return reply

    def set_communications_protocol(self, mode: int) -> None:
        mode = _check_mode("Communications protocol", mode, PROTOCOL_MODES)
        # the only command the IPS does not answer
        self.conn.write(f"Q{mode}")

    def set_control(self, mode: int) -> None:
        mode = _check_mode("Control mode", mode, tuple(IPSControl))
        self._command(f"C{mode}")

    def read_parameter(self, parameter: int) -> float:
        """Read parameter `R<n>`, see IPSParameter for the meaning and unit."""
        if not 0 <= parameter <= 24:
            raise InvalidConfiguration(f"IPS parameter must be within 0..24, got {parameter}")
        command = f"R{int(parameter)}"
        reply = self._command(command)
        if not reply.startswith("R"):
            raise ProtocolError(f"Unexpected reply to '{command}': '{reply}'", reply=reply)
        try:
            return float(reply[1:])
        except ValueError:
            raise ProtocolError(
                f"Expected a number in reply to '{command}', got '{reply}'", reply=reply
            ) from None

    def set_activity(self, mode: int) -> None:
        mode = _check_mode("Activity", mode, tuple(IPSActivity))
        self._command(f"A{mode}")

    def set_switch_heater(self, mode: int) -> None:
        mode = _check_mode("Switch heater mode", mode, tuple(IPSSwitchHeater))
        self._command(f"H{mode}")

    def set_target_current(self, current: float) -> None:
        self._command(f"I{current:.4f}")

    def set_target_field(self, field: float) -> None:
        self._command(f"J{field:.5f}")

    def set_mode(self, mode: int) -> None:
        mode = _check_mode("Sweep mode", mode, SWEEP_MODES)
        self._command(f"M{mode}")

    def set_polarity(self, mode: int) -> None:
        mode = _check_mode("Polarity mode", mode, POLARITY_MODES)
        if mode != 0 and not self.can_reverse:
            raise InvalidConfiguration("This IPS is configured as unable to reverse polarity")
        self._command(f"P{mode}")

    def set_current_sweep_rate(self, rate: float) -> None:
        """Current sweep rate in A/min."""
        self._command(f"S{rate:.4f}")

    def set_field_sweep_rate(self, rate: float) -> None:
        """Field sweep rate in T/min."""
        self._command(f"T{rate:.5f}")

    ###################################################################
    # MagnetSupply hooks
    ###################################################################

    def _get_current(self) -> float:
        return self.read_parameter(IPSParameter.DEMAND_CURRENT)

    def _set_sweep_target_current(self, current: float) -> None:
        self.set_target_current(current)

    def _set_hold(self, hold: bool) -> None:
        if hold:
            self.set_activity(IPSActivity.HOLD)
        else:
            self.set_activity(IPSActivity.TO_SET_POINT)

    def _get_sweeprate(self) -> float:
        return self.read_parameter(IPSParameter.CURRENT_SWEEP_RATE) / 60

    def _set_sweeprate(self, rate: float) -> float:
        self.set_current_sweep_rate(rate * 60)
        return self._get_sweeprate()
