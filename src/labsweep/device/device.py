"""Device base class and hardware abstraction layer.

All hardware drivers in labsweep inherit from `Device` and implement the
methods required by the roles they are meant to fill. The base class
provides:

1. Configuration validation (`required_config`)
2. Role bookkeeping
3. The open/close/is_connected contract
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Set, Type, TypeVar

from loguru import logger

if TYPE_CHECKING:
    from labsweep.types import DeviceRole

D = TypeVar("D", bound="Device")


class Device:
    """Base class for all hardware devices.

    Configuration is passed as keyword arguments and set as attributes. Keys
    listed in `required_config` must be present and of the declared type.

    Required Methods
    --------------
    - open(): Connect to the hardware
    - close(): Disconnect from the hardware
    - is_connected(): Check connection status

    Attributes
    ----------
    required_config : dict[str, Type]
        Required configuration parameters and their types
    _roles : Set[DeviceRole[Device]]
        Set of roles this device fulfills

    Examples
    --------
    ```python
    class MyAnalyzer(Device):
        required_config = {"visa_addr": str}

        def open(self) -> tuple[bool, str]:
            ...
            return True, "Connected"
    ```
    """

    required_config: dict[str, Type] = {}

    _roles: Set[DeviceRole[Device]]

    def __init__(self, **config_kwargs):
        for key, value in config_kwargs.items():
            setattr(self, key, value)
        for key, value in self.required_config.items():
            if not hasattr(self, key):
                logger.error(
                    f"Device {self.__class__.__name__} missing required config key: "
                    + f"{key}"
                )
                raise ValueError(
                    f"Device {self.__class__.__name__} missing required config "
                    + f"key: {key}"
                )
            if not isinstance(getattr(self, key), value):
                logger.error(
                    f"Device {self.__class__.__name__} config key {key} "
                    + f"has wrong type: {type(getattr(self, key))} (expected {value})"
                )
                raise ValueError(
                    f"Device {self.__class__.__name__} config key {key} has "
                    + f"wrong type: {type(getattr(self, key))} (expected {value})"
                )
        self._roles: Set[DeviceRole[Device]] = set()

    def _add_role(self, role: DeviceRole[D]) -> None:
        """Add a role that this device fulfills."""
        self._roles.add(role)

    def has_role(self, role: DeviceRole[D]) -> bool:
        return role in self._roles

    def open(self) -> tuple[bool, str]:
        raise NotImplementedError()

    def close(self):
        raise NotImplementedError()

    def is_connected(self) -> bool:
        raise NotImplementedError()
