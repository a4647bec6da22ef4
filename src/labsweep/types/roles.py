"""Device role definitions and base classes.

The role system connects devices to their interfaces and checks that they
implement the required protocol:

1. Protocols (protocols.py) - Define required methods for each role
2. Interfaces (interfaces.py) - Provide type-safe access to role functionality
3. Roles (this file) - Connect devices to interfaces and validate protocols

Example
-------
```python
ok, msg = SPECTRUM_ANALYZER.validate_device_type(SCPISpectrumAnalyzer)
sa = SPECTRUM_ANALYZER.get_interface(device)
freqs, powers = sa.get_trace_xy()
```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, Type, TypeVar, get_args

from loguru import logger

from labsweep.types.interfaces import (
    MagnetSupplyInterface,
    RoleInterface,
    SpectrumAnalyzerInterface,
)
from labsweep.types.protocols import MagnetSupplyProtocol, SpectrumAnalyzerProtocol

if TYPE_CHECKING:
    from labsweep.device import Device

D = TypeVar("D", bound="Device")


def _get_base_classes(cls: Type) -> list[str]:
    """Get names of class and all its base classes."""
    return [cls.__name__] + [base.__name__ for base in cls.__mro__[1:]]


class DeviceRole(Generic[D]):
    """Base class for device roles.

    A DeviceRole defines an abstract capability that a device can fulfill.
    Each role specifies a protocol that devices must implement, and provides
    an interface class for accessing the device through that protocol.

    Examples
    --------
    ```python
    class TemperatureController(DeviceRole[TempControlProtocol]):
        interface_class = TempControlInterface
    ```
    """

    interface_class: Type[RoleInterface] = None

    def __init__(self) -> None:
        # Get the type argument (will be a ForwardRef or actual type)
        self.required_type = get_args(self.__class__.__orig_bases__[0])[0]

    def get_interface(self, device: Device, **kwargs) -> RoleInterface:
        """Get the interface implementation for this role.

        The device is recorded as filling this role (see `Device.has_role`).

        Parameters
        ----------
        device : Device
            Device to wrap with interface
        **kwargs
            Passed on to the interface constructor

        Raises
        ------
        NotImplementedError
            If role doesn't define an interface class
        ValueError
            If the device does not implement the role's protocol
        """
        if not self.interface_class:
            raise NotImplementedError("Role must define interface_class")
        valid, msg = self.validate_device_type(type(device))
        if not valid:
            logger.error(msg)
            raise ValueError(msg)
        if not device.has_role(self):
            logger.debug(f"{type(device).__name__} takes role {self}")
            device._add_role(self)
        return self.interface_class(device, **kwargs)

    def validate_device_type(self, device_class: type[Device]) -> tuple[bool, str]:
        """Validate if a device class can fulfill this role.

        Returns
        -------
        tuple[bool, str]
            (is_valid, error_message), the message is empty when valid
        """
        from typing import ForwardRef

        if isinstance(self.required_type, ForwardRef):
            base_classes = _get_base_classes(device_class)
            if self.required_type.__forward_arg__ not in base_classes:
                return False, (
                    f"Role {self} requires device type {self.required_type.__forward_arg__}, "
                    f"got {device_class.__name__}"
                )
        else:
            missing_methods = [
                method_name
                for method_name in self.required_type.__annotations__
                if not hasattr(device_class, method_name)
            ]
            if missing_methods:
                return False, (
                    f"Role {self} requires device implementing {self.required_type.__name__}, "
                    f"but {device_class.__name__} is missing methods: {', '.join(missing_methods)}"
                )
        return True, ""

    def __str__(self) -> str:
        return self.__class__.__name__

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DeviceRole):
            return NotImplemented
        return type(self) == type(other)

    def __hash__(self) -> int:
        return hash(type(self))


class SpectrumAnalyzer(DeviceRole[SpectrumAnalyzerProtocol]):
    """Swept spectrum analyzer role."""

    interface_class = SpectrumAnalyzerInterface


class MagnetPowerSupply(DeviceRole[MagnetSupplyProtocol]):
    """Superconducting magnet power supply role."""

    interface_class = MagnetSupplyInterface


# Singleton instances (use these)
SPECTRUM_ANALYZER = SpectrumAnalyzer()
MAGNET_SUPPLY = MagnetPowerSupply()

PREFIX_TO_ROLE = {
    "spectrum_analyzer": SPECTRUM_ANALYZER,
    "magnet_supply": MAGNET_SUPPLY,
}

__all__ = [
    "DeviceRole",
    "SpectrumAnalyzer",
    "SPECTRUM_ANALYZER",
    "MagnetPowerSupply",
    "MAGNET_SUPPLY",
    "PREFIX_TO_ROLE",
]
