# Base class for superconducting magnet power supplies
#

from loguru import logger

from labsweep.device.device import Device
from labsweep.types.errors import InvalidConfiguration


class MagnetSupply(Device):
    """Superconducting magnet power supply.

    Public methods work in amps and amps per second. Drivers implement the
    `_get_current`, `_set_sweep_target_current`, `_set_hold`,
    `_get_sweeprate` and `_set_sweeprate` hooks in whatever units the
    hardware uses.

    Parameters
    ----------
    use_persistent_mode : bool, optional
        Magnet is operated in persistent mode, by default False
    can_reverse : bool, optional
        Supply can reverse the output polarity, by default True
    can_use_negative_current : bool, optional
        Supply accepts negative target currents, by default True
    """

    def __init__(
        self,
        use_persistent_mode: bool = False,
        can_reverse: bool = True,
        can_use_negative_current: bool = True,
        **config_kwargs,
    ):
        super().__init__(
            use_persistent_mode=use_persistent_mode,
            can_reverse=can_reverse,
            can_use_negative_current=can_use_negative_current,
            **config_kwargs,
        )

    ##########################################
    #      current
    ##########################################

    @property
    def current(self) -> float:
        return self.get_current()

    def get_current(self) -> float:
        """Demand (output) current in A."""
        return self._get_current()

    def set_current(self, target: float) -> None:
        """Set the sweep target current in A. Does not start the sweep."""
        if target < 0 and not self.can_use_negative_current:
            raise InvalidConfiguration(
                f"{self.__class__.__name__} cannot use negative currents, got {target} A"
            )
        logger.debug(f"{self.__class__.__name__} target current {target} A")
        self._set_sweep_target_current(target)

    def set_hold(self, hold: bool) -> None:
        """Hold the output (True) or sweep to the target current (False)."""
        self._set_hold(hold)

    ##########################################
    #      sweep rate
    ##########################################

    @property
    def sweeprate(self) -> float:
        return self.get_sweeprate()

    @sweeprate.setter
    def sweeprate(self, rate: float):
        self.set_sweeprate(rate)

    def get_sweeprate(self) -> float:
        """Current sweep rate in A/s."""
        return self._get_sweeprate()

    def set_sweeprate(self, rate: float) -> float:
        """Set the current sweep rate in A/s, returns the rate read back."""
        if rate <= 0:
            raise InvalidConfiguration(f"Sweep rate must be positive, got {rate} A/s")
        return self._set_sweeprate(rate)

    ##########################################
    #      driver hooks
    ##########################################

    def _get_current(self) -> float:
        raise NotImplementedError()

    def _set_sweep_target_current(self, current: float) -> None:
        raise NotImplementedError()

    def _set_hold(self, hold: bool) -> None:
        raise NotImplementedError()

    def _get_sweeprate(self) -> float:
        raise NotImplementedError()

    def _set_sweeprate(self, rate: float) -> float:
        raise NotImplementedError()
