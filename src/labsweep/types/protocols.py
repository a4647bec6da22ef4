"""Device role protocols defining required methods for each role.

Protocols specify the methods a device must implement to fulfill a role.
Devices don't inherit from them; the role system checks that every annotated
name is present on the device class (see `labsweep.types.roles`).

Example
-------
To create a device that can act as a spectrum analyzer:

    class MyAnalyzer(Device):
        def get_frequency_start(self) -> float: ...
        def get_trace_y(self, trace: int = 1, timeout=None) -> np.ndarray: ...
        # ... implement the other SpectrumAnalyzerProtocol methods

    SPECTRUM_ANALYZER.validate_device_type(MyAnalyzer)

See Also
--------
labsweep.types.roles : Role definitions and validation
labsweep.types.interfaces : Interface implementations
labsweep.device : Device implementations
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, runtime_checkable

import numpy as np

from labsweep.types.sweep import PointCountCapability


@runtime_checkable
class SpectrumAnalyzerProtocol(Protocol):
    """Methods required for spectrum analyzer functionality.

    Covers the basic set of settings every swept analyzer exposes (span,
    points, bandwidths, sweep time, reference level, unit) plus raw Y-trace
    acquisition. The X-trace is never read from the hardware; it is
    computed from the frequency span and the point count by the interface.
    """

    get_frequency_start: Callable[[], float]
    """Get the sweep start frequency in Hz."""

    set_frequency_start: Callable[[float], None]
    """Set the sweep start frequency in Hz."""

    get_frequency_stop: Callable[[], float]
    """Get the sweep stop frequency in Hz."""

    set_frequency_stop: Callable[[float], None]
    """Set the sweep stop frequency in Hz."""

    get_sweep_points: Callable[[], int]
    """Query the number of points in a sweep from the hardware."""

    set_sweep_points: Callable[[int], None]
    """Set the number of points in a sweep."""

    get_sweep_count: Callable[[], int]
    """Get the number of sweeps averaged per trace."""

    set_sweep_count: Callable[[int], None]
    """Set the number of sweeps averaged per trace."""

    get_resolution_bandwidth: Callable[[], float]
    """Get the resolution bandwidth in Hz."""

    set_resolution_bandwidth: Callable[[float], None]
    """Set the resolution bandwidth in Hz."""

    get_video_bandwidth: Callable[[], float]
    """Get the video bandwidth in Hz."""

    set_video_bandwidth: Callable[[float], None]
    """Set the video bandwidth in Hz."""

    get_sweep_time: Callable[[], float]
    """Get the sweep time in seconds."""

    set_sweep_time: Callable[[float], None]
    """Set the sweep time in seconds."""

    get_reference_level: Callable[[], float]
    """Get the display reference level (in the current power unit)."""

    set_reference_level: Callable[[float], None]
    """Set the display reference level."""

    get_power_unit: Callable[[], str]
    """Get the power unit, e.g. 'DBM'."""

    set_power_unit: Callable[[str], None]
    """Set the power unit."""

    get_trace_y: Callable[[int, Optional[float]], np.ndarray]
    """Perform a single sweep and return the Y points of a trace.

    Parameters:
    - trace: Trace number (1..3)
    - timeout: Optional timeout for the sweep in seconds
    """

    get_point_count_capability: Callable[[], PointCountCapability]
    """Get how the device can report its number of sweep points."""


@runtime_checkable
class MagnetSupplyProtocol(Protocol):
    """Methods required for a superconducting magnet power supply.

    Currents are in A, sweep rates in A/s.
    """

    get_current: Callable[[], float]
    """Get the demand (output) current."""

    set_current: Callable[[float], None]
    """Set the sweep target current without starting the sweep."""

    set_hold: Callable[[bool], None]
    """Hold the output (True) or sweep to the target (False)."""

    get_sweeprate: Callable[[], float]
    """Get the current sweep rate."""

    set_sweeprate: Callable[[float], float]
    """Set the current sweep rate, returns the value read back."""
