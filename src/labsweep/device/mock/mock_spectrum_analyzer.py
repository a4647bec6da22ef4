from __future__ import annotations

from typing import Optional

import numpy as np

from labsweep.device.spectrum_analyzer import SpectrumAnalyzerBase


class MockSpectrumAnalyzer(SpectrumAnalyzerBase):  # Protocol compliance checked by role system
    """Simulated spectrum analyzer returning a Lorentzian peak on a noise floor.

    `num_points` is the length of the traces it produces, by default the
    hardwired number of points if one is set, else 101. `reported_points`,
    if set, is what the point-count query answers instead, to mimic a device
    whose declared and actual trace lengths disagree.
    """

    def __init__(
        self,
        num_points: Optional[int] = None,
        reported_points: Optional[int] = None,
        freq_start: float = 1e6,
        freq_stop: float = 3e9,
        peak_freq: Optional[float] = None,
        peak_width: float = 5e6,
        peak_power: float = -20.0,
        noise_floor: float = -90.0,
        noise: float = 0.0,
        seed: Optional[int] = None,
        **profile,
    ):
        super().__init__(**profile)
        self._connected = False
        if num_points is None:
            num_points = (
                self.hardwired_number_of_x_points
                if self.has_hardwired_number_of_x_points()
                else 101
            )
        self._num_points = num_points
        self._reported_points = reported_points
        self._device_freq_start = freq_start
        self._device_freq_stop = freq_stop
        self._peak_freq = peak_freq
        self._peak_width = peak_width
        self._peak_power = peak_power
        self._noise_floor = noise_floor
        self._noise = noise
        self._rng = np.random.default_rng(seed)
        self._sweep_count = 1
        self._rbw = 1e5
        self._vbw = 1e5
        self._sweep_time = 0.1
        self._ref_level = 0.0
        self._power_unit = "DBM"
        # call counters, handy for checking device round trips
        self.trace_calls = 0
        self.point_queries = 0

    def open(self):
        self._connected = True
        return True, "MockSpectrumAnalyzer opened"

    def close(self):
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    def _query_frequency_start(self) -> float:
        return self._device_freq_start

    def _write_frequency_start(self, freq: float) -> None:
        self._device_freq_start = float(freq)

    def _query_frequency_stop(self) -> float:
        return self._device_freq_stop

    def _write_frequency_stop(self, freq: float) -> None:
        self._device_freq_stop = float(freq)

    def get_sweep_points(self) -> int:
        self.point_queries += 1
        if self._reported_points is not None:
            return self._reported_points
        if self.has_hardwired_number_of_x_points():
            return self.hardwired_number_of_x_points
        return self._num_points

    def set_sweep_points(self, points: int) -> None:
        self._num_points = self._check_can_set_points(points)

    def get_sweep_count(self) -> int:
        return self._sweep_count

    def set_sweep_count(self, count: int) -> None:
        self._sweep_count = int(count)

    def get_resolution_bandwidth(self) -> float:
        return self._rbw

    def set_resolution_bandwidth(self, bw: float) -> None:
        self._rbw = float(bw)

    def get_video_bandwidth(self) -> float:
        return self._vbw

    def set_video_bandwidth(self, bw: float) -> None:
        self._vbw = float(bw)

    def get_sweep_time(self) -> float:
        return self._sweep_time

    def set_sweep_time(self, sweep_time: float) -> None:
        self._sweep_time = float(sweep_time)

    def get_reference_level(self) -> float:
        return self._ref_level

    def set_reference_level(self, level: float) -> None:
        self._ref_level = float(level)

    def get_power_unit(self) -> str:
        return self._power_unit

    def set_power_unit(self, unit: str) -> None:
        self._power_unit = unit.upper()

    def get_trace_y(self, trace: int = 1, timeout: Optional[float] = None) -> np.ndarray:
        self._check_trace(trace)
        self.trace_calls += 1
        freqs = np.linspace(self._device_freq_start, self._device_freq_stop, self._num_points)
        peak = self._peak_freq
        if peak is None:
            peak = (self._device_freq_start + self._device_freq_stop) / 2
        hwhm = self._peak_width / 2
        lorentz = 1 / (1 + ((freqs - peak) / hwhm) ** 2)
        power_mw = 10 ** (self._noise_floor / 10) + 10 ** (self._peak_power / 10) * lorentz
        trace_y = 10 * np.log10(power_mw)
        if self._noise:
            trace_y = trace_y + self._rng.normal(0, self._noise, size=trace_y.shape)
        return trace_y
