import dataclasses

import numpy as np
import pytest

from labsweep.types import (
    CachedPointCount,
    HardwareFixed,
    HardwareQueryable,
    Heuristic,
    InvalidConfiguration,
    SweepRange,
    capability_from_profile,
)


class TestSweepRange:
    def test_span(self):
        assert SweepRange(1.0, 4.0).span == 3.0
        assert SweepRange(4.0, 1.0).span == -3.0

    def test_frozen(self):
        r = SweepRange(0, 1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            r.start = 2


class TestCapabilities:
    def test_fixed_count_validated(self):
        with pytest.raises(InvalidConfiguration):
            HardwareFixed(0)
        with pytest.raises(InvalidConfiguration):
            HardwareFixed(3.0)

    def test_fixed_count_normalised_to_int(self):
        cap = HardwareFixed(np.int32(11))
        assert cap.count == 11
        assert type(cap.count) is int

    def test_variants_compare_by_value(self):
        assert HardwareFixed(5) == HardwareFixed(5)
        assert HardwareFixed(5) != HardwareFixed(6)
        assert Heuristic() == Heuristic()
        assert HardwareQueryable() != Heuristic()

    def test_str(self):
        assert str(HardwareFixed(5)) == "fixed(5)"
        assert str(HardwareQueryable()) == "hardware"
        assert str(Heuristic()) == "heuristic"

    @pytest.mark.parametrize(
        "can_query, hardwired, expected",
        [
            (True, None, HardwareQueryable()),
            (False, None, Heuristic()),
            (True, 601, HardwareFixed(601)),
            (False, 601, HardwareFixed(601)),
        ],
    )
    def test_from_profile(self, can_query, hardwired, expected):
        assert capability_from_profile(can_query, hardwired) == expected

    def test_from_profile_bad_hardwired(self):
        with pytest.raises(InvalidConfiguration):
            capability_from_profile(True, 0)


class TestCachedPointCount:
    def test_lifecycle(self):
        cache = CachedPointCount()
        assert not cache.is_set()
        assert cache.value is None

        assert cache.set(42, "hardware") == 42
        assert cache.is_set()
        assert cache.value == 42
        assert cache.source == "hardware"

        cache.invalidate()
        assert not cache.is_set()
        assert cache.source is None

    def test_rejects_invalid(self):
        cache = CachedPointCount()
        with pytest.raises(InvalidConfiguration):
            cache.set(0, "heuristic")
        assert not cache.is_set()
