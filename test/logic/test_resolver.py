from unittest.mock import MagicMock

import numpy as np
import pytest

from labsweep.sweep import SweepPointResolver, generate_abscissa
from labsweep.types import (
    HardwareFixed,
    HardwareQueryable,
    Heuristic,
    InconsistentPointCount,
    InvalidConfiguration,
    ProtocolError,
    SweepRange,
    TransportError,
)


class TestGenerateAbscissa:
    @pytest.mark.parametrize(
        "sweep_range",
        [SweepRange(0, 10), SweepRange(2.5, -7.0), SweepRange(1e6, 3e9), SweepRange(3, 3)],
    )
    def test_single_point_is_start(self, sweep_range):
        assert list(generate_abscissa(sweep_range, 1)) == [sweep_range.start]

    @pytest.mark.parametrize("count", [2, 3, 10, 101, 1001])
    @pytest.mark.parametrize(
        "sweep_range",
        [SweepRange(0, 10), SweepRange(10, 0), SweepRange(-3.3, 7.1), SweepRange(1e6, 3e9)],
    )
    def test_length_endpoints_monotonic(self, sweep_range, count):
        x = generate_abscissa(sweep_range, count)
        assert len(x) == count
        assert x[0] == sweep_range.start
        assert x[-1] == pytest.approx(sweep_range.stop)
        steps = np.diff(x)
        if sweep_range.stop >= sweep_range.start:
            assert np.all(steps >= 0)
        else:
            assert np.all(steps <= 0)

    def test_three_points(self):
        x = generate_abscissa(SweepRange(0, 10), 3)
        np.testing.assert_array_equal(x, [0.0, 5.0, 10.0])

    def test_degenerate_range(self):
        x = generate_abscissa(SweepRange(4.2, 4.2), 5)
        assert len(x) == 5
        assert all(v == 4.2 for v in x)

    def test_idempotent(self):
        r = SweepRange(-1.5, 2.75)
        first = generate_abscissa(r, 17)
        second = generate_abscissa(r, 17)
        np.testing.assert_array_equal(first, second)
        assert first is not second

    @pytest.mark.parametrize("count", [0, -1, -100])
    def test_non_positive_count_rejected(self, count):
        with pytest.raises(InvalidConfiguration):
            generate_abscissa(SweepRange(0, 1), count)

    @pytest.mark.parametrize("count", [2.5, "3", None, True])
    def test_non_integral_count_rejected(self, count):
        with pytest.raises(InvalidConfiguration):
            generate_abscissa(SweepRange(0, 1), count)

    def test_numpy_integer_count(self):
        assert len(generate_abscissa(SweepRange(0, 1), np.int64(4))) == 4

    def test_invalid_configuration_is_value_error(self):
        with pytest.raises(ValueError):
            generate_abscissa(SweepRange(0, 1), 0)


class TestResolvePointCount:
    def test_fixed_never_calls_provider(self):
        provider = MagicMock()
        query = MagicMock()
        resolver = SweepPointResolver(query_point_count=query, observer=lambda note: None)
        assert resolver.resolve_point_count(HardwareFixed(7), provider) == 7
        provider.assert_not_called()
        query.assert_not_called()

    def test_heuristic_uses_trace_length(self):
        resolver = SweepPointResolver(observer=lambda note: None)
        assert resolver.resolve_point_count(Heuristic(), lambda: [0.0] * 50) == 50

    def test_heuristic_accepts_plain_length(self):
        resolver = SweepPointResolver(observer=lambda note: None)
        assert resolver.resolve_point_count(Heuristic(), lambda: 23) == 23

    def test_queryable_uses_query(self):
        query = MagicMock(return_value=201)
        provider = MagicMock()
        resolver = SweepPointResolver(query_point_count=query, observer=lambda note: None)
        assert resolver.resolve_point_count(HardwareQueryable(), provider) == 201
        query.assert_called_once_with()
        provider.assert_not_called()

    def test_queryable_without_query_is_invalid(self):
        resolver = SweepPointResolver(observer=lambda note: None)
        with pytest.raises(InvalidConfiguration):
            resolver.resolve_point_count(HardwareQueryable(), lambda: 10)

    def test_unknown_capability_is_invalid(self):
        resolver = SweepPointResolver(observer=lambda note: None)
        with pytest.raises(InvalidConfiguration):
            resolver.resolve_point_count("heuristic", lambda: 10)

    def test_memoized_within_cycle(self):
        provider = MagicMock(return_value=[1.0, 2.0, 3.0, 4.0])
        resolver = SweepPointResolver(observer=lambda note: None)
        assert resolver.resolve_point_count(Heuristic(), provider) == 4
        assert resolver.resolve_point_count(Heuristic(), provider) == 4
        provider.assert_called_once()
        assert resolver.cache.value == 4
        assert resolver.cache.source == "heuristic"

    def test_new_cycle_invalidates_cache(self):
        query = MagicMock(side_effect=[101, 201])
        resolver = SweepPointResolver(query_point_count=query, observer=lambda note: None)
        assert resolver.resolve_point_count(HardwareQueryable(), lambda: 0) == 101
        resolver.begin_cycle()
        assert not resolver.cache.is_set()
        assert resolver.resolve_point_count(HardwareQueryable(), lambda: 0) == 201
        assert query.call_count == 2

    @pytest.mark.parametrize("reply", [0, -5])
    def test_non_positive_query_result_is_invalid(self, reply):
        resolver = SweepPointResolver(
            query_point_count=lambda: reply, observer=lambda note: None
        )
        with pytest.raises(InvalidConfiguration):
            resolver.resolve_point_count(HardwareQueryable(), lambda: 10)
        assert not resolver.cache.is_set()

    def test_empty_trace_is_invalid(self):
        resolver = SweepPointResolver(observer=lambda note: None)
        with pytest.raises(InvalidConfiguration):
            resolver.resolve_point_count(Heuristic(), lambda: [])

    @pytest.mark.parametrize("error", [TransportError("link down"), ProtocolError("garbage")])
    def test_query_errors_propagate(self, error):
        query = MagicMock(side_effect=error)
        resolver = SweepPointResolver(query_point_count=query, observer=lambda note: None)
        with pytest.raises(type(error)) as exc_info:
            resolver.resolve_point_count(HardwareQueryable(), lambda: 10)
        assert exc_info.value is error
        query.assert_called_once()
        assert not resolver.cache.is_set()

    def test_trace_errors_propagate(self):
        provider = MagicMock(side_effect=TransportError("timeout"))
        resolver = SweepPointResolver(observer=lambda note: None)
        with pytest.raises(TransportError):
            resolver.resolve_point_count(Heuristic(), provider)
        provider.assert_called_once()

    def test_observer_notes(self):
        notes = []
        resolver = SweepPointResolver(query_point_count=lambda: 11, observer=notes.append)
        resolver.resolve_point_count(HardwareFixed(7), lambda: 0)
        resolver.begin_cycle()
        resolver.resolve_point_count(HardwareQueryable(), lambda: 0)
        resolver.begin_cycle()
        resolver.resolve_point_count(Heuristic(), lambda: 3)
        assert len(notes) == 3
        assert "hardwired" in notes[0] and "7" in notes[0]
        assert "hardware capabilities" in notes[1]
        assert "heuristic" in notes[2]

    def test_default_observer_logs(self, log_messages):
        resolver = SweepPointResolver()
        resolver.resolve_point_count(Heuristic(), lambda: 3)
        assert any("heuristic" in m for m in log_messages)

    def test_conflicting_counts_in_cycle(self):
        resolver = SweepPointResolver(observer=lambda note: None)
        resolver.record_point_count(101, "hardware")
        assert resolver.record_point_count(101, "heuristic") == 101
        with pytest.raises(InconsistentPointCount) as exc_info:
            resolver.record_point_count(99, "heuristic")
        assert exc_info.value.expected == 101
        assert exc_info.value.actual == 99


class TestAcquireSweep:
    def test_heuristic(self):
        provider = MagicMock(return_value=[1.0, 2.0, 3.0])
        resolver = SweepPointResolver(observer=lambda note: None)
        x, y = resolver.acquire_sweep(SweepRange(0, 10), Heuristic(), provider)
        np.testing.assert_array_equal(x, [0.0, 5.0, 10.0])
        np.testing.assert_array_equal(y, [1.0, 2.0, 3.0])
        provider.assert_called_once()

    def test_heuristic_lengths_match(self):
        resolver = SweepPointResolver(observer=lambda note: None)
        for n in (1, 2, 57):
            x, y = resolver.acquire_sweep(SweepRange(5, 6), Heuristic(), lambda: np.ones(n))
            assert len(x) == len(y) == n

    def test_heuristic_single_point(self):
        resolver = SweepPointResolver(observer=lambda note: None)
        x, y = resolver.acquire_sweep(SweepRange(2, 8), Heuristic(), lambda: [-50.0])
        assert list(x) == [2.0]

    def test_queryable(self):
        query = MagicMock(return_value=5)
        provider = MagicMock(return_value=np.zeros(5))
        resolver = SweepPointResolver(query_point_count=query, observer=lambda note: None)
        x, y = resolver.acquire_sweep(SweepRange(0, 4), HardwareQueryable(), provider)
        np.testing.assert_array_equal(x, [0.0, 1.0, 2.0, 3.0, 4.0])
        query.assert_called_once()
        provider.assert_called_once()

    def test_each_call_is_a_new_cycle(self):
        query = MagicMock(side_effect=[3, 5])
        resolver = SweepPointResolver(query_point_count=query, observer=lambda note: None)
        x1, _ = resolver.acquire_sweep(SweepRange(0, 1), HardwareQueryable(), lambda: np.zeros(3))
        x2, _ = resolver.acquire_sweep(SweepRange(0, 1), HardwareQueryable(), lambda: np.zeros(5))
        assert len(x1) == 3
        assert len(x2) == 5

    def test_fixed_mismatch_is_reported_not_corrected(self, log_messages):
        notes = []
        resolver = SweepPointResolver(observer=notes.append)
        x, y = resolver.acquire_sweep(SweepRange(0, 1), HardwareFixed(5), lambda: [1.0, 2.0, 3.0])
        assert len(x) == 5
        assert len(y) == 3
        assert any("differs" in note for note in notes)
        assert any("differs" in m for m in log_messages)

    def test_fixed_mismatch_strict(self):
        resolver = SweepPointResolver(observer=lambda note: None)
        with pytest.raises(InconsistentPointCount) as exc_info:
            resolver.acquire_sweep(
                SweepRange(0, 1), HardwareFixed(5), lambda: [1.0, 2.0, 3.0], strict=True
            )
        assert exc_info.value.expected == 5
        assert exc_info.value.actual == 3

    def test_trace_error_propagates(self):
        query = MagicMock(return_value=5)
        resolver = SweepPointResolver(query_point_count=query, observer=lambda note: None)

        def failing_trace():
            raise TransportError("link down")

        with pytest.raises(TransportError):
            resolver.acquire_sweep(SweepRange(0, 1), HardwareQueryable(), failing_trace)
        query.assert_not_called()

    def test_empty_heuristic_trace_is_invalid(self):
        resolver = SweepPointResolver(observer=lambda note: None)
        with pytest.raises(InvalidConfiguration):
            resolver.acquire_sweep(SweepRange(0, 1), Heuristic(), lambda: [])
