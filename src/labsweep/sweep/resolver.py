"""Sweep-point resolution and abscissa generation.

The `SweepPointResolver` answers two questions for a trace acquisition:

1. How many points does the sweep have? (`resolve_point_count`)
2. Where do those points sit on the abscissa? (`generate_abscissa`)

The point count comes from the cheapest strategy the device supports (see
`labsweep.types.sweep`). Whichever strategy is used, the result is memoized
for the remainder of the acquisition cycle, so building the abscissa after a
trace does not go back to the device.

Diagnostics are passed to an injected observer callable. The default observer
forwards to the loguru logger.

Examples
--------
```python
from labsweep.sweep import SweepPointResolver
from labsweep.types import Heuristic, SweepRange

resolver = SweepPointResolver()
x, y = resolver.acquire_sweep(SweepRange(0, 10), Heuristic(), lambda: [1.0, 2.0, 3.0])
# x -> array([ 0.,  5., 10.])
```
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence, Tuple, Union

import numpy as np
from loguru import logger

from labsweep.types.errors import InconsistentPointCount, InvalidConfiguration
from labsweep.types.sweep import (
    CachedPointCount,
    HardwareFixed,
    HardwareQueryable,
    Heuristic,
    PointCountCapability,
    SweepRange,
    validate_point_count,
)

Observer = Callable[[str], None]


def log_observer(note: str) -> None:
    logger.debug(note)


def generate_abscissa(sweep_range: SweepRange, count: int) -> np.ndarray:
    """Evenly spaced abscissa values from `sweep_range.start` to `.stop`.

    Parameters
    ----------
    sweep_range : SweepRange
        Inclusive sweep endpoints
    count : int
        Number of points, >= 1

    Returns
    -------
    np.ndarray
        1D float array of length `count`. For `count == 1` this is
        `[sweep_range.start]`.

    Raises
    ------
    InvalidConfiguration
        If `count` is not an integer >= 1
    """
    count = validate_point_count(count)
    start = float(sweep_range.start)
    stop = float(sweep_range.stop)

    n_intervals = count - 1
    if n_intervals == 0:
        return np.array([start], dtype=float)

    # i / n_intervals is exactly 1.0 at the last index
    fractions = np.arange(count, dtype=float) / n_intervals
    return start + (stop - start) * fractions


class SweepPointResolver:
    """Resolves sweep point counts and builds abscissa sequences.

    Parameters
    ----------
    query_point_count : Callable[[], int], optional
        Device-side point-count query, used for `HardwareQueryable`
        capabilities. May raise TransportError or ProtocolError.
    observer : Callable[[str], None], optional
        Receives one diagnostic note per resolution (and on trace length
        mismatches). Defaults to logging via loguru at DEBUG level.

    Attributes
    ----------
    cache : CachedPointCount
        Point count memoized for the current acquisition cycle
    """

    def __init__(
        self,
        query_point_count: Optional[Callable[[], int]] = None,
        observer: Optional[Observer] = None,
    ):
        self._query_point_count = query_point_count
        self._observer = observer if observer is not None else log_observer
        self.cache = CachedPointCount()

    def begin_cycle(self) -> None:
        """Start a new acquisition cycle, dropping any memoized point count."""
        self.cache.invalidate()

    def resolve_point_count(
        self,
        capability: PointCountCapability,
        trace_length_provider: Callable[[], Union[int, Sequence[float]]],
    ) -> int:
        """Resolve the number of sweep points with the cheapest strategy.

        Parameters
        ----------
        capability : PointCountCapability
            The device's point-count capability
        trace_length_provider : Callable[[], int | Sequence[float]]
            Performs a full trace acquisition and returns the number of
            samples received (or the samples themselves). Only called for
            `Heuristic` capabilities.

        Returns
        -------
        int
            The point count, >= 1

        Raises
        ------
        InvalidConfiguration
            For an unknown capability, a queryable capability with no query
            collaborator, or a resolved count below 1
        TransportError, ProtocolError
            Propagated unchanged from the device collaborators
        """
        if self.cache.is_set():
            return self.cache.value

        if isinstance(capability, HardwareFixed):
            self._observer(f"using hardwired number of points: {capability.count}")
            return self.record_point_count(capability.count, str(capability))

        if isinstance(capability, HardwareQueryable):
            if self._query_point_count is None:
                raise InvalidConfiguration(
                    "Capability is HardwareQueryable but no point count query was given"
                )
            self._observer(
                "using hardware capabilities to detect number of points in a sweep"
            )
            return self.record_point_count(self._query_point_count(), str(capability))

        if isinstance(capability, Heuristic):
            self._observer("trying heuristic to detect number of points in a sweep")
            length = trace_length_provider()
            if hasattr(length, "__len__"):
                # provider handed back the trace itself
                length = len(length)
            return self.record_point_count(length, str(capability))

        raise InvalidConfiguration(f"Unknown point count capability: {capability!r}")

    def generate_abscissa(self, sweep_range: SweepRange, count: int) -> np.ndarray:
        return generate_abscissa(sweep_range, count)

    def acquire_sweep(
        self,
        sweep_range: SweepRange,
        capability: PointCountCapability,
        trace_y_provider: Callable[[], Sequence[float]],
        strict: bool = False,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Acquire one trace and pair it with its abscissa.

        Parameters
        ----------
        sweep_range : SweepRange
            Sweep endpoints
        capability : PointCountCapability
            The device's point-count capability
        trace_y_provider : Callable[[], Sequence[float]]
            Acquires the raw ordinate trace from the device
        strict : bool, optional
            Raise InconsistentPointCount when the trace length disagrees with
            a queried or fixed point count. By default the mismatch is only
            reported to the observer and logged as a warning.

        Returns
        -------
        tuple[np.ndarray, np.ndarray]
            `(x, y)`. `len(x) == len(y)` is guaranteed for `Heuristic`
            capabilities only.
        """
        self.begin_cycle()
        y = np.asarray(trace_y_provider(), dtype=float)

        if isinstance(capability, Heuristic):
            # the trace we already hold gives the count, no second acquisition
            count = self.record_point_count(len(y), str(capability))
        else:
            count = self.resolve_point_count(capability, lambda: len(y))

        x = generate_abscissa(sweep_range, count)

        if len(x) != len(y):
            msg = (
                f"trace length {len(y)} differs from {self.cache.source} "
                f"point count {count}"
            )
            self._observer(msg)
            if strict:
                raise InconsistentPointCount(msg, expected=count, actual=len(y))
            logger.warning(msg)
        return x, y

    def record_point_count(self, count: int, source: str) -> int:
        """Memoize `count` for the current cycle.

        Raises InconsistentPointCount if a different count from another
        measurement is already cached for this cycle.
        """
        count = validate_point_count(count)
        if self.cache.is_set() and self.cache.value != count:
            raise InconsistentPointCount(
                f"{source} point count {count} disagrees with {self.cache.source} "
                f"point count {self.cache.value} in the same acquisition cycle",
                expected=self.cache.value,
                actual=count,
            )
        return self.cache.set(count, source)
