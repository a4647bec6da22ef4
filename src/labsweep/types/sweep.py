"""Sweep data model: ranges, point-count capabilities and the per-cycle cache.

A point-count capability describes how a device can tell us how many points
are in its sweep. It is one of three variants, selected once when the driver
is configured:

- `HardwareQueryable`: the device answers a point-count query
  (the analogue of `[:SENSe]:SWEep:POINts?`).
- `HardwareFixed`: the device has an immutable number of points that is known
  up front.
- `Heuristic`: neither; the count is inferred from the length of a measured
  trace.

Examples
--------
```python
from labsweep.types import SweepRange, HardwareFixed, capability_from_profile

rng = SweepRange(start=1e6, stop=3e9)
cap = capability_from_profile(can_query=False, hardwired_points=601)
assert cap == HardwareFixed(601)
```
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Optional, Union

from labsweep.types.errors import InvalidConfiguration


@dataclass(frozen=True)
class SweepRange:
    """Inclusive endpoints of a linear parameter sweep.

    Attributes
    ----------
    start : float
        First abscissa value (e.g. start frequency in Hz)
    stop : float
        Last abscissa value
    """

    start: float
    stop: float

    @property
    def span(self) -> float:
        return self.stop - self.start


@dataclass(frozen=True)
class HardwareQueryable:
    """Device can report its point count on request."""

    def __str__(self) -> str:
        return "hardware"


@dataclass(frozen=True)
class HardwareFixed:
    """Device has an immutable point count known a priori."""

    count: int

    def __post_init__(self):
        object.__setattr__(self, "count", validate_point_count(self.count))

    def __str__(self) -> str:
        return f"fixed({self.count})"


@dataclass(frozen=True)
class Heuristic:
    """Point count must be inferred from the measured data length."""

    def __str__(self) -> str:
        return "heuristic"


PointCountCapability = Union[HardwareQueryable, HardwareFixed, Heuristic]


def validate_point_count(count) -> int:
    """Return `count` as an int, raising InvalidConfiguration if it is not >= 1.

    Accepts anything integral (python or numpy ints). Floats and bools are
    rejected rather than truncated.
    """
    if isinstance(count, bool):
        raise InvalidConfiguration(f"Point count must be an integer, got {count!r}")
    try:
        count = operator.index(count)
    except TypeError:
        raise InvalidConfiguration(
            f"Point count must be an integer, got {type(count).__name__} ({count!r})"
        ) from None
    if count < 1:
        raise InvalidConfiguration(f"Point count must be >= 1, got {count}")
    return count


def capability_from_profile(
    can_query: bool = True, hardwired_points: Optional[int] = None
) -> PointCountCapability:
    """Build the capability variant from a driver's flag/int profile.

    A hardwired point count wins over the query flag.
    """
    if hardwired_points is not None:
        return HardwareFixed(hardwired_points)
    if can_query:
        return HardwareQueryable()
    return Heuristic()


class CachedPointCount:
    """Point count memoized for the duration of one acquisition cycle.

    The cache is empty until `set` is called, and emptied again by
    `invalidate` at the start of each new acquisition.
    """

    def __init__(self):
        self._value: Optional[int] = None
        self._source: Optional[str] = None

    @property
    def value(self) -> Optional[int]:
        return self._value

    @property
    def source(self) -> Optional[str]:
        """Name of the strategy that produced the cached value."""
        return self._source

    def is_set(self) -> bool:
        return self._value is not None

    def set(self, value: int, source: str) -> int:
        self._value = validate_point_count(value)
        self._source = source
        return self._value

    def invalidate(self) -> None:
        self._value = None
        self._source = None

    def __repr__(self) -> str:
        return f"CachedPointCount(value={self._value!r}, source={self._source!r})"
