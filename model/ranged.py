"""Range-enforced integer values.

Every synth parameter is an integer tagged with an inclusive ``Bound``.
``RangedValue`` guarantees that the stored value never leaves that bound:
under ``Policy.CLAMP`` out-of-range input is saturated, under
``Policy.REJECT`` it raises ``RangeError``.  Semantic parameter kinds
(detune, rate, transpose, ...) subclass ``RangedValue`` in ``model.params``
so that two kinds never compare equal even when their numbers match.
"""
from __future__ import annotations
import dataclasses
import numbers
import threading
import typing
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache, total_ordering
import numpy as np
from core.errors import ProgrammingError, RangeError


@dataclass(frozen=True)
class Bound:
    lo: int
    hi: int

    def __post_init__(self) -> None:
        if self.lo > self.hi:
            raise ProgrammingError(f"Invalid bound: {self.lo} > {self.hi}")

    def contains(self, value: int) -> bool:
        return self.lo <= value <= self.hi

    def contains_bound(self, other: Bound) -> bool:
        return self.lo <= other.lo and other.hi <= self.hi

    def clamp(self, value: int) -> int:
        return max(self.lo, min(self.hi, value))

    def __str__(self) -> str:
        return f"{self.lo}..{self.hi}"


class Policy(Enum):
    CLAMP = "clamp"
    REJECT = "reject"


_local = threading.local()


def default_rng() -> np.random.Generator:
    """Return this thread's random generator, creating it on first use."""
    rng = getattr(_local, "rng", None)
    if rng is None:
        rng = np.random.default_rng()
        _local.rng = rng
    return rng


def _draw(bound: Bound, rng: np.random.Generator | None) -> int:
    rng = rng or default_rng()
    return int(rng.integers(bound.lo, bound.hi, endpoint=True))


@total_ordering
class RangedValue:
    """An integer that always lies within ``bound``.

    Subclasses set ``BOUND`` and ``NAME`` at class level.  A plain
    ``RangedValue`` may be given an explicit ``bound`` instead.
    """

    BOUND: typing.ClassVar[Bound] = Bound(0, 127)
    NAME: typing.ClassVar[str] = "value"

    __slots__ = ("_value", "_bound")

    def __init__(self, value: int, policy: Policy = Policy.CLAMP,
                 bound: Bound | None = None) -> None:
        bound = bound or self.BOUND
        if not isinstance(value, numbers.Integral):
            raise TypeError(f"{self.NAME} must be an integer, got {value!r}")
        value = int(value)
        if not bound.contains(value):
            if policy is Policy.REJECT:
                raise RangeError(self.NAME, value, bound)
            value = bound.clamp(value)
        object.__setattr__(self, "_value", value)
        object.__setattr__(self, "_bound", bound)

    def __setattr__(self, name, value) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self):
        if type(self) is RangedValue:
            return (RangedValue, (self._value, Policy.REJECT, self._bound))
        return (type(self), (self._value, Policy.REJECT))

    @property
    def value(self) -> int:
        return self._value

    @property
    def bound(self) -> Bound:
        return self._bound

    @classmethod
    def random(cls, rng: np.random.Generator | None = None,
               bound: Bound | None = None):
        """Uniformly distributed value over the whole bound."""
        bound = bound or cls.BOUND
        return cls(_draw(bound, rng), bound=bound if cls is RangedValue else None)

    @classmethod
    def random_within(cls, sub_bound: Bound, rng: np.random.Generator | None = None,
                      bound: Bound | None = None):
        """Uniformly distributed value over ``sub_bound``, which must lie inside the bound."""
        bound = bound or cls.BOUND
        if not bound.contains_bound(sub_bound):
            raise ProgrammingError(
                f"{cls.NAME}: sub-bound {sub_bound} is not within {bound}"
            )
        return cls(_draw(sub_bound, rng), bound=bound if cls is RangedValue else None)

    def _same_kind(self, other) -> bool:
        return type(other) is type(self) and other._bound == self._bound

    def __eq__(self, other) -> bool:
        if not isinstance(other, RangedValue):
            return NotImplemented
        return self._same_kind(other) and other._value == self._value

    def __lt__(self, other) -> bool:
        if not isinstance(other, RangedValue) or not self._same_kind(other):
            return NotImplemented
        return self._value < other._value

    def __hash__(self) -> int:
        return hash((type(self), self._bound, self._value))

    def __int__(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value})"


@lru_cache(maxsize=None)
def _field_types(cls) -> dict[str, type]:
    hints = typing.get_type_hints(cls)
    return {f.name: hints[f.name] for f in dataclasses.fields(cls)}


def check_field_types(obj) -> None:
    """Raise TypeError if any dataclass field holds the wrong kind of value."""
    for name, expected in _field_types(type(obj)).items():
        value = getattr(obj, name)
        if isinstance(expected, type) and not isinstance(value, expected):
            raise TypeError(
                f"{type(obj).__name__}.{name} must be {expected.__name__}, "
                f"got {type(value).__name__}"
            )
