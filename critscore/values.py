"""Values, conditions, distributions and bounded inputs used by scoring."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Protocol, Union

Fields = Mapping[str, float]
Condition = Callable[[Fields], bool]

DEFAULT_DISTRIBUTION_NAME = "linear"


class Value(Protocol):
    """Something that computes a number from a record, or None if it cannot."""

    def value(self, fields: Fields) -> Optional[float]: ...


@dataclass(frozen=True)
class Field:
    """A value that is the raw value of the named field."""

    name: str

    def __str__(self) -> str:
        return self.name

    def value(self, fields: Fields) -> Optional[float]:
        """Return the field's value, or None if the record lacks it."""
        return fields.get(self.name)


def exists_condition(field: Union[Field, str]) -> Condition:
    """Return a condition that holds when the record has the field."""
    name = str(field)
    return lambda fields: name in fields


def not_condition(condition: Condition) -> Condition:
    """Return a condition that holds when condition does not."""
    return lambda fields: not condition(fields)


@dataclass
class ConditionalValue:
    """Yields the inner value only while the condition holds."""

    condition: Condition
    inner: Value

    def value(self, fields: Fields) -> Optional[float]:
        v = self.inner.value(fields)
        if v is None or not self.condition(fields):
            return None
        return v


def _log(x: float) -> float:
    if x > 0:
        return math.log(x)
    if x == 0:
        return -math.inf
    return math.nan


_NORMALIZERS: dict[str, Callable[[float], float]] = {
    "linear": lambda v: v,
    "zipfian": lambda v: _log(1 + v),
}


@dataclass(frozen=True)
class Distribution:
    """A named normalization applied to input values."""

    name: str
    normalize_fn: Callable[[float], float] = field(repr=False, compare=False)

    def __str__(self) -> str:
        return self.name

    def normalize(self, v: float) -> float:
        return self.normalize_fn(v)


def lookup_distribution(name: str) -> Optional[Distribution]:
    """Return the distribution called name, or None if there is none."""
    fn = _NORMALIZERS.get(name)
    if fn is None:
        return None
    return Distribution(name, fn)


def _divide(a: float, b: float) -> float:
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a) or math.isnan(b):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


@dataclass
class Bounds:
    """Clamps values to a range and shifts them so the lower bound is zero."""

    lower: float = 0.0
    upper: float = 0.0
    smaller_is_better: bool = False

    def apply(self, v: float) -> float:
        if v < self.lower:
            v = self.lower
        elif v > self.upper:
            v = self.upper
        v -= self.lower
        if self.smaller_is_better:
            v = self.threshold() - v
        return v

    def threshold(self) -> float:
        return self.upper - self.lower


def _linear() -> Distribution:
    return Distribution("linear", _NORMALIZERS["linear"])


@dataclass
class Input:
    """A weighted, optionally bounded, source of a normalized value."""

    source: Value
    distribution: Distribution = field(default_factory=_linear)
    bounds: Optional[Bounds] = None
    tags: list[str] = field(default_factory=list)
    weight: float = 1.0

    def value(self, fields: Fields) -> Optional[float]:
        """Return the normalized value, or None if the source has none."""
        v = self.source.value(fields)
        if v is None:
            return None
        den = 1.0
        if self.bounds is not None:
            v = self.bounds.apply(v)
            den = self.distribution.normalize(self.bounds.threshold())
        return _divide(self.distribution.normalize(v), den)