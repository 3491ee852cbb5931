"""Scoring algorithms and the registry that creates them by name."""

from __future__ import annotations

import abc
import math
from typing import Callable, Mapping, Sequence

from .values import Input

NAME = "weighted_arithmetic_mean"


class Algorithm(abc.ABC):
    """Turns a record of named values into a single score."""

    @abc.abstractmethod
    def score(self, record: Mapping[str, float]) -> float:
        """Return the score for record."""


Factory = Callable[[Sequence[Input]], Algorithm]


class UnknownAlgorithmError(ValueError):
    """Raised when no factory is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown algorithm {name}")
        self.name = name


class Registry:
    """Maps algorithm names to factories that create them."""

    def __init__(self) -> None:
        self._factories: dict[str, Factory] = {}

    def register(self, name: str, factory: Factory) -> None:
        """Register factory under name, replacing any earlier registration."""
        self._factories[name] = factory

    def new_algorithm(self, name: str, inputs: Sequence[Input]) -> Algorithm:
        """Create the algorithm called name from inputs.

        Raises UnknownAlgorithmError if nothing is registered under name.
        """
        try:
            factory = self._factories[name]
        except KeyError:
            raise UnknownAlgorithmError(name) from None
        return factory(inputs)


class WeightedArithmeticMean(Algorithm):
    """The weighted arithmetic mean of every input that has a value."""

    def __init__(self, inputs: Sequence[Input]) -> None:
        self.inputs = list(inputs)

    def score(self, record: Mapping[str, float]) -> float:
        total_weight = 0.0
        total = 0.0
        for item in self.inputs:
            v = item.value(record)
            if v is not None:
                total_weight += item.weight
                total += item.weight * v
        if total_weight == 0:
            if total == 0 or math.isnan(total):
                return math.nan
            return math.copysign(math.inf, total)
        return total / total_weight