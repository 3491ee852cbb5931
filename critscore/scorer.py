"""Scoring configuration loaded from YAML, and the Scorer built from it."""

from __future__ import annotations

import dataclasses
import posixpath
import unicodedata
from typing import IO, Any, Mapping, Optional, Union

import yaml

from . import values
from .algorithm import NAME as WAM_NAME
from .algorithm import Algorithm, Registry, WeightedArithmeticMean


class ConfigError(ValueError):
    """Raised when a scoring configuration is invalid."""


@dataclasses.dataclass
class Condition:
    """A condition on a record: exactly one of its fields must be set."""

    not_: Optional[Condition] = None
    field_exists: str = ""


def build_condition(condition: Condition) -> values.Condition:
    """Return the callable condition described by condition."""
    if condition.field_exists and condition.not_ is not None:
        raise ConfigError("only one field of condition must be set")
    if condition.field_exists:
        return values.exists_condition(values.Field(condition.field_exists))
    if condition.not_ is not None:
        return values.not_condition(build_condition(condition.not_))
    raise ConfigError("one condition field must be set")


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"{what} must be a mapping")
    return data


def _string(data: Any, what: str) -> str:
    if data is None:
        return ""
    if not isinstance(data, str):
        raise ConfigError(f"{what} must be a string")
    return data


def _number(data: Any, what: str, default: float) -> float:
    if data is None:
        return default
    if isinstance(data, bool) or not isinstance(data, (int, float)):
        raise ConfigError(f"{what} must be a number")
    return float(data)


def _parse_condition(data: Any) -> Condition:
    raw = _mapping(data, "condition")
    inner = raw.get("not")
    return Condition(
        not_=_parse_condition(inner) if inner is not None else None,
        field_exists=_string(raw.get("field_exists"), "field_exists"),
    )


def _parse_bounds(data: Any) -> values.Bounds:
    raw = _mapping(data, "bounds")
    smaller = raw.get("smaller_is_better", False)
    if not isinstance(smaller, bool):
        raise ConfigError("smaller_is_better must be a boolean")
    return values.Bounds(
        lower=_number(raw.get("lower"), "lower", 0.0),
        upper=_number(raw.get("upper"), "upper", 0.0),
        smaller_is_better=smaller,
    )


@dataclasses.dataclass
class InputConfig:
    """One input of the configured algorithm, as written in the YAML file."""

    field: str
    bounds: Optional[values.Bounds] = None
    condition: Optional[Condition] = None
    distribution: str = values.DEFAULT_DISTRIBUTION_NAME
    tags: list[str] = dataclasses.field(default_factory=list)
    weight: float = 1.0

    @classmethod
    def from_mapping(cls, data: Any) -> InputConfig:
        """Build an input from a parsed YAML mapping, validating it."""
        raw = _mapping(data, "input")
        field_name = _string(raw.get("field"), "field")
        if not field_name:
            raise ConfigError("field must be set")
        weight = _number(raw.get("weight"), "weight", 1.0)
        if not weight > 0:
            raise ConfigError("weight must be greater than 0")
        distribution = raw.get("distribution")
        tags = raw.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ConfigError("tags must be a list of strings")
        bounds = raw.get("bounds")
        condition = raw.get("condition")
        return cls(
            field=field_name,
            bounds=_parse_bounds(bounds) if bounds is not None else None,
            condition=_parse_condition(condition) if condition is not None else None,
            distribution=(
                _string(distribution, "distribution")
                if distribution is not None
                else values.DEFAULT_DISTRIBUTION_NAME
            ),
            tags=list(tags),
            weight=weight,
        )

    def to_algorithm_input(self) -> values.Input:
        """Return the algorithm input described by this configuration."""
        source: values.Value = values.Field(self.field)
        if self.condition is not None:
            source = values.ConditionalValue(build_condition(self.condition), source)
        distribution = values.lookup_distribution(self.distribution)
        if distribution is None:
            raise ConfigError(f"unknown distribution {self.distribution}")
        return values.Input(
            source=source,
            distribution=distribution,
            bounds=self.bounds,
            tags=list(self.tags),
            weight=self.weight,
        )


@dataclasses.dataclass
class Config:
    """An algorithm name and the inputs it is given."""

    name: str = ""
    inputs: list[InputConfig] = dataclasses.field(default_factory=list)

    def algorithm(self) -> Algorithm:
        """Create the configured algorithm.

        Raises ConfigError for a bad input and UnknownAlgorithmError for an
        unknown algorithm name.
        """
        inputs = [i.to_algorithm_input() for i in self.inputs]
        registry = Registry()
        registry.register(WAM_NAME, WeightedArithmeticMean)
        return registry.new_algorithm(self.name, inputs)


def load_config(stream: IO[Any]) -> Config:
    """Parse a YAML configuration from stream."""
    data = stream.read()
    try:
        doc = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid yaml: {exc}") from exc
    raw = _mapping(doc, "config")
    inputs = raw.get("inputs") or []
    if not isinstance(inputs, list):
        raise ConfigError("inputs must be a list")
    return Config(
        name=_string(raw.get("algorithm"), "algorithm"),
        inputs=[InputConfig.from_mapping(item) for item in inputs],
    )


class Scorer:
    """A named algorithm applied to records of raw values."""

    def __init__(self, name: str, algorithm: Algorithm) -> None:
        self.name = name
        self.algorithm = algorithm

    def score_raw(self, raw: Mapping[str, str]) -> float:
        """Score raw text values; values that are not numbers are ignored."""
        record: dict[str, float] = {}
        for key, text in raw.items():
            number = _parse_float(text)
            if number is not None:
                record[key] = number
        return self.algorithm.score(record)


def _parse_float(text: str) -> Optional[float]:
    if text != text.strip() or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def from_config(name: str, stream: IO[Any]) -> Scorer:
    """Create a Scorer called name from the YAML configuration in stream."""
    if not name:
        raise ValueError("name must be non-empty")
    try:
        config = load_config(stream)
    except ConfigError as exc:
        raise ConfigError(f"load config: {exc}") from exc
    try:
        algorithm = config.algorithm()
    except ValueError as exc:
        raise ConfigError(f"create algorithm: {exc}") from exc
    return Scorer(name, algorithm)


def _base(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def _map_char(ch: str) -> str:
    if not (unicodedata.category(ch) == "Nd" or ch.isalpha()):
        return "_"
    lowered = ch.lower()
    return lowered if len(lowered) == 1 else ch


def name_from_filepath(filepath: Union[str, "posixpath.PathLike[str]"]) -> str:
    """Derive a score name from a file path: "path/to/My-File.yml" -> "my_file_score"."""
    base = _base(str(filepath))
    dot = base.rfind(".")
    if dot >= 0:
        base = base[:dot]
    return "".join(_map_char(ch) for ch in base) + "_score"