import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Sequence, Tuple, Union

from app.utils.errors import ConfigurationError

FALLBACK_LABEL = "unclassifiable"
FALLBACK_DESCRIPTION = "insufficient data to classify"

Number = Union[int, float]


@dataclass(frozen=True)
class Bounded:
    """Half-open interval [min, max)."""
    min: float
    max: float
    label: str
    description: str = ""

    def contains(self, value: Number) -> bool:
        return self.min <= value < self.max


@dataclass(frozen=True)
class LowerBound:
    """[min, +inf)"""
    min: float
    label: str
    description: str = ""

    def contains(self, value: Number) -> bool:
        return value >= self.min


@dataclass(frozen=True)
class UpperBound:
    """(-inf, max]"""
    max: float
    label: str
    description: str = ""

    def contains(self, value: Number) -> bool:
        return value <= self.max


@dataclass(frozen=True)
class Unbounded:
    """Entry authored without bounds. Never matches."""
    label: str
    description: str = ""

    def contains(self, value: Number) -> bool:
        return False


ThresholdEntry = Union[Bounded, LowerBound, UpperBound, Unbounded]


def _bound(raw: dict, key: str, label: str) -> Optional[Number]:
    value = raw.get(key)
    if value is None:
        return None
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise ConfigurationError(f"Threshold entry '{label}' has non-numeric {key}: {value!r}")
    return value


def parse_threshold_entry(raw: dict) -> ThresholdEntry:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Threshold entry must be an object, got {raw!r}")

    label = raw.get("label")
    if not label:
        raise ConfigurationError(f"Threshold entry without label: {raw!r}")
    description = raw.get("description", "")

    low = _bound(raw, "min", label)
    high = _bound(raw, "max", label)
    if low is not None and high is not None:
        if low >= high:
            raise ConfigurationError(f"Threshold entry '{label}' has min >= max")
        return Bounded(min=low, max=high, label=label, description=description)
    if low is not None:
        return LowerBound(min=low, label=label, description=description)
    if high is not None:
        return UpperBound(max=high, label=label, description=description)
    return Unbounded(label=label, description=description)


def find_threshold(entries: Iterable[ThresholdEntry], value: Number) -> Optional[ThresholdEntry]:
    """First entry, in authored order, whose interval contains value."""
    for entry in entries:
        if entry.contains(value):
            return entry
    return None


def get_severity(
    value: Number,
    entries: Iterable[ThresholdEntry],
    fallback: Tuple[str, str] = (FALLBACK_LABEL, FALLBACK_DESCRIPTION),
) -> Tuple[str, str]:
    entry = find_threshold(entries, value)
    if entry is None:
        return fallback
    return entry.label, entry.description


def safe_mean(values: Sequence[Number]) -> float:
    # empty categories score 0 rather than NaN
    if not values:
        return 0.0
    return sum(values) / len(values)


@dataclass(frozen=True)
class ReportConfig:
    """Validated, read-only threshold configuration."""
    category_thresholds: Dict[str, Tuple[ThresholdEntry, ...]]
    global_thresholds: Tuple[ThresholdEntry, ...]
    global_categories: Tuple[str, ...]
    anxiety_sum_category: str
    fallback_label: str = FALLBACK_LABEL
    fallback_description: str = FALLBACK_DESCRIPTION
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def fallback(self) -> Tuple[str, str]:
        return self.fallback_label, self.fallback_description
