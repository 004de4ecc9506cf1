"""Evaluate telemetry against the operator's safety thresholds."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from pondwatch.core.errors import ConfigurationError
from pondwatch.models import Threshold
from pondwatch.services.telemetry import TelemetrySnapshot


@dataclass(frozen=True)
class MetricRange:
    minimum: float
    maximum: float

    def describe(self, unit: str = "") -> str:
        return f"{_fmt(self.minimum)}-{_fmt(self.maximum)}{unit}"


@dataclass(frozen=True)
class ThresholdConfig:
    water_level: MetricRange
    temperature: MetricRange
    tds: MetricRange

    @classmethod
    def from_row(cls, row: Threshold) -> "ThresholdConfig":
        """Build from a ``thresholds`` row; any empty bound is a configuration error."""

        values: dict[str, float] = {}
        for column in (
            "min_water_level",
            "max_water_level",
            "min_temperature",
            "max_temperature",
            "min_tds",
            "max_tds",
        ):
            value = _safe_float(getattr(row, column))
            if value is None:
                raise ConfigurationError(f"Threshold column {column} is not configured")
            values[column] = value
        return cls(
            water_level=MetricRange(values["min_water_level"], values["max_water_level"]),
            temperature=MetricRange(values["min_temperature"], values["max_temperature"]),
            tds=MetricRange(values["min_tds"], values["max_tds"]),
        )


@dataclass(frozen=True)
class AlertCondition:
    metric: str
    observed: float
    bound: float
    bound_kind: str  # "min" or "max"
    message: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric,
            "observed": self.observed,
            "bound": self.bound,
            "bound_kind": self.bound_kind,
            "message": self.message,
        }


# (metric, snapshot attribute, label, unit). Order here is the alert order.
_METRICS = (
    ("water_level", "water_level", "Water Level", ""),
    ("temperature", "water_temp", "Temperature", "°C"),
    ("tds", "tds", "TDS", ""),
)


def evaluate(snapshot: TelemetrySnapshot, thresholds: ThresholdConfig | None) -> list[AlertCondition]:
    """Return one condition per metric strictly outside its range.

    Boundary values are within range. Conditions always come back in the
    order water level, temperature, TDS.
    """

    if thresholds is None:
        raise ConfigurationError("No threshold configuration found")

    conditions: list[AlertCondition] = []
    for metric, attribute, label, unit in _METRICS:
        bounds = getattr(thresholds, metric, None)
        if bounds is None:
            raise ConfigurationError(f"No threshold configured for {metric}")
        if bounds.minimum > bounds.maximum:
            raise ConfigurationError(
                f"Threshold for {metric} is inverted (min {_fmt(bounds.minimum)} > max {_fmt(bounds.maximum)})"
            )

        observed = _safe_float(getattr(snapshot, attribute, None))
        if observed is None:
            raise ConfigurationError(f"Telemetry value for {metric} is missing or not numeric")

        if observed < bounds.minimum:
            bound, kind = bounds.minimum, "min"
        elif observed > bounds.maximum:
            bound, kind = bounds.maximum, "max"
        else:
            continue

        conditions.append(
            AlertCondition(
                metric=metric,
                observed=observed,
                bound=bound,
                bound_kind=kind,
                message=f"{label}: {_fmt(observed)}{unit} (Range: {bounds.describe(unit)})",
            )
        )
    return conditions


def _safe_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _fmt(value: float) -> str:
    return f"{value:g}"


__all__ = ["AlertCondition", "MetricRange", "ThresholdConfig", "evaluate"]
