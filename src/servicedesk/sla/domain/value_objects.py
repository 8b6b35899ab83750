"""
SLA Value Objects
==================

Immutable value objects for SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared between concurrent callers.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from servicedesk.config import Priority, SLACompliance, VALID_PRIORITIES
from servicedesk.core import ConfigurationException, UnknownPriority
from servicedesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SLA_TARGETS: Dict[str, float] = {
    Priority.CRITICAL.value: 4,
    Priority.HIGH.value: 8,
    Priority.MEDIUM.value: 24,
    Priority.LOW.value: 72,
}

DEFAULT_AT_RISK_THRESHOLD = 0.8


def to_utc(value: datetime) -> datetime:
    """Normalize a timestamp to aware UTC. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Stateless utility class - all duration and compliance maths in one place.
    """

    @staticmethod
    def hours_between(start: datetime, end: datetime) -> float:
        """
        Wall-clock hours from ``start`` to ``end``.

        Never negative: an ``end`` before ``start`` means clock skew or a
        caller bug, which is logged and reported as zero elapsed time.
        """
        seconds = (to_utc(end) - to_utc(start)).total_seconds()
        if seconds < 0:
            logger.warning(
                "Negative duration clamped to zero",
                extra={
                    "start": to_utc(start).isoformat(),
                    "end": to_utc(end).isoformat(),
                    "skew_seconds": round(-seconds, 3),
                }
            )
            return 0.0
        return seconds / 3600

    @staticmethod
    def is_skewed(start: datetime, end: datetime) -> bool:
        """True when ``end`` precedes ``start``."""
        return to_utc(end) < to_utc(start)

    @staticmethod
    def calculate_compliance(
        elapsed_hours: float,
        target_hours: float,
        closed: bool,
        at_risk_threshold: float = DEFAULT_AT_RISK_THRESHOLD
    ) -> SLACompliance:
        """
        Decide compliance from elapsed and target hours.

        Closed tickets are Met or Violated. Open tickets are OnTrack below the
        at-risk threshold, AtRisk up to the target and Violated from the
        target onwards.
        """
        if closed:
            return SLACompliance.MET if elapsed_hours <= target_hours else SLACompliance.VIOLATED

        ratio = elapsed_hours / target_hours
        if ratio >= 1.0:
            return SLACompliance.VIOLATED
        if ratio >= at_risk_threshold:
            return SLACompliance.AT_RISK
        return SLACompliance.ON_TRACK

    @staticmethod
    def format_hours(hours: float) -> str:
        """
        Human-readable age: ``45m`` under an hour, ``5h`` under a day,
        ``2d 3h`` otherwise.
        """
        if hours < 1:
            return f"{_round_half_up(hours * 60)}m"
        if hours < 24:
            return f"{_round_half_up(hours)}h"
        days = int(hours // 24)
        return f"{days}d {_round_half_up(hours % 24)}h"


class AgingBucket(BaseModel):
    """
    One named range of open-ticket age, ``[lower_hours, upper_hours)``.

    ``upper_hours`` of ``None`` means unbounded.
    """
    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1)
    lower_hours: float = Field(..., ge=0)
    upper_hours: Optional[float] = Field(default=None)
    color: str = Field(default="gray")

    def contains(self, hours: float) -> bool:
        if hours < self.lower_hours:
            return False
        return self.upper_hours is None or hours < self.upper_hours


DEFAULT_AGING_BUCKETS: Tuple[AgingBucket, ...] = (
    AgingBucket(label="0-24 hours", lower_hours=0, upper_hours=24, color="blue"),
    AgingBucket(label="24-48 hours", lower_hours=24, upper_hours=48, color="amber"),
    AgingBucket(label="48-72 hours", lower_hours=48, upper_hours=72, color="orange"),
    AgingBucket(label="72+ hours", lower_hours=72, upper_hours=None, color="red"),
)


class SLAPolicy(BaseModel):
    """
    SLA policy table loaded from YAML.

    Maps every canonical priority to a target resolution time in hours and
    carries the at-risk threshold and the aging bucket partition.
    """
    model_config = ConfigDict(frozen=True)

    sla_targets: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_SLA_TARGETS),
        description="Target resolution hours by priority"
    )
    at_risk_threshold: float = Field(
        default=DEFAULT_AT_RISK_THRESHOLD,
        gt=0,
        lt=1,
        description="Fraction of the target at which an open ticket is at risk"
    )
    aging_buckets: Tuple[AgingBucket, ...] = Field(
        default=DEFAULT_AGING_BUCKETS,
        description="Ordered, gapless partition of [0, inf) hours"
    )

    @field_validator("sla_targets")
    @classmethod
    def validate_sla_targets(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Every canonical priority needs a positive target, nothing else is allowed."""
        canonical = [p.value for p in VALID_PRIORITIES]

        missing = [p for p in canonical if p not in v]
        if missing:
            raise ValueError(f"sla_targets missing priorities: {missing}")

        unknown = sorted(set(v) - set(canonical))
        if unknown:
            raise ValueError(f"sla_targets has unknown priorities: {unknown}")

        for priority, hours in v.items():
            if not math.isfinite(hours) or hours <= 0:
                raise ValueError(f"sla_targets[{priority}] must be a positive number, got {hours}")

        return {p: float(v[p]) for p in canonical}

    @field_validator("aging_buckets")
    @classmethod
    def validate_aging_buckets(cls, v: Tuple[AgingBucket, ...]) -> Tuple[AgingBucket, ...]:
        """Buckets must partition [0, inf) in order, with no gaps or overlaps."""
        if not v:
            raise ValueError("aging_buckets must not be empty")
        if v[0].lower_hours != 0:
            raise ValueError("first aging bucket must start at 0 hours")

        for current, following in zip(v, v[1:]):
            if current.upper_hours is None:
                raise ValueError(f"only the last aging bucket may be unbounded ({current.label})")
            if current.upper_hours <= current.lower_hours:
                raise ValueError(f"aging bucket {current.label} is empty")
            if following.lower_hours != current.upper_hours:
                raise ValueError(
                    f"aging buckets {current.label} and {following.label} are not contiguous"
                )

        if v[-1].upper_hours is not None:
            raise ValueError("last aging bucket must be unbounded")

        labels = [b.label for b in v]
        if len(set(labels)) != len(labels):
            raise ValueError("aging bucket labels must be unique")

        return v

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SLAPolicy":
        """Build a policy from parsed YAML, raising ConfigurationException on bad data."""
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationException(
                "Invalid SLA policy",
                {"errors": [err["msg"] for err in e.errors()]}
            ) from e
        except TypeError as e:
            raise ConfigurationException(f"Invalid SLA policy: {e}") from e

    def target_hours(self, priority: Union[Priority, str]) -> float:
        """Target resolution hours for ``priority``; UnknownPriority if absent."""
        key = priority.value if isinstance(priority, Priority) else priority
        try:
            return self.sla_targets[key]
        except (KeyError, TypeError):
            raise UnknownPriority(priority) from None

    def bucket_for(self, elapsed_hours: float) -> AgingBucket:
        """The single aging bucket containing ``elapsed_hours``."""
        hours = max(0.0, elapsed_hours)
        for bucket in self.aging_buckets:
            if bucket.contains(hours):
                return bucket
        # Unreachable for a validated partition
        raise ConfigurationException(f"No aging bucket covers {elapsed_hours} hours")
