# services/safety-service/src/apps/core/services/recurrence.py
"""
Recurrence Compliance Calculator

Pure functions deciding how close a recurring obligation is to its due date.
Nothing here reads the clock: ``today`` is always passed in by the caller,
who gets it from ``compliance_today()`` at the request boundary.

Two tier scales are in use:

* the recurrence scale (drills): overdue / due_soon (0..7) / on_schedule
* the review scale (document reviews, certificate expiry):
  overdue / urgent (<30) / warning (<60) / normal
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Optional, Tuple, Union

from django.utils import timezone

DateLike = Union[date, datetime]

NEVER_SATISFIED_DAYS = -999
DUE_SOON_DAYS = 7


class Tier:
    OVERDUE = 'overdue'
    DUE_SOON = 'due_soon'
    ON_SCHEDULE = 'on_schedule'
    URGENT = 'urgent'
    WARNING = 'warning'
    NORMAL = 'normal'

    CHOICES = [
        (OVERDUE, 'Overdue'),
        (DUE_SOON, 'Due Soon'),
        (ON_SCHEDULE, 'On Schedule'),
        (URGENT, 'Urgent'),
        (WARNING, 'Warning'),
        (NORMAL, 'Normal'),
    ]


@dataclass(frozen=True)
class TierScale:
    """
    Ordered cut points mapping a day count to a tier.

    ``bands`` is a sequence of (exclusive upper bound, tier); the first band
    whose bound is above the day count wins, otherwise ``default``.
    """

    name: str
    bands: Tuple[Tuple[int, str], ...]
    default: str

    def classify(self, days_until_due: int) -> str:
        for upper_bound, tier in self.bands:
            if days_until_due < upper_bound:
                return tier
        return self.default


RECURRENCE_SCALE = TierScale(
    name='recurrence',
    bands=((0, Tier.OVERDUE), (DUE_SOON_DAYS + 1, Tier.DUE_SOON)),
    default=Tier.ON_SCHEDULE,
)

REVIEW_SCALE = TierScale(
    name='review',
    bands=((0, Tier.OVERDUE), (30, Tier.URGENT), (60, Tier.WARNING)),
    default=Tier.NORMAL,
)


@dataclass(frozen=True)
class RecurrenceStatus:
    tier: str
    due_date: date
    days_until_due: int

    @property
    def is_overdue(self) -> bool:
        return self.tier == Tier.OVERDUE

    def to_dict(self):
        return {
            'tier': self.tier,
            'due_date': self.due_date.isoformat(),
            'days_until_due': self.days_until_due,
        }


@dataclass
class Obligation:
    """
    One trackable recurring item: a drill type on a vessel, a document's
    review cycle or a certificate's validity window.
    """

    kind: str
    reference_id: Any
    label: str
    status: RecurrenceStatus
    vessel_id: Any = None
    frequency_days: Optional[int] = None
    last_satisfied: Optional[date] = None
    extra: dict = field(default_factory=dict)

    @property
    def due_date(self) -> date:
        return self.status.due_date

    @property
    def days_until_due(self) -> int:
        return self.status.days_until_due

    def to_dict(self):
        data = {
            'kind': self.kind,
            'reference_id': str(self.reference_id),
            'label': self.label,
            'vessel_id': str(self.vessel_id) if self.vessel_id else None,
            'frequency_days': self.frequency_days,
            'last_satisfied': self.last_satisfied.isoformat() if self.last_satisfied else None,
            **self.status.to_dict(),
        }
        data.update(self.extra)
        return data


def compliance_today() -> date:
    """The current date in the service timezone."""
    return timezone.localdate()


def _as_datetime(value: DateLike, tzinfo) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min, tzinfo=tzinfo)


def days_until(target: DateLike, today: DateLike) -> int:
    """
    Whole days from ``today`` to ``target``, rounded up.

    Plain dates give the exact day difference; when either side carries a
    time of day the fractional remainder counts as a full day.
    """
    if not isinstance(target, datetime) and not isinstance(today, datetime):
        return (target - today).days

    tzinfo = next(
        (v.tzinfo for v in (target, today) if isinstance(v, datetime)),
        None,
    )
    delta = _as_datetime(target, tzinfo) - _as_datetime(today, tzinfo)
    return math.ceil(delta.total_seconds() / 86400)


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def calculate_recurrence(
    last_date: Optional[DateLike],
    frequency_days: int,
    today: DateLike,
    scale: TierScale = RECURRENCE_SCALE,
) -> RecurrenceStatus:
    """
    Compliance status of an obligation last satisfied on ``last_date``.

    A never-satisfied obligation is overdue with ``NEVER_SATISFIED_DAYS`` and
    is due today.
    """
    if frequency_days is None or frequency_days <= 0:
        raise ValueError(f"frequency_days must be positive, got {frequency_days!r}")

    if last_date is None:
        return RecurrenceStatus(
            tier=Tier.OVERDUE,
            due_date=_as_date(today),
            days_until_due=NEVER_SATISFIED_DAYS,
        )

    due = last_date + timedelta(days=frequency_days)
    remaining = days_until(due, today)
    return RecurrenceStatus(
        tier=scale.classify(remaining),
        due_date=_as_date(due),
        days_until_due=remaining,
    )


def classify_anchor(
    target: Optional[DateLike],
    today: DateLike,
    scale: TierScale = REVIEW_SCALE,
) -> Optional[RecurrenceStatus]:
    """
    Status of an obligation whose due date is stored directly
    (next review date, certificate expiry). ``None`` when nothing is due.
    """
    if target is None:
        return None
    remaining = days_until(target, today)
    return RecurrenceStatus(
        tier=scale.classify(remaining),
        due_date=_as_date(target),
        days_until_due=remaining,
    )
