"""Suggested end dates derived from a blueprint's default duration."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Union

from launchos.shared.dates import parse_date
from launchos.specs.models.domain import Blueprint


def derive_end_date(start: Union[str, date], duration_days: Optional[int]) -> date:
    """Start date plus the duration, at calendar-date granularity.

    An absent duration counts as zero days.
    """
    start_date = parse_date(start)
    if start_date is None:
        raise ValueError(f"Invalid start date: {start!r}")
    days = duration_days or 0
    if days < 0:
        raise ValueError("duration_days must be non-negative")
    return start_date + timedelta(days=days)


class ScheduleForm:
    """Start/end date pair as edited on the launch form.

    The end date follows start date and blueprint changes until the user
    types an end date that differs from the derived one.
    """

    def __init__(self, start_date: Optional[date] = None, blueprint: Optional[Blueprint] = None) -> None:
        self.start_date = start_date
        self.blueprint = blueprint
        self.end_date: Optional[date] = None
        self.end_date_overridden = False
        self._recompute()

    def suggested_end_date(self) -> Optional[date]:
        if self.start_date is None or self.blueprint is None:
            return None
        return derive_end_date(self.start_date, self.blueprint.defaultDurationDays)

    def _recompute(self) -> None:
        if self.end_date_overridden:
            return
        suggested = self.suggested_end_date()
        if suggested is not None:
            self.end_date = suggested

    def set_start_date(self, value: Union[str, date]) -> None:
        parsed = parse_date(value)
        if parsed is None:
            raise ValueError(f"Invalid start date: {value!r}")
        self.start_date = parsed
        self._recompute()

    def select_blueprint(self, blueprint: Optional[Blueprint]) -> None:
        self.blueprint = blueprint
        self._recompute()

    def set_end_date(self, value: Union[str, date]) -> None:
        parsed = parse_date(value)
        if parsed is None:
            raise ValueError(f"Invalid end date: {value!r}")
        self.end_date = parsed
        self.end_date_overridden = parsed != self.suggested_end_date()

    def reset_end_date(self) -> None:
        self.end_date_overridden = False
        self._recompute()
