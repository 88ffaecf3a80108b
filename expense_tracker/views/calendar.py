"""Calendar selection state: the selected day and the month on display."""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, field_validator


def first_of_month(day: dt.date) -> dt.date:
    return day.replace(day=1)


class CalendarState(BaseModel):
    """
    What the calendar widget currently shows.

    ``selected_date`` drives the daily table; ``displayed_month`` drives
    the chart and the monthly totals. Both change independently, as with
    a calendar whose month can be paged without changing the selection.
    """
    model_config = ConfigDict(frozen=True)

    selected_date: dt.date = Field(default_factory=dt.date.today)
    displayed_month: dt.date = Field(
        default_factory=lambda: first_of_month(dt.date.today())
    )

    @field_validator('displayed_month')
    @classmethod
    def normalize_month(cls, v: dt.date) -> dt.date:
        return first_of_month(v)

    @property
    def month_filter(self) -> tuple[int, int]:
        """(year, zero-based month) for the displayed month."""
        return self.displayed_month.year, self.displayed_month.month - 1

    @property
    def period_label(self) -> str:
        return self.displayed_month.strftime("%B %Y")

    def select(self, day: dt.date) -> "CalendarState":
        """Select a day and bring its month into view."""
        return CalendarState(selected_date=day, displayed_month=day)

    def show_month(self, day: dt.date) -> "CalendarState":
        return CalendarState(selected_date=self.selected_date, displayed_month=day)

    def next_month(self) -> "CalendarState":
        month = self.displayed_month
        if month.month == 12:
            target = month.replace(year=month.year + 1, month=1)
        else:
            target = month.replace(month=month.month + 1)
        return self.show_month(target)

    def previous_month(self) -> "CalendarState":
        month = self.displayed_month
        if month.month == 1:
            target = month.replace(year=month.year - 1, month=12)
        else:
            target = month.replace(month=month.month - 1)
        return self.show_month(target)
