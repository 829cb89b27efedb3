from .date_rules import (
    easter_sunday,
    easter_relative,
    nth_weekday_of_month,
    resolve_entry_dates,
)

__all__ = ["easter_sunday", "easter_relative", "nth_weekday_of_month", "resolve_entry_dates"]
