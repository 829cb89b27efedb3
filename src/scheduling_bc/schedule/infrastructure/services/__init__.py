from .occurrence_pipeline import candidate_dates, schedule_modifiers, schedule_occurrences
from .schedule_service import ScheduleService

__all__ = ["candidate_dates", "schedule_modifiers", "schedule_occurrences", "ScheduleService"]
