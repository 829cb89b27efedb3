from .schedule_model import ScheduleModel, ScheduleStopTimeModel, ScheduleExceptionModel

__all__ = ["ScheduleModel", "ScheduleStopTimeModel", "ScheduleExceptionModel"]
