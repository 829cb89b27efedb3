from .recurrence import (
    expand_recurrence,
    single_occurrence,
    validate_rrule,
    build_rrule,
    describe_rrule,
)
from .modifier_filter import apply_modifiers
from .exception_resolver import resolve_exceptions

__all__ = [
    "expand_recurrence",
    "single_occurrence",
    "validate_rrule",
    "build_rrule",
    "describe_rrule",
    "apply_modifiers",
    "resolve_exceptions",
]
