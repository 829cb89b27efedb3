"""Unit tests for trip identifiers."""

import pytest
from datetime import date

from core.errors import ValidationError
from src.scheduling_bc.trip.domain.value_objects import (
    VirtualTripRef,
    MaterializedTripRef,
    build_virtual_id,
    is_virtual_id,
    parse_trip_id,
)


class TestTripId:
    """Tests for virtual and persisted trip ids."""

    def test_build_virtual_id(self):
        assert build_virtual_id("sched-1", date(2026, 3, 2)) == "virtual:sched-1:2026-03-02"

    def test_parse_virtual_id(self):
        ref = parse_trip_id("virtual:sched-1:2026-03-02")
        assert ref == VirtualTripRef(schedule_id="sched-1", schedule_date=date(2026, 3, 2))
        assert str(ref) == "virtual:sched-1:2026-03-02"

    def test_schedule_id_may_contain_colons(self):
        """The date is always the last segment."""
        ref = parse_trip_id("virtual:a:b:2026-03-02")
        assert ref.schedule_id == "a:b"

    def test_other_ids_are_persisted(self):
        ref = parse_trip_id("6f1c2b9e-0000-4000-8000-000000000001")
        assert isinstance(ref, MaterializedTripRef)
        assert not is_virtual_id(str(ref))

    @pytest.mark.parametrize("trip_id", [
        "virtual:",
        "virtual:2026-03-02",
        "virtual:sched-1:tomorrow",
        "virtual:sched-1:2026-02-30",
    ])
    def test_malformed_virtual_ids(self, trip_id):
        with pytest.raises(ValidationError):
            parse_trip_id(trip_id)
