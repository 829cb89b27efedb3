"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; point them at SQLite before anything loads
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import app
from core.database import get_db, init_db
from src.scheduling_bc.route.infrastructure.models import (
    StopModel,
    RouteModel,
    RouteVersionModel,
    RouteStopModel,
)
from src.scheduling_bc.schedule.infrastructure.services import ScheduleService


COMPANY_ID = "company-polbus"
OTHER_COMPANY_ID = "company-other"

# Cumulative minutes from the first stop: Warszawa, Radom, Kielce, Krakow
ROUTE_DURATIONS = (0, 15, 40, 60)


@pytest.fixture
def engine():
    """Fresh in-memory database per test, shared by every session."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """Create a test client for the FastAPI app."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def api_base_url():
    """Base URL for scheduling API endpoints."""
    return "/api/v1"


@pytest.fixture
def make_route(db):
    """Route with one current version and a stop per duration."""

    def _make(company_id=COMPANY_ID, durations=ROUTE_DURATIONS, name="Warszawa - Krakow"):
        route = RouteModel(company_id=company_id, name=name)
        db.add(route)
        db.flush()

        version = RouteVersionModel(route_id=route.id, version_number=1)
        db.add(version)
        db.flush()

        for index, minutes in enumerate(durations):
            stop = StopModel(name=f"Stop {index + 1}", lat=52.23 - index * 0.6, lon=21.01)
            db.add(stop)
            db.flush()
            db.add(RouteStopModel(
                route_version_id=version.id,
                stop_id=stop.id,
                sequence_number=index + 1,
                distance_from_start=index * 90.0,
                duration_from_start=minutes,
            ))

        route.current_version_id = version.id
        db.commit()
        db.refresh(route)
        return route

    return _make


@pytest.fixture
def route(make_route):
    return make_route()


@pytest.fixture
def make_schedule(db):
    """Daily 08:00 -> 09:30 schedule from Monday 2026-03-02, overridable."""

    def _make(route, **overrides):
        data = {
            "company_id": route.company_id,
            "route_id": route.id,
            "name": "Morning express",
            "departure_time": "08:00",
            "arrival_time": "09:30",
            "schedule_type": "recurring",
            "recurrence_rule": "FREQ=DAILY",
            "valid_from": date(2026, 3, 2),
            "valid_to": None,
            "calendar_modifiers": [],
            "stop_times": None,
        }
        data.update(overrides)
        return ScheduleService(db).create(data)

    return _make


@pytest.fixture
def schedule(make_schedule, route):
    return make_schedule(route)
