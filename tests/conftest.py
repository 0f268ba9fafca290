from datetime import datetime, timedelta
from typing import Any, Dict

import pytest

from haccp_review.config.settings import Settings
from haccp_review.db.init_db import init_db
from haccp_review.db.session import build_engine, get_session_factory
from haccp_review.models import Incident, Kitchen
from haccp_review.models.base import ActorRole, IncidentSeverity, IncidentType
from haccp_review.services.analytics import ComplianceTrendService
from haccp_review.services.common import Principal
from haccp_review.services.notification import NotificationDispatcher
from haccp_review.services.review import (
    PerformanceBadgeService,
    ReviewDisputeService,
    ReviewService,
    ReviewVerificationService,
)


class TickingClock:
    """Deterministic clock; each reading is one second after the previous one."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value

    def set(self, value: datetime) -> None:
        self.current = value


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'haccp_test.db'}",
        ENVIRONMENT="testing",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def engine(settings):
    engine = build_engine(settings.DATABASE_URL)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def clock():
    return TickingClock(datetime(2024, 6, 15, 9, 0, 0))


@pytest.fixture
def kitchen(session_factory):
    session = session_factory()
    kitchen = Kitchen(name="Dapur Sehat Bandung", code="KIT-BDG-01", city="Bandung", province="West Java")
    session.add(kitchen)
    session.commit()
    session.close()
    return kitchen


@pytest.fixture
def other_kitchen(session_factory):
    session = session_factory()
    kitchen = Kitchen(name="Dapur Nusantara", code="KIT-JKT-02", city="Jakarta")
    session.add(kitchen)
    session.commit()
    session.close()
    return kitchen


@pytest.fixture
def add_incident(session_factory):
    def _add(kitchen_id: str, when: datetime, severity: IncidentSeverity = IncidentSeverity.MINOR) -> None:
        session = session_factory()
        session.add(
            Incident(
                kitchen_id=kitchen_id,
                date=when,
                type=IncidentType.SANITATION,
                severity=severity,
                description="Unclean serving trays",
            )
        )
        session.commit()
        session.close()

    return _add


# --- Principals ----------------------------------------------------------------

@pytest.fixture
def admin():
    return Principal(user_id="u-admin", code="ADM-001", role=ActorRole.ADMIN)


@pytest.fixture
def consumer():
    return Principal(user_id="u-school-1", code="SCH-001", role=ActorRole.CONSUMER)


@pytest.fixture
def other_consumer():
    return Principal(user_id="u-school-2", code="SCH-002", role=ActorRole.CONSUMER)


@pytest.fixture
def kitchen_user(kitchen):
    return Principal(
        user_id="u-kitchen-1",
        code="KIT-BDG-01",
        role=ActorRole.KITCHEN,
        kitchen_ids=frozenset({kitchen.id}),
    )


@pytest.fixture
def supplier(kitchen):
    return Principal(
        user_id="u-supplier-1",
        code="SUP-001",
        role=ActorRole.SUPPLIER,
        kitchen_ids=frozenset({kitchen.id}),
    )


# --- Services ------------------------------------------------------------------

@pytest.fixture
def dispatcher(session_factory, settings, clock):
    return NotificationDispatcher(session_factory, settings=settings, clock=clock)


@pytest.fixture
def review_service(session_factory, settings, clock):
    return ReviewService(session_factory, settings=settings, clock=clock)


@pytest.fixture
def verification_service(session_factory, dispatcher, settings, clock):
    return ReviewVerificationService(session_factory, dispatcher=dispatcher, settings=settings, clock=clock)


@pytest.fixture
def dispute_service(session_factory, dispatcher, settings, clock):
    return ReviewDisputeService(session_factory, dispatcher=dispatcher, settings=settings, clock=clock)


@pytest.fixture
def trend_service(session_factory, settings, clock):
    return ComplianceTrendService(session_factory, settings=settings, clock=clock)


@pytest.fixture
def badge_service(session_factory):
    return PerformanceBadgeService(session_factory)


# --- Payloads ------------------------------------------------------------------

GOOD_RATINGS = {
    "taste": "4.5",
    "hygiene": "4.0",
    "freshness": "4.5",
    "temperature": "4.0",
    "packaging": "5.0",
    "handling": "4.0",
}


@pytest.fixture
def review_payload(kitchen):
    def _payload(**overrides: Any) -> Dict[str, Any]:
        ratings = dict(GOOD_RATINGS)
        ratings.update(overrides.pop("ratings", {}))
        payload = {
            "kitchen_id": kitchen.id,
            "reviewer_name": "SDN 1 Bandung",
            "reviewer_type": "consumer",
            "ratings": ratings,
            "comment": "Lunch arrived on time and was well packed.",
            "photos": ["https://cdn.example.org/photos/lunch-1.jpg"],
            "report_source": "public",
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture
def verified_review(review_service, verification_service, review_payload, consumer, admin):
    """Submit and verify a review; keyword overrides go to the payload."""
    def _create(**overrides: Any):
        review = review_service.submit_review(review_payload(**overrides), consumer)
        return verification_service.set_verification_status(review.id, "verified", admin)

    return _create
