from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass, field
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fellowship_reports.core.auth import AppRole, RequestUserContext, context_from_user
from fellowship_reports.db.base import Base
from fellowship_reports.db.dependencies import get_db_session
import fellowship_reports.models.entities  # noqa: F401
from fellowship_reports.main import create_app
from fellowship_reports.models.entities import (
    ActivityReport,
    Fellowship,
    FellowshipOutreachReport,
    FinancialReport,
    OutreachReport,
    User,
    Zone,
)

TEST_TABLES = [
    Zone.__table__,
    Fellowship.__table__,
    User.__table__,
    FinancialReport.__table__,
    ActivityReport.__table__,
    FellowshipOutreachReport.__table__,
    OutreachReport.__table__,
]


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine, tables=TEST_TABLES)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine, tables=TEST_TABLES)


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(email: str) -> dict[str, str]:
    return {"X-USER-EMAIL": email}


@dataclass
class SeededOrg:
    """Two zones with two fellowships each plus one user per role slot."""

    zones: dict[str, Zone] = field(default_factory=dict)
    fellowships: dict[str, Fellowship] = field(default_factory=dict)
    users: dict[str, User] = field(default_factory=dict)

    def headers(self, alias: str) -> dict[str, str]:
        return auth_headers(self.users[alias].email)

    def context(self, alias: str) -> RequestUserContext:
        return context_from_user(self.users[alias])


def create_zone(db: Session, *, name: str) -> Zone:
    now = datetime.utcnow()
    zone = Zone(name=name, office_address=f"{name} office", created_at=now, updated_at=now)
    db.add(zone)
    db.commit()
    db.refresh(zone)
    return zone


def create_fellowship(db: Session, *, name: str, zone: Zone) -> Fellowship:
    now = datetime.utcnow()
    slug = name.lower().replace(" ", "-")
    fellowship = Fellowship(
        name=name,
        address=f"{name} address",
        zone_id=zone.id,
        email=f"{slug}@fellowship.test",
        president_phone_number="+000000000",
        created_at=now,
        updated_at=now,
    )
    db.add(fellowship)
    db.commit()
    db.refresh(fellowship)
    return fellowship


def create_user(
    db: Session,
    *,
    email: str,
    role: AppRole,
    fellowship: Fellowship | None = None,
    zone: Zone | None = None,
) -> User:
    now = datetime.utcnow()
    user = User(
        name=email.split("@")[0],
        email=email,
        role=role,
        fellowship_id=fellowship.id if fellowship else None,
        zone_id=zone.id if zone else None,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def org(db_session: Session) -> SeededOrg:
    seeded = SeededOrg()
    seeded.zones["a"] = create_zone(db_session, name="Zone A")
    seeded.zones["b"] = create_zone(db_session, name="Zone B")
    for zone_key in ("a", "b"):
        for index in (1, 2):
            key = f"{zone_key}{index}"
            seeded.fellowships[key] = create_fellowship(
                db_session,
                name=f"Fellowship {key.upper()}",
                zone=seeded.zones[zone_key],
            )

    seeded.users["super_admin"] = create_user(db_session, email="super.admin@test.local", role=AppRole.SUPER_ADMIN)
    seeded.users["admin"] = create_user(db_session, email="admin@test.local", role=AppRole.ADMINISTRATOR)
    seeded.users["accountant"] = create_user(db_session, email="accountant@test.local", role=AppRole.ACCOUNTANT)
    seeded.users["national"] = create_user(
        db_session, email="national@test.local", role=AppRole.NATIONAL_COORDINATOR
    )
    seeded.users["outreach"] = create_user(
        db_session,
        email="outreach@test.local",
        role=AppRole.ASSISTANT_NATIONAL_COORDINATOR_OUTREACH,
    )
    for zone_key in ("a", "b"):
        seeded.users[f"zonal_{zone_key}"] = create_user(
            db_session,
            email=f"zonal.{zone_key}@test.local",
            role=AppRole.ZONAL_COORDINATOR,
            zone=seeded.zones[zone_key],
        )
    for key, fellowship in seeded.fellowships.items():
        role = AppRole.FELLOWSHIP_PRESIDENT_RCF if key.endswith("1") else AppRole.FELLOWSHIP_PRESIDENT_RCCF
        seeded.users[f"president_{key}"] = create_user(
            db_session,
            email=f"president.{key}@test.local",
            role=role,
            fellowship=fellowship,
        )
    return seeded
