"""Shared test configuration and fixtures for Competition Manager tests"""

import logging
import os
import subprocess
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

from tests.config import test_config  # noqa: I001  sets env before app imports

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine
from testcontainers.postgres import PostgresContainer

from competition_manager.auth.jwt_utils import jwt_utils
from competition_manager.errors import DeliveryError
from competition_manager.main import app
from competition_manager.models import Competition, CompetitionLevel, Region
from competition_manager.models.database import get_db
from competition_manager.services.artifact_renderer import (
    CertificateRenderer,
    EventPassRenderer,
    get_certificate_renderer,
    get_event_pass_renderer,
)
from competition_manager.services.certificate_service import CertificateService
from competition_manager.services.competition_service import CompetitionService
from competition_manager.services.email_service import EmailService
from competition_manager.services.notifier_service import get_notifier
from competition_manager.services.registration_service import RegistrationService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class FakeNotifier:
    """Records outgoing mail instead of calling Mailgun"""

    def __init__(self):
        self.sent = []
        self.fail_for = set()
        self.fail_all = False

    async def send(self, to, subject, html, attachment=None, tag=None):
        if self.fail_all or to in self.fail_for:
            raise DeliveryError(f"Email sending failed: mailbox unavailable for {to}")

        self.sent.append(
            {
                "to": to,
                "subject": subject,
                "html": html,
                "tag": tag,
                "attachment_name": attachment.filename if attachment else None,
                # Read now: the file may be released right after sending
                "attachment_bytes": attachment.read_bytes() if attachment else None,
            }
        )
        return {"id": f"<fake-{len(self.sent)}@example.com>", "message": "Queued"}

    def sent_to(self, email):
        return [message for message in self.sent if message["to"] == email]


def today() -> date:
    return datetime.now(timezone.utc).date()


@pytest.fixture(scope="session")
def test_engine():
    """Database engine for the session.

    In-memory SQLite by default; TEST_WITH_POSTGRES=1 runs against a
    throwaway PostgreSQL container migrated with alembic.
    """
    if not test_config["use_postgres"]:
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        SQLModel.metadata.create_all(engine)
        yield engine
        engine.dispose()
        return

    with PostgresContainer("postgres:16") as postgres:
        database_url = postgres.get_connection_url()
        _run_migrations(database_url)
        engine = create_engine(database_url)
        yield engine
        engine.dispose()


def _run_migrations(database_url: str):
    """Run Alembic migrations on the test database"""
    server_dir = Path(__file__).parent.parent
    env = os.environ.copy()
    env["DATABASE_URL"] = database_url

    result = subprocess.run(
        [
            sys.executable,
            "-m",
            "alembic",
            "-c",
            str(server_dir / "alembic.ini"),
            "upgrade",
            "head",
        ],
        cwd=server_dir,
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
    )
    if result.returncode != 0:
        logger.error(f"Alembic migration failed: {result.stderr}")
        raise RuntimeError(f"Failed to run migrations: {result.stderr}")
    logger.info("Database schema setup completed successfully")


@pytest.fixture
def _db_session(test_engine):
    """Private DB session for fixtures only.

    Prefer the service fixtures in tests. Every table is emptied afterwards.
    """
    session = Session(test_engine)

    yield session

    session.rollback()
    for table in reversed(SQLModel.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def email_service(notifier):
    return EmailService(notifier)


@pytest.fixture
def certificate_renderer(tmp_path):
    return CertificateRenderer(tmp_path / "certificates")


@pytest.fixture
def event_pass_renderer(tmp_path):
    return EventPassRenderer(tmp_path / "passes")


@pytest.fixture
def competition_service(_db_session):
    return CompetitionService(_db_session)


@pytest.fixture
def registration_service(_db_session, email_service):
    return RegistrationService(_db_session, email_service)


@pytest.fixture
def certificate_service(_db_session, certificate_renderer, email_service):
    return CertificateService(_db_session, certificate_renderer, email_service)


@pytest.fixture
def make_competition(competition_service):
    """Factory creating competitions open for registration by default"""

    def _make(name="Robotics Challenge", deadline_offset_days=30, **overrides):
        values = {
            "name": name,
            "level": CompetitionLevel.REGIONAL,
            "date": today() + timedelta(days=deadline_offset_days + 7),
            "venue": "Tech Convention Center",
            "registration_deadline": today() + timedelta(days=deadline_offset_days),
            "maximum_teams": 10,
            "fees": 50.0,
            "rules": "Each team must have up to 4 members.",
        }
        values.update(overrides)
        return competition_service.create_competition(Competition(**values))

    return _make


@pytest.fixture
def make_region(competition_service):
    def _make(competition_id, region_name="North Zone"):
        return competition_service.create_region(
            Region(
                competition_id=competition_id,
                region_name=region_name,
                event_date=today() + timedelta(days=40),
                venue="North Campus",
            )
        )

    return _make


def _auth_headers(user_id: str, role: str) -> dict:
    token = jwt_utils.create_access_token(user_id, role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers():
    return _auth_headers("user-1", "user")


@pytest.fixture
def other_user_headers():
    return _auth_headers("user-2", "user")


@pytest.fixture
def admin_headers():
    return _auth_headers("admin-1", "admin")


@pytest.fixture
def client(_db_session, notifier, certificate_renderer, event_pass_renderer):
    """Test client wired to the test database, fake notifier and tmp renderers"""
    original_overrides = app.dependency_overrides.copy()

    def get_test_db():
        return _db_session

    app.dependency_overrides.clear()
    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_certificate_renderer] = lambda: certificate_renderer
    app.dependency_overrides[get_event_pass_renderer] = lambda: event_pass_renderer

    yield TestClient(app)

    app.dependency_overrides.clear()
    app.dependency_overrides.update(original_overrides)
