from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401  populates Base.metadata
from app.api.dependencies.database import get_db
from app.core.config import settings
from app.database import Base
from app.main import app
from app.models.professional import ClientProfile, ProfessionalProfile
from app.models.service import ProfessionalServiceOffering, Service
from tests._utils import LOS_ANGELES


@pytest.fixture(scope="session")
def _unit_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def unit_db(_unit_engine) -> Session:
    """
    Provide a session whose commits only release savepoints.

    Services commit freely; everything is rolled back when the test ends.
    """
    connection = _unit_engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture(autouse=True)
def _no_redis(monkeypatch):
    """Unit tests never talk to Redis; the schedule lock is always granted."""
    monkeypatch.setattr(settings, "booking_lock_enabled", False)


@pytest.fixture
def professional(unit_db) -> ProfessionalProfile:
    profile = ProfessionalProfile(
        display_name="Sam Rivera",
        time_zone=LOS_ANGELES,
        working_hours=None,
    )
    unit_db.add(profile)
    unit_db.commit()
    return profile


@pytest.fixture
def client_profile(unit_db) -> ClientProfile:
    client = ClientProfile(display_name="Jordan Lee", email="jordan@example.com")
    unit_db.add(client)
    unit_db.commit()
    return client


@pytest.fixture
def haircut(unit_db, professional) -> Service:
    """Salon-only 45 minute cut at $80."""
    service = Service(name="Haircut", default_duration_minutes=45, min_price_cents=6000)
    unit_db.add(service)
    unit_db.flush()
    unit_db.add(
        ProfessionalServiceOffering(
            professional_id=professional.id,
            service_id=service.id,
            offers_in_salon=True,
            offers_mobile=False,
            salon_price_cents=8000,
        )
    )
    unit_db.commit()
    return service


@pytest.fixture
def color(unit_db, professional) -> Service:
    """Two-location color service; mobile runs longer and costs more."""
    service = Service(name="Color", default_duration_minutes=60, min_price_cents=9000)
    unit_db.add(service)
    unit_db.flush()
    unit_db.add(
        ProfessionalServiceOffering(
            professional_id=professional.id,
            service_id=service.id,
            offers_in_salon=True,
            offers_mobile=True,
            salon_price_cents=12000,
            mobile_price_cents=15000,
            mobile_duration_minutes=75,
        )
    )
    unit_db.commit()
    return service


@pytest.fixture
def client(unit_db):
    """Create a test client whose requests share the test session."""

    def override_get_db():
        yield unit_db

    app.dependency_overrides[get_db] = override_get_db

    # Don't use context manager - the lifespan would touch the real engine
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture
def pro_headers(professional):
    return {"X-Professional-Id": professional.id}
