import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from src.api.routes.routes import get_db
from src.application.trip_service import TripService
from src.infrastructure.db.models import Base
from src.infrastructure.db.session import build_engine
from src.main import app


@pytest.fixture
def engine(tmp_path):
    # File-backed so several threads can hold their own connections.
    test_engine = build_engine(f"sqlite:///{tmp_path / 'test.sqlite'}")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_trip(session_factory):
    def _make_trip(capacity=2, origin="A", destination="B", depart_at="2030-01-01T08:00:00"):
        session = session_factory()
        try:
            trip = TripService(session).create_trip(
                origin=origin,
                destination=destination,
                depart_at=depart_at,
                capacity=capacity,
            )
            return trip.id
        finally:
            session.close()

    return _make_trip


@pytest.fixture
def seats_available(session_factory):
    def _seats_available(trip_id):
        session = session_factory()
        try:
            return TripService(session).get_trip(trip_id).seats_available
        finally:
            session.close()

    return _seats_available


@pytest.fixture
def client(session_factory):

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
    yield TestClient(app)
    app.dependency_overrides.clear()
