import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from app.main import app
from app.db.session import get_db, init_db
from app.models.age import AgeBracket
from app.models.cover import Cover
from app.models.destination import Destination
from app.models.duration import DurationBracket
from app.models.excess import Excess
from app.models.premium import Premium
from app.models.trip_type import TripType
from app.tests.factories import BASE_MULTIPLIER, make_reference, make_submission


@pytest.fixture
def reference_data():
    return make_reference()


@pytest.fixture
def valid_submission():
    return make_submission()


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_quotes.db'}", future=True)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded_reference(session_factory):
    """Rate tables mirroring the unit-rated setup used by the calculator tests"""
    async with session_factory() as session:
        session.add_all([
            Premium(id=1, label="Base Premium", premium_type="base", multiplier=BASE_MULTIPLIER),
            TripType(id=1, label="Single Trip", multiplier=1.0),
            TripType(id=2, label="Annual Multi Trip", multiplier=2.5),
            Excess(id=1, label="£100", amount=100.0, multiplier=1.0),
            Excess(id=2, label="£0", amount=0.0, multiplier=1.25),
            Destination(id=1, label="United Kingdom", code="UK", zone=1, multiplier=1.4,
                        cruise_add_on_amount=25.0, ski_per_day_amount=25.0),
            Destination(id=2, label="Europe", code="EU", zone=2, multiplier=1.8,
                        cruise_add_on_amount=40.0, ski_per_day_amount=30.0),
            Destination(id=3, label="Australia", code="AU", zone=3, multiplier=2.6,
                        cruise_add_on_amount=60.0, ski_per_day_amount=None),
            AgeBracket(id=1, age_minimum=1, age_maximum=84, multiplier=1.0),
            DurationBracket(id=1, minimum_days=1, maximum_days=731, multiplier=1.0),
            Cover(id=1, label="Essentials", multiplier=1.0),
            Cover(id=2, label="Comprehensive", multiplier=1.5),
        ])
        await session.commit()


@pytest.fixture
async def test_client(session_factory, seeded_reference):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def quote_payload():
    return make_submission()


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "validation: marks tests related to quote validation"
    )
