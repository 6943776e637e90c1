"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.config import settings
from src.core.battle.registry import CardRegistry, GuestRegistry
from src.core.dice import ScriptedDice
from src.core.event_bus import EventBus
from src.db.database import get_db
from src.db.models import Base
from src.main import app
from src.services.battle_service import BattleService
from src.services.party_service import PartyService
from src.services.player_service import PlayerService
from src.services.progression_service import ProgressionService
from src.services.scenario_service import ScenarioService

# StaticPool: TestClient runs sync endpoints in worker threads,
# they must all see the same in-memory database.
TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture()
def db_session() -> Session:
    """Raw database session on fresh tables."""
    Base.metadata.drop_all(TEST_ENGINE)
    Base.metadata.create_all(TEST_ENGINE)
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def dice() -> ScriptedDice:
    """New characters roll no variance, travel rolls no encounter."""
    return ScriptedDice(floats=[0.9], ints=[2, 0, 10])


@pytest.fixture()
def client(db_session: Session, dice: ScriptedDice) -> TestClient:
    """FastAPI TestClient with services wired to an in-memory SQLite database.

    Mirrors the lifespan wiring without running it.
    """
    bus = EventBus()
    cards = CardRegistry()
    cards.load_from_json(settings.CARD_DATA_PATH)
    guests = GuestRegistry()
    guests.load_from_json(settings.GUEST_DATA_PATH)

    app.state.party_service = PartyService(db_session, bus, guests)
    app.state.progression_service = ProgressionService(db_session, bus)
    app.state.player_service = PlayerService(db_session, dice)
    app.state.battle_service = BattleService(db_session, bus, cards, dice=dice)
    scenario_service = ScenarioService(db_session, bus, dice=dice)
    scenario_service.import_directory(settings.SCENARIO_DIR)
    app.state.scenario_service = scenario_service
    app.state.event_bus = bus
    return TestClient(app)
