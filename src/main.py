"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.battle import router as battle_router
from src.api.health import router as health_router
from src.api.party import router as party_router
from src.api.player import router as player_router
from src.api.quest import router as quest_router
from src.config import settings
from src.core.battle.registry import CardRegistry, GuestRegistry
from src.core.dice import SystemDice
from src.core.event_bus import EventBus
from src.core.logging import get_logger, setup_logging
from src.db.database import SessionLocal, init_db
from src.services.battle_service import BattleService
from src.services.party_service import PartyService
from src.services.player_service import PlayerService
from src.services.progression_service import ProgressionService
from src.services.scenario_service import ScenarioService

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


def _load_registries() -> tuple[CardRegistry, GuestRegistry]:
    cards = CardRegistry()
    if Path(settings.CARD_DATA_PATH).is_file():
        cards.load_from_json(settings.CARD_DATA_PATH)
    else:
        logger.warning("Card data not found: %s", settings.CARD_DATA_PATH)

    guests = GuestRegistry()
    if Path(settings.GUEST_DATA_PATH).is_file():
        guests.load_from_json(settings.GUEST_DATA_PATH)
    else:
        logger.warning("Guest data not found: %s", settings.GUEST_DATA_PATH)
    return cards, guests


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Creating database tables...")
    init_db()

    event_bus = EventBus()
    db_session = SessionLocal()
    dice = SystemDice(settings.RANDOM_SEED)
    cards, guests = _load_registries()

    app.state.party_service = PartyService(db_session, event_bus, guests)
    app.state.progression_service = ProgressionService(db_session, event_bus)
    app.state.player_service = PlayerService(db_session, dice)
    app.state.battle_service = BattleService(
        db_session,
        event_bus,
        cards,
        dice=dice,
        default_world_tier=settings.DEFAULT_WORLD_TIER,
    )
    scenario_service = ScenarioService(db_session, event_bus, dice=dice)
    imported = scenario_service.import_directory(settings.SCENARIO_DIR)
    app.state.scenario_service = scenario_service
    app.state.event_bus = event_bus
    logger.info(
        "Services initialized (%d cards, %d guests, %d scenarios)",
        cards.count(),
        guests.count(),
        imported,
    )

    yield

    logger.info("Shutting down...")
    db_session.close()


app = FastAPI(title="Quest Script Engine", lifespan=lifespan)

app.include_router(health_router)
app.include_router(player_router)
app.include_router(quest_router)
app.include_router(battle_router)
app.include_router(party_router)
