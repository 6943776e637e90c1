"""ScenarioService 통합 테스트 (인메모리 SQLite + EventBus)

시나리오 → 파티(guest_joined), 시나리오 → 성장(scenario_completed)
이벤트 연결까지 함께 확인한다.
"""

import pytest
from sqlalchemy import create_engine, event as sa_event
from sqlalchemy.orm import sessionmaker

from src.config import settings
from src.core.battle.registry import GuestRegistry
from src.core.dice import ScriptedDice
from src.core.event_bus import EventBus
from src.core.event_types import EventTypes
from src.core.scenario.enums import ScenarioResult, SessionPhase
from src.core.scenario.errors import ChoiceRejectedError, ScenarioStateError
from src.db.models import Base, PlayerModel, QuestSessionModel, ScenarioModel
from src.services.errors import (
    NoActiveQuestError,
    PlayerNotFoundError,
    QuestLockedError,
    ScenarioNotFoundError,
)
from src.services.party_service import PartyService
from src.services.progression_service import ProgressionService
from src.services.scenario_service import QuestMeta, ScenarioService

GOBLIN = "1001_goblin_forest"
BRIDGE = "1002_old_bridge"

SIMPLE_CSV = """row_type,node_id,text_label,next_node,params
NODE,start,Hello,,
CHOICE,start,go,end,
NODE,end,Bye,EXIT,
"""


@pytest.fixture()
def dice():
    """조우 판정은 기본적으로 실패 (0.9 >= 0.3)"""
    return ScriptedDice(floats=[0.9])


@pytest.fixture()
def setup(dice):
    """인메모리 DB + EventBus + 시나리오/파티/성장 Service"""
    engine = create_engine("sqlite:///:memory:")

    @sa_event.listens_for(engine, "connect")
    def _set_fk(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    db = sessionmaker(bind=engine)()
    bus = EventBus()

    guests = GuestRegistry()
    guests.load_from_json(settings.GUEST_DATA_PATH)
    party = PartyService(db, bus, guests)
    progression = ProgressionService(db, bus)
    service = ScenarioService(db, bus, dice)
    service.import_directory(settings.SCENARIO_DIR)

    db.add(
        PlayerModel(
            player_id="p1",
            level=1,
            exp=0,
            hp=100,
            max_hp=100,
            initial_hp=100,
            age=20,
            age_days=0,
            vitality=100,
            max_vitality=100,
            gold=100,
            tags=[],
            deck=[],
            alignment={},
        )
    )
    db.commit()
    return service, party, progression, db, bus


def _player(db) -> PlayerModel:
    player = db.get(PlayerModel, "p1")
    db.refresh(player)
    return player


# === 임포트 ===


class TestImport:
    def test_bundled_scenarios_imported(self, setup) -> None:
        service, _, _, db, _ = setup
        ids = [s.scenario_id for s in service.list_scenarios()]
        assert ids == [GOBLIN, BRIDGE]

    def test_meta_from_sidecar(self, setup) -> None:
        _, _, _, db, _ = setup
        orm = db.get(ScenarioModel, GOBLIN)
        assert orm.difficulty == 2
        assert orm.gold_reward == 120
        assert orm.days_success == 3
        assert orm.exp_reward is None

    def test_import_csv_emits_event(self, setup) -> None:
        service, _, _, _, bus = setup
        received = []
        bus.subscribe(EventTypes.SCENARIO_IMPORTED, received.append)
        scenario = service.import_csv("simple", SIMPLE_CSV, QuestMeta(title="Simple"))
        assert len(scenario) == 2
        assert received[0].data == {"scenario_id": "simple", "node_count": 2}

    def test_reimport_replaces_graph(self, setup) -> None:
        service, _, _, db, _ = setup
        service.import_csv("simple", SIMPLE_CSV)
        assert service.get_scenario("simple").get("start").text == "Hello"

        service.import_csv("simple", SIMPLE_CSV.replace("Hello", "Welcome"))
        assert service.get_scenario("simple").get("start").text == "Welcome"
        assert db.query(ScenarioModel).filter_by(scenario_id="simple").count() == 1

    def test_missing_directory(self, setup) -> None:
        service, _, _, _, _ = setup
        assert service.import_directory("/nonexistent/scenarios") == 0

    def test_unknown_scenario(self, setup) -> None:
        service, _, _, _, _ = setup
        with pytest.raises(ScenarioNotFoundError):
            service.get_scenario("9999")


# === 시작 / 잠금 ===


class TestStartQuest:
    def test_start(self, setup) -> None:
        service, _, _, db, _ = setup
        step = service.start_quest("p1", GOBLIN)
        assert step.node.node_id == "start"
        assert step.session.phase == SessionPhase.AWAITING_CHOICE
        assert [c.label for c in step.choices] == ["引き受ける", "断る"]
        assert _player(db).current_quest_id == GOBLIN

    def test_quest_lock(self, setup) -> None:
        service, _, _, db, _ = setup
        service.start_quest("p1", GOBLIN)
        with pytest.raises(QuestLockedError):
            service.start_quest("p1", BRIDGE)
        assert db.query(QuestSessionModel).count() == 1

    def test_unknown_player(self, setup) -> None:
        service, _, _, _, _ = setup
        with pytest.raises(PlayerNotFoundError):
            service.start_quest("ghost", GOBLIN)

    def test_unknown_scenario_does_not_lock(self, setup) -> None:
        service, _, _, db, _ = setup
        with pytest.raises(ScenarioNotFoundError):
            service.start_quest("p1", "9999")
        assert _player(db).current_quest_id is None

    def test_no_active_quest(self, setup) -> None:
        service, _, _, _, _ = setup
        with pytest.raises(NoActiveQuestError):
            service.choose("p1", 0)


# === 진행 ===


class TestProgress:
    def test_full_run_with_guest_and_battle(self, setup) -> None:
        service, party, progression, db, bus = setup
        entered = []
        bus.subscribe(EventTypes.NODE_ENTERED, lambda e: entered.append(e.data["node_id"]))

        service.start_quest("p1", GOBLIN)

        step = service.choose("p1", 0)
        assert step.encounter is False
        assert step.visited == ["depart", "forest_edge", "den"]
        assert step.joined_guests == ["mercenary_garo"]
        assert [m.slug for m in party.get_party("p1")] == ["mercenary_garo"]

        step = service.choose("p1", 2)  # 罠 (50G)
        assert step.node.node_id == "trap"
        assert _player(db).gold == 50

        step = service.choose("p1", 0)
        assert step.node.node_id == "boss_weakened"
        step = service.choose("p1", 0)
        assert step.session.phase == SessionPhase.IN_BATTLE
        assert step.enemy_group_id == "goblin_chief"

        step = service.resolve_battle("p1", won=True)
        assert step.finished
        assert step.result == ScenarioResult.SUCCESS
        assert "report" in entered

        player = _player(db)
        assert player.current_quest_id is None
        # difficulty 2 * 20 + 전투 1회 30
        assert player.exp == 70
        assert player.gold == 170
        assert player.age_days == 3
        summary = progression.get_completion(step.session_id)
        assert summary["earned_exp"] == 70
        assert summary["result"] == "success"

    def test_choice_rejected_keeps_session(self, setup) -> None:
        service, _, _, db, _ = setup
        service.start_quest("p1", GOBLIN)
        service.choose("p1", 0)

        with pytest.raises(ChoiceRejectedError) as exc_info:
            service.choose("p1", 1)  # 松明 없음
        assert exc_info.value.reason == "req_tag"

        step = service.get_current_step("p1")
        assert step.node.node_id == "den"
        assert _player(db).gold == 100

    @pytest.mark.parametrize("dice", [ScriptedDice(floats=[0.1])])
    def test_travel_encounter_and_defeat(self, setup) -> None:
        service, _, _, db, _ = setup
        service.start_quest("p1", GOBLIN)
        step = service.choose("p1", 0)
        assert step.encounter is True
        assert step.node.node_id == "ambush"
        assert step.enemy_group_id == "goblin_pack"

        with pytest.raises(ScenarioStateError):
            service.choose("p1", 0)

        step = service.resolve_battle("p1", won=False)
        assert step.result == ScenarioResult.FAILURE
        player = _player(db)
        assert player.gold == 100
        assert player.age_days == 2

    def test_vitality_cost_and_status_check(self, setup) -> None:
        service, _, _, db, _ = setup
        service.start_quest("p1", BRIDGE)
        step = service.choose("p1", 0)
        # 레벨 1 → 판정 실패 → 낙하
        assert step.visited == ["crossing", "fall"]
        assert step.result == ScenarioResult.FAILURE
        player = _player(db)
        assert player.vitality == 95
        assert player.exp == 0

    def test_status_check_success(self, setup) -> None:
        service, _, _, db, _ = setup
        player = _player(db)
        player.level = 3
        player.exp = 400
        db.commit()

        service.start_quest("p1", BRIDGE)
        step = service.choose("p1", 0)
        assert step.result == ScenarioResult.SUCCESS
        assert _player(db).gold == 130

    def test_resume_with_new_service(self, setup, dice) -> None:
        service, _, _, db, bus = setup
        service.start_quest("p1", GOBLIN)

        resumed = ScenarioService(db, bus, dice)
        step = resumed.get_current_step("p1")
        assert step.node.node_id == "start"
        assert len(step.choices) == 2

    def test_give_up(self, setup) -> None:
        service, _, _, db, _ = setup
        service.start_quest("p1", GOBLIN)
        step = service.give_up("p1")
        assert step.result == ScenarioResult.FAILURE
        assert _player(db).current_quest_id is None

        # 잠금 해제 → 다시 시작 가능
        step = service.start_quest("p1", BRIDGE)
        assert step.node.node_id == "start"

    def test_completion_event(self, setup) -> None:
        service, _, _, _, bus = setup
        completed = []
        bus.subscribe(EventTypes.SCENARIO_COMPLETED, completed.append)
        service.start_quest("p1", GOBLIN)
        service.choose("p1", 1)  # 断る → EXIT_FAIL
        assert completed[0].data["result"] == "failure"
        assert completed[0].data["battles_fought"] == 0
