"""시나리오 상태 머신 테스트 (ScriptedDice로 판정 고정)"""

import pytest

from src.core.dice import ScriptedDice
from src.core.player import PlayerSnapshot
from src.core.scenario.csv_parser import parse_scenario_csv
from src.core.scenario.enums import ScenarioResult, SessionPhase
from src.core.scenario.errors import (
    ChoiceRejectedError,
    InvalidChoiceError,
    ScenarioStateError,
    UnresolvedNodeError,
)
from src.core.scenario.session import (
    BattleDirective,
    CompletionDirective,
    GuestJoinDirective,
    ResourceDelta,
)
from src.core.scenario.state_machine import ScenarioRunner

HEADER = "row_type,node_id,text_label,next_node,params\n"


def _runner(body: str, dice=None) -> ScenarioRunner:
    return ScenarioRunner(parse_scenario_csv(HEADER + body, "test"), dice or ScriptedDice())


@pytest.fixture()
def player():
    return PlayerSnapshot(player_id="p1", level=3, gold=100, vitality=50)


FORK = (
    "NODE,start,Which way?,,\n"
    "CHOICE,,Left,win_room,\n"
    "CHOICE,,Right,lose_room,\n"
    "NODE,win_room,Treasure!,EXIT,\n"
    "NODE,lose_room,Trap!,EXIT_FAIL,\n"
)


class TestTraversal:
    def test_start_waits_for_choice(self, player):
        step = _runner(FORK).start(player)
        assert step.session.current_node_id == "start"
        assert step.session.phase == SessionPhase.AWAITING_CHOICE
        assert step.visited == ["start"]

    def test_success_path(self, player):
        runner = _runner(FORK)
        step = runner.choose(runner.start(player).session, player, 0)
        assert step.finished
        assert step.result == ScenarioResult.SUCCESS
        assert step.session.history == ["start", "win_room"]
        assert isinstance(step.directives[-1], CompletionDirective)

    def test_failure_path(self, player):
        runner = _runner(FORK)
        step = runner.choose(runner.start(player).session, player, 1)
        assert step.result == ScenarioResult.FAILURE

    def test_invalid_choice_rejected(self, player):
        runner = _runner(FORK)
        session = runner.start(player).session
        with pytest.raises(InvalidChoiceError) as exc:
            runner.choose(session, player, 2)
        assert exc.value.reason == "not_found"
        assert session.current_node_id == "start"

    def test_input_session_unchanged(self, player):
        runner = _runner(FORK)
        session = runner.start(player).session
        runner.choose(session, player, 0)
        assert session.current_node_id == "start"
        assert session.history == ["start"]

    def test_continue_chain(self, player):
        runner = _runner("NODE,start,a,b,\nNODE,b,b,c,\nNODE,c,c,EXIT,\n")
        step = runner.start(player)
        assert step.session.current_node_id == "start"
        step = runner.choose(step.session, player, 0)
        assert step.session.current_node_id == "b"
        step = runner.choose(step.session, player, 0)
        step = runner.choose(step.session, player, 0)
        assert step.result == ScenarioResult.SUCCESS

    def test_sentinel_end(self, player):
        runner = _runner("NODE,start,a,,\nCHOICE,,done,end,\n")
        step = runner.choose(runner.start(player).session, player, 0)
        assert step.result == ScenarioResult.SUCCESS
        assert step.node is None

    def test_choice_loop_stays(self, player):
        runner = _runner("NODE,start,a,,\nCHOICE,,again,,\nCHOICE,,leave,EXIT,\n")
        step = runner.choose(runner.start(player).session, player, 0)
        assert step.session.current_node_id == "start"
        assert step.session.history == ["start", "start"]

    def test_unresolved_target(self, player):
        runner = _runner("NODE,start,a,missing,\n")
        with pytest.raises(UnresolvedNodeError) as exc:
            runner.choose(runner.start(player).session, player, 0)
        assert exc.value.node_id == "missing"

    def test_choose_after_finish(self, player):
        runner = _runner(FORK)
        step = runner.choose(runner.start(player).session, player, 0)
        with pytest.raises(ScenarioStateError):
            runner.choose(step.session, player, 0)

    def test_dead_end_node_fails(self, player):
        runner = _runner("NODE,start,a,b,\nNODE,b,nothing here,,\n")
        step = runner.choose(runner.start(player).session, player, 0)
        assert step.result == ScenarioResult.FAILURE


class TestChoiceGating:
    GATED = (
        "NODE,start,Door,,\n"
        "CHOICE,,Torch,lit,req_tag:torch\n"
        "CHOICE,,Key,open,req_card:card_key\n"
        'CHOICE,,Bribe,open,"cost_gold:150"\n'
        'CHOICE,,Climb,open,"cost_type:vitality, cost_val:20"\n'
        "NODE,lit,Bright,EXIT,\n"
        "NODE,open,Open,EXIT,\n"
    )

    def test_req_tag_rejected(self, player):
        runner = _runner(self.GATED)
        with pytest.raises(ChoiceRejectedError) as exc:
            runner.choose(runner.start(player).session, player, 0)
        assert exc.value.reason == "req_tag"

    def test_req_tag_satisfied(self):
        runner = _runner(self.GATED)
        player = PlayerSnapshot(player_id="p", tags=frozenset({"torch"}))
        step = runner.choose(runner.start(player).session, player, 0)
        assert step.result == ScenarioResult.SUCCESS

    def test_req_card_rejected(self, player):
        runner = _runner(self.GATED)
        with pytest.raises(ChoiceRejectedError) as exc:
            runner.choose(runner.start(player).session, player, 1)
        assert exc.value.reason == "req_card"

    def test_insufficient_gold(self, player):
        runner = _runner(self.GATED)
        with pytest.raises(ChoiceRejectedError) as exc:
            runner.choose(runner.start(player).session, player, 2)
        assert exc.value.reason == "insufficient_gold"

    def test_vitality_cost_emits_delta(self, player):
        runner = _runner(self.GATED)
        step = runner.choose(runner.start(player).session, player, 3)
        deltas = [d for d in step.directives if isinstance(d, ResourceDelta)]
        assert deltas == [ResourceDelta(vitality=-20, gold=0)]
        assert step.session.vitality_spent == 20
        # 스냅샷은 바뀌지 않는다
        assert player.vitality == 50

    def test_available_choices_flags(self, player):
        runner = _runner(self.GATED)
        views = runner.available_choices(runner.start(player).session, player)
        assert [v.available for v in views] == [False, False, False, True]
        assert views[2].reason == "insufficient_gold"
        assert views[2].cost_gold == 150


class TestTravel:
    TRAVEL = (
        'NODE,start,Go,,"type:travel, encounter_rate:0.3, '
        'next_node_success:arrive, next_node_battle:ambush"\n'
        "NODE,arrive,Safe,EXIT,\n"
        'NODE,ambush,Goblins!,,"type:battle, enemy:goblins"\n'
        "CHOICE,,win,arrive,\n"
        "CHOICE,,lose,EXIT_FAIL,\n"
    )

    def test_no_encounter(self, player):
        step = _runner(self.TRAVEL, ScriptedDice(floats=[0.3])).start(player)
        assert step.encounter is False
        assert step.result == ScenarioResult.SUCCESS
        assert step.session.history == ["start", "arrive"]

    def test_encounter(self, player):
        step = _runner(self.TRAVEL, ScriptedDice(floats=[0.29])).start(player)
        assert step.encounter is True
        assert step.session.phase == SessionPhase.IN_BATTLE
        assert step.session.current_node_id == "ambush"
        assert step.session.battles_fought == 1
        battle = [d for d in step.directives if isinstance(d, BattleDirective)]
        assert battle[0].enemy_group_id == "goblins"

    def test_zero_rate_never_encounters(self, player):
        body = 'NODE,start,Go,,"type:travel, next_node_success:arrive"\nNODE,arrive,x,EXIT,\n'
        step = _runner(body, ScriptedDice(floats=[0.0])).start(player)
        assert step.encounter is False

    def test_travel_falls_back_to_first_choice(self, player):
        body = 'NODE,start,Go,arrive,"type:travel"\nNODE,arrive,x,EXIT,\n'
        step = _runner(body, ScriptedDice(floats=[0.9])).start(player)
        assert step.session.current_node_id == "arrive"

    def test_encounter_without_battle_target_raises(self, player):
        body = (
            'NODE,start,Go,,"type:travel, encounter_rate:1, next_node_success:arrive"\n'
            "NODE,arrive,x,EXIT,\n"
        )
        with pytest.raises(UnresolvedNodeError) as exc_info:
            _runner(body, ScriptedDice(floats=[0.0])).start(player)
        assert exc_info.value.source_id == "start"


class TestBattle:
    BATTLE = (
        'NODE,start,Fight,,"type:battle, enemy:orc"\n'
        "CHOICE,,win,after,\n"
        "CHOICE,,lose,EXIT_FAIL,\n"
        "NODE,after,Victory,EXIT,\n"
    )

    def test_choose_during_battle_rejected(self, player):
        runner = _runner(self.BATTLE)
        session = runner.start(player).session
        with pytest.raises(ScenarioStateError):
            runner.choose(session, player, 0)

    def test_win_resumes(self, player):
        runner = _runner(self.BATTLE)
        step = runner.resolve_battle(runner.start(player).session, player, won=True)
        assert step.result == ScenarioResult.SUCCESS
        assert step.session.battles_fought == 1

    def test_lose_follows_lose_choice(self, player):
        runner = _runner(self.BATTLE)
        step = runner.resolve_battle(runner.start(player).session, player, won=False)
        assert step.result == ScenarioResult.FAILURE

    def test_lose_without_lose_choice_fails(self, player):
        runner = _runner('NODE,start,Fight,after,"type:battle"\nNODE,after,x,EXIT,\n')
        step = runner.resolve_battle(runner.start(player).session, player, won=False)
        assert step.result == ScenarioResult.FAILURE

    def test_win_uses_first_choice_without_label(self, player):
        runner = _runner('NODE,start,Fight,after,"type:battle"\nNODE,after,x,EXIT,\n')
        step = runner.resolve_battle(runner.start(player).session, player, won=True)
        assert step.result == ScenarioResult.SUCCESS

    def test_resolve_without_battle(self, player):
        runner = _runner(FORK)
        with pytest.raises(ScenarioStateError):
            runner.resolve_battle(runner.start(player).session, player, won=True)


class TestAutomaticNodes:
    def test_guest_join_directive_and_auto_advance(self, player):
        runner = _runner(
            'NODE,start,Hello,next,"type:guest_join, guest_id:garo"\n'
            "NODE,next,Onward,,\nCHOICE,,go,EXIT,\n"
        )
        step = runner.start(player)
        joins = [d for d in step.directives if isinstance(d, GuestJoinDirective)]
        assert joins == [GuestJoinDirective(guest_id="garo", node_id="start")]
        assert step.session.current_node_id == "next"
        assert step.session.joined_guests == ["garo"]

    def test_random_branch_hit(self, player):
        body = (
            'NODE,start,Roll,,"type:random_branch, prob:60"\n'
            "CHOICE,,hit,good,\nCHOICE,,miss,bad,\n"
            "NODE,good,g,EXIT,\nNODE,bad,b,EXIT_FAIL,\n"
        )
        step = _runner(body, ScriptedDice(ints=[59])).start(player)
        assert step.result == ScenarioResult.SUCCESS

    def test_random_branch_miss(self, player):
        body = (
            'NODE,start,Roll,,"type:random_branch, prob:60"\n'
            "CHOICE,,hit,good,\nCHOICE,,miss,bad,\n"
            "NODE,good,g,EXIT,\nNODE,bad,b,EXIT_FAIL,\n"
        )
        step = _runner(body, ScriptedDice(ints=[60])).start(player)
        assert step.result == ScenarioResult.FAILURE

    def test_check_status(self, player):
        body = (
            'NODE,start,Check,,"type:check_status, req_stat:level, req_val:3"\n'
            "CHOICE,,success,good,\nCHOICE,,failure,bad,\n"
            "NODE,good,g,EXIT,\nNODE,bad,b,EXIT_FAIL,\n"
        )
        runner = _runner(body)
        assert runner.start(player).result == ScenarioResult.SUCCESS
        weak = PlayerSnapshot(player_id="w", level=2)
        assert runner.start(weak).result == ScenarioResult.FAILURE

    def test_node_condition_redirect(self, player):
        body = (
            'NODE,start,Gate,,"cond:min_gold:50, next:rich, fallback:poor"\n'
            "NODE,rich,r,EXIT,\nNODE,poor,p,EXIT_FAIL,\n"
        )
        runner = _runner(body)
        assert runner.start(player).result == ScenarioResult.SUCCESS
        broke = PlayerSnapshot(player_id="b", gold=0)
        assert runner.start(broke).result == ScenarioResult.FAILURE

    def test_auto_loop_guard(self, player):
        body = 'NODE,start,a,,"cond:min_level:1, next:b"\nNODE,b,b,,"cond:min_level:1, next:start"\n'
        with pytest.raises(ScenarioStateError):
            _runner(body).start(player)


class TestGiveUp:
    def test_give_up_fails_quest(self, player):
        runner = _runner(FORK)
        step = runner.give_up(runner.start(player).session)
        assert step.result == ScenarioResult.FAILURE
        assert step.session.phase == SessionPhase.FINISHED

    def test_give_up_after_finish(self, player):
        runner = _runner(FORK)
        step = runner.choose(runner.start(player).session, player, 0)
        with pytest.raises(ScenarioStateError):
            runner.give_up(step.session)
