"""시나리오 상태 머신

상태 = 노드 ID, 전이 = 선택지 / 자동 분기 / 이동 판정.
플레이어 입력이 필요한 노드(대화, 상점, 전투 대기)에 도달할 때까지
자동 노드(이동, 무작위 분기, 스탯 판정, 동료 합류, 조건 분기)를 연속 처리한다.

규칙:
- 세션은 사본만 갱신한다 (입력 세션 불변)
- 주사위는 주입받은 Dice로만 굴린다
- 끊긴 전이 대상은 UnresolvedNodeError (조용히 멈추지 않는다)
- 거부된 선택은 ChoiceRejectedError, 세션은 그대로
"""

from __future__ import annotations

import logging
from typing import Optional

from src.core.dice import Dice, SystemDice
from src.core.player import PlayerSnapshot
from src.core.scenario.conditions import check_choice, evaluate_condition
from src.core.scenario.enums import (
    BATTLE_LOSE,
    BATTLE_WIN,
    BRANCH_HIT,
    BRANCH_MISS,
    CHECK_FAILURE,
    CHECK_SUCCESS,
    ScenarioResult,
    SessionPhase,
    sentinel_result,
)
from src.core.scenario.errors import (
    ChoiceRejectedError,
    InvalidChoiceError,
    ScenarioStateError,
    UnresolvedNodeError,
)
from src.core.scenario.models import (
    BattleNode,
    CheckStatusNode,
    Choice,
    EndNode,
    GuestJoinNode,
    Node,
    ProcessRewardsNode,
    RandomBranchNode,
    Scenario,
    TravelNode,
)
from src.core.scenario.session import (
    BattleDirective,
    ChoiceView,
    CompletionDirective,
    GuestJoinDirective,
    ResourceDelta,
    ScenarioSession,
    StepResult,
)

logger = logging.getLogger(__name__)

# 한 스텝에서 허용하는 자동 전이 횟수 (자동 노드 순환 방지)
MAX_AUTO_HOPS = 64


def _find_labeled(node: Node, label: str) -> Optional[Choice]:
    for choice in node.choices:
        if choice.label == label:
            return choice
    return None


class ScenarioRunner:
    """Scenario 하나를 실행하는 상태 머신.

    사용 패턴:
        runner = ScenarioRunner(scenario, dice)
        step = runner.start(player)
        step = runner.choose(step.session, player, 0)
        if step.session.phase == SessionPhase.IN_BATTLE:
            step = runner.resolve_battle(step.session, player, won=True)
    """

    def __init__(self, scenario: Scenario, dice: Optional[Dice] = None) -> None:
        self._scenario = scenario
        self._dice: Dice = dice or SystemDice()

    @property
    def scenario(self) -> Scenario:
        return self._scenario

    # === 진입 ===

    def start(self, player: PlayerSnapshot) -> StepResult:
        """진입 노드에서 새 세션 시작."""
        entry = self._scenario.entry_id
        if not entry:
            raise ScenarioStateError(
                f"Scenario '{self._scenario.scenario_id}' has no nodes"
            )
        session = ScenarioSession(
            scenario_id=self._scenario.scenario_id,
            current_node_id=entry,
        )
        step = StepResult(session=session, node=None)
        self._advance(step, entry, player, source_id=None)
        logger.info(
            "Scenario '%s' started at '%s'",
            self._scenario.scenario_id,
            step.session.current_node_id,
        )
        return step

    def current_node(self, session: ScenarioSession) -> Node:
        node = self._scenario.get(session.current_node_id)
        if node is None:
            raise UnresolvedNodeError(session.current_node_id)
        return node

    # === 선택 ===

    def available_choices(
        self, session: ScenarioSession, player: PlayerSnapshot
    ) -> list[ChoiceView]:
        """현재 노드의 선택지 + 선택 가능 여부"""
        if session.phase != SessionPhase.AWAITING_CHOICE:
            return []
        node = self.current_node(session)
        views = []
        for index, choice in enumerate(node.choices):
            reason = check_choice(choice, player)
            views.append(
                ChoiceView(
                    index=index,
                    label=choice.label,
                    available=reason is None,
                    reason=reason,
                    cost_vitality=choice.cost_vitality,
                    cost_gold=choice.cost_gold,
                    req_tag=choice.req_tag,
                    req_card=choice.req_card,
                )
            )
        return views

    def choose(
        self,
        session: ScenarioSession,
        player: PlayerSnapshot,
        choice_index: int,
    ) -> StepResult:
        """선택지 선택. 조건/비용 불충족 시 ChoiceRejectedError."""
        self._require_phase(session, SessionPhase.AWAITING_CHOICE)
        node = self.current_node(session)

        if not 0 <= choice_index < len(node.choices):
            raise InvalidChoiceError(choice_index, node.node_id)

        choice = node.choices[choice_index]
        reason = check_choice(choice, player)
        if reason is not None:
            logger.info(
                "Choice rejected: node=%s, choice=%d, reason=%s",
                node.node_id,
                choice_index,
                reason,
            )
            raise ChoiceRejectedError(reason, f"Choice '{choice.label}' rejected: {reason}")

        step = StepResult(session=session.clone(), node=node)
        if choice.cost_vitality or choice.cost_gold:
            step.directives.append(
                ResourceDelta(vitality=-choice.cost_vitality, gold=-choice.cost_gold)
            )
            step.session.vitality_spent += choice.cost_vitality
            step.session.gold_spent += choice.cost_gold

        self._advance(step, choice.next, player, source_id=node.node_id)
        return step

    # === 전투 재개 ===

    def resolve_battle(
        self,
        session: ScenarioSession,
        player: PlayerSnapshot,
        won: bool,
    ) -> StepResult:
        """외부 전투 종료 후 재개.

        승리: 'win' 라벨 선택지 → 없으면 첫 선택지
        패배: 'lose' 라벨 선택지 → 없으면 실패 종료
        """
        self._require_phase(session, SessionPhase.IN_BATTLE)
        node = self.current_node(session)

        step = StepResult(session=session.clone(), node=node)
        step.session.phase = SessionPhase.AWAITING_CHOICE

        if won:
            choice = _find_labeled(node, BATTLE_WIN) or (
                node.choices[0] if node.choices else None
            )
            if choice is None:
                raise UnresolvedNodeError("<battle next>", node.node_id)
            logger.info("Battle won at '%s' → '%s'", node.node_id, choice.next)
            self._advance(step, choice.next, player, source_id=node.node_id)
        else:
            choice = _find_labeled(node, BATTLE_LOSE)
            logger.info("Battle lost at '%s'", node.node_id)
            if choice is None:
                self._finish(step, ScenarioResult.FAILURE)
            else:
                self._advance(step, choice.next, player, source_id=node.node_id)
        return step

    def give_up(self, session: ScenarioSession) -> StepResult:
        """퀘스트 포기 → 실패 종료"""
        if session.finished:
            raise ScenarioStateError("Scenario already finished")
        step = StepResult(session=session.clone(), node=self._scenario.get(session.current_node_id))
        self._finish(step, ScenarioResult.FAILURE)
        logger.info("Scenario '%s' abandoned", session.scenario_id)
        return step

    # === 내부 ===

    def _require_phase(self, session: ScenarioSession, phase: SessionPhase) -> None:
        if session.phase != phase:
            raise ScenarioStateError(
                f"Expected phase {phase.value}, session is {session.phase.value}"
            )

    def _finish(self, step: StepResult, result: ScenarioResult) -> None:
        step.session.phase = SessionPhase.FINISHED
        step.session.result = result
        step.directives.append(
            CompletionDirective(
                result=result, battles_fought=step.session.battles_fought
            )
        )
        logger.info(
            "Scenario '%s' finished: %s (battles=%d)",
            step.session.scenario_id,
            result.value,
            step.session.battles_fought,
        )

    def _advance(
        self,
        step: StepResult,
        target_id: str,
        player: PlayerSnapshot,
        source_id: Optional[str],
    ) -> None:
        """target_id로 전이한 뒤 입력이 필요한 노드까지 자동 진행"""
        for _ in range(MAX_AUTO_HOPS):
            result = sentinel_result(target_id)
            if result is not None:
                step.node = None
                self._finish(step, result)
                return

            node = self._scenario.get(target_id)
            if node is None:
                raise UnresolvedNodeError(target_id, source_id)

            step.session.current_node_id = node.node_id
            step.session.history.append(node.node_id)
            step.visited.append(node.node_id)
            step.node = node

            next_id = self._enter(step, node, player)
            if next_id is None:
                return
            source_id, target_id = node.node_id, next_id

        raise ScenarioStateError(
            f"Automatic transitions exceeded {MAX_AUTO_HOPS} hops near '{target_id}'"
        )

    def _enter(
        self, step: StepResult, node: Node, player: PlayerSnapshot
    ) -> Optional[str]:
        """노드 진입 처리. 자동으로 이어질 다음 ID, 입력 대기/종료면 None."""
        if node.condition is not None:
            passed = evaluate_condition(node.condition.expr, player)
            redirect = node.condition.next if passed else node.condition.fallback
            if redirect:
                logger.debug(
                    "Condition %r on '%s' = %s → '%s'",
                    node.condition.expr,
                    node.node_id,
                    passed,
                    redirect,
                )
                return redirect

        if isinstance(node, (EndNode, ProcessRewardsNode)):
            self._finish(step, node.result)
            return None

        if isinstance(node, TravelNode):
            return self._enter_travel(step, node)

        if isinstance(node, BattleNode):
            step.session.phase = SessionPhase.IN_BATTLE
            step.session.battles_fought += 1
            step.directives.append(
                BattleDirective(enemy_group_id=node.enemy_group_id, node_id=node.node_id)
            )
            return None

        if isinstance(node, GuestJoinNode):
            guest_id = node.guest_id or node.extra.get("slug")
            if guest_id:
                step.session.joined_guests.append(guest_id)
                step.directives.append(
                    GuestJoinDirective(guest_id=guest_id, node_id=node.node_id)
                )
            else:
                logger.warning("guest_join node '%s' has no guest id", node.node_id)
            if len(node.choices) == 1:
                return node.choices[0].next
            return self._await_choice(step, node)

        if isinstance(node, RandomBranchNode):
            hit, miss = _find_labeled(node, BRANCH_HIT), _find_labeled(node, BRANCH_MISS)
            if hit and miss:
                roll = self._dice.randrange(100)
                logger.debug("random_branch '%s': roll=%d prob=%d", node.node_id, roll, node.prob)
                return hit.next if roll < node.prob else miss.next
            return self._await_choice(step, node)

        if isinstance(node, CheckStatusNode):
            ok, ng = _find_labeled(node, CHECK_SUCCESS), _find_labeled(node, CHECK_FAILURE)
            if ok and ng:
                passed = bool(node.req_stat) and player.stat(node.req_stat) >= node.req_val
                return ok.next if passed else ng.next
            return self._await_choice(step, node)

        return self._await_choice(step, node)

    def _enter_travel(self, step: StepResult, node: TravelNode) -> str:
        success_id = node.next_node_success or (
            node.choices[0].next if node.choices else None
        )
        roll = self._dice.random()
        encounter = roll < node.encounter_rate
        step.encounter = encounter
        logger.info(
            "Travel '%s' → %s: roll=%.3f rate=%.2f encounter=%s",
            node.node_id,
            node.target_location or "-",
            roll,
            node.encounter_rate,
            encounter,
        )
        if encounter:
            if not node.next_node_battle:
                raise UnresolvedNodeError("<travel battle>", node.node_id)
            return node.next_node_battle
        if success_id is None:
            raise UnresolvedNodeError("<travel success>", node.node_id)
        return success_id

    def _await_choice(self, step: StepResult, node: Node) -> None:
        step.session.phase = SessionPhase.AWAITING_CHOICE
        if not node.choices:
            # 선택지 없는 비종료 노드: 진행 불가 → 실패로 종료
            logger.warning("Dead-end node '%s' treated as failure", node.node_id)
            self._finish(step, ScenarioResult.FAILURE)
        return None
