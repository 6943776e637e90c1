"""Service 계층 예외

API 계층이 HTTP 상태 코드로 매핑한다.
"""

from src.core.scenario.errors import ScenarioStateError


class PlayerNotFoundError(LookupError):
    def __init__(self, player_id: str) -> None:
        self.player_id = player_id
        super().__init__(f"Player not found: {player_id}")


class ScenarioNotFoundError(LookupError):
    def __init__(self, scenario_id: str) -> None:
        self.scenario_id = scenario_id
        super().__init__(f"Scenario not found: {scenario_id}")


class NoActiveQuestError(LookupError):
    def __init__(self, player_id: str) -> None:
        self.player_id = player_id
        super().__init__(f"Player {player_id} has no active quest")


class PartyMemberNotFoundError(LookupError):
    def __init__(self, member_id: str) -> None:
        self.member_id = member_id
        super().__init__(f"Party member not found: {member_id}")


class QuestLockedError(ScenarioStateError):
    """이미 진행 중인 퀘스트가 있음 (플레이어당 1개)"""

    def __init__(self, player_id: str, current_quest_id: str) -> None:
        self.player_id = player_id
        self.current_quest_id = current_quest_id
        super().__init__(
            f"Player {player_id} is already on quest '{current_quest_id}'"
        )
