"""이벤트 유형 상수

서비스 간 통신은 이 문자열로만 한다.
"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # === Scenario (ScenarioService) ===
    SCENARIO_IMPORTED = "scenario_imported"
    SCENARIO_STARTED = "scenario_started"
    NODE_ENTERED = "node_entered"
    CHOICE_COSTS_PAID = "choice_costs_paid"
    BATTLE_STARTED = "battle_started"
    SCENARIO_COMPLETED = "scenario_completed"  # data: player_id, scenario_id, result, battles_fought

    # === Party (ScenarioService → PartyService) ===
    GUEST_JOINED = "guest_joined"  # data: player_id, guest_id
    PARTY_MEMBER_KNOCKED_OUT = "party_member_knocked_out"
    PARTY_MEMBER_DISMISSED = "party_member_dismissed"

    # === Battle (BattleService) ===
    DAMAGE_ROUTED = "damage_routed"
    PLAYER_DEFEATED = "player_defeated"

    # === Progression (ProgressionService) ===
    PLAYER_LEVELED_UP = "player_leveled_up"
    PLAYER_AGED = "player_aged"
    PLAYER_RETIRED = "player_retired"
