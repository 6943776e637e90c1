"""정규화 JSON 형식 변환 테스트"""

from src.core.scenario.csv_parser import parse_scenario_csv
from src.core.scenario.models import EndNode, TravelNode
from src.core.scenario.serialization import scenario_from_dict, scenario_to_dict

CSV = (
    "row_type,node_id,text_label,next_node,params\n"
    "NODE,start,Hi,,\"bg:town, cond:min_gold:10, next:rich, fallback:poor\"\n"
    "CHOICE,,Pay,rich,\"cost_gold:10, tip:yes\"\n"
    "NODE,rich,Go,,\"type:travel, encounter_rate:0.5, next_node_success:done, next_node_battle:done\"\n"
    "NODE,poor,Bye,EXIT_FAIL,\n"
    "NODE,done,,,type:end_success\n"
)


class TestScenarioDict:
    def test_dict_shape(self):
        data = scenario_to_dict(parse_scenario_csv(CSV, "q"))
        start = data["nodes"]["start"]
        assert start["type"] == "dialogue"
        assert start["text"] == "Hi"
        assert start["bg_key"] == "town"
        assert start["cond"] == "min_gold:10"
        assert start["choices"][0] == {
            "label": "Pay",
            "next": "rich",
            "cost_gold": 10,
            "tip": "yes",
        }

    def test_restores_equal_graph(self):
        original = parse_scenario_csv(CSV, "q")
        restored = scenario_from_dict(scenario_to_dict(original), "q")
        assert restored == original

    def test_typed_fields_survive(self):
        restored = scenario_from_dict(scenario_to_dict(parse_scenario_csv(CSV, "q")))
        assert isinstance(restored.get("rich"), TravelNode)
        assert restored.get("rich").encounter_rate == 0.5
        assert isinstance(restored.get("poor"), EndNode)
        assert restored.get("poor").result.value == "failure"

    def test_empty_dict(self):
        scenario = scenario_from_dict({})
        assert len(scenario) == 0
        assert scenario.entry_id == ""

    def test_unknown_type_tag_survives(self):
        scenario = parse_scenario_csv(
            "row_type,node_id,text_label,next_node,params\n"
            "NODE,start,???,done,type:mystery\n"
            "NODE,done,Bye,EXIT,\n",
            "q",
        )
        assert scenario.get("start").extra == {"type": "mystery"}

        data = scenario_to_dict(scenario)
        assert data["nodes"]["start"]["type"] == "mystery"

        restored = scenario_from_dict(data, "q")
        assert restored == scenario
        assert restored.get("start").extra == {"type": "mystery"}
