import copy

import pytest

from ai.errors import SchemaViolation
from ai.schemas import (
    ANALYSIS_SCHEMA,
    CONCLUSION_SCHEMA,
    CONTRACT_MODELS,
    MISSION_SCHEMA,
    PLAN_SCHEMA,
    STORY_SCHEMA,
    DreamAnalysis,
    MissionConclusion,
    MissionDesign,
    RealWorldPlanDraft,
    StoryStart,
    validate_contract,
)
from conftest import analysis_payload, conclusion_payload, mission_payload, plan_payload, story_payload


ENVELOPES = [ANALYSIS_SCHEMA, STORY_SCHEMA, MISSION_SCHEMA, CONCLUSION_SCHEMA, PLAN_SCHEMA]


@pytest.mark.parametrize(
    "payload, model",
    [
        (analysis_payload(), DreamAnalysis),
        (story_payload(), StoryStart),
        (mission_payload(), MissionDesign),
        (conclusion_payload(), MissionConclusion),
        (plan_payload(), RealWorldPlanDraft),
    ],
)
def test_well_formed_payloads_pass(payload, model):
    assert isinstance(validate_contract(payload, model, "test"), model)


def test_answers_are_read_through_snake_case_fields():
    design = validate_contract(mission_payload(), MissionDesign, "generate_mini_mission")
    first = design.rounds[0]
    assert first.game_mode == "SELECT_ALL_MATCHING"
    assert first.correct_object_type == "wrench"
    assert [(ot.type, ot.count) for ot in first.object_types] == [("wrench", 3), ("bolt", 2)]


@pytest.mark.parametrize("envelope", ENVELOPES, ids=lambda env: env["name"])
def test_every_envelope_has_a_model_with_the_same_fields(envelope):
    model = CONTRACT_MODELS[envelope["name"]]
    model_fields = model.model_json_schema(by_alias=True)["properties"]
    assert set(model_fields) == set(envelope["schema"]["properties"])


def test_strict_contracts_list_every_property_as_required():
    schema = MISSION_SCHEMA["schema"]
    assert set(schema["required"]) == set(schema["properties"])
    round_node = schema["properties"]["rounds"]["items"]
    assert set(round_node["required"]) == set(round_node["properties"])
    assert round_node["additionalProperties"] is False


def test_missing_field_is_reported_with_path():
    payload = analysis_payload()
    del payload["careerPaths"][1]["description"]

    with pytest.raises(SchemaViolation) as exc:
        validate_contract(payload, DreamAnalysis, "analyze_dream")
    assert "$.careerPaths[1].description" in str(exc.value)
    assert exc.value.operation == "analyze_dream"


def test_too_many_career_paths():
    payload = analysis_payload(careers=("A", "B", "C", "D"))
    with pytest.raises(SchemaViolation):
        validate_contract(payload, DreamAnalysis, "analyze_dream")


def test_story_needs_exactly_two_choices():
    payload = story_payload()
    payload["choices"].append({"text": "Take a nap"})
    with pytest.raises(SchemaViolation):
        validate_contract(payload, StoryStart, "start_simulation")


def test_mission_needs_exactly_two_rounds():
    payload = mission_payload()
    payload["rounds"] = payload["rounds"][:1]
    with pytest.raises(SchemaViolation) as exc:
        validate_contract(payload, MissionDesign, "generate_mini_mission")
    assert exc.value.operation == "generate_mini_mission"


def test_unknown_game_mode_is_rejected():
    payload = mission_payload()
    payload["rounds"][0]["gameMode"] = "MEMORY"
    with pytest.raises(SchemaViolation) as exc:
        validate_contract(payload, MissionDesign, "generate_mini_mission")
    assert "gameMode" in str(exc.value)


@pytest.mark.parametrize("count", [0, 1.5, True, "3"])
def test_object_count_must_be_a_positive_integer(count):
    payload = mission_payload()
    payload["rounds"][1]["objectTypes"][0]["count"] = count
    with pytest.raises(SchemaViolation) as exc:
        validate_contract(payload, MissionDesign, "generate_mini_mission")
    assert "$.rounds[1].objectTypes[0].count" in str(exc.value)


def test_correct_object_type_must_appear_in_the_grid():
    payload = mission_payload()
    payload["rounds"][0]["correctObjectType"] = "hammer"
    with pytest.raises(SchemaViolation) as exc:
        validate_contract(payload, MissionDesign, "generate_mini_mission")
    assert "correctObjectType 'hammer'" in str(exc.value)
    assert "$.rounds[0]" in str(exc.value)


def test_validation_does_not_modify_payload():
    payload = plan_payload()
    before = copy.deepcopy(payload)
    validate_contract(payload, RealWorldPlanDraft, "generate_real_world_plan")
    assert payload == before


def test_plan_courses_carry_a_platform():
    payload = plan_payload()
    del payload["onlineCourseSuggestions"][0]["platform"]
    with pytest.raises(SchemaViolation):
        validate_contract(payload, RealWorldPlanDraft, "generate_real_world_plan")
