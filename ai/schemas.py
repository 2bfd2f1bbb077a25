# ai/schemas.py
from typing import Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from ai.errors import SchemaViolation

GAME_MODES = ["SELECT_ALL_MATCHING", "SELECT_ODD_ONE_OUT"]
ICON_KEYWORDS = ["Adventure", "ProblemSolving", "Focus", "Creativity", "Teamwork", "Curiosity"]


def _obj(properties: dict, description: str | None = None) -> dict:
    # strict=True: every property must be listed in required
    node = {
        "type": "object",
        "properties": properties,
        "required": list(properties.keys()),
        "additionalProperties": False,
    }
    if description:
        node["description"] = description
    return node


def _str(description: str | None = None, **extra) -> dict:
    node = {"type": "string", **extra}
    if description:
        node["description"] = description
    return node


def _suggestion(url_hint: str, with_platform: bool = False) -> dict:
    properties = {
        "title": _str("A search-friendly title."),
        "description": _str("A short description."),
    }
    if with_platform:
        properties["platform"] = _str("e.g. 'Khan Academy', 'Outschool'")
    properties["url"] = _str(url_hint)
    return _obj(properties)


def _growth_node(description: str) -> dict:
    return _obj({
        "title": _str(),
        "imagePrompt": _str("A simple prompt for a cute cartoon icon, e.g. 'A lightbulb for Creativity'."),
    }, description)


ANALYSIS_SCHEMA = {
    "type": "json_schema",
    "name": "DreamAnalysis",
    "strict": True,
    "schema": _obj({
        "feedback": _str(
            "A short, encouraging paragraph (2-3 sentences) addressing the user as 'you', "
            "connecting their dream to their potential interests."
        ),
        "traits": {
            "type": "array",
            "description": "3-5 single-word personality traits or skills (e.g. 'Creative', 'Curious').",
            "minItems": 1,
            "items": {"type": "string"},
        },
        "careerPaths": {
            "type": "array",
            "description": "2-3 potential career paths tailored to the user's age.",
            "minItems": 1,
            "maxItems": 3,
            "items": _obj({
                "name": _str("The name of the career."),
                "description": _str("One sentence explaining the career for the user's age."),
            }),
        },
    }),
}

STORY_SCHEMA = {
    "type": "json_schema",
    "name": "StoryStep",
    "strict": True,
    "schema": _obj({
        "text": _str("A single engaging sentence setting a scene for a choice."),
        "choices": {
            "type": "array",
            "description": "Exactly two short action phrases.",
            "minItems": 2,
            "maxItems": 2,
            "items": _obj({"text": _str()}),
        },
    }),
}

MISSION_SCHEMA = {
    "type": "json_schema",
    "name": "MissionDesign",
    "strict": True,
    "schema": _obj({
        "title": _str("A short, exciting title for the mission."),
        "rounds": {
            "type": "array",
            "description": "Exactly 2 game rounds.",
            "minItems": 2,
            "maxItems": 2,
            "items": _obj({
                "instructions": _str("Simple, clear instructions for this round."),
                "skillToTest": _str("The skill tested, e.g. 'Attention to Detail', 'Logic'."),
                "gameMode": _str(
                    "SELECT_ALL_MATCHING: find every matching item. SELECT_ODD_ONE_OUT: find the odd one out.",
                    enum=GAME_MODES,
                ),
                "objectTypes": {
                    "type": "array",
                    "description": "Object types for the grid. Each type is a single simple drawable object name.",
                    "minItems": 1,
                    "items": _obj({
                        "type": _str(),
                        "count": {"type": "integer", "minimum": 1},
                    }),
                },
                "correctObjectType": _str("Must match one of the types in objectTypes."),
            }),
        },
    }),
}

CONCLUSION_SCHEMA = {
    "type": "json_schema",
    "name": "MissionConclusion",
    "strict": True,
    "schema": _obj({
        "text": _str("One positive concluding sentence describing the outcome."),
        "feedbackTitle": _str("An exciting title, like 'Mission Accomplished!'."),
        "unlockedSkills": {
            "type": "array",
            "description": "Only skills from rounds the user succeeded in. Empty if none succeeded.",
            "items": {"type": "string"},
        },
        "coachingFeedback": {
            "type": "array",
            "description": "2-3 short, reflective coaching points.",
            "minItems": 1,
            "items": _obj({
                "text": _str("One encouraging sentence."),
                "icon": _str("One of: " + ", ".join(ICON_KEYWORDS) + "."),
            }),
        },
    }),
}

PLAN_SCHEMA = {
    "type": "json_schema",
    "name": "RealWorldPlan",
    "strict": True,
    "schema": _obj({
        "planTitle": _str("An exciting title for the action plan."),
        "youtubeSuggestions": {
            "type": "array",
            "minItems": 1,
            "items": _suggestion("Full YouTube search URL, e.g. 'https://www.youtube.com/results?search_query=...'"),
        },
        "onlineCourseSuggestions": {
            "type": "array",
            "minItems": 1,
            "items": _suggestion(
                "Full Khan Academy search URL, e.g. 'https://www.khanacademy.org/search?page_search_query=...'",
                with_platform=True,
            ),
        },
        "localActivitySuggestions": {
            "type": "array",
            "minItems": 1,
            "items": _suggestion(
                "Google Calendar event link: "
                "'https://calendar.google.com/calendar/render?action=TEMPLATE&text=EVENT_TITLE&details=EVENT_DETAILS'"
            ),
        },
        "growthMap": _obj({
            "centralCareer": _growth_node("The central node: the explored career."),
            "traitNodes": {
                "type": "array",
                "items": _growth_node("One of the user's traits."),
            },
        }, "A mind map linking the career to the user's traits."),
        "parentEmail": _obj({
            "subject": _str(),
            "body": _str("Markdown body summarizing progress and how to support the child's interests."),
        }),
    }),
}

# ---------- validation models ----------
# The envelopes above go to the model as the response format; the answers are
# read back through these models. Field aliases are the camelCase wire names.

class _Contract(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class CareerPathDraft(_Contract):
    name: str
    description: str


class DreamAnalysis(_Contract):
    feedback: str
    traits: list[str] = Field(min_length=1)
    career_paths: list[CareerPathDraft] = Field(min_length=1, max_length=3)


class ChoiceDraft(_Contract):
    text: str


class StoryStart(_Contract):
    text: str
    choices: list[ChoiceDraft] = Field(min_length=2, max_length=2)


class ObjectTypeCount(_Contract):
    type: str
    count: StrictInt = Field(ge=1)


class RoundDesign(_Contract):
    instructions: str
    skill_to_test: str
    game_mode: Literal["SELECT_ALL_MATCHING", "SELECT_ODD_ONE_OUT"]
    object_types: list[ObjectTypeCount] = Field(min_length=1)
    correct_object_type: str

    @model_validator(mode="after")
    def _correct_type_is_on_the_grid(self):
        types = {ot.type for ot in self.object_types}
        if self.correct_object_type not in types:
            raise ValueError(f"correctObjectType '{self.correct_object_type}' is not among {sorted(types)}")
        return self


class MissionDesign(_Contract):
    title: str
    rounds: list[RoundDesign] = Field(min_length=2, max_length=2)


class CoachingDraft(_Contract):
    text: str
    icon: str


class MissionConclusion(_Contract):
    text: str
    feedback_title: str
    unlocked_skills: list[str]
    coaching_feedback: list[CoachingDraft] = Field(min_length=1)


class SuggestionDraft(_Contract):
    title: str
    description: str
    url: str


class CourseDraft(SuggestionDraft):
    platform: str


class GrowthNodeDraft(_Contract):
    title: str
    image_prompt: str


class GrowthMapDraft(_Contract):
    central_career: GrowthNodeDraft
    trait_nodes: list[GrowthNodeDraft]


class ParentEmailDraft(_Contract):
    subject: str
    body: str


class RealWorldPlanDraft(_Contract):
    plan_title: str
    youtube_suggestions: list[SuggestionDraft] = Field(min_length=1)
    online_course_suggestions: list[CourseDraft] = Field(min_length=1)
    local_activity_suggestions: list[SuggestionDraft] = Field(min_length=1)
    growth_map: GrowthMapDraft
    parent_email: ParentEmailDraft


# envelope -> model that reads its answers
CONTRACT_MODELS = {
    "DreamAnalysis": DreamAnalysis,
    "StoryStep": StoryStart,
    "MissionDesign": MissionDesign,
    "MissionConclusion": MissionConclusion,
    "RealWorldPlan": RealWorldPlanDraft,
}

M = TypeVar("M", bound=_Contract)


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    path = "$" + "".join(f"[{part}]" if isinstance(part, int) else f".{part}" for part in first["loc"])
    more = error.error_count() - 1
    return f"{path}: {first['msg']}" + (f" (+{more} more)" if more else "")


def validate_contract(payload, model: type[M], operation: str) -> M:
    """
    Read a decoded backend answer through its model.
    Raises SchemaViolation naming the first failing path.
    """
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise SchemaViolation(_describe(e), operation=operation) from e
