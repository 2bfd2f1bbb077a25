# core/models.py
from dataclasses import dataclass
from enum import Enum


def unique_in_order(items) -> tuple[str, ...]:
    """Set semantics with first-seen order kept for display."""
    return tuple(dict.fromkeys(items))


class GameMode(str, Enum):
    SELECT_ALL_MATCHING = "SELECT_ALL_MATCHING"
    SELECT_ODD_ONE_OUT = "SELECT_ODD_ONE_OUT"


class IconKey(str, Enum):
    ADVENTURE = "Adventure"
    PROBLEM_SOLVING = "ProblemSolving"
    FOCUS = "Focus"
    CREATIVITY = "Creativity"
    TEAMWORK = "Teamwork"
    CURIOSITY = "Curiosity"
    DEFAULT = "Default"

    @classmethod
    def from_keyword(cls, keyword: str | None) -> "IconKey":
        key = "".join((keyword or "").split()).lower()
        for icon in cls:
            if icon.value.lower() == key:
                return icon
        return cls.DEFAULT


@dataclass(frozen=True)
class CareerPath:
    name: str
    description: str
    image_url: str = ""


@dataclass(frozen=True)
class AnalysisResult:
    feedback: str
    traits: tuple[str, ...]
    career_paths: tuple[CareerPath, ...]

    def with_traits(self, extra) -> "AnalysisResult":
        return AnalysisResult(
            feedback=self.feedback,
            traits=unique_in_order([*self.traits, *extra]),
            career_paths=self.career_paths,
        )


@dataclass(frozen=True)
class StoryChoice:
    text: str


@dataclass(frozen=True)
class StoryStep:
    text: str
    choices: tuple[StoryChoice, ...]
    image_url: str = ""


@dataclass(frozen=True)
class GridObject:
    id: str
    type: str
    image_url: str = ""


@dataclass(frozen=True)
class Round:
    index: int
    instructions: str
    skill_label: str
    mode: GameMode
    grid_objects: tuple[GridObject, ...]
    correct_object_ids: frozenset[str]


@dataclass(frozen=True)
class Mission:
    title: str
    rounds: tuple[Round, ...]


@dataclass(frozen=True)
class RoundResult:
    skill_label: str
    success: bool


@dataclass(frozen=True)
class CoachingPoint:
    text: str
    icon: IconKey = IconKey.DEFAULT


@dataclass(frozen=True)
class Conclusion:
    narrative_text: str
    feedback_title: str
    coaching_points: tuple[CoachingPoint, ...]
    unlocked_skills: tuple[str, ...]
    image_url: str = ""


@dataclass(frozen=True)
class PlanSuggestion:
    title: str
    description: str
    url: str
    platform: str | None = None


@dataclass(frozen=True)
class GrowthMapNode:
    title: str
    image_prompt: str
    image_url: str = ""


@dataclass(frozen=True)
class GrowthMap:
    central_node: GrowthMapNode
    trait_nodes: tuple[GrowthMapNode, ...]

    @property
    def nodes(self) -> tuple[GrowthMapNode, ...]:
        return (self.central_node, *self.trait_nodes)


@dataclass(frozen=True)
class ParentMessage:
    subject: str
    body: str


@dataclass(frozen=True)
class RealWorldPlan:
    title: str
    video_suggestions: tuple[PlanSuggestion, ...]
    course_suggestions: tuple[PlanSuggestion, ...]
    activity_suggestions: tuple[PlanSuggestion, ...]
    growth_map: GrowthMap
    parent_message: ParentMessage
