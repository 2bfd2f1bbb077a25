# core/session.py
from dataclasses import dataclass, replace
from enum import Enum

from core.models import AnalysisResult, CareerPath, Conclusion, Mission, RealWorldPlan, StoryChoice, StoryStep

MIN_AGE = 6
MAX_AGE = 17


class Stage(str, Enum):
    AGE_INPUT = "AGE_INPUT"
    DREAM_INPUT = "DREAM_INPUT"
    ANALYZING = "ANALYZING"
    RESULTS = "RESULTS"
    SIMULATING = "SIMULATING"
    IN_STORY = "IN_STORY"
    MISSION_LOADING = "MISSION_LOADING"
    IN_MISSION = "IN_MISSION"
    CONCLUDING = "CONCLUDING"
    PLANNER_LOADING = "PLANNER_LOADING"
    PLAN_DISPLAY = "PLAN_DISPLAY"
    ERROR = "ERROR"


# a generation call is in flight while the session sits in one of these
LOADING_STAGES = frozenset({
    Stage.ANALYZING,
    Stage.SIMULATING,
    Stage.MISSION_LOADING,
    Stage.PLANNER_LOADING,
})


@dataclass(frozen=True)
class Session:
    age: int | None = None
    analysis: AnalysisResult | None = None
    selected_career: CareerPath | None = None
    story_step: StoryStep | None = None
    user_choice: StoryChoice | None = None
    mission: Mission | None = None
    conclusion: Conclusion | None = None
    plan: RealWorldPlan | None = None
    stage: Stage = Stage.AGE_INPUT
    last_error: str | None = None

    @property
    def is_loading(self) -> bool:
        return self.stage in LOADING_STAGES


def initial_session() -> Session:
    return Session()


def advance(session: Session, stage: Stage, **changes) -> Session:
    """Move to stage, clearing any previous error."""
    return replace(session, stage=stage, last_error=None, **changes)


def reject(session: Session, message: str) -> Session:
    """Stay on the same stage and show message (recoverable input problems)."""
    return replace(session, last_error=message)


def fail(session: Session, message: str) -> Session:
    return replace(session, stage=Stage.ERROR, last_error=message)


def back_to_growth_map(session: Session) -> Session:
    return replace(
        session,
        selected_career=None,
        story_step=None,
        user_choice=None,
        mission=None,
        conclusion=None,
        plan=None,
        stage=Stage.RESULTS,
        last_error=None,
    )


def merge_unlocked_skills(session: Session, skills) -> Session:
    if not skills or session.analysis is None:
        return session
    return replace(session, analysis=session.analysis.with_traits(skills))
