# core/events.py
from dataclasses import dataclass

from core.models import RoundResult


@dataclass(frozen=True)
class SubmitAge:
    age: int


@dataclass(frozen=True)
class SubmitDream:
    text: str
    drawing: bytes | None = None


@dataclass(frozen=True)
class SelectCareer:
    index: int  # 0-based position in analysis.career_paths


@dataclass(frozen=True)
class ChooseAction:
    index: int  # 0-based position in story_step.choices


@dataclass(frozen=True)
class CompleteMission:
    results: tuple[RoundResult, ...]


@dataclass(frozen=True)
class RequestPlan:
    pass


@dataclass(frozen=True)
class StartOver:
    pass


@dataclass(frozen=True)
class BackToGrowthMap:
    pass
