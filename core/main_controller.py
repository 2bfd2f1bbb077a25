# core/main_controller.py
import unicodedata

from ai.prompts import theme_for_age
from core.app_context import AppContext
from core.events import BackToGrowthMap, StartOver
from core.session import Session, Stage
from core.session_machine import ACCEPTED_STAGES
from infra.logging import get_logger
from phases.age_input import AgeInput
from phases.analysis_display import AnalysisDisplay
from phases.career_simulation import CareerSimulation
from phases.dream_input import DreamInput
from phases.error_screen import ErrorScreen
from phases.loading import Loading
from phases.mini_mission import MiniMission
from phases.real_world_planner import RealWorldPlanner
from phases.simulation_conclusion import SimulationConclusion

log = get_logger("MainController")

RESTART_COMMANDS = {"restart", "start over"}
BACK_COMMANDS = {"map", "back", "growth map"}


class MainController:
    def __init__(self, context: AppContext):
        self.ctx = context
        self._theme = None
        self.ctx.machine.subscribe(self._on_session_change)

    def opening(self) -> str:
        return self.render()

    def step(self, player_input: str) -> str:
        text = unicodedata.normalize("NFKC", player_input or "").strip()
        command = text.lower()
        session = self.ctx.machine.session

        if command in RESTART_COMMANDS and not session.is_loading:
            self.ctx.mission_play = None
            self.ctx.machine.dispatch(StartOver())
            return self.render()

        if command in BACK_COMMANDS and session.stage in ACCEPTED_STAGES[BackToGrowthMap]:
            self.ctx.mission_play = None
            self.ctx.machine.dispatch(BackToGrowthMap())
            return self.render()

        hint = self._phase_for(session).handle(text)
        if hint:
            return f"{hint}\n\n{self.render()}"
        return self.render()

    def render(self) -> str:
        session = self.ctx.machine.session
        phase = self._phase_for(session)
        output = phase.render()
        if session.last_error and session.stage != Stage.ERROR:
            output = f"! {session.last_error}\n\n{output}"
        self._show_images(phase)
        return output

    def _phase_for(self, session: Session):
        match session.stage:
            case Stage.AGE_INPUT:
                return AgeInput(self.ctx)
            case Stage.DREAM_INPUT:
                return DreamInput(self.ctx)
            case Stage.RESULTS:
                return AnalysisDisplay(self.ctx)
            case Stage.IN_STORY:
                return CareerSimulation(self.ctx)
            case Stage.IN_MISSION:
                return MiniMission(self.ctx)
            case Stage.CONCLUDING:
                return SimulationConclusion(self.ctx)
            case Stage.PLAN_DISPLAY:
                return RealWorldPlanner(self.ctx)
            case Stage.ERROR:
                return ErrorScreen(self.ctx)
            case _:
                return Loading(self.ctx)

    def _show_images(self, phase):
        show_image = getattr(self.ctx.ui, "show_image", None)
        if show_image is None:
            return
        for caption, url in getattr(phase, "images", lambda: [])():
            show_image(caption, url)

    def _on_session_change(self, session: Session):
        ui = self.ctx.ui
        if ui is None:
            return

        theme = theme_for_age(session.age)
        if theme != self._theme:
            self._theme = theme
            apply_theme = getattr(ui, "apply_theme", None)
            if apply_theme:
                apply_theme(theme)

        if session.is_loading:
            ui.safe_print("System", Loading.message_for(session.stage))
