# phases/loading.py
from core.session import Stage

LOADER_MESSAGES = {
    Stage.ANALYZING: "Analyzing your brilliant dream...",
    Stage.SIMULATING: "Building your next adventure...",
    Stage.MISSION_LOADING: "Preparing your mission...",
    Stage.PLANNER_LOADING: "Building your real-world plan...",
}


class Loading:
    def __init__(self, ctx):
        self.ctx = ctx

    @staticmethod
    def message_for(stage: Stage) -> str:
        return LOADER_MESSAGES.get(stage, "Working on it...")

    def render(self) -> str:
        return self.message_for(self.ctx.machine.session.stage)

    def handle(self, input_text: str) -> str | None:
        return "Still working on it, hang tight!"
