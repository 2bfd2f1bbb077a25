# phases/error_screen.py
from core.events import StartOver


class ErrorScreen:
    def __init__(self, ctx):
        self.ctx = ctx
        self.machine = ctx.machine

    def render(self) -> str:
        message = self.machine.session.last_error or "Something unexpected happened."
        return f"Oops! Something went wrong.\n{message}\n\nPress Enter to start over."

    def handle(self, input_text: str) -> str | None:
        self.ctx.mission_play = None
        self.machine.dispatch(StartOver())
        return None
