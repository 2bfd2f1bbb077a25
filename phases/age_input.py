# phases/age_input.py
from core.events import SubmitAge
from core.session import MAX_AGE, MIN_AGE

BANNER = [
    "==============================",
    "   Becom.AI",
    "   Dream it. Explore it. Become it.",
    "==============================",
]


class AgeInput:
    def __init__(self, ctx):
        self.ctx = ctx
        self.machine = ctx.machine

    def render(self) -> str:
        return "\n".join(BANNER + ["", f"How old are you? ({MIN_AGE}-{MAX_AGE})"])

    def handle(self, input_text: str) -> str | None:
        try:
            age = int(input_text)
        except ValueError:
            return "Please type your age as a number."
        self.machine.dispatch(SubmitAge(age))
        return None
