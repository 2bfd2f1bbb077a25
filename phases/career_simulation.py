# phases/career_simulation.py
from core.events import ChooseAction


class CareerSimulation:
    def __init__(self, ctx):
        self.ctx = ctx
        self.machine = ctx.machine
        self.session = ctx.machine.session

    def render(self) -> str:
        step = self.session.story_step
        lines = [f"A day as a {self.session.selected_career.name}", "", step.text, "", "What do you do?"]
        for i, choice in enumerate(step.choices, start=1):
            lines.append(f"{i}. {choice.text}")
        lines.append("")
        lines.append("Type 1 or 2. ('map' goes back to your growth map)")
        return "\n".join(lines)

    def images(self) -> list[tuple[str, str]]:
        step = self.session.story_step
        return [("", step.image_url)] if step.image_url else []

    def handle(self, input_text: str) -> str | None:
        choices = self.session.story_step.choices
        try:
            index = int(input_text) - 1
        except ValueError:
            return f"Type a number from 1 to {len(choices)}."
        if not 0 <= index < len(choices):
            return f"Type a number from 1 to {len(choices)}."
        self.machine.dispatch(ChooseAction(index))
        return None
