# phases/simulation_conclusion.py
from core.events import RequestPlan
from core.models import IconKey

ICON_LABELS = {
    IconKey.ADVENTURE: "[map]",
    IconKey.PROBLEM_SOLVING: "[brain]",
    IconKey.FOCUS: "[eye]",
    IconKey.CREATIVITY: "[lightbulb]",
    IconKey.TEAMWORK: "[team]",
    IconKey.CURIOSITY: "[question]",
    IconKey.DEFAULT: "[sparkles]",
}

PLAN_COMMANDS = {"plan", "next", "yes"}


class SimulationConclusion:
    def __init__(self, ctx):
        self.ctx = ctx
        self.machine = ctx.machine
        self.conclusion = ctx.machine.session.conclusion

    def render(self) -> str:
        c = self.conclusion
        lines = [c.narrative_text, "", c.feedback_title]
        for point in c.coaching_points:
            lines.append(f"{ICON_LABELS.get(point.icon, ICON_LABELS[IconKey.DEFAULT])} {point.text}")
        if c.unlocked_skills:
            lines.append("")
            lines.append("Skills unlocked: " + ", ".join(c.unlocked_skills))
        lines.append("")
        lines.append("Type 'plan' to turn this into a real-world plan, or 'map' to explore another career.")
        return "\n".join(lines)

    def images(self) -> list[tuple[str, str]]:
        return [("", self.conclusion.image_url)] if self.conclusion.image_url else []

    def handle(self, input_text: str) -> str | None:
        if input_text.lower() in PLAN_COMMANDS:
            self.machine.dispatch(RequestPlan())
            return None
        return "Type 'plan' or 'map'."
