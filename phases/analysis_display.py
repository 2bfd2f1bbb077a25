# phases/analysis_display.py
from core.events import SelectCareer


class AnalysisDisplay:
    def __init__(self, ctx):
        self.ctx = ctx
        self.machine = ctx.machine
        self.analysis = ctx.machine.session.analysis

    def render(self) -> str:
        lines = ["Here's what I see in your dream:", self.analysis.feedback, ""]
        lines.append("Your strengths: " + ", ".join(self.analysis.traits))
        lines.append("")
        lines.append("Pick a future to explore:")
        for i, path in enumerate(self.analysis.career_paths, start=1):
            picture = "" if path.image_url else " (no picture)"
            lines.append(f"{i}. {path.name}{picture} - {path.description}")
        lines.append("")
        lines.append("Type a number to start an adventure, or 'restart' to start over.")
        return "\n".join(lines)

    def images(self) -> list[tuple[str, str]]:
        return [(p.name, p.image_url) for p in self.analysis.career_paths if p.image_url]

    def handle(self, input_text: str) -> str | None:
        try:
            index = int(input_text) - 1
        except ValueError:
            return "Type the number of a career."
        if not 0 <= index < len(self.analysis.career_paths):
            return "Pick one of the listed numbers."
        self.machine.dispatch(SelectCareer(index))
        return None
