# phases/real_world_planner.py


def _suggestion_lines(heading: str, suggestions) -> list[str]:
    lines = [heading]
    for s in suggestions:
        platform = f" ({s.platform})" if s.platform else ""
        lines.append(f"- {s.title}{platform}: {s.description}")
        lines.append(f"  {s.url}")
    return lines


class RealWorldPlanner:
    def __init__(self, ctx):
        self.ctx = ctx
        self.machine = ctx.machine
        self.plan = ctx.machine.session.plan

    def render(self) -> str:
        plan = self.plan
        growth = plan.growth_map
        lines = [plan.title, ""]
        lines.append(f"Growth map: {growth.central_node.title}")
        for node in growth.trait_nodes:
            lines.append(f"  +-- {node.title}")
        lines.append("")
        lines += _suggestion_lines("Videos to watch:", plan.video_suggestions)
        lines.append("")
        lines += _suggestion_lines("Courses to try:", plan.course_suggestions)
        lines.append("")
        lines += _suggestion_lines("Things to do nearby:", plan.activity_suggestions)
        lines.append("")
        lines.append(f"A note for your parents: {plan.parent_message.subject}")
        lines.append(plan.parent_message.body)
        lines.append("")
        lines.append("Type 'map' to explore another career, or 'restart' to start over.")
        return "\n".join(lines)

    def images(self) -> list[tuple[str, str]]:
        return [(n.title, n.image_url) for n in self.plan.growth_map.nodes if n.image_url]

    def handle(self, input_text: str) -> str | None:
        return "Type 'map' or 'restart'."
