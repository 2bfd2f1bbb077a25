# phases/mini_mission.py
import re

from core.events import CompleteMission
from core.mission_game import MissionPlay
from core.models import GameMode

SUBMIT_COMMANDS = {"ok", "check", "done"}

MODE_HINTS = {
    GameMode.SELECT_ALL_MATCHING: "Find every matching object.",
    GameMode.SELECT_ODD_ONE_OUT: "Find the odd one out.",
}


class MiniMission:
    def __init__(self, ctx):
        self.ctx = ctx
        self.machine = ctx.machine
        mission = ctx.machine.session.mission
        if ctx.mission_play is None or ctx.mission_play.mission is not mission:
            ctx.mission_play = MissionPlay(mission)
        self.play: MissionPlay = ctx.mission_play

    def render(self) -> str:
        play = self.play
        rnd = play.current_round

        if play.awaiting_next:
            verdict = "Correct!" if play.results[-1].success else "Good Try!"
            follow = "Press Enter to finish the mission." if play.is_last_round else "Press Enter for the next round."
            return f"{verdict}\n{follow}"

        lines = [
            play.mission.title,
            f"Round {rnd.index} / {len(play.mission.rounds)}: {rnd.instructions}",
            f"Skill test: {rnd.skill_label} ({MODE_HINTS[rnd.mode]})",
            "",
        ]
        for pos, obj in enumerate(rnd.grid_objects, start=1):
            mark = "*" if obj.id in play.selections else " "
            lines.append(f"[{mark}] {pos:2d}. {obj.type}")
        lines.append("")
        lines.append("Type numbers to select or unselect objects, then 'ok' to check your answer.")
        return "\n".join(lines)

    def handle(self, input_text: str) -> str | None:
        play = self.play

        if play.awaiting_next:
            if not play.next_round():
                results = tuple(play.results)
                self.ctx.mission_play = None
                self.machine.dispatch(CompleteMission(results))
            return None

        if input_text.lower() in SUBMIT_COMMANDS:
            play.submit()
            return None

        positions = re.findall(r"\d+", input_text)
        if not positions:
            return "Type object numbers, or 'ok' to check your answer."
        for pos in positions:
            try:
                play.toggle(int(pos))
            except IndexError as e:
                return str(e).capitalize() + "."
        return None
