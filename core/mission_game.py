# core/mission_game.py
from core.models import Mission, Round, RoundResult


def score_round(rnd: Round, selections) -> RoundResult:
    """A round is won only when the selection is exactly the set of correct objects."""
    return RoundResult(rnd.skill_label, frozenset(selections) == rnd.correct_object_ids)


class MissionPlay:
    """Round-by-round play of a Mission: toggle grid objects, submit, move on."""

    def __init__(self, mission: Mission):
        self.mission = mission
        self.round_index = 0
        self.selections: set[str] = set()
        self.results: list[RoundResult] = []
        self.awaiting_next = False

    @property
    def current_round(self) -> Round:
        return self.mission.rounds[self.round_index]

    @property
    def is_last_round(self) -> bool:
        return self.round_index == len(self.mission.rounds) - 1

    @property
    def finished(self) -> bool:
        return len(self.results) == len(self.mission.rounds)

    def toggle(self, position: int) -> str:
        """Toggle the object at a 1-based grid position; returns its id."""
        if self.awaiting_next:
            raise ValueError("round already submitted")
        grid = self.current_round.grid_objects
        if not 1 <= position <= len(grid):
            raise IndexError(f"position must be between 1 and {len(grid)}")
        object_id = grid[position - 1].id
        if object_id in self.selections:
            self.selections.remove(object_id)
        else:
            self.selections.add(object_id)
        return object_id

    def submit(self) -> RoundResult:
        if self.awaiting_next:
            raise ValueError("round already submitted")
        result = score_round(self.current_round, self.selections)
        self.results.append(result)
        self.awaiting_next = True
        return result

    def next_round(self) -> bool:
        """Advance after a submitted round. False once there are no rounds left."""
        if not self.awaiting_next:
            raise ValueError("submit the current round first")
        self.selections = set()
        self.awaiting_next = False
        if self.is_last_round:
            return False
        self.round_index += 1
        return True
