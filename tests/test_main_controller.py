import io

import pytest

from core.app_context import AppContext
from core.main_controller import MainController
from core.session import Stage
from core.session_machine import SessionMachine
from ui.message_console_stdio import MessageConsole_stdio
from conftest import analysis_payload, conclusion_payload, mission_payload, story_payload


class _RecordingUI:
    def __init__(self):
        self.printed = []
        self.images = []
        self.themes = []

    def safe_print(self, sender, message):
        self.printed.append(message)

    def show_image(self, caption, url):
        self.images.append(caption)

    def apply_theme(self, theme):
        self.themes.append(theme)


@pytest.fixture
def ui():
    return _RecordingUI()


@pytest.fixture
def controller(engine, service, ui):
    machine = SessionMachine(service)
    ctx = AppContext(engine=engine, ui=ui, service=service, machine=machine)
    return MainController(ctx)


def test_opening_asks_for_age(controller):
    assert "How old are you? (6-17)" in controller.opening()


def test_non_numeric_age_gets_a_hint(controller):
    output = controller.step("eight")
    assert output.startswith("Please type your age as a number.")
    assert controller.ctx.machine.session.stage is Stage.AGE_INPUT


def test_out_of_range_age_shows_error_above_prompt(controller):
    output = controller.step("4")
    assert output.startswith("! Please enter an age between 6 and 17.")


def test_dream_to_results_shows_loader_careers_and_pictures(controller, engine, ui):
    engine.queue(analysis_payload())

    controller.step("8")
    output = controller.step("I want to go to space")

    assert "Analyzing your brilliant dream..." in ui.printed
    assert "1. Astronaut - A Astronaut explores." in output
    assert "2. Pilot" in output
    assert ui.images == ["Astronaut", "Pilot"]
    assert ui.themes == ["theme-younger"]


def test_fullwidth_digits_are_normalized(controller):
    controller.step("１２")
    assert controller.ctx.machine.session.age == 12


def test_mission_is_played_through_the_console(controller, engine):
    engine.queue(analysis_payload(), story_payload(), mission_payload(), conclusion_payload())
    controller.step("8")
    controller.step("space")
    controller.step("1")
    output = controller.step("1")
    assert "Round 1 / 2: Find all the wrenches." in output

    play = controller.ctx.mission_play
    positions = [
        str(pos) for pos, obj in enumerate(play.current_round.grid_objects, start=1)
        if obj.id in play.current_round.correct_object_ids
    ]
    controller.step(" ".join(positions))
    assert controller.step("ok").startswith("Correct!")

    assert "Round 2 / 2" in controller.step("")
    controller.step("ok")
    output = controller.step("")

    s = controller.ctx.machine.session
    assert s.stage is Stage.CONCLUDING
    assert s.conclusion.unlocked_skills == ("Focus",)
    assert "Mission Accomplished!" in output
    assert "[eye] You spotted every wrench." in output
    assert "[sparkles] Keep asking questions." in output
    assert controller.ctx.mission_play is None


def test_map_command_returns_to_results(controller, engine):
    engine.queue(analysis_payload(), story_payload())
    controller.step("8")
    controller.step("space")
    controller.step("2")

    output = controller.step("map")

    assert controller.ctx.machine.session.stage is Stage.RESULTS
    assert "Pick a future to explore:" in output


def test_restart_command_goes_back_to_age(controller, engine):
    engine.queue(analysis_payload())
    controller.step("8")
    controller.step("space")

    output = controller.step("Start Over")

    assert "How old are you?" in output
    assert controller.ctx.machine.session.age is None


def test_error_screen_restarts_on_any_input(controller, engine):
    engine.queue(RuntimeError("network down"))
    controller.step("8")
    output = controller.step("space")
    assert "Oops! Something went wrong." in output
    assert "Failed to get analysis from Becom.AI." in output

    assert "How old are you?" in controller.step("")


def test_stdio_console_reads_until_quit():
    stream_in = io.StringIO("hello\nquit\n")
    stream_out = io.StringIO()
    console = MessageConsole_stdio(stream_in, stream_out)
    received = []

    def on_input(text):
        received.append(text)
        console.safe_print("System", f"echo {text}")
        console.wait_for_input(on_input)

    console.wait_for_input(on_input)
    console.run()

    assert received == ["hello"]
    assert "echo hello" in stream_out.getvalue()
