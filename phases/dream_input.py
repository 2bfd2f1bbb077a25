# phases/dream_input.py
from ai.errors import InvalidInput
from core.creative_input import parse_console_dream
from core.events import SubmitDream


class DreamInput:
    def __init__(self, ctx):
        self.ctx = ctx
        self.machine = ctx.machine

    def render(self) -> str:
        return (
            "Tell me about your dream! What would you love to do or become?\n"
            "You can also attach a drawing: add @path/to/drawing.png to your message."
        )

    def handle(self, input_text: str) -> str | None:
        try:
            capture = parse_console_dream(input_text)
        except InvalidInput as e:
            return e.user_message
        self.machine.dispatch(SubmitDream(capture.text, capture.drawing_image))
        return None
