# core/creative_input.py
import re
from dataclasses import dataclass
from pathlib import Path

from ai.errors import InvalidInput

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".webp"}
# @path or @"path with spaces", only at the start of a word
DRAWING_TOKEN = re.compile(r'(?<!\S)@(?:"(?P<quoted>[^"]+)"|(?P<bare>\S+))')


@dataclass(frozen=True)
class CreativeInput:
    """A captured dream: free text and/or the bytes of a drawing."""
    text: str = ""
    drawing_image: bytes | None = None

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    @property
    def has_drawing(self) -> bool:
        return bool(self.drawing_image)

    def validate(self) -> "CreativeInput":
        if not self.has_text and not self.has_drawing:
            raise InvalidInput(
                "dream input has neither text nor drawing",
                operation="capture",
                user_message="Tell me about your dream or draw it first!",
            )
        return self


def load_drawing(path: str | Path) -> bytes:
    p = Path(path).expanduser()
    if p.suffix.lower() not in IMAGE_SUFFIXES:
        raise InvalidInput(
            f"unsupported drawing file: {p}",
            operation="capture",
            user_message=f"Drawings must be {', '.join(sorted(IMAGE_SUFFIXES))} files.",
        )
    if not p.is_file():
        raise InvalidInput(
            f"drawing not found: {p}",
            operation="capture",
            user_message=f"I couldn't find the drawing '{path}'.",
        )
    return p.read_bytes()


def parse_console_dream(line: str) -> CreativeInput:
    """
    Console capture. The first '@path' naming an image file is the drawing,
    the rest of the line is the dream text, kept as typed.
      I want to fly @drawings/rocket.png
      @"my drawings/rocket.png" and a "flying" car
    """
    drawing = None
    text = line.strip()
    for match in DRAWING_TOKEN.finditer(line):
        path = match.group("quoted") or match.group("bare")
        if Path(path).suffix.lower() not in IMAGE_SUFFIXES:
            continue
        drawing = load_drawing(path)
        text = f"{line[:match.start()].rstrip()} {line[match.end():].lstrip()}".strip()
        break
    return CreativeInput(text, drawing)
