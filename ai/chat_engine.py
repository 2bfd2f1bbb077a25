# ai/chat_engine.py
import json
import os
import re
import uuid
from datetime import datetime
from pathlib import Path

from openai import OpenAI

from ai.errors import SchemaViolation, TerminalProviderError, classify_provider_error
from infra.logging import get_logger
from infra.path_helper import get_data_path

log = get_logger("ChatEngine")

IMAGE_MODEL = "gpt-image-1"
IMAGE_SIZES = {
    "wide": "1536x1024",
    "square": "1024x1024",
}


def _safe_write(path: Path, data: str) -> None:
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(data)
    os.replace(tmp, path)


def _sanitize_filename(s: str) -> str:
    return re.sub(r'[<>:"/\\|?*]', '_', s)


def _redact_media(messages: list[dict]) -> list[dict]:
    """Inline drawings are large base64 blobs; keep only their size in the chatlog."""
    out = []
    for m in messages:
        content = m.get("content")
        if isinstance(content, list):
            parts = []
            for part in content:
                if part.get("type") == "input_image":
                    parts.append({"type": "input_image", "image_url": f"<{len(part.get('image_url', ''))} chars>"})
                else:
                    parts.append(part)
            m = {**m, "content": parts}
        out.append(m)
    return out


def _dump_chatlog(
    *,
    caller_name: str,
    model: str,
    temperature: float | None,
    messages: list[dict],
    raw_text: str | None,
    parsed_object: dict | None,
    usage: dict | None,
) -> Path:
    now = datetime.now()
    stem = f"{now.strftime('%Y%m%d_%H%M%S_%f')[:-3]}_{_sanitize_filename(caller_name or 'Unknown')}_{uuid.uuid4().hex[:6]}"
    record = {
        "timestamp": now.isoformat(timespec="milliseconds"),
        "caller": caller_name,
        "model": model,
        "temperature": temperature,
        "request": {"messages": _redact_media(messages)},
        "response": {"raw_text": raw_text, "parsed_object": parsed_object},
        "usage": usage,
    }
    path = get_data_path(f"temp/debug/chatlog/{stem}.json")
    _safe_write(path, json.dumps(record, ensure_ascii=False, indent=2))
    return path


def _usage_to_jsonable(usage) -> dict | None:
    if usage is None:
        return None
    dump = getattr(usage, "model_dump", None)
    if callable(dump):
        return dump()
    if isinstance(usage, dict):
        return usage
    return {"repr": str(usage)}


def resolve_model_name(model_input: str | None) -> str:
    """
    Resolve a low / medium / high label into an OpenAI model name.
    Edit this table to switch models everywhere.
    """
    level_map = {
        "low": "gpt-4.1-nano",
        "medium": "gpt-4.1-mini",
        "high": "gpt-4.1",
    }
    key = (model_input or "medium").lower()
    if key not in level_map:
        raise ValueError("model_level must be one of 'low' | 'medium' | 'high'")
    return level_map[key]


def load_api_key(api_key_path: str | Path | None) -> str | None:
    if api_key_path:
        path = Path(api_key_path)
        if path.exists():
            key = path.read_text(encoding="utf-8").strip()
            if key:
                return key
    return os.getenv("OPENAI_API_KEY")


class ChatEngine:
    """
    OpenAI boundary for the app.
    - chat(): Responses API, structured output when a schema is given
    - generate_image(): one illustration as a PNG data URL
    Errors are raised as Transient/TerminalProviderError; nothing is retried here.
    """

    def __init__(self, api_key_path: str | Path | None = None, debug: bool = False, client=None):
        if client is None:
            api_key = load_api_key(api_key_path)
            if not api_key:
                raise ValueError("No OpenAI API key: put one in resources/api_key.txt or set OPENAI_API_KEY.")
            client = OpenAI(api_key=api_key)
        self.client = client
        self.debug = debug
        log.info(f"ChatEngine initialized (debug={self.debug})")

    def chat(
        self,
        messages: list[dict],
        caller_name: str = "",
        max_tokens: int = 4096,
        model_level: str | None = None,
        schema: dict | None = None,
        temperature: float | None = None,
    ) -> str | dict:
        if not messages:
            raise ValueError("ChatEngine.chat: messages must not be empty")

        model = resolve_model_name(model_level)
        log.info(f"[{caller_name}] Responses API request (model={model})")

        req_args = {
            "model": model,
            "input": messages,
            "max_output_tokens": max_tokens,
        }
        if temperature is not None:
            req_args["temperature"] = temperature
        if schema:
            req_args["text"] = {"format": schema}

        try:
            resp = self.client.responses.create(**req_args)
        except Exception as e:
            raise classify_provider_error(e, caller_name) from e

        text = getattr(resp, "output_text", None)
        usage = _usage_to_jsonable(getattr(resp, "usage", None))
        if usage:
            log.info(f"[{caller_name}] token usage: {json.dumps(usage, ensure_ascii=False)}")
        log.info(f"[{caller_name}] Responses API response received")

        parsed = None
        if schema:
            if not text or not text.strip():
                self._maybe_dump(caller_name, model, temperature, messages, text, None, usage)
                raise SchemaViolation("empty response from the model", operation=caller_name)
            try:
                parsed = json.loads(text.strip())
            except json.JSONDecodeError as e:
                log.warning(f"[{caller_name}] JSON parse failed: {text[:200]}")
                self._maybe_dump(caller_name, model, temperature, messages, text, None, usage)
                raise SchemaViolation(f"response is not valid JSON ({e})", operation=caller_name) from e

        self._maybe_dump(caller_name, model, temperature, messages, text, parsed, usage)
        return parsed if schema else (text or "")

    def generate_image(self, prompt: str, aspect_ratio: str = "wide", caller_name: str = "ImageGen") -> str:
        size = IMAGE_SIZES.get(aspect_ratio)
        if size is None:
            raise ValueError(f"aspect_ratio must be one of {list(IMAGE_SIZES)}")

        try:
            resp = self.client.images.generate(
                model=IMAGE_MODEL,
                prompt=prompt,
                n=1,
                size=size,
            )
        except Exception as e:
            raise classify_provider_error(e, caller_name) from e

        data = getattr(resp, "data", None) or []
        b64 = getattr(data[0], "b64_json", None) if data else None
        if not b64:
            raise TerminalProviderError("image response contained no image data", operation=caller_name)
        return f"data:image/png;base64,{b64}"

    def _maybe_dump(self, caller_name, model, temperature, messages, raw_text, parsed, usage):
        if not self.debug:
            return
        try:
            path = _dump_chatlog(
                caller_name=caller_name,
                model=model,
                temperature=temperature,
                messages=messages,
                raw_text=raw_text,
                parsed_object=parsed,
                usage=usage,
            )
            log.info(f"[{caller_name}] chatlog saved: {path}")
        except OSError as e:
            log.warning(f"[{caller_name}] failed to save chatlog: {e}")
