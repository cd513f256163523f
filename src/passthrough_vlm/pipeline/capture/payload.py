from __future__ import annotations
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

IMAGE_DATA_URI_PREFIX = "data:image/png;base64,"

# order matters: backslash first so later substitutions aren't escaped twice
_ESCAPES: Tuple[Tuple[str, str], ...] = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
)


def escape_json_string(value: str) -> str:
    """Escape text for embedding inside a hand-built JSON string literal."""
    if not value:
        return value
    for raw, escaped in _ESCAPES:
        value = value.replace(raw, escaped)
    if any(ord(c) < 0x20 for c in value):
        value = "".join(f"\\u{ord(c):04x}" if ord(c) < 0x20 else c for c in value)
    return value


@dataclass(frozen=True)
class ContentBlock:
    kind: Literal["text", "image"]
    value: str #prompt text, or base64 png data for images

    def to_wire(self) -> str:
        if self.kind == "text":
            return '{"type":"text","text":"%s"}' % escape_json_string(self.value)
        url = IMAGE_DATA_URI_PREFIX + self.value
        return '{"type":"image_url","image_url":{"url":"%s"}}' % escape_json_string(url)


@dataclass(frozen=True)
class ChatPayload:
    model: str
    content: Tuple[ContentBlock, ...]

    @classmethod
    def create(cls, model: str, prompt: str, image_base64: Optional[str] = None) -> "ChatPayload":
        blocks = [ContentBlock("text", prompt)]
        if image_base64:
            blocks.append(ContentBlock("image", image_base64))
        return cls(model=model, content=tuple(blocks))

    @property
    def has_image(self) -> bool:
        return any(block.kind == "image" for block in self.content)

    def to_wire(self) -> str:
        if self.has_image:
            content = "[%s]" % ",".join(block.to_wire() for block in self.content)
        else:
            #text-only requests send the prompt as a plain string
            text = "".join(block.value for block in self.content)
            content = '"%s"' % escape_json_string(text)
        return (
            '{"model":"%s","messages":[{"role":"user","content":%s}]}'
            % (escape_json_string(self.model), content)
        )


def build_payload(model_id: str, prompt: str, image_base64: Optional[str] = None) -> str:
    return ChatPayload.create(model_id, prompt, image_base64).to_wire()
