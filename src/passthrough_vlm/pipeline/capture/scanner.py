"""
Reply extraction for chat-completion response bodies.

The endpoint's body can't be fully trusted (escaping, nesting, a null
content field), so extraction never guesses: a value is only returned from a
well-formed string literal, otherwise the caller gets NullContent or NotFound.
"""
from __future__ import annotations
import re
import string
from typing import List, Optional

from pydantic import BaseModel, ValidationError

from .types import ExtractionResult, Text, NullContent, NotFound

_SIMPLE_ESCAPES = {'"': '"', '\\': '\\', 'n': '\n', 'r': '\r', 't': '\t'}
_HEX_DIGITS = set(string.hexdigits)


def _marker_pattern(key: str) -> re.Pattern:
    return re.compile(r'"%s"\s*:\s*"' % re.escape(key))

def _null_pattern(key: str) -> re.Pattern:
    return re.compile(r'"%s"\s*:\s*null\b' % re.escape(key))


def extract_string_value(text: str, key: str = "content") -> ExtractionResult:
    """Find the first `"key":"...` literal in text and return its unescaped value."""
    if not text:
        return NotFound()

    match = _marker_pattern(key).search(text)
    if match is None:
        if _null_pattern(key).search(text):
            return NullContent()
        return NotFound()

    start = match.end()
    end = _find_string_end(text, start)
    if end < 0:
        #unterminated literal
        return NotFound()
    return Text(unescape_json_string(text[start:end]))


def _find_string_end(text: str, start: int) -> int:
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if escaped:
            escaped = False
        elif ch == '\\':
            escaped = True
        elif ch == '"':
            return i
    return -1


def _has_surrogate(value: str) -> bool:
    return any("\ud800" <= c <= "\udfff" for c in value)


def _read_hex4(value: str, start: int) -> Optional[int]:
    digits = value[start:start + 4]
    if len(digits) != 4 or not all(c in _HEX_DIGITS for c in digits):
        return None
    return int(digits, 16)


def unescape_json_string(value: str) -> str:
    """Single left-to-right unescape pass over the body of a JSON string literal."""
    out: List[str] = []
    i, n = 0, len(value)
    while i < n:
        ch = value[i]
        if ch != '\\' or i + 1 >= n:
            out.append(ch)
            i += 1
            continue

        nxt = value[i + 1]
        if nxt in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[nxt])
            i += 2
        elif nxt == 'u':
            code = _read_hex4(value, i + 2)
            if code is None:
                # keep "\u" and let the original characters through untouched
                out.append('\\u')
                i += 2
                continue
            i += 6
            if 0xD800 <= code <= 0xDBFF and value.startswith('\\u', i):
                low = _read_hex4(value, i + 2)
                if low is not None and 0xDC00 <= low <= 0xDFFF:
                    code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                    i += 6
            if 0xD800 <= code <= 0xDFFF:
                # unpaired surrogate, not encodable: keep the escape text
                out.append(value[i - 6:i])
                continue
            out.append(chr(code))
        else:
            out.append(ch + nxt)
            i += 2
    return "".join(out)


# Structured view of the chat-completions response, first choice only
class _ReplyMessage(BaseModel):
    role: Optional[str] = None
    content: Optional[str] = None

class _ReplyChoice(BaseModel):
    message: _ReplyMessage

class ChatCompletion(BaseModel):
    choices: List[_ReplyChoice]


def extract_reply(body: str) -> ExtractionResult:
    """
    Read choices[0].message.content from a response body.

    Well-formed bodies go through pydantic; anything that does not validate
    (truncated JSON, unexpected nesting, array content) falls back to the
    string scanner so the NullContent / NotFound distinction survives both paths.
    """
    try:
        completion = ChatCompletion.model_validate_json(body)
    except ValidationError:
        return extract_string_value(body, "content")

    if not completion.choices:
        return extract_string_value(body, "content")

    message = completion.choices[0].message
    if "content" not in message.model_fields_set:
        return NotFound()
    if message.content is None:
        return NullContent()
    if _has_surrogate(message.content):
        return extract_string_value(body, "content")
    return Text(message.content)
