"""
Recovery of a single JSON value from raw model output.

The model is asked for exactly one JSON value but may wrap it in prose or a
markdown fence, use typographic quotes, leave trailing commas, or stop in the
middle of the document when it hits the token cap. ``repair_and_parse_json``
applies a fixed sequence of fixups, re-parsing after every fixup that changed
the text, and reports which fixups were needed.
"""

import json
import re
from collections.abc import Callable

from ai_agent.logging_config import logger
from ai_agent.schemas.pipeline import RepairResult

EXCERPT_LENGTH = 200
MAX_TRUNCATION_CUTS = 20

SMART_DOUBLE_QUOTES = "“”„‟″"

_FENCE_START = re.compile(r"^```[\w+-]*[ \t]*\n?")
_FENCE_END = re.compile(r"\n?```\s*$")


def _scan(text: str):
    """Yield (index, char, in_string) skipping over escape sequences."""
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
                yield i, ch, False
                continue
            yield i, ch, True
            continue
        if ch == '"':
            in_string = True
            yield i, ch, True
            continue
        yield i, ch, False


def strip_code_fence(text: str) -> str:
    text = text.strip()
    text = _FENCE_START.sub("", text, count=1)
    text = _FENCE_END.sub("", text, count=1)
    return text.strip()


def _region_end(text: str, start: int) -> int | None:
    depth = 0
    for i, ch, in_string in _scan(text[start:]):
        if in_string:
            continue
        if ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
            if depth == 0:
                return start + i
    return None


def extract_json_region(text: str) -> str:
    """Longest balanced {...} or [...] region; an unclosed one runs to the end."""
    best: str | None = None
    i = 0
    while i < len(text):
        if text[i] not in "{[":
            i += 1
            continue
        end = _region_end(text, i)
        region = text[i:] if end is None else text[i:end + 1]
        if best is None or len(region) > len(best):
            best = region
        if end is None:
            break
        i = end + 1
    return text if best is None else best


def normalize_quotes(text: str) -> str:
    """Typographic double quotes used as string delimiters become ASCII quotes.

    Typographic quotes inside an ASCII-delimited string are content and stay.
    """
    out = []
    closer = None  # None, '"' or "smart"
    escaped = False
    for ch in text:
        if closer is None:
            if ch == '"':
                closer = '"'
                out.append(ch)
            elif ch in SMART_DOUBLE_QUOTES:
                closer = "smart"
                out.append('"')
            else:
                out.append(ch)
            continue
        if escaped:
            escaped = False
            out.append(ch)
        elif ch == "\\":
            escaped = True
            out.append(ch)
        elif closer == '"' and ch == '"':
            closer = None
            out.append(ch)
        elif closer == "smart" and (ch == '"' or ch in SMART_DOUBLE_QUOTES):
            closer = None
            out.append('"')
        else:
            out.append(ch)
    return "".join(out)


def remove_trailing_commas(text: str) -> str:
    out = []
    for i, ch, in_string in _scan(text):
        if ch == "," and not in_string:
            j = i + 1
            while j < len(text) and text[j].isspace():
                j += 1
            if j < len(text) and text[j] in "}]":
                continue
        out.append(ch)
    return "".join(out)


def _open_state(text: str) -> tuple[list[str], bool, bool]:
    """Closers still owed at the end of ``text``, whether a string is open, and
    whether it ends on a dangling backslash."""
    closers: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            closers.append("}")
        elif ch == "[":
            closers.append("]")
        elif ch in "}]" and closers:
            closers.pop()
    return closers, in_string, escaped


def _close(text: str) -> str:
    closers, in_string, escaped = _open_state(text)
    result = text
    if in_string:
        if escaped:
            result = result[:-1]
        result += '"'
    result = result.rstrip()
    while result.endswith(","):
        result = result[:-1].rstrip()
    if result.endswith(":"):
        result += " null"
    return result + "".join(reversed(closers))


def _parses(text: str) -> bool:
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True


def close_truncated_json(text: str) -> str:
    """Close an open string and any open objects/arrays of truncated output.

    If simply closing does not produce valid JSON (e.g. the text stopped right
    after an object key), cut back to earlier element boundaries and close
    again. Text that is not truncated is returned unchanged.
    """
    closers, in_string, _ = _open_state(text)
    if not closers and not in_string:
        return text

    closed = _close(text)
    if _parses(closed):
        return closed

    cuts = [i for i, ch, in_str in _scan(text) if ch == "," and not in_str]
    for cut in reversed(cuts[-MAX_TRUNCATION_CUTS:]):
        candidate = _close(text[:cut])
        if _parses(candidate):
            return candidate
    return closed


REPAIR_STEPS: list[tuple[str, Callable[[str], str]]] = [
    ("stripped_code_fence", strip_code_fence),
    ("extracted_json_region", extract_json_region),
    ("normalized_quotes", normalize_quotes),
    ("removed_trailing_commas", remove_trailing_commas),
    ("closed_truncated_json", close_truncated_json),
]


def repair_and_parse_json(text: str | None) -> RepairResult:
    if not text or not text.strip():
        return RepairResult(success=False, error="Empty response")

    candidate = text.strip()
    try:
        return RepairResult(success=True, data=json.loads(candidate))
    except json.JSONDecodeError as e:
        last_error = e

    repairs: list[str] = []
    for name, fix in REPAIR_STEPS:
        fixed = fix(candidate).strip()
        if fixed == candidate:
            continue
        repairs.append(name)
        candidate = fixed
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError as e:
            last_error = e
            continue
        logger.debug("JSON parsed after repairs: %s", ", ".join(repairs))
        return RepairResult(success=True, data=data, repaired=True, repairs=repairs)

    return RepairResult(
        success=False,
        repaired=bool(repairs),
        repairs=repairs,
        error=(
            f"{last_error.msg} at line {last_error.lineno} column {last_error.colno}; "
            f"text starts with: {text[:EXCERPT_LENGTH]!r}"
        ),
    )
