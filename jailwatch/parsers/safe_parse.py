# jailwatch/parsers/safe_parse.py
# The one boundary every parse goes through: it always returns a result dict.

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, Optional

from jailwatch.errors import EmptyInputError, InputError, JailwatchError, handle_error

logger = logging.getLogger(__name__)

Parser = Callable[[str], Dict[str, Any]]


def _failed(defaults: Optional[dict], error: JailwatchError) -> dict:
    result = copy.deepcopy(defaults) if defaults else {}
    result["errors"] = [error.message]
    result["partial"] = True
    return result


def _coerce_text(raw: Any) -> str:
    logger.warning(f"[PARSER] Output is not a string (type: {type(raw).__name__}), converting...")
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8", errors="replace")
    return str(raw)


def safe_parse(parser_fn: Parser, raw_text: Any, defaults: Optional[dict] = None) -> dict:
    """
    Run `parser_fn` over `raw_text` without ever raising.

    The returned dict is `defaults` overlaid with the parser's own fields and
    always carries `errors` (list of str) and `partial` (True iff errors is
    non-empty). None and blank input short-circuit with one descriptive error;
    None never reaches the parser.
    """
    if raw_text is None:
        error = InputError()
        logger.error(f"[PARSER] ERROR: {error.message}")
        return _failed(defaults, error)

    if not isinstance(raw_text, str):
        raw_text = _coerce_text(raw_text)

    if not raw_text.strip():
        error = EmptyInputError()
        logger.error(f"[PARSER] ERROR: {error.message}")
        return _failed(defaults, error)

    # functools.partial objects carry the wrapped parser under .func
    name = getattr(getattr(parser_fn, "func", parser_fn), "__name__", repr(parser_fn))
    try:
        result = parser_fn(raw_text)
        if not isinstance(result, dict):
            raise TypeError(f"{name} returned {type(result).__name__}, expected dict")
    except Exception as e:
        error = handle_error(e)
        logger.exception(f"[PARSER] {name} failed: {error.message}")
        return _failed(defaults, error)

    errors = result.get("errors")
    if not isinstance(errors, list):
        errors = [] if errors is None else [str(errors)]

    merged = copy.deepcopy(defaults) if defaults else {}
    merged.update(result)
    merged["errors"] = [str(e) for e in errors]
    merged["partial"] = bool(merged["errors"])
    return merged
