"""Input validation helpers."""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError


def parse_positive_id(raw: str) -> Optional[int]:
    """Parse a path id; ``None`` unless it is a plain positive integer."""
    raw = (raw or "").strip()
    # str.isdigit alone also accepts superscripts and non-ASCII digits.
    if not (raw.isascii() and raw.isdigit()):
        return None
    value = int(raw)
    return value if value >= 1 else None


def jsonable_errors(exc: ValidationError) -> list[dict]:
    """Pydantic errors with the non-serializable bits dropped."""
    errors = exc.errors(include_url=False, include_input=False)
    for err in errors:
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
    return errors
