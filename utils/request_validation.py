"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

import json
from typing import Iterable

from flask import Request
from werkzeug.exceptions import BadRequest

from errors import InvalidInput


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise InvalidInput("Request content type must be application/json.")

    try:
        data = req.get_json(silent=False)
    except BadRequest as exc:
        raise InvalidInput("Request body is not valid JSON.") from exc
    if data is None:
        raise InvalidInput("Request JSON body is required.")

    if not isinstance(data, dict):
        raise InvalidInput("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise InvalidInput("Request JSON body must not be empty.")

    if required_keys:
        missing = [key for key in required_keys if not data.get(key)]
        if missing:
            raise InvalidInput(
                "Missing required fields: {}.".format(", ".join(sorted(missing)))
            )

    return data


def parse_bool(value: object) -> bool | None:
    """Interpret common boolean spellings, returning None when unrecognized."""

    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    return None


def parse_positive_int(value: object, name: str, default: int) -> int:
    """Parse a query-string integer that must be at least 1."""

    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"{name} must be a positive integer.") from exc
    if parsed < 1:
        raise InvalidInput(f"{name} must be a positive integer.")
    return parsed


def parse_tags(raw: str | None) -> list[str]:
    """Decode a JSON array of tag strings sent as a form field."""

    if raw is None or raw.strip() == "":
        return []
    try:
        tags = json.loads(raw)
    except ValueError as exc:
        raise InvalidInput("tags must be a JSON array of strings.") from exc
    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise InvalidInput("tags must be a JSON array of strings.")
    return [tag.strip() for tag in tags if tag.strip()]
