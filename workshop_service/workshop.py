"""
workshop.py
===========

The single mutable resource served on `/workshop`.

GET re-rolls the sweater score and returns the record; POST replaces the
record after validating the score.  Error bodies are plain text and are part
of the public contract:

    400  Invalid JSON data
    400  SweaterScore must be between 1 and 10
    405  Method not allowed
"""

from __future__ import annotations

import json
import logging
import random
from threading import Lock
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import request_response
from starlette.types import ASGIApp

from .config import MAX_SWEATER_SCORE, MIN_SWEATER_SCORE

logger = logging.getLogger(__name__)

INVALID_JSON = "Invalid JSON data"
SCORE_OUT_OF_RANGE = f"SweaterScore must be between {MIN_SWEATER_SCORE} and {MAX_SWEATER_SCORE}"
METHOD_NOT_ALLOWED = "Method not allowed"


class Workshop(BaseModel):
    # missing fields decode to zero values, wrong JSON types are rejected
    model_config = ConfigDict(strict=True)

    name: str = ""
    date: str = ""
    presentator: str = ""
    sweaterScore: int = 0
    participants: Optional[List[str]] = None


def default_workshop(sweater_score: int) -> Workshop:
    return Workshop(
        name="ALM Workshop",
        date="1/12/2025",
        presentator="AE Consultants",
        sweaterScore=sweater_score,
        participants=["John Doe", "Mary Little Lamb", "Chuck Norris", "Ting Lee"],
    )


class WorkshopStore:
    """Holds the current record; safe to share between requests."""

    def __init__(self, initial: Workshop, rng: Optional[random.Random] = None):
        self._workshop = initial
        self._rng = rng or random.Random()
        self._lock = Lock()

    def current(self) -> Workshop:
        with self._lock:
            return self._workshop

    def reroll(self) -> Workshop:
        with self._lock:
            score = self._rng.randint(MIN_SWEATER_SCORE, MAX_SWEATER_SCORE)
            self._workshop = self._workshop.model_copy(update={"sweaterScore": score})
            return self._workshop

    def replace(self, workshop: Workshop) -> Workshop:
        with self._lock:
            self._workshop = workshop
            return self._workshop


_FIELDS_BY_FOLDED_KEY = {name.casefold(): name for name in Workshop.model_fields}

# HTML-sensitive characters are escaped inside JSON strings, never bare
_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def decode_workshop(body: bytes) -> Workshop:
    """
    Decode the first JSON value in *body* into a Workshop.

    Only the leading value is read; trailing bytes are ignored.  `null`
    decodes to an all-zero record, keys match field names case-insensitively,
    unknown keys are dropped and `null` members leave the field at its zero
    value.  Raises ValueError (or ValidationError) for anything else.
    """
    text = body.decode("utf-8").lstrip(" \t\r\n")
    value, _ = json.JSONDecoder(parse_constant=_reject_constant).raw_decode(text)
    if value is None:
        value = {}
    if not isinstance(value, dict):
        raise ValueError("workshop payload must be a JSON object")

    fields: Dict[str, Any] = {}
    for key, member in value.items():
        name = _FIELDS_BY_FOLDED_KEY.get(key.casefold())
        if name is not None and member is not None:
            fields[name] = member
    return Workshop.model_validate(fields)


def encode_workshop(workshop: Workshop) -> str:
    text = workshop.model_dump_json()
    for char, escape in _HTML_ESCAPES.items():
        text = text.replace(char, escape)
    return text + "\n"


def _json_response(workshop: Workshop) -> Response:
    return Response(encode_workshop(workshop), media_type="application/json")


async def _post(store: WorkshopStore, request: Request) -> Response:
    body = await request.body()
    try:
        workshop = decode_workshop(body)
    except (ValueError, ValidationError):
        logger.warning("Rejected workshop update: malformed payload")
        return PlainTextResponse(INVALID_JSON, status_code=400)

    if not MIN_SWEATER_SCORE <= workshop.sweaterScore <= MAX_SWEATER_SCORE:
        logger.warning("Rejected workshop update: sweaterScore=%s", workshop.sweaterScore)
        return PlainTextResponse(SCORE_OUT_OF_RANGE, status_code=400)

    store.replace(workshop)
    logger.info("Workshop updated: name=%r sweaterScore=%d", workshop.name, workshop.sweaterScore)
    return _json_response(workshop)


def workshop_app(store: WorkshopStore) -> ASGIApp:
    """ASGI handler for `/workshop`; dispatches on method itself."""

    async def handle(request: Request) -> Response:
        if request.method == "GET":
            return _json_response(store.reroll())
        if request.method == "POST":
            return await _post(store, request)
        return PlainTextResponse(METHOD_NOT_ALLOWED, status_code=405)

    return request_response(handle)
