"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Response decoding for successful and failed transport results.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .errors import HttpError, ParseError
from .types import RawResponse, RequestOptions

NO_CONTENT_STATUSES = frozenset({204, 205})


async def parse_response(response: RawResponse, request: RequestOptions) -> Any:
    """
    Decode ``response`` according to ``request``.

    Raises:
        HttpError: For non-2xx responses, with a best-effort decoded body.
        ParseError: When a JSON body (or ``response_model``) fails to decode.
    """
    if not response.ok:
        body = await _safe_body(response)
        message = body if isinstance(body, str) and body else f"HTTP {response.status}"
        raise HttpError(message, response.status, body, response)

    if request.parser is not None:
        return await request.parser(response)

    if request.response_type == "raw":
        return response

    if response.status in NO_CONTENT_STATUSES:
        return None

    if request.response_type == "text":
        return await response.text()

    text = await response.text()
    if not text:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(str(exc)) from exc

    if request.response_model is None:
        return data
    try:
        return TypeAdapter(request.response_model).validate_python(data)
    except ValidationError as exc:
        raise ParseError(str(exc)) from exc


async def _safe_body(response: RawResponse) -> Any:
    try:
        text = await response.text()
    except Exception as exc:
        raise ParseError("Unable to read response body") from exc
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text
