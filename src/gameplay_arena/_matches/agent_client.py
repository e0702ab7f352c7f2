# Area: Matches
"""
gameplay_arena._matches.agent_client - Remote agent calls
=========================================================

POSTs a turn request to an agent and validates what comes back:
1. Transport (connection errors, timeouts)
2. HTTP status
3. JSON body
4. Response shape ``{action, agent_data?}``

Each failure raises the matching ``AgentCallError``; the caller ends
the match with the error's reason. Nothing is retried.
"""

from __future__ import annotations
import logging
from typing import Type

import httpx
from pydantic import BaseModel, ValidationError

from ..errors import (
    AgentHTTPStatusError,
    AgentTransportError,
    InvalidJSONResponseError,
    SchemaValidationError,
)
from ..types import AgentRequest

logger = logging.getLogger("gameplay_arena.matches.agent_client")


def call_agent(
    client: httpx.Client,
    url: str,
    payload: AgentRequest,
    response_model: Type[BaseModel],
    agent: str,
    match_id: str,
) -> BaseModel:
    """
    Ask an agent for its action.

    Parameters
    ----------
    client : httpx.Client
        Client carrying the per-call timeout.
    url : str
        The agent's registered endpoint.
    payload : AgentRequest
        Request body.
    response_model : type
        Pydantic model the response body must satisfy.
    agent : str
        ``username/agentname``, used in error reasons.
    match_id : str
        Match being played, for logs.

    Returns
    -------
    BaseModel
        The validated response.

    Raises
    ------
    AgentTransportError, AgentHTTPStatusError, InvalidJSONResponseError,
    SchemaValidationError
        On any failure, in that order of checking.
    """
    logger.info(f"[AGENT] Calling {agent} for {match_id}")

    # ── Step 1: Send request ──────────────────────────────────
    try:
        response = client.post(url, json=payload)
    except httpx.HTTPError as e:
        raise AgentTransportError(agent, match_id, dict(payload), f"{type(e).__name__}: {e}") from e

    # ── Step 2: Check status ──────────────────────────────────
    if not response.is_success:
        raise AgentHTTPStatusError(
            agent, match_id, dict(payload), response.status_code, response.reason_phrase
        )

    # ── Step 3: Decode JSON ───────────────────────────────────
    try:
        body = response.json()
    except ValueError as e:
        raise InvalidJSONResponseError(agent, match_id, dict(payload), response.text) from e

    # ── Step 4: Validate shape ────────────────────────────────
    try:
        result = response_model.model_validate(body)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}"
            for err in e.errors()
        ]
        raise SchemaValidationError(agent, match_id, dict(payload), body, errors) from e

    logger.info(f"[AGENT] {agent} answered for {match_id}")
    return result
