"""
gameplay_arena.errors - Exception hierarchy
===========================================

Defines the errors raised by the game engines, the match orchestrator
and the agent client. Agent call errors store full context so they can
be written to the log as a structured block before the match is ended.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional
import json


class GameplayError(Exception):
    """Base exception for all gameplay_arena errors."""
    pass


# ══════════════════════════════════════════════════════════════
# RULE VIOLATIONS
# ══════════════════════════════════════════════════════════════

class GameErrorKind(Enum):
    """Kind of rule violation reported by a game engine."""
    ARGS = "args"        # Malformed game construction
    PLAYER = "player"    # Wrong player for this turn
    ACTION = "action"    # Illegal move
    STATE = "state"      # Game state does not allow the operation


class GameError(GameplayError):
    """Raised when a game rule is violated. Always recoverable by the caller."""

    def __init__(self, kind: GameErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"GameError({self.kind.value}, {self.message!r})"


# ══════════════════════════════════════════════════════════════
# LOOKUP AND AUTHORIZATION
# ══════════════════════════════════════════════════════════════

class NotFound(GameplayError):
    """Raised when a user, agent or match does not exist."""

    def __init__(self, entity: str, identifier: str):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} '{identifier}' not found")


class NotAllowed(GameplayError):
    """Raised when a user may not perform an operation on an entity."""

    def __init__(self, username: str, entity: str, identifier: str, reason: str):
        self.username = username
        self.entity = entity
        self.identifier = identifier
        self.reason = reason
        super().__init__(
            f"User '{username}' not allowed on {entity} '{identifier}': {reason}"
        )


class TurnConflictError(GameplayError):
    """Raised by the store when a turn number was already written."""

    def __init__(self, match_id: str, turn_number: int):
        self.match_id = match_id
        self.turn_number = turn_number
        super().__init__(f"Turn {turn_number} of match '{match_id}' already taken")


# ══════════════════════════════════════════════════════════════
# AGENT CALL FAILURES
# ══════════════════════════════════════════════════════════════

class AgentCallError(GameplayError):
    """Base class for a misbehaving agent.

    ``reason`` is the text recorded in the match's errored result.
    """

    error_type = "AGENT_ERROR"

    def __init__(
        self,
        agent: str,
        match_id: str,
        request_payload: Dict[str, Any],
        reason: str,
    ):
        self.agent = agent
        self.match_id = match_id
        self.request_payload = request_payload
        self.reason = reason
        super().__init__(reason)

    def _output_payload(self) -> Optional[Dict[str, Any]]:
        return None

    def _validation_errors(self) -> Optional[List[str]]:
        return None

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type=self.error_type,
            agent=self.agent,
            match_id=self.match_id,
            reason=self.reason,
            input_payload=self.request_payload,
            output_payload=self._output_payload(),
            validation_errors=self._validation_errors(),
        )


class AgentUnavailableError(AgentCallError):
    """Raised when the seat's agent is inactive or no longer registered."""

    error_type = "AGENT_UNAVAILABLE"

    def __init__(self, agent: str, match_id: str, request_payload: Dict[str, Any], detail: str):
        super().__init__(agent, match_id, request_payload, f"Agent '{agent}' {detail}")


class AgentTransportError(AgentCallError):
    """Raised when the agent could not be reached or timed out."""

    error_type = "AGENT_TRANSPORT"

    def __init__(self, agent: str, match_id: str, request_payload: Dict[str, Any], detail: str):
        self.detail = detail
        super().__init__(agent, match_id, request_payload, f"Error calling agent '{agent}'")

    def _validation_errors(self) -> Optional[List[str]]:
        return [self.detail]


class AgentHTTPStatusError(AgentCallError):
    """Raised when the agent answers with a non-2xx status."""

    error_type = "AGENT_HTTP_STATUS"

    def __init__(
        self,
        agent: str,
        match_id: str,
        request_payload: Dict[str, Any],
        status_code: int,
        reason_phrase: str,
    ):
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        super().__init__(
            agent, match_id, request_payload,
            f"Agent '{agent}' returned {status_code} {reason_phrase}".rstrip(),
        )


class InvalidJSONResponseError(AgentCallError):
    """Raised when the agent's response body is not JSON."""

    error_type = "INVALID_JSON_RESPONSE"

    def __init__(self, agent: str, match_id: str, request_payload: Dict[str, Any], raw_body: str):
        self.raw_body = raw_body
        super().__init__(agent, match_id, request_payload, f"Agent '{agent}' returned invalid JSON")

    def _output_payload(self) -> Optional[Dict[str, Any]]:
        return {"raw_body": self.raw_body[:500]}


class SchemaValidationError(AgentCallError):
    """Raised when the agent's JSON does not have the ``{action, agent_data?}`` shape."""

    error_type = "SCHEMA_VALIDATION_FAILURE"

    def __init__(
        self,
        agent: str,
        match_id: str,
        request_payload: Dict[str, Any],
        response_body: Any,
        validation_errors: List[str],
    ):
        self.response_body = response_body
        self.validation_errors = validation_errors
        super().__init__(
            agent, match_id, request_payload,
            f"Agent '{agent}' returned invalid action {json.dumps(response_body, default=str)}",
        )

    def _output_payload(self) -> Optional[Dict[str, Any]]:
        return {"body": self.response_body}

    def _validation_errors(self) -> Optional[List[str]]:
        return self.validation_errors


class IllegalActionError(AgentCallError):
    """Raised when the agent's action is well formed but breaks the game rules."""

    error_type = "ILLEGAL_ACTION"

    def __init__(
        self,
        agent: str,
        match_id: str,
        request_payload: Dict[str, Any],
        action: Dict[str, Any],
        game_error: GameError,
    ):
        self.action = action
        self.game_error = game_error
        super().__init__(
            agent, match_id, request_payload,
            f"Agent '{agent}' returned illegal action {json.dumps(action)}: {game_error.message}",
        )

    def _output_payload(self) -> Optional[Dict[str, Any]]:
        return {"action": self.action}

    def _validation_errors(self) -> Optional[List[str]]:
        return [f"{self.game_error.kind.value}: {self.game_error.message}"]


def _format_error_block(
    error_type: str,
    agent: str,
    match_id: str,
    reason: str,
    input_payload: Dict[str, Any],
    output_payload: Optional[Dict[str, Any]],
    validation_errors: Optional[List[str]],
) -> str:
    """Format a structured error block for the log."""
    from datetime import datetime, timezone

    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    lines = [
        "",
        "=" * 64,
        " AGENT ERROR - MATCH ENDED",
        "=" * 64,
        f" Timestamp:    {timestamp}",
        f" Error Type:   {error_type}",
        f" Agent:        {agent}",
        f" Match:        {match_id}",
        f" Reason:       {reason}",
    ]

    lines.append("")
    lines.append(" ── REQUEST PAYLOAD " + "─" * 44)
    lines.append(_indent_json(input_payload))

    if output_payload is not None:
        lines.append("")
        lines.append(" ── AGENT RESPONSE " + "─" * 45)
        lines.append(_indent_json(output_payload))

    if validation_errors:
        lines.append("")
        lines.append(" ── VALIDATION ERRORS " + "─" * 42)
        for error in validation_errors:
            lines.append(f" • {error}")

    lines.append("")
    lines.append("=" * 64)
    lines.append("")

    return "\n".join(lines)


def _indent_json(data: Dict[str, Any], indent: int = 2) -> str:
    """Format JSON with indentation for error logs."""
    try:
        formatted = json.dumps(data, indent=indent, default=str)
        return "\n".join(" " + line for line in formatted.split("\n"))
    except (TypeError, ValueError):
        return f" {repr(data)}"
