"""Anthropic Event Generator - GenerationCapability backed by AsyncAnthropic tool use.

Invariants:
    - Exactly one forced tool call (emit_event_config); its input is the config dict
    - SDK retries disabled (max_retries=0): retry policy lives in resilient_call
    - Rate limits (429), overload (529), 5xx and connection errors -> ConnectionFailureError
    - SDK timeout -> OperationTimeoutError; other API errors -> GenerationError
    - A response without the tool call -> GenerationError (retryable)

Design Decisions:
    - Forced tool_choice over free-text JSON: the SDK hands back parsed input, no
      regex recovery of model output needed
"""

import json
import logging

import anthropic
from anthropic import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    InternalServerError,
    RateLimitError,
)

from event_maker.core.errors import (
    ConnectionFailureError,
    GenerationError,
    OperationTimeoutError,
)

logger = logging.getLogger(__name__)

_OVERLOADED_STATUS = 529
_ENDPOINT = "messages"
TOOL_NAME = "emit_event_config"

_SYSTEM_PROMPT = """<role>
You are an event architect. You turn an organizer's short description into a complete,
relationship-first event configuration.
</role>

<rules>
1. Respect every explicit input (name, date, location, goals, audience, tone).
2. Invent plausible speakers, a schedule and sample attendees that fit the goals.
3. Session formats: keynote, activation, panel, workshop, convergence_circle.
4. Always answer by calling the emit_event_config tool. Never answer in prose.
</rules>"""

_PERSON = {
    "type": "object",
    "properties": {
        "person_id": {"type": "string"},
        "legal_name": {"type": "string"},
        "preferred_name": {"type": "string"},
        "emails": {"type": "array", "items": {"type": "string"}},
        "tags": {"type": "array", "items": {"type": "string"}},
        "interests": {"type": "array", "items": {"type": "string"}},
        "intents": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["person_id", "legal_name"],
}

EVENT_CONFIG_TOOL = {
    "name": TOOL_NAME,
    "description": "Emit the full event configuration.",
    "input_schema": {
        "type": "object",
        "properties": {
            "primary_goals": {"type": "array", "items": {"type": "string"}},
            "design_notes": {"type": "string"},
            "branding": {
                "type": "object",
                "properties": {
                    "primary_color": {"type": "string"},
                    "accent_color": {"type": "string"},
                    "tone_keywords": {"type": "array", "items": {"type": "string"}},
                },
            },
            "matchmaking_config": {
                "type": "object",
                "properties": {
                    "enabled": {"type": "boolean"},
                    "input_signals": {"type": "array", "items": {"type": "string"}},
                    "match_types": {"type": "array", "items": {"type": "string"}},
                    "meeting_durations": {"type": "array", "items": {"type": "integer"}},
                },
            },
            "content": {
                "type": "object",
                "properties": {
                    "event_name": {"type": "string"},
                    "tagline": {"type": "string"},
                    "speakers": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "name": {"type": "string"},
                                "role": {"type": "string"},
                                "company": {"type": "string"},
                                "bio": {"type": "string"},
                                "handle": {"type": "string"},
                            },
                            "required": ["name", "role"],
                        },
                    },
                    "schedule": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "id": {"type": "string"},
                                "title": {"type": "string"},
                                "start_time": {"type": "string"},
                                "end_time": {"type": "string"},
                                "format": {"type": "string"},
                                "track": {"type": "string"},
                                "speakers": {"type": "array", "items": {"type": "string"}},
                            },
                            "required": ["id", "title"],
                        },
                    },
                    "sample_attendees": {"type": "array", "items": _PERSON},
                },
                "required": ["speakers", "schedule", "sample_attendees"],
            },
        },
        "required": ["content"],
    },
}


class AnthropicEventGenerator:
    """Wraps AsyncAnthropic with error mapping onto the ErrorKind taxonomy."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 8192,
        timeout_seconds: int = 300,
        client: anthropic.AsyncAnthropic | None = None,
    ):
        self.client = client or anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
        )
        self.model = model
        self.max_tokens = max_tokens
        self.timeout_ms = timeout_seconds * 1000

    async def generate(self, inputs: dict) -> dict:
        """One generation attempt. Raises taxonomy errors only."""
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=_SYSTEM_PROMPT,
                tools=[EVENT_CONFIG_TOOL],
                tool_choice={"type": "tool", "name": TOOL_NAME},
                messages=[{
                    "role": "user",
                    "content": json.dumps(inputs, ensure_ascii=False),
                }],
            )
        except APITimeoutError as e:
            raise OperationTimeoutError(self.timeout_ms) from e
        except APIConnectionError as e:
            raise ConnectionFailureError(
                "Generation provider unreachable", endpoint=_ENDPOINT,
            ) from e
        except (RateLimitError, InternalServerError) as e:
            raise ConnectionFailureError(
                f"Generation provider unavailable ({e.status_code})",
                endpoint=_ENDPOINT, status_code=e.status_code,
            ) from e
        except APIStatusError as e:
            if e.status_code == _OVERLOADED_STATUS:
                raise ConnectionFailureError(
                    "Generation provider overloaded",
                    endpoint=_ENDPOINT, status_code=e.status_code,
                ) from e
            raise GenerationError(
                f"Generation rejected ({e.status_code})", cause=e,
            ) from e
        except APIError as e:
            raise GenerationError("Generation provider error", cause=e) from e

        self._log_success(response)
        return _extract_tool_input(response)

    def _log_success(self, response) -> None:
        usage = response.usage
        logger.info(
            "Generation call succeeded",
            extra={
                "operation": "generate_event_config",
                "input_tokens": usage.input_tokens,
                "output_tokens": usage.output_tokens,
            },
        )


def _extract_tool_input(response) -> dict:
    for block in response.content:
        if getattr(block, "type", None) == "tool_use" and block.name == TOOL_NAME:
            if isinstance(block.input, dict):
                return block.input
    raise GenerationError(
        f"Model response did not call {TOOL_NAME} "
        f"(stop_reason={getattr(response, 'stop_reason', None)})",
    )
