"""Identity Graph HTTP Client - httpx adapter for the protocol's people/interaction/tag APIs.

Invariants:
    - Transport failures and non-2xx answers map to ConnectionFailureError(endpoint, status)
    - httpx timeouts map to OperationTimeoutError
    - 409 on context-tag creation maps to TagConflictError
    - No retries here: callers decide (identity resolution degrades instead of retrying)

Design Decisions:
    - One shared httpx.AsyncClient per process (connection pooling), owned by the lifespan
    - Endpoint paths (never full URLs or tokens) travel on errors for diagnostics
"""

import logging
from datetime import datetime, timezone

import httpx

from event_maker.core.errors import (
    ConnectionFailureError,
    OperationTimeoutError,
    TagConflictError,
)

logger = logging.getLogger(__name__)

_PEOPLE = "/v1/protocol/people"
_INTERACTIONS = "/v1/protocol/interactions"
_CONTEXT_TAGS = "/v1/protocol/context-tags"


def build_http_client(
    base_url: str, api_token: str | None, timeout_seconds: float = 10.0,
) -> httpx.AsyncClient:
    """Create the shared client for the identity graph."""
    headers = {"Content-Type": "application/json"}
    if api_token:
        headers["Authorization"] = f"Bearer {api_token}"
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        headers=headers,
        timeout=timeout_seconds,
    )


class HttpIdentityGraph:
    """IdentityGraph implementation over the protocol's REST API."""

    def __init__(self, client: httpx.AsyncClient, owner_id: str):
        self.client = client
        self.owner_id = owner_id

    async def search(self, email: str, owner_id: str) -> list[dict]:
        body = await self._request(
            "GET", _PEOPLE,
            params={"owner_id": owner_id, "email": email, "limit": 1},
        )
        return list((body or {}).get("people", []))

    async def create(self, fields: dict) -> dict:
        payload = {"owner_id": self.owner_id, **fields}
        return await self._request("POST", _PEOPLE, json=payload)

    async def assign_tags(self, person_id: str, tags: list[str]) -> None:
        await self._request(
            "PATCH", f"{_PEOPLE}/{person_id}",
            params={"owner_id": self.owner_id},
            json={"tags": tags},
        )

    async def seed_relationship(
        self, from_person_id: str, to_person_id: str, summary: str,
    ) -> None:
        await self._request("POST", _INTERACTIONS, json={
            "owner_id": self.owner_id,
            "actor_person_id": from_person_id,
            "partner_person_id": to_person_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "summary": summary,
            "context_tags": ["event_interaction", "welcome"],
        })

    async def create_context_tag(self, label: str) -> dict:
        try:
            return await self._request("POST", _CONTEXT_TAGS, json={
                "owner_id": self.owner_id, "label": label,
            })
        except ConnectionFailureError as e:
            if e.status_code == httpx.codes.CONFLICT:
                raise TagConflictError(label) from e
            raise

    async def _request(self, method: str, path: str, **kwargs) -> dict | None:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            timeout = self.client.timeout.read or 0
            raise OperationTimeoutError(int(timeout * 1000)) from e
        except httpx.HTTPError as e:
            raise ConnectionFailureError(
                f"Identity graph unreachable: {type(e).__name__}", endpoint=path,
            ) from e

        if response.is_error:
            raise ConnectionFailureError(
                f"Identity graph error {response.status_code}: {_detail(response)}",
                endpoint=path,
                status_code=response.status_code,
            )
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        return response.json()


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("message") or response.reason_phrase)
    return response.reason_phrase
