"""
HTTP adapter for the remote chat service.

Encodes entities with the wire mapper, posts them to the chat API and
classifies failures for the coordinator:
- 2xx: success, response decoded with the wire mapper
- 408, 429, 5xx, connection errors, timeouts: transient
- any other status: permanent (validation rejection, conflict, auth)

Every request carries the entity key as ``X-Request-Id`` so the server
can deduplicate pushes repeated after an interrupted pass.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any

import aiohttp

from ..exceptions import PermanentRemoteError, TransientRemoteError, ValidationError
from ..mapping import ChannelRecord, MessageRecord, UserContext, to_domain, to_wire
from ..protocol import Channel, Message
from .remote import RemoteService, SyncOutcome

logger = logging.getLogger(__name__)

TRANSIENT_STATUS_CODES: tuple[int, ...] = (408, 429, 500, 502, 503, 504)


def is_transient_status(status: int) -> bool:
    """Statuses worth retrying on a later pass."""
    return status in TRANSIENT_STATUS_CODES or status >= 500


@dataclass
class HttpServiceConfig:
    """Configuration for the HTTP chat service."""

    base_url: str
    api_key: str | None = None
    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> HttpServiceConfig:
        """Create config from environment variables."""
        base_url = os.environ.get("CHAT_SYNC_REMOTE_URL")
        if not base_url:
            raise ValidationError("CHAT_SYNC_REMOTE_URL", "environment variable is not set")

        return cls(
            base_url=base_url,
            api_key=os.environ.get("CHAT_SYNC_API_KEY"),
            timeout=float(os.environ.get("CHAT_SYNC_REQUEST_TIMEOUT", "10")),
        )


class HttpChatService(RemoteService):
    """aiohttp-based ``RemoteService``.

    Example:
        >>> async with HttpChatService(config, UserContext(current_user=me)) as service:
        ...     outcome = await service.create_or_update(channel)
    """

    def __init__(
        self,
        config: HttpServiceConfig,
        user_context: UserContext | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        """
        Args:
            config: Endpoint and credentials
            user_context: Known users, for decoding responses
            session: Optional shared aiohttp session (not closed by this service)
        """
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.user_context = user_context or UserContext()
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> HttpChatService:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _headers(self, request_id: str) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "X-Request-Id": request_id}
        if self.config.api_key:
            headers["Authorization"] = self.config.api_key
        return headers

    def _build_request(self, entity: Any) -> tuple[str, dict[str, Any], str]:
        """Return (url, body, response field) for an entity."""
        record = to_wire(entity)
        if isinstance(entity, Channel):
            url = f"{self.base_url}/channels/{entity.type}/{entity.id}"
            return url, {"data": record.to_json()}, "channel"
        if isinstance(entity, Message):
            channel_type, _, channel_id = entity.cid.partition(":")
            if not channel_id:
                raise PermanentRemoteError(
                    f"Message {entity.id} has no valid cid: {entity.cid!r}", key=entity.key
                )
            url = f"{self.base_url}/channels/{channel_type}/{channel_id}/message"
            return url, {"message": record.to_json()}, "message"
        raise PermanentRemoteError(f"Cannot push {type(entity).__name__}")

    def _decode(self, entity: Any, payload: dict[str, Any] | None, field: str) -> Any:
        if not payload or not payload.get(field):
            return None
        data = payload[field]
        record = (
            ChannelRecord.from_json(data)
            if isinstance(entity, Channel)
            else MessageRecord.from_json(data)
        )
        decoded = to_domain(record, self.user_context)
        self._remember_users(decoded)
        return decoded

    def _remember_users(self, entity: Any) -> None:
        """Add users embedded in a response to the user context."""
        if isinstance(entity, Channel):
            users = [entity.created_by, *(m.user for m in entity.members)]
        else:
            reactions = [*entity.latest_reactions, *entity.own_reactions]
            users = [entity.user, *entity.mentioned_users, *(r.user for r in reactions)]
        for user in users:
            if user is not None and user.id:
                self.user_context.add(user)

    async def create_or_update(self, entity: Any) -> SyncOutcome:
        """POST the entity and classify the response."""
        try:
            url, body, field = self._build_request(entity)
        except PermanentRemoteError as e:
            return SyncOutcome.failure(e)

        try:
            session = self._get_session()
            async with session.post(url, json=body, headers=self._headers(entity.key)) as response:
                status = response.status
                try:
                    payload = await response.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError):
                    payload = None
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Remote unreachable for {entity.key}: {e}")
            return SyncOutcome.failure(
                TransientRemoteError(f"Request failed: {e}", key=entity.key, cause=e)
            )

        if 200 <= status < 300:
            return SyncOutcome.success(self._decode(entity, payload, field))

        message = _error_message(payload) or f"HTTP {status}"
        if is_transient_status(status):
            return SyncOutcome.failure(
                TransientRemoteError(message, key=entity.key, status_code=status)
            )
        return SyncOutcome.failure(PermanentRemoteError(message, key=entity.key, status_code=status))


def _error_message(payload: Any) -> str | None:
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str):
            return message
    return None
