"""Supabase-backed storage of push notification tokens."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import httpx

from newsreader.core.logging import get_logger
from newsreader.core.settings import get_settings
from newsreader.utils.error_logger import log_error, log_http_error

logger = get_logger(__name__)

PUSH_TOKENS_TABLE = "push_tokens"
PUSH_PLATFORM = "expo"


class PushTokenStore:
    """Registers and deactivates push tokens in the `push_tokens` table.

    Talks to Supabase's PostgREST endpoint with the anonymous key. Failures
    are logged and reported as False so callers never have to handle them.
    """

    def __init__(
        self,
        supabase_url: str,
        anon_key: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.supabase_url = supabase_url.strip().rstrip("/")
        self.anon_key = anon_key.strip()
        self._client = http_client
        self._timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.supabase_url) and bool(self.anon_key)

    @property
    def table_url(self) -> str:
        return f"{self.supabase_url}/rest/v1/{PUSH_TOKENS_TABLE}"

    def _headers(self, prefer: str) -> dict[str, str]:
        return {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.anon_key}",
            "Content-Type": "application/json",
            "Prefer": prefer,
        }

    async def register(self, token: str) -> bool:
        """Upsert a token so the backend can target this device."""
        row = {
            "token": token,
            "platform": PUSH_PLATFORM,
            "updated_at": datetime.now(UTC).isoformat(),
        }
        return await self._send(
            "POST",
            params={"on_conflict": "token"},
            json=row,
            prefer="resolution=merge-duplicates,return=minimal",
            operation="register_push_token",
        )

    async def unregister(self, token: str) -> bool:
        """Mark a token inactive; the row is kept."""
        return await self._send(
            "PATCH",
            params={"token": f"eq.{token}"},
            json={"active": False},
            prefer="return=minimal",
            operation="unregister_push_token",
        )

    async def _send(
        self,
        method: str,
        *,
        params: dict[str, str],
        json: dict[str, Any],
        prefer: str,
        operation: str,
    ) -> bool:
        if not self.is_configured():
            logger.warning("Supabase not configured, skipping %s", operation)
            return False

        try:
            if self._client is not None:
                response = await self._client.request(
                    method, self.table_url, params=params, json=json, headers=self._headers(prefer)
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.request(
                        method, self.table_url, params=params, json=json, headers=self._headers(prefer)
                    )
        except httpx.HTTPError as e:
            log_error("push_tokens", e, operation=operation)
            return False

        if response.status_code >= 400:
            log_http_error("push_tokens", self.table_url, response=response, operation=operation)
            return False
        return True


def get_push_token_store() -> PushTokenStore:
    settings = get_settings()
    return PushTokenStore(settings.supabase_url, settings.supabase_anon_key)
