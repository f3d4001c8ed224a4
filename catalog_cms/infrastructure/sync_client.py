"""Medusa sync client.

Thin HTTP client for the Medusa ``/admin/strapi-sync`` endpoints.
Every failure (missing secret, timeout, transport error, non-2xx) is
normalized into a ``SyncResponse``; nothing is raised to the caller.
"""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from catalog_cms.infrastructure.config import settings

logger = structlog.get_logger()

MISSING_SECRET_ERROR = "Missing MEDUSA_STRAPI_SYNC_SECRET configuration"
TIMEOUT_ERROR = "Medusa sync timed out"


@dataclass
class SyncResponse:
    """Outcome of one sync request."""

    ok: bool
    status: int
    body: Any = None
    error: str | None = None
    details: Any = None


class MedusaSyncClient:
    """HTTP client for pushing catalog state to Medusa.

    Configuration is logged once per client instance, on the first
    call.
    """

    def __init__(
        self,
        base_url: str | None = None,
        secret: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the sync client.

        Args:
            base_url: Medusa backend URL (defaults to settings).
            secret: Shared sync secret (defaults to settings).
            timeout: Request timeout in seconds (defaults to settings).
        """
        self.base_url = (base_url if base_url is not None else settings.sync_base_url).rstrip("/")
        self.secret = secret if secret is not None else settings.sync_secret
        self.timeout = timeout if timeout is not None else settings.sync_timeout_seconds
        self._config_logged = False
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _log_config_once(self) -> None:
        if self._config_logged:
            return
        self._config_logged = True

        if not self.secret:
            if not settings.is_production:
                logger.warning("Missing sync secret configuration; skipping Medusa sync calls")
            return

        logger.info(
            "Configured Medusa sync target",
            base_url=self.base_url,
            secret_length=len(self.secret),
        )

    async def post_resource(self, resource: str, payload: dict[str, Any]) -> SyncResponse:
        """POST a payload to a Medusa sync endpoint.

        Args:
            resource: Endpoint name, e.g. ``collections``.
            payload: JSON body; the secret is added to it.

        Returns:
            SyncResponse describing the outcome.
        """
        self._log_config_once()

        if not self.secret:
            return SyncResponse(ok=False, status=0, error=MISSING_SECRET_ERROR)

        path = f"/admin/strapi-sync/{resource}"
        body = {**payload, "__sync_secret": self.secret}
        headers = {
            "content-type": "application/json",
            "x-sync-secret": self.secret,
            "authorization": f"Bearer {self.secret}",
        }

        try:
            client = await self._get_client()
            response = await client.post(path, json=body, headers=headers)
        except httpx.TimeoutException as e:
            logger.error("Medusa sync request timed out", resource=resource, error=str(e))
            return SyncResponse(ok=False, status=0, error=TIMEOUT_ERROR)
        except httpx.RequestError as e:
            logger.error("Medusa sync request failed", resource=resource, error=str(e))
            return SyncResponse(ok=False, status=0, error=str(e) or type(e).__name__)
        except Exception as e:
            logger.exception("Unexpected Medusa sync error", resource=resource)
            return SyncResponse(ok=False, status=0, error=str(e) or type(e).__name__)

        data = self._parse_json(response)

        if not 200 <= response.status_code < 300:
            logger.warning(
                "Medusa sync request rejected",
                resource=resource,
                status_code=response.status_code,
            )
            error = data.get("error") if isinstance(data, dict) else None
            return SyncResponse(
                ok=False,
                status=response.status_code,
                error=error or f"Request failed with status {response.status_code}",
                details=data,
            )

        return SyncResponse(ok=True, status=response.status_code, body=data)

    @staticmethod
    def _parse_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    async def sync_collections(self, items: list[dict[str, Any]]) -> SyncResponse:
        """Push collection payloads."""
        return await self.post_resource("collections", {"items": items})

    async def sync_categories(self, items: list[dict[str, Any]]) -> SyncResponse:
        """Push category payloads."""
        return await self.post_resource("categories", {"items": items})


# Global client instance
_sync_client: MedusaSyncClient | None = None


def get_sync_client() -> MedusaSyncClient:
    """Get the sync client singleton."""
    global _sync_client
    if _sync_client is None:
        _sync_client = MedusaSyncClient()
    return _sync_client


async def reset_sync_client() -> None:
    """Close and drop the sync client singleton."""
    global _sync_client
    if _sync_client is not None:
        await _sync_client.close()
    _sync_client = None
