"""Thin async client for the Webex REST API.

Implements the MessagingClient port used by the dispatch core, plus the
webhook management calls used once at startup. Errors surface as
``httpx.HTTPError``; callers decide how to wrap them.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from webex_bot.constants import (
    API_TIMEOUT_SECONDS,
    DEFAULT_API_URL,
    WEBHOOK_EVENT_CREATED,
    WEBHOOK_RESOURCE_MESSAGES,
)

logger = logging.getLogger(__name__)


class WebexApiClient:
    """Bearer-authenticated Webex API calls over a shared httpx client."""

    def __init__(
        self,
        access_token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = API_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            access_token: Bot access token from the Webex developer portal.
            api_url: Base URL of the REST API.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Shut down the HTTP client."""
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        response = await self._client.request(method, path, **kwargs)
        response.raise_for_status()
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    # -- Messaging ---------------------------------------------------------

    async def get_message(self, message_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/messages/{message_id}")

    async def get_person(self, person_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/people/{person_id}")

    async def get_me(self) -> Dict[str, Any]:
        return await self._request("GET", "/people/me")

    async def create_message(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/messages", json=payload)

    # -- Webhooks ----------------------------------------------------------

    async def list_webhooks(self) -> List[Dict[str, Any]]:
        """All registered webhooks, following the ``Link: rel="next"`` pages."""
        items: List[Dict[str, Any]] = []
        url = "/webhooks"
        while url:
            response = await self._client.get(url)
            response.raise_for_status()
            items.extend(response.json().get("items", []))
            url = response.links.get("next", {}).get("url")
        return items

    async def create_webhook(
        self,
        name: str,
        target_url: str,
        resource: str = WEBHOOK_RESOURCE_MESSAGES,
        event: str = WEBHOOK_EVENT_CREATED,
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/webhooks",
            json={
                "name": name,
                "targetUrl": target_url,
                "resource": resource,
                "event": event,
            },
        )

    async def delete_webhook(self, webhook_id: str) -> None:
        await self._request("DELETE", f"/webhooks/{webhook_id}")

    async def register_webhook(self, name: str, target_url: str) -> Dict[str, Any]:
        """Replace any webhooks registered under ``name`` with a fresh one."""
        for webhook in await self.list_webhooks():
            if webhook.get("name") == name:
                logger.info(f"Removing stale webhook {webhook.get('id')} ({webhook.get('targetUrl')})")
                await self.delete_webhook(webhook["id"])

        webhook = await self.create_webhook(name, target_url)
        logger.info(f"Webhook registered: {target_url}")
        return webhook
