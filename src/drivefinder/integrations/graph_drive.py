# Graph Drive Client: OneDrive search over Microsoft Graph using OAuth tokens.
# Created: 2026-10-19

from __future__ import annotations

import asyncio
import logging
import urllib.parse
from typing import Any

import httpx

from drivefinder.config import Settings, get_settings
from drivefinder.integrations.oauth import GRAPH_SERVICE, OAuthManager
from drivefinder.integrations.token_store import TokenStore
from drivefinder.search.models import DriveHandle, DriveItemResult

logger = logging.getLogger(__name__)

_SEARCH_FIELDS = "id,name,folder,specialFolder,image,file,webUrl,size"


def escape_query(query: str) -> str:
    """Quote a search term for an OData string literal inside a URL path."""
    return urllib.parse.quote(query.replace("'", "''"), safe="")


class GraphDriveClient:
    """HTTP client for OneDrive through Microsoft Graph v1.0.

    Uses OAuth bearer tokens from the token store. Every call opens its own
    ``httpx.AsyncClient`` and is attempted once.
    """

    def __init__(self, settings: Settings | None = None, oauth: OAuthManager | None = None):
        self.settings = settings or get_settings()
        self._oauth = oauth or OAuthManager(TokenStore(), tenant=self.settings.graph_tenant)

    async def _get_token(self) -> str:
        token = await self._oauth.get_valid_token(
            service=GRAPH_SERVICE,
            client_id=self.settings.graph_client_id or "",
            client_secret=self.settings.graph_client_secret or "",
        )
        if not token:
            raise RuntimeError("OneDrive not authenticated. Run `drivefinder login` first.")
        return token

    async def _get_json(
        self, url: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """GET a Graph resource. Returns None on 404."""
        token = await self._get_token()
        async with httpx.AsyncClient(timeout=self.settings.request_timeout) as client:
            resp = await client.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            return resp.json()

    async def resolve_primary_drive(self) -> DriveHandle | None:
        """Resolve the signed-in user's OneDrive.

        Returns:
            The drive handle, or None if the account has no drive.
        """
        data = await self._get_json(f"{self.settings.graph_base_url}/me/drive")
        if not data or not data.get("id"):
            logger.warning("Graph returned no drive for the signed-in user")
            return None
        drive = DriveHandle.from_graph(data)
        logger.debug("Resolved drive %s (%s)", drive.id, drive.drive_type)
        return drive

    async def search(self, drive: DriveHandle, query: str) -> list[DriveItemResult] | None:
        """Search a drive by free text.

        Args:
            drive: Drive to search.
            query: Search text; Graph matches names, metadata and content.

        Returns:
            Items of the first result page in relevance order, or None if
            Graph answered without a result list.
        """
        url = (
            f"{self.settings.graph_base_url}/drives/{drive.id}"
            f"/root/search(q='{escape_query(query)}')"
        )
        data = await self._get_json(
            url,
            params={"$top": self.settings.search_max_results, "$select": _SEARCH_FIELDS},
        )
        if data is None or data.get("value") is None:
            return None
        return [DriveItemResult.from_graph(item) for item in data["value"]]

    async def fetch_thumbnail(self, drive: DriveHandle, item_id: str) -> bytes | None:
        """Download the medium thumbnail of an item.

        While ``thumbnails_enabled`` is off this only waits
        ``thumbnail_stub_delay`` seconds and returns None.
        """
        if not self.settings.thumbnails_enabled:
            await asyncio.sleep(self.settings.thumbnail_stub_delay)
            return None

        data = await self._get_json(
            f"{self.settings.graph_base_url}/drives/{drive.id}/items/{item_id}/thumbnails"
        )
        sets = (data or {}).get("value") or []
        if not sets:
            return None
        medium = sets[0].get("medium") or {}
        url = medium.get("url")
        if not url:
            return None

        async with httpx.AsyncClient(timeout=self.settings.request_timeout) as client:
            resp = await client.get(url)
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            return resp.content
