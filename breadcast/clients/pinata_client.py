"""
Pinata / IPFS client.

Implements the ObjectStore capability on top of the Pinata pinning API for
writes and listings, and an IPFS gateway for reads.
"""

import json
import logging
from typing import Any, Dict, Optional, Set

import httpx

from breadcast.config import settings
from breadcast.errors import ObjectStoreError, ObjectStoreNotConfiguredError

logger = logging.getLogger(__name__)


class PinataClient:
    """
    Async client for pinning, listing and fetching IPFS content.

    Example:
        >>> client = PinataClient(jwt="...")
        >>> cid = await client.put("recipe-title-1.svg", image_bytes)
        >>> client.url(cid)
        'https://gateway.pinata.cloud/ipfs/Qm...'
    """

    def __init__(
        self,
        jwt: Optional[str] = None,
        api_url: Optional[str] = None,
        gateway: Optional[str] = None,
        page_size: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            jwt: Pinata API token. Defaults to config setting.
            api_url: Pinata API base URL. Defaults to config setting.
            gateway: IPFS gateway base URL. Defaults to config setting.
            page_size: pinList page size. Defaults to config setting.
            timeout: HTTP timeout in seconds. Defaults to config setting.
            transport: Optional httpx transport (used by tests).
        """
        self._jwt = jwt if jwt is not None else settings.pinata_jwt
        self._api_url = (api_url or settings.pinata_api_url).rstrip("/")
        self._gateway = (gateway or settings.ipfs_gateway).rstrip("/")
        self._page_size = page_size or settings.pinata_page_size
        self._timeout = timeout or settings.http_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Lazily create the shared HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    def _auth_headers(self) -> Dict[str, str]:
        if not self._jwt:
            raise ObjectStoreNotConfiguredError()
        return {"Authorization": f"Bearer {self._jwt}"}

    async def _request(self, operation: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = self._ensure_client()
        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as e:
            raise ObjectStoreError(operation, "request timed out", details={"url": url}) from e
        except httpx.HTTPStatusError as e:
            raise ObjectStoreError(
                operation,
                f"HTTP {e.response.status_code}",
                details={"url": url},
            ) from e
        except httpx.HTTPError as e:
            raise ObjectStoreError(operation, str(e), details={"url": url}) from e

    def url(self, content_id: str) -> str:
        """Gateway URL for a content id."""
        return f"{self._gateway}/ipfs/{content_id}"

    async def put(self, name: str, data: bytes) -> str:
        """
        Pin bytes to IPFS.

        Args:
            name: Pin name shown by the provider (asset keys are used here).
            data: File content.

        Returns:
            The CIDv0 of the pinned content.
        """
        response = await self._request(
            "pin",
            "POST",
            f"{self._api_url}/pinning/pinFileToIPFS",
            headers=self._auth_headers(),
            files={"file": (name, data)},
            data={
                "pinataMetadata": json.dumps({"name": name}),
                "pinataOptions": json.dumps({"cidVersion": 0}),
            },
        )
        content_id = response.json().get("IpfsHash")
        if not content_id:
            raise ObjectStoreError("pin", "response did not include IpfsHash", details={"name": name})
        logger.info(f"Pinned {name} as {content_id}")
        return content_id

    async def get(self, content_id: str) -> bytes:
        """Fetch raw content through the gateway."""
        response = await self._request("fetch", "GET", self.url(content_id))
        return response.content

    async def list(self) -> Set[str]:
        """
        List every pinned content id.

        Pages through pinList. If the total pin count changes between pages
        (pins added or removed elsewhere) a warning is logged and the listing
        carries on with what it has.
        """
        pinned: Set[str] = set()
        offset = 0
        expected_total: Optional[int] = None

        while True:
            response = await self._request(
                "list",
                "GET",
                f"{self._api_url}/data/pinList",
                headers=self._auth_headers(),
                params={"status": "pinned", "pageLimit": self._page_size, "pageOffset": offset},
            )
            payload = response.json()
            total = int(payload.get("count", 0))
            rows = payload.get("rows") or []

            if expected_total is None:
                expected_total = total
            elif total != expected_total:
                logger.warning(
                    f"Pin count changed during listing ({expected_total} -> {total}); "
                    f"results may be incomplete"
                )
                expected_total = total

            pinned.update(row["ipfs_pin_hash"] for row in rows if row.get("ipfs_pin_hash"))
            offset += len(rows)

            if not rows or offset >= total:
                break

        logger.debug(f"Listed {len(pinned)} pins")
        return pinned

    async def delete(self, content_id: str) -> None:
        """Unpin a content id."""
        await self._request(
            "unpin",
            "DELETE",
            f"{self._api_url}/pinning/unpin/{content_id}",
            headers=self._auth_headers(),
        )
        logger.info(f"Unpinned {content_id}")

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
