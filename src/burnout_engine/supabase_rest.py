"""
Async PostgREST client for the hosted Supabase database.

Talks to Supabase's REST endpoint directly with httpx instead of the
full supabase SDK. Every transport or HTTP failure is raised as
RemoteUnavailable so callers can fall back to local data.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import httpx

from .errors import RemoteUnavailable

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class PostgrestClient:
    """Thin async wrapper over `/rest/v1/<table>` endpoints."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Supabase project URL (https://<ref>.supabase.co)
            api_key: Service role or anon key sent as apikey and bearer token
            timeout: Overall request timeout; expiry counts as a remote failure
            transport: Optional transport override (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _headers(self, prefer: Optional[str] = None) -> dict:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{self.base_url}/rest/v1",
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[Sequence[Tuple[str, str]]] = None,
        json=None,
        prefer: Optional[str] = None,
    ) -> list:
        client = self._get_client()
        try:
            resp = await client.request(
                method,
                f"/{table}",
                params=list(params or []),
                json=json,
                headers=self._headers(prefer),
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteUnavailable(
                f"{method} {table} failed with status {e.response.status_code}",
                details={"status": e.response.status_code, "body": e.response.text[:200]},
            ) from e
        except httpx.HTTPError as e:
            raise RemoteUnavailable(f"{method} {table} failed: {e!r}") from e

        logger.debug(f"[GATEWAY] {method} {table} -> {resp.status_code}")
        if not resp.content:
            return []
        result = resp.json()
        return result if isinstance(result, list) else [result]

    async def select(
        self,
        table: str,
        filters: Iterable[Tuple[str, str]] = (),
        columns: str = "*",
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        """Select rows. Filters are raw PostgREST pairs such as ("user_id", "eq.abc")."""
        params = [("select", columns), *filters]
        if order:
            params.append(("order", order))
        if limit is not None:
            params.append(("limit", str(limit)))
        return await self._request("GET", table, params=params)

    async def upsert(self, table: str, rows, on_conflict: str) -> List[dict]:
        """Insert or merge rows on the given unique key in a single request."""
        return await self._request(
            "POST",
            table,
            params=[("on_conflict", on_conflict)],
            json=rows,
            prefer="resolution=merge-duplicates,return=representation",
        )

    async def insert_ignoring_duplicates(self, table: str, rows: list, on_conflict: str) -> List[dict]:
        """Insert rows, leaving any row that already exists on the key untouched."""
        return await self._request(
            "POST",
            table,
            params=[("on_conflict", on_conflict)],
            json=rows,
            prefer="resolution=ignore-duplicates,return=representation",
        )

    async def insert(self, table: str, row: dict) -> List[dict]:
        """Insert a single row and return the created record."""
        return await self._request("POST", table, json=row, prefer="return=representation")
