"""
Remote store client for the Notion REST API.

``RemoteStore`` is the interface the loader and the status promoter depend
on; ``NotionClient`` implements it over an async httpx client. Every call
returns one page of raw records (``results``) plus ``next_cursor``.

Failures are retried with a linear backoff for transport errors, rate
limiting (429) and server errors (5xx). Once retries are exhausted, or on
any other non-2xx response, ``RemoteStoreError`` is raised.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
import logging
from typing import Any

import httpx

from ..config import NotionConfig
from ..utils.logging import log_warning


STATUS_PROPERTY = "Status"


class RemoteStoreError(Exception):
    """A remote store request failed after all retry attempts."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RemoteStore(ABC):
    """Paginated query / block-children / status-update capability."""

    @abstractmethod
    async def query_database(
        self,
        database_id: str,
        filter: dict[str, Any] | None = None,
        start_cursor: str | None = None,
    ) -> dict[str, Any]:
        """Return one page of database records and the next cursor."""
        raise NotImplementedError

    @abstractmethod
    async def list_block_children(
        self,
        block_id: str,
        start_cursor: str | None = None,
    ) -> dict[str, Any]:
        """Return one page of child blocks and the next cursor."""
        raise NotImplementedError

    @abstractmethod
    async def update_page_status(self, page_id: str, status: str) -> dict[str, Any]:
        """Set the page's status select to ``status``."""
        raise NotImplementedError


def status_filter(statuses: list[str]) -> dict[str, Any]:
    """Build a filter matching any of ``statuses`` on the Status select."""
    clauses = [
        {"property": STATUS_PROPERTY, "select": {"equals": status}}
        for status in statuses
    ]
    if len(clauses) == 1:
        return clauses[0]
    return {"or": clauses}


class NotionClient(RemoteStore):
    """Notion REST implementation of RemoteStore."""

    def __init__(
        self,
        cfg: NotionConfig,
        api_key: str | None,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
    ):
        if not api_key:
            raise ValueError("Missing Notion API key")
        self.cfg = cfg
        self.logger = logger
        self._client = httpx.AsyncClient(
            base_url=cfg.base_url.rstrip("/"),
            timeout=cfg.timeout_seconds,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Notion-Version": cfg.notion_version,
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def query_database(
        self,
        database_id: str,
        filter: dict[str, Any] | None = None,
        start_cursor: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"page_size": self.cfg.page_size}
        if filter:
            payload["filter"] = filter
        if start_cursor:
            payload["start_cursor"] = start_cursor
        return await self._request("POST", f"/databases/{database_id}/query", json=payload)

    async def list_block_children(
        self,
        block_id: str,
        start_cursor: str | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"page_size": self.cfg.page_size}
        if start_cursor:
            params["start_cursor"] = start_cursor
        return await self._request("GET", f"/blocks/{block_id}/children", params=params)

    async def update_page_status(self, page_id: str, status: str) -> dict[str, Any]:
        payload = {"properties": {STATUS_PROPERTY: {"select": {"name": status}}}}
        return await self._request("PATCH", f"/pages/{page_id}", json=payload)

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        retries = max(0, int(self.cfg.retries))
        last_error = ""
        last_status: int | None = None

        for attempt in range(retries + 1):
            try:
                resp = await self._client.request(method, path, json=json, params=params)
            except httpx.TransportError as exc:
                last_error = f"{type(exc).__name__}: {exc}"
                last_status = None
            else:
                if resp.is_success:
                    return resp.json()
                last_status = resp.status_code
                last_error = f"HTTP {resp.status_code}: {_error_message(resp)}"
                # Client errors other than rate limiting will not succeed on retry
                if resp.status_code != 429 and resp.status_code < 500:
                    break

            if attempt < retries:
                log_warning(
                    self.logger,
                    "Remote store request retry",
                    event="remote_retry",
                    method=method,
                    path=path,
                    attempt=attempt + 1,
                    error=last_error,
                )
                await asyncio.sleep(0.5 * (attempt + 1))

        raise RemoteStoreError(f"{method} {path} failed: {last_error}", status_code=last_status)


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return resp.text[:200]
