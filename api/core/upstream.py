"""
Upstream HTTP helpers.

Every provider call goes through `get_json`, which issues exactly one GET on a
shared `httpx.AsyncClient`. The client carries the bounded timeout; it is
created once per process in the FastAPI lifespan (see `api/main.py`).
"""

from __future__ import annotations

from typing import Any

import httpx

from .errors import NoUpstreamData, UpstreamUnavailable


def make_client(*, timeout_s: float, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=timeout_s, transport=transport)


def _join(base_url: str, path: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise UpstreamUnavailable("Provider base URL is empty.")
    return base_url.rstrip("/") + "/" + path.lstrip("/")


async def get_json(
    client: httpx.AsyncClient,
    base_url: str,
    path: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    """
    GET `base_url/path` and return the decoded JSON body.
    """
    url = _join(base_url, path)
    try:
        resp = await client.get(url, params=params, headers=headers)
    except httpx.TimeoutException as e:
        raise UpstreamUnavailable(f"Upstream request timed out: {url}") from e
    except httpx.HTTPError as e:
        raise UpstreamUnavailable(f"Upstream request failed: {url}: {e}") from e

    if not resp.is_success:
        # Avoid dumping huge bodies; include a small snippet.
        body = resp.text[:300]
        raise UpstreamUnavailable(f"Upstream request failed: {resp.status_code} {url} {body}")

    try:
        return resp.json()
    except ValueError as e:
        raise UpstreamUnavailable(f"Upstream returned a non-JSON body: {url}") from e


def extract_items(payload: Any, path: str) -> list[Any]:
    """
    Walk a dotted path (e.g. "daily.data") and return the non-empty list there.
    """
    node = payload
    for key in path.split("."):
        if not isinstance(node, dict):
            node = None
            break
        node = node.get(key)

    if not isinstance(node, list) or not node:
        raise NoUpstreamData(f"Upstream returned no '{path}' results.")
    return node
