"""Read template and parameter documents from disk or over http(s)."""

import logging
import os

import httpx

from rgdeploy.errors import SourceUnreachable

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 60


def is_remote(path_or_uri: str) -> bool:
    return path_or_uri.lower().startswith(("http://", "https://"))


async def read(path_or_uri: str) -> bytes:
    """Return the raw bytes at a local path or http(s) URI.

    Raises SourceUnreachable if the file cannot be read or the request fails.
    """
    if is_remote(path_or_uri):
        return await _download(path_or_uri)

    path = os.path.expanduser(path_or_uri)
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise SourceUnreachable(f"Unable to read '{path_or_uri}': {e.strerror or e}", name=path_or_uri) from e


async def _download(uri: str) -> bytes:
    logger.debug(f"GET {uri}")
    try:
        async with httpx.AsyncClient(follow_redirects=True) as client:
            resp = await client.get(uri, timeout=FETCH_TIMEOUT)
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise SourceUnreachable(f"Unable to download '{uri}': HTTP {e.response.status_code}", name=uri) from e
    except httpx.HTTPError as e:
        raise SourceUnreachable(f"Unable to download '{uri}': {e}", name=uri) from e
    return resp.content
