"""Resource Manager client: submit, validate, query and cancel deployments."""

import asyncio
import json
import logging
from urllib.parse import quote

import httpx

from rgdeploy.config import Settings
from rgdeploy.deploy.types import TERMINAL_STATES, DeploymentRequest

logger = logging.getLogger(__name__)


# ── API helpers ───────────────────────────────────────────────────


def _deployments_path(settings: Settings, resource_group: str, name: str | None = None) -> str:
    path = (
        f"/subscriptions/{quote(settings.subscription_id, safe='')}"
        f"/resourcegroups/{quote(resource_group, safe='')}"
        f"/providers/Microsoft.Resources/deployments"
    )
    if name is not None:
        path += f"/{quote(name, safe='')}"
    return path


async def _api_request(method, path, settings: Settings, data=None, dry_run=False):
    """Make an authenticated Resource Manager request.

    ``path`` is either relative to ``settings.api_url`` or an absolute
    nextLink URL returned by a previous list call.

    Returns:
        Parsed JSON response (``{}`` for empty bodies), or ``None`` in dry-run mode.
    """
    url = path if path.startswith("https://") else f"{settings.api_url.rstrip('/')}{path}"
    params = None if "api-version=" in url else {"api-version": settings.api_version}

    if dry_run:
        logger.info(f"[dry-run] {method} {url}")
        if data is not None:
            logger.info(f"[dry-run] payload: {json.dumps(data, indent=2)}")
        return None

    settings.require_credentials()
    headers = {"Authorization": f"Bearer {settings.access_token}", "Content-Type": "application/json"}
    async with httpx.AsyncClient() as client:
        resp = await client.request(method, url, params=params, json=data, headers=headers, timeout=60)
    resp.raise_for_status()
    if not resp.content:
        return {}
    return resp.json()


# ── Core logic ─────────────────────────────────────────────────────


async def submit(request: DeploymentRequest, settings: Settings, dry_run=False):
    """Create or update a deployment.

    PUT .../deployments/{name}
    """
    logger.info(f"Submitting deployment '{request.name}' to resource group '{request.resource_group}' ({request.mode.value})...")
    path = _deployments_path(settings, request.resource_group, request.name)
    return await _api_request("PUT", path, settings, request.to_body(), dry_run)


async def validate(request: DeploymentRequest, settings: Settings, dry_run=False):
    """Validate a deployment without running it.

    POST .../deployments/{name}/validate. A 400 carries the validation error
    in its body, which is returned rather than raised.
    """
    path = _deployments_path(settings, request.resource_group, request.name) + "/validate"
    try:
        return await _api_request("POST", path, settings, request.to_body(), dry_run)
    except httpx.HTTPStatusError as e:
        if e.response.status_code != 400:
            raise
        return e.response.json()


async def get_status(resource_group: str, name: str, settings: Settings, dry_run=False):
    """GET .../deployments/{name}"""
    return await _api_request("GET", _deployments_path(settings, resource_group, name), settings, dry_run=dry_run)


async def list_deployments(resource_group: str, settings: Settings, dry_run=False) -> list[dict]:
    """List all deployments in a resource group, following nextLink pages."""
    path = _deployments_path(settings, resource_group)
    deployments = []
    while path:
        result = await _api_request("GET", path, settings, dry_run=dry_run)
        if result is None:  # dry-run
            return []
        deployments.extend(result.get("value", []))
        path = result.get("nextLink")
    return deployments


async def cancel(resource_group: str, name: str, settings: Settings, dry_run=False):
    """Cancel a running deployment.

    POST .../deployments/{name}/cancel
    """
    logger.info(f"Canceling deployment '{name}' in resource group '{resource_group}'...")
    path = _deployments_path(settings, resource_group, name) + "/cancel"
    await _api_request("POST", path, settings, dry_run=dry_run)
    return True


async def wait_for_completion(resource_group: str, name: str, settings: Settings, timeout=None, interval=None, dry_run=False):
    """Poll deployment status until it reaches a terminal provisioning state.

    Returns:
        The last status response, or None on timeout.
    """
    timeout = settings.timeout if timeout is None else timeout
    interval = settings.poll_interval if interval is None else interval

    if dry_run:
        logger.info(f"[dry-run] Poll every {interval}s (up to {timeout}s) for a terminal state of '{name}'")
        return None

    elapsed = 0
    state = None
    while elapsed < timeout:
        raw = await get_status(resource_group, name, settings)
        state = (raw.get("properties") or {}).get("provisioningState")
        if state in TERMINAL_STATES:
            return raw
        logger.info(f"Deployment '{name}' is {state}...")
        await asyncio.sleep(interval)
        elapsed += interval

    logger.error(f"Timeout after {timeout}s waiting for deployment '{name}' (last state: '{state}')")
    return None
