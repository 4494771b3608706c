"""Gallery service client: look up published templates by identity."""

import logging
from urllib.parse import quote

import httpx

from rgdeploy.clients import fetcher
from rgdeploy.config import Settings
from rgdeploy.errors import GalleryLookupFailed, SourceUnreachable
from rgdeploy.template.types import TemplateLink

logger = logging.getLogger(__name__)


async def _gallery_request(path, settings: Settings):
    """GET a gallery resource and return the parsed JSON body."""
    url = f"{settings.gallery_url.rstrip('/')}{path}"
    params = {"api-version": settings.gallery_api_version}
    async with httpx.AsyncClient() as client:
        resp = await client.get(url, params=params, timeout=60)
    resp.raise_for_status()
    return resp.json()


async def get_gallery_item(identity: str, settings: Settings | None = None) -> dict:
    """Fetch the gallery item for ``identity``.

    Raises GalleryLookupFailed on any transport or HTTP error.
    """
    settings = settings or Settings()
    logger.debug(f"Looking up gallery template '{identity}'")
    try:
        return await _gallery_request(f"/Microsoft.Gallery/galleryitems/{quote(identity, safe='')}", settings)
    except httpx.HTTPStatusError as e:
        raise GalleryLookupFailed(
            f"Unable to find gallery template '{identity}' (HTTP {e.response.status_code})", name=identity
        ) from e
    except (httpx.HTTPError, ValueError) as e:
        raise GalleryLookupFailed(f"Unable to find gallery template '{identity}': {e}", name=identity) from e


def _default_template_uri(item: dict, identity: str) -> str:
    """Pick the default deployment template URI out of a gallery item."""
    definitions = item.get("definitionTemplates") or {}
    uris = definitions.get("deploymentTemplateFileUris") or {}
    default_id = definitions.get("defaultDeploymentTemplateId")
    uri = uris.get(default_id) if default_id else None
    if uri is None and len(uris) == 1:
        uri = next(iter(uris.values()))
    if not uri:
        raise GalleryLookupFailed(f"Gallery template '{identity}' has no default deployment template", name=identity)
    return uri


async def get_template_link(identity: str, settings: Settings | None = None) -> TemplateLink:
    """Resolve a gallery identity to the link of its deployment template."""
    item = await get_gallery_item(identity, settings)
    return TemplateLink(uri=_default_template_uri(item, identity), content_version=item.get("version"))


async def get_template_body(identity: str, settings: Settings | None = None) -> dict:
    """Download and parse the deployment template of a gallery item."""
    from rgdeploy.template.schema import parse_template

    link = await get_template_link(identity, settings)
    try:
        body = await fetcher.read(link.uri)
    except SourceUnreachable as e:
        raise GalleryLookupFailed(f"Unable to download template for gallery item '{identity}': {e}", name=identity) from e
    return parse_template(body, identity)


async def get_template_parameters(identity: str, settings: Settings | None = None):
    """Return the ParameterDescriptors declared by a gallery template."""
    from rgdeploy.template.schema import extract_parameters

    template = await get_template_body(identity, settings)
    return extract_parameters(template, identity)
