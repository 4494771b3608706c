"""Template parameter schema: parsing templates and discovering dynamic parameters."""

import json
import logging

from rgdeploy.clients import fetcher, gallery
from rgdeploy.errors import TemplateParseFailed
from rgdeploy.template.params import file_parameter_names
from rgdeploy.template.source import source_changed
from rgdeploy.template.types import (
    ParameterDescriptor,
    ParameterDiscovery,
    SourceKind,
    TemplateSource,
)

logger = logging.getLogger(__name__)


def parse_template(body: bytes | str, label: str) -> dict:
    """Parse a template body and check it declares a parameters section.

    ``label`` names the file, URI or gallery identity in error messages.
    """
    try:
        template = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise TemplateParseFailed(f"Template '{label}' is not valid JSON: {e}", name=label) from e

    if not isinstance(template, dict):
        raise TemplateParseFailed(f"Template '{label}' must be a JSON object", name=label)
    if not isinstance(template.get("parameters"), dict):
        raise TemplateParseFailed(f"Template '{label}' has no 'parameters' section", name=label)
    return template


def extract_parameters(template: dict, label: str = "template") -> list[ParameterDescriptor]:
    """Turn a template's parameters section into descriptors, in declaration order."""
    descriptors = []
    for name, spec in template["parameters"].items():
        if not isinstance(spec, dict):
            raise TemplateParseFailed(f"Template '{label}': parameter '{name}' must be an object", name=label)
        metadata = spec.get("metadata") or {}
        descriptors.append(
            ParameterDescriptor(
                name=name,
                type=spec.get("type", "string"),
                mandatory="defaultValue" not in spec,
                help=metadata.get("description") or name,
                default=spec.get("defaultValue"),
                allowed_values=tuple(spec.get("allowedValues") or ()),
            )
        )
    return descriptors


async def load_template(source: TemplateSource, settings=None) -> dict:
    """Fetch and parse the template body for any kind of source."""
    if source.kind is SourceKind.GALLERY:
        return await gallery.get_template_body(source.identity, settings)
    body = await fetcher.read(source.identity)
    return parse_template(body, source.identity)


async def _fetch_parameters(source: TemplateSource, settings=None) -> list[ParameterDescriptor]:
    if source.kind is SourceKind.GALLERY:
        return await gallery.get_template_parameters(source.identity, settings)
    return extract_parameters(await load_template(source, settings), source.identity)


async def discover(
    source: TemplateSource,
    inline_params: dict | None = None,
    parameter_file: str | None = None,
    bound_names=(),
    previous: ParameterDiscovery | None = None,
    settings=None,
) -> ParameterDiscovery:
    """Discover which template parameters the caller still has to supply.

    The schema is fetched only when ``source`` differs from ``previous.source``;
    otherwise the previous schema is reused. Parameters present in
    ``inline_params``, in ``parameter_file`` or in ``bound_names`` are left out
    of the returned ``descriptors``.
    """
    if previous is not None and not source_changed(previous.source, source):
        declared = previous.declared
    else:
        logger.debug(f"Fetching parameter schema for {source.kind.value} '{source.identity}'")
        declared = tuple(await _fetch_parameters(source, settings))

    supplied = {name.lower() for name in (inline_params or {})}
    supplied |= {name.lower() for name in file_parameter_names(parameter_file)}
    supplied |= {name.lower() for name in bound_names}

    missing = tuple(d for d in declared if d.name.lower() not in supplied)
    return ParameterDiscovery(source=source, declared=declared, descriptors=missing)
