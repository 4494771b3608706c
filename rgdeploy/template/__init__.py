"""Template sources, parameter discovery and parameter merging."""

from rgdeploy.template.params import (
    check_mandatory,
    coerce_value,
    load_parameter_file,
    merge,
    parse_parameter_object,
)
from rgdeploy.template.schema import discover, extract_parameters, load_template, parse_template
from rgdeploy.template.source import describe_source, resolve_source, source_changed
from rgdeploy.template.types import (
    GalleryIdentity,
    LocalFile,
    ParameterDescriptor,
    ParameterDiscovery,
    ParameterValueSet,
    RemoteUri,
    SourceKind,
    TemplateLink,
    TemplateSource,
)

__all__ = [
    "GalleryIdentity",
    "LocalFile",
    "ParameterDescriptor",
    "ParameterDiscovery",
    "ParameterValueSet",
    "RemoteUri",
    "SourceKind",
    "TemplateLink",
    "TemplateSource",
    "check_mandatory",
    "coerce_value",
    "describe_source",
    "discover",
    "extract_parameters",
    "load_parameter_file",
    "load_template",
    "merge",
    "parse_parameter_object",
    "parse_template",
    "resolve_source",
    "source_changed",
]
