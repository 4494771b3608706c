"""Template source selection: gallery identity, local file or remote URI."""

from rgdeploy.errors import ConflictingSource, NoSource
from rgdeploy.template.types import (
    GalleryIdentity,
    LocalFile,
    RemoteUri,
    SourceKind,
    TemplateSource,
)

# Command-line option that supplies each kind of source, used in error messages.
SOURCE_OPTIONS = {
    SourceKind.GALLERY: "--gallery-template",
    SourceKind.FILE: "--template-file",
    SourceKind.URI: "--template-uri",
}

_SOURCE_TYPES = {
    SourceKind.GALLERY: GalleryIdentity,
    SourceKind.FILE: LocalFile,
    SourceKind.URI: RemoteUri,
}


def resolve_source(gallery_template=None, template_file=None, template_uri=None, required=True) -> TemplateSource | None:
    """Pick the single active template source.

    Raises ConflictingSource if more than one input is non-empty, and NoSource
    if none is and ``required`` is set. Never touches the network or disk.
    """
    given = {
        kind: value
        for kind, value in (
            (SourceKind.GALLERY, gallery_template),
            (SourceKind.FILE, template_file),
            (SourceKind.URI, template_uri),
        )
        if value
    }

    if len(given) > 1:
        options = ", ".join(SOURCE_OPTIONS[kind] for kind in given)
        raise ConflictingSource(
            f"Only one template source may be given, got: {options}",
            name=options,
        )

    if not given:
        if required:
            options = ", ".join(SOURCE_OPTIONS.values())
            raise NoSource(f"A template source is required: one of {options}", name=options)
        return None

    kind, value = given.popitem()
    return _SOURCE_TYPES[kind](value)


def source_changed(previous: TemplateSource | None, current: TemplateSource | None) -> bool:
    """True if ``current`` is a different template than ``previous``.

    Identities are compared case-insensitively; a missing previous source
    always counts as a change.
    """
    if previous is None or current is None:
        return previous is not current
    if previous.kind is not current.kind:
        return True
    return previous.identity.lower() != current.identity.lower()


def describe_source(source: TemplateSource) -> str:
    """Human-readable label, e.g. "--template-file ./azuredeploy.json"."""
    return f"{SOURCE_OPTIONS[source.kind]} {source.identity}"
