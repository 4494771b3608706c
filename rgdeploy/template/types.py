"""Template source, parameter descriptor and parameter value types."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum


class SourceKind(Enum):
    GALLERY = "gallery"
    FILE = "file"
    URI = "uri"


@dataclass(frozen=True)
class GalleryIdentity:
    """Template published in the gallery, addressed by its identity."""

    name: str

    kind = SourceKind.GALLERY

    @property
    def identity(self) -> str:
        return self.name


@dataclass(frozen=True)
class LocalFile:
    """Template read from a local JSON file."""

    path: str

    kind = SourceKind.FILE

    @property
    def identity(self) -> str:
        return self.path


@dataclass(frozen=True)
class RemoteUri:
    """Template downloaded from an http(s) URI."""

    uri: str

    kind = SourceKind.URI

    @property
    def identity(self) -> str:
        return self.uri


TemplateSource = GalleryIdentity | LocalFile | RemoteUri


@dataclass(frozen=True)
class ParameterDescriptor:
    """One parameter declared by a template.

    ``mandatory`` is true when the template declares no defaultValue.
    """

    name: str
    type: str = "string"
    mandatory: bool = True
    help: str = ""
    default: object = None
    allowed_values: tuple = ()

    @property
    def normalized_type(self) -> str:
        """Declared type in lower case ('securestring', 'int', ...)."""
        return self.type.lower()

    @property
    def is_secure(self) -> bool:
        return self.normalized_type in ("securestring", "secureobject")


@dataclass(frozen=True)
class ParameterDiscovery:
    """Result of one discovery call, passed back as the next call's ``previous``.

    ``declared`` is the full schema of the template; ``descriptors`` holds the
    declared parameters that still need a value from the caller.
    """

    source: TemplateSource
    declared: tuple[ParameterDescriptor, ...] = ()
    descriptors: tuple[ParameterDescriptor, ...] = ()

    @property
    def names(self) -> list[str]:
        return [d.name for d in self.descriptors]

    def get(self, name: str) -> ParameterDescriptor | None:
        for descriptor in self.declared:
            if descriptor.name.lower() == name.lower():
                return descriptor
        return None


@dataclass(frozen=True, eq=False)
class ParameterValueSet(Mapping):
    """Read-only, ordered mapping of parameter name to resolved value."""

    _values: dict = field(default_factory=dict)

    def __getitem__(self, key):
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def as_dict(self) -> dict:
        """Return a mutable copy of the values."""
        return dict(self._values)

    def to_request(self) -> dict:
        """Wire form for a deployment request: {name: {"value": v}}."""
        return {name: {"value": value} for name, value in self._values.items()}


@dataclass(frozen=True)
class TemplateLink:
    """Location of a template body plus the content version it must match."""

    uri: str
    content_version: str | None = None

    def to_request(self) -> dict:
        link = {"uri": self.uri}
        if self.content_version:
            link["contentVersion"] = self.content_version
        return link

    @classmethod
    def from_response(cls, d: dict | None) -> "TemplateLink | None":
        if not d or not d.get("uri"):
            return None
        return cls(uri=d["uri"], content_version=d.get("contentVersion"))

    def __str__(self) -> str:
        if self.content_version:
            return f"{self.uri} (contentVersion {self.content_version})"
        return self.uri
