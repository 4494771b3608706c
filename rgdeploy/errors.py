"""Error types raised while resolving, submitting and reading deployments.

Every error carries ``name``: the parameter or template source it is about,
so the CLI can print an actionable message.
"""


class RgDeployError(Exception):
    """Base class for all rgdeploy errors."""

    def __init__(self, message: str, name: str | None = None):
        super().__init__(message)
        self.name = name


class ConflictingSource(RgDeployError, ValueError):
    """More than one template source was given."""


class NoSource(RgDeployError, ValueError):
    """No template source was given for a template-dependent operation."""


class GalleryLookupFailed(RgDeployError, LookupError):
    """The gallery service could not return the requested template."""


class SourceUnreachable(RgDeployError, OSError):
    """A template file or URI could not be read."""


class TemplateParseFailed(RgDeployError, ValueError):
    """A template body is not JSON or has no parameters section."""


class ParameterFileInvalid(RgDeployError, ValueError):
    """A parameter file is not a name -> {"value": ...} mapping."""


class ParameterFileNotFound(RgDeployError, FileNotFoundError):
    """A parameter file path was given but nothing exists there."""


class MissingMandatoryParameter(RgDeployError, ValueError):
    """A template parameter without a default has no value."""


class ParameterValueInvalid(RgDeployError, ValueError):
    """A command-line value does not match the declared parameter type."""


class MalformedResponse(RgDeployError, ValueError):
    """A deployment response lacks required fields."""


class DeploymentFailed(RgDeployError, RuntimeError):
    """The deployment reached a failed or canceled provisioning state."""
