"""Deployment request and result types."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from rgdeploy.template.types import ParameterValueSet, TemplateLink

TERMINAL_STATES = {"Succeeded", "Failed", "Canceled"}


class DeploymentMode(str, Enum):
    INCREMENTAL = "Incremental"
    COMPLETE = "Complete"

    @classmethod
    def parse(cls, value: str) -> "DeploymentMode":
        """Case-insensitive lookup by name ('incremental', 'Complete', ...)."""
        for mode in cls:
            if mode.value.lower() == str(value).lower():
                return mode
        raise ValueError(f"Unknown deployment mode '{value}'. Expected one of: Incremental, Complete")


@dataclass(frozen=True)
class DeploymentVariable:
    """A deployment parameter or output: declared type plus value."""

    type: str
    value: object = None


@dataclass(frozen=True)
class DeploymentRequest:
    """Everything needed to submit (or validate) one deployment.

    Exactly one of ``template_link`` and ``template`` is set: linked templates
    come from a gallery item or URI, local template files are sent inline.
    """

    resource_group: str
    name: str
    parameters: ParameterValueSet = field(default_factory=ParameterValueSet)
    mode: DeploymentMode = DeploymentMode.INCREMENTAL
    template_link: TemplateLink | None = None
    template: dict | None = None

    def __post_init__(self):
        if (self.template_link is None) == (self.template is None):
            raise ValueError("DeploymentRequest needs exactly one of template_link or template")

    def to_body(self) -> dict:
        properties = {
            "mode": self.mode.value,
            "parameters": self.parameters.to_request(),
        }
        if self.template_link is not None:
            properties["templateLink"] = self.template_link.to_request()
        else:
            properties["template"] = self.template
        return {"properties": properties}


@dataclass(frozen=True)
class ResourceGroupDeployment:
    """Snapshot of a deployment's status. Re-fetched, never updated in place."""

    deployment_name: str
    correlation_id: str | None
    resource_group_name: str | None
    provisioning_state: str
    timestamp: datetime | None
    mode: DeploymentMode | None
    template_link: TemplateLink | None
    template_link_string: str
    parameters: dict[str, DeploymentVariable]
    parameters_string: str
    outputs: dict[str, DeploymentVariable]
    outputs_string: str

    @property
    def is_terminal(self) -> bool:
        return self.provisioning_state in TERMINAL_STATES

    @property
    def succeeded(self) -> bool:
        return self.provisioning_state == "Succeeded"
