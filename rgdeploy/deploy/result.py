"""Deployment result projection: raw status response -> ResourceGroupDeployment."""

import json
import re
from datetime import datetime

from rgdeploy.deploy.types import DeploymentMode, DeploymentVariable, ResourceGroupDeployment
from rgdeploy.errors import MalformedResponse
from rgdeploy.template.types import TemplateLink

_RESOURCE_GROUP_RE = re.compile(r"/resourcegroups/([^/]+)", re.IGNORECASE)

# Column widths for the Name / Type / Value table.
_NAME_WIDTH = 16
_TYPE_WIDTH = 16


def serialize_value(value) -> str:
    """Canonical JSON rendering of a variable value (sorted keys, no NaN)."""
    return json.dumps(value, sort_keys=True, ensure_ascii=False, allow_nan=False)


def parse_value(text: str):
    """Inverse of serialize_value."""
    return json.loads(text)


def _parse_variables(raw, field_name: str) -> dict[str, DeploymentVariable]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise MalformedResponse(f"Deployment response field '{field_name}' must be an object", name=field_name)
    variables = {}
    for name, entry in raw.items():
        if isinstance(entry, dict):
            variables[name] = DeploymentVariable(type=entry.get("type", ""), value=entry.get("value"))
        else:
            variables[name] = DeploymentVariable(type="", value=entry)
    return variables


def format_variables(variables: dict[str, DeploymentVariable]) -> str:
    """Render variables as a fixed-width Name / Type / Value table."""
    if not variables:
        return ""

    name_width = max(_NAME_WIDTH, *(len(n) + 2 for n in variables))
    lines = [
        f"{'Name':<{name_width}}{'Type':<{_TYPE_WIDTH}}Value",
        f"{'=' * (name_width - 2):<{name_width}}{'=' * (_TYPE_WIDTH - 2):<{_TYPE_WIDTH}}{'=' * 10}",
    ]
    for name, variable in variables.items():
        lines.append(f"{name:<{name_width}}{variable.type:<{_TYPE_WIDTH}}{serialize_value(variable.value)}")
    return "\n".join(lines)


def _parse_timestamp(raw):
    if not raw:
        return None
    # Resource Manager returns 1 to 7 fractional digits; fromisoformat wants exactly 6 on 3.10.
    text = re.sub(r"\.(\d+)", lambda m: "." + m.group(1)[:6].ljust(6, "0"), str(raw), count=1).replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise MalformedResponse(f"Invalid deployment timestamp '{raw}'", name="timestamp") from e


def _parse_mode(raw):
    if not raw:
        return None
    try:
        return DeploymentMode.parse(raw)
    except ValueError as e:
        raise MalformedResponse(str(e), name="mode") from e


def resource_group_from_id(resource_id: str | None) -> str | None:
    """Extract the resource group name from a deployment resource id."""
    if not resource_id:
        return None
    match = _RESOURCE_GROUP_RE.search(resource_id)
    return match.group(1) if match else None


def project(raw: dict, resource_group: str | None = None) -> ResourceGroupDeployment:
    """Build a ResourceGroupDeployment from a deployment status response.

    Pure transformation. Raises MalformedResponse when the response is not an
    object or lacks the deployment name or provisioning state.
    """
    if not isinstance(raw, dict):
        raise MalformedResponse("Deployment response must be a JSON object", name="response")

    name = raw.get("name")
    if not name:
        raise MalformedResponse("Deployment response is missing 'name'", name="name")

    properties = raw.get("properties")
    if not isinstance(properties, dict) or not properties.get("provisioningState"):
        raise MalformedResponse(
            f"Deployment '{name}' response is missing 'properties.provisioningState'",
            name="provisioningState",
        )

    template_link = TemplateLink.from_response(properties.get("templateLink"))
    parameters = _parse_variables(properties.get("parameters"), "parameters")
    outputs = _parse_variables(properties.get("outputs"), "outputs")

    return ResourceGroupDeployment(
        deployment_name=name,
        correlation_id=properties.get("correlationId"),
        resource_group_name=resource_group or resource_group_from_id(raw.get("id")),
        provisioning_state=properties["provisioningState"],
        timestamp=_parse_timestamp(properties.get("timestamp")),
        mode=_parse_mode(properties.get("mode")),
        template_link=template_link,
        template_link_string=str(template_link) if template_link else "",
        parameters=parameters,
        parameters_string=format_variables(parameters),
        outputs=outputs,
        outputs_string=format_variables(outputs),
    )


def format_deployment(deployment: ResourceGroupDeployment) -> str:
    """Multi-line summary of a deployment for terminal output."""
    rows = [
        ("DeploymentName", deployment.deployment_name),
        ("CorrelationId", deployment.correlation_id or ""),
        ("ResourceGroupName", deployment.resource_group_name or ""),
        ("ProvisioningState", deployment.provisioning_state),
        ("Timestamp", deployment.timestamp.isoformat() if deployment.timestamp else ""),
        ("Mode", deployment.mode.value if deployment.mode else ""),
        ("TemplateLink", deployment.template_link_string),
    ]
    lines = [f"{label:<20}: {value}" for label, value in rows]
    if deployment.parameters_string:
        lines.append(f"{'Parameters':<20}:")
        lines.extend(f"  {line}" for line in deployment.parameters_string.splitlines())
    if deployment.outputs_string:
        lines.append(f"{'Outputs':<20}:")
        lines.extend(f"  {line}" for line in deployment.outputs_string.splitlines())
    return "\n".join(lines)
