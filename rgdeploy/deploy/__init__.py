"""Deploy library: request building, submission and result projection."""

from rgdeploy.deploy.types import (
    DeploymentMode,
    DeploymentRequest,
    DeploymentVariable,
    ResourceGroupDeployment,
)
from rgdeploy.deploy.result import (
    format_deployment,
    format_variables,
    parse_value,
    project,
    serialize_value,
)
from rgdeploy.deploy.orchestrate import (
    prepare_deployment,
    run_deploy,
    run_list,
    run_show,
    run_stop,
    run_validate,
)

__all__ = [
    "DeploymentMode",
    "DeploymentRequest",
    "DeploymentVariable",
    "ResourceGroupDeployment",
    "format_deployment",
    "format_variables",
    "parse_value",
    "project",
    "serialize_value",
    "prepare_deployment",
    "run_deploy",
    "run_list",
    "run_show",
    "run_stop",
    "run_validate",
]
