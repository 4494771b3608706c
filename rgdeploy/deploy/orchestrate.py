"""Deployment orchestration: resolve parameters, submit, and project results."""

import logging

from rgdeploy.clients import gallery, resources
from rgdeploy.deploy.result import project
from rgdeploy.deploy.types import DeploymentMode, DeploymentRequest, ResourceGroupDeployment
from rgdeploy.errors import DeploymentFailed
from rgdeploy.template.params import check_mandatory, merge
from rgdeploy.template.schema import discover, load_template
from rgdeploy.template.source import describe_source
from rgdeploy.template.types import ParameterDiscovery, SourceKind, TemplateLink, TemplateSource

logger = logging.getLogger(__name__)


async def _template_reference(source: TemplateSource, template_version=None, settings=None):
    """Return (template_link, template) for a request; exactly one is set."""
    if source.kind is SourceKind.GALLERY:
        link = await gallery.get_template_link(source.identity, settings)
        if template_version:
            link = TemplateLink(uri=link.uri, content_version=template_version)
        return link, None
    if source.kind is SourceKind.URI:
        return TemplateLink(uri=source.identity, content_version=template_version), None
    return None, await load_template(source, settings)


async def prepare_deployment(
    resource_group: str,
    name: str,
    source: TemplateSource,
    inline_params: dict | None = None,
    parameter_file: str | None = None,
    bindings: dict | None = None,
    mode: DeploymentMode = DeploymentMode.INCREMENTAL,
    template_version: str | None = None,
    discovery: ParameterDiscovery | None = None,
    settings=None,
) -> DeploymentRequest:
    """Build a DeploymentRequest with a fully resolved parameter set.

    ``discovery`` is the result of an earlier discover() call for the same
    source; it is reused instead of fetching the schema again.

    Raises MissingMandatoryParameter if a mandatory template parameter ends
    up without a value.
    """
    discovery = await discover(source, inline_params, parameter_file, previous=discovery, settings=settings)
    values = merge(inline_params, parameter_file, bindings)
    check_mandatory(discovery.declared, values)

    template_link, template = await _template_reference(source, template_version, settings)
    logger.debug(f"Resolved {len(values)} parameter(s) for {describe_source(source)}")
    return DeploymentRequest(
        resource_group=resource_group,
        name=name,
        parameters=values,
        mode=mode,
        template_link=template_link,
        template=template,
    )


async def run_deploy(request: DeploymentRequest, settings, wait=False, timeout=None, dry_run=False) -> ResourceGroupDeployment | None:
    """Submit a deployment and project the response.

    With ``wait``, polls until the deployment finishes and raises
    DeploymentFailed if it ends in any state other than Succeeded.

    Returns:
        The deployment snapshot, or None in dry-run mode.
    """
    raw = await resources.submit(request, settings, dry_run=dry_run)
    if dry_run:
        logger.info(f"[dry-run] Would deploy '{request.name}' to resource group '{request.resource_group}'")
        return None

    deployment = project(raw, request.resource_group)
    if not wait:
        return deployment

    if not deployment.is_terminal:
        raw = await resources.wait_for_completion(request.resource_group, request.name, settings, timeout=timeout)
        if raw is None:
            raise DeploymentFailed(f"Timed out waiting for deployment '{request.name}'", name=request.name)
        deployment = project(raw, request.resource_group)
    return _check_outcome(deployment)


def _check_outcome(deployment: ResourceGroupDeployment) -> ResourceGroupDeployment:
    if not deployment.succeeded:
        raise DeploymentFailed(
            f"Deployment '{deployment.deployment_name}' finished with state {deployment.provisioning_state}",
            name=deployment.deployment_name,
        )
    return deployment


async def run_validate(request: DeploymentRequest, settings, dry_run=False) -> dict | None:
    """Validate a deployment request.

    Returns:
        The error object reported by Resource Manager, ``{}`` if the template
        is valid, or None in dry-run mode.
    """
    result = await resources.validate(request, settings, dry_run=dry_run)
    if result is None:
        return None
    return result.get("error") or {}


async def run_show(resource_group: str, name: str, settings) -> ResourceGroupDeployment:
    raw = await resources.get_status(resource_group, name, settings)
    return project(raw, resource_group)


async def run_list(resource_group: str, settings) -> list[ResourceGroupDeployment]:
    """All deployments in a resource group, newest first."""
    deployments = [project(raw, resource_group) for raw in await resources.list_deployments(resource_group, settings)]
    return sorted(deployments, key=lambda d: d.timestamp.timestamp() if d.timestamp else 0, reverse=True)


async def run_stop(resource_group: str, name: str, settings, dry_run=False) -> bool:
    """Cancel a running deployment. Refuses if it has already finished."""
    if not dry_run:
        deployment = await run_show(resource_group, name, settings)
        if deployment.is_terminal:
            logger.warning(f"Deployment '{name}' already finished ({deployment.provisioning_state}); nothing to stop.")
            return False
    return await resources.cancel(resource_group, name, settings, dry_run=dry_run)
