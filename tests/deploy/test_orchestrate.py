"""Tests for deployment orchestration over mocked clients."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from rgdeploy.deploy import (
    DeploymentMode,
    prepare_deployment,
    run_deploy,
    run_list,
    run_stop,
    run_validate,
)
from rgdeploy.errors import DeploymentFailed, MissingMandatoryParameter
from rgdeploy.template import GalleryIdentity, LocalFile, RemoteUri, TemplateLink, discover


def _status(state, name="site-1", timestamp=None):
    properties = {"provisioningState": state}
    if timestamp:
        properties["timestamp"] = timestamp
    return {"name": name, "properties": properties}


# ── prepare_deployment ───────────────────────────────────────────


def test_prepare_local_file_sends_template_inline(template_file, sample_template):
    request = asyncio.run(
        prepare_deployment(
            "web-rg",
            "site-1",
            LocalFile(template_file),
            inline_params={"siteName": "contoso", "adminPassword": "P@ssw0rd-long"},
        )
    )
    assert request.template == sample_template
    assert request.template_link is None
    assert dict(request.parameters) == {"siteName": "contoso", "adminPassword": "P@ssw0rd-long"}
    assert request.mode is DeploymentMode.INCREMENTAL


def test_prepare_missing_mandatory(write_json):
    path = write_json("template.json", {"parameters": {"size": {"type": "string"}}})
    with pytest.raises(MissingMandatoryParameter) as exc_info:
        asyncio.run(prepare_deployment("web-rg", "site-1", LocalFile(path), inline_params={}))
    assert exc_info.value.name == "size"


def test_prepare_binding_satisfies_mandatory(write_json):
    path = write_json("template.json", {"parameters": {"size": {"type": "string"}}})
    request = asyncio.run(prepare_deployment("web-rg", "site-1", LocalFile(path), bindings={"size": "Small"}))
    assert dict(request.parameters) == {"size": "Small"}


def test_prepare_file_overrides_inline(write_json):
    template = write_json("template.json", {"parameters": {"count": {"type": "int"}}})
    params = write_json("params.json", {"count": {"value": 3}})
    request = asyncio.run(prepare_deployment("rg", "d", LocalFile(template), inline_params={"count": 5}, parameter_file=params))
    assert request.parameters["count"] == 3


def test_prepare_uri_uses_template_link():
    body = b'{"parameters": {"location": {"type": "string", "defaultValue": "westus"}}}'
    with patch("rgdeploy.template.schema.fetcher.read", new_callable=AsyncMock, return_value=body):
        request = asyncio.run(
            prepare_deployment("rg", "d", RemoteUri("https://example.com/t.json"), template_version="1.0.0.0")
        )
    assert request.template_link == TemplateLink("https://example.com/t.json", "1.0.0.0")
    assert request.template is None


@patch("rgdeploy.deploy.orchestrate.gallery.get_template_link", new_callable=AsyncMock)
@patch("rgdeploy.template.schema.gallery.get_template_body", new_callable=AsyncMock)
def test_prepare_gallery_uses_gallery_link(mock_body, mock_link, settings):
    mock_body.return_value = {"parameters": {}}
    mock_link.return_value = TemplateLink("https://gallery.example.com/t.json", "0.1.0")

    request = asyncio.run(prepare_deployment("rg", "d", GalleryIdentity("Microsoft.WebSite"), settings=settings))
    assert request.template_link == TemplateLink("https://gallery.example.com/t.json", "0.1.0")

    request = asyncio.run(
        prepare_deployment("rg", "d", GalleryIdentity("Microsoft.WebSite"), template_version="0.2.0", settings=settings)
    )
    assert request.template_link.content_version == "0.2.0"


def test_prepare_reuses_discovery(template_file):
    discovery = asyncio.run(discover(LocalFile(template_file)))
    with patch("rgdeploy.template.schema.fetcher.read", new_callable=AsyncMock) as mock_read, patch(
        "rgdeploy.deploy.orchestrate.load_template", new_callable=AsyncMock, return_value={"parameters": {}}
    ):
        asyncio.run(
            prepare_deployment(
                "rg",
                "d",
                LocalFile(template_file),
                inline_params={"siteName": "x", "adminPassword": "y"},
                discovery=discovery,
            )
        )
    mock_read.assert_not_called()


# ── run_deploy ───────────────────────────────────────────────────


@pytest.fixture
def request_(template_file):
    return asyncio.run(
        prepare_deployment("web-rg", "site-1", LocalFile(template_file), inline_params={"siteName": "a", "adminPassword": "b"})
    )


@patch("rgdeploy.deploy.orchestrate.resources.submit", new_callable=AsyncMock)
def test_run_deploy_returns_projection(mock_submit, request_, settings):
    mock_submit.return_value = _status("Accepted")
    deployment = asyncio.run(run_deploy(request_, settings))

    mock_submit.assert_awaited_once_with(request_, settings, dry_run=False)
    assert deployment.provisioning_state == "Accepted"
    assert deployment.resource_group_name == "web-rg"


@patch("rgdeploy.deploy.orchestrate.resources.submit", new_callable=AsyncMock)
def test_run_deploy_dry_run(mock_submit, request_, settings):
    mock_submit.return_value = None
    assert asyncio.run(run_deploy(request_, settings, dry_run=True)) is None


@patch("rgdeploy.deploy.orchestrate.resources.wait_for_completion", new_callable=AsyncMock)
@patch("rgdeploy.deploy.orchestrate.resources.submit", new_callable=AsyncMock)
def test_run_deploy_wait_success(mock_submit, mock_wait, request_, settings):
    mock_submit.return_value = _status("Accepted")
    mock_wait.return_value = _status("Succeeded")

    deployment = asyncio.run(run_deploy(request_, settings, wait=True, timeout=30))

    mock_wait.assert_awaited_once_with("web-rg", "site-1", settings, timeout=30)
    assert deployment.succeeded


@patch("rgdeploy.deploy.orchestrate.resources.wait_for_completion", new_callable=AsyncMock)
@patch("rgdeploy.deploy.orchestrate.resources.submit", new_callable=AsyncMock)
def test_run_deploy_wait_failed(mock_submit, mock_wait, request_, settings):
    mock_submit.return_value = _status("Accepted")
    mock_wait.return_value = _status("Failed")
    with pytest.raises(DeploymentFailed) as exc_info:
        asyncio.run(run_deploy(request_, settings, wait=True))
    assert exc_info.value.name == "site-1"


@patch("rgdeploy.deploy.orchestrate.resources.wait_for_completion", new_callable=AsyncMock)
@patch("rgdeploy.deploy.orchestrate.resources.submit", new_callable=AsyncMock)
def test_run_deploy_wait_timeout(mock_submit, mock_wait, request_, settings):
    mock_submit.return_value = _status("Running")
    mock_wait.return_value = None
    with pytest.raises(DeploymentFailed, match="Timed out"):
        asyncio.run(run_deploy(request_, settings, wait=True))


@patch("rgdeploy.deploy.orchestrate.resources.wait_for_completion", new_callable=AsyncMock)
@patch("rgdeploy.deploy.orchestrate.resources.submit", new_callable=AsyncMock)
def test_run_deploy_wait_already_terminal(mock_submit, mock_wait, request_, settings):
    mock_submit.return_value = _status("Succeeded")
    assert asyncio.run(run_deploy(request_, settings, wait=True)).succeeded
    mock_wait.assert_not_called()


# ── validate / list / stop ───────────────────────────────────────


@patch("rgdeploy.deploy.orchestrate.resources.validate", new_callable=AsyncMock)
def test_run_validate(mock_validate, request_, settings):
    mock_validate.return_value = {"properties": {"provisioningState": "Succeeded"}}
    assert asyncio.run(run_validate(request_, settings)) == {}

    mock_validate.return_value = {"error": {"code": "InvalidTemplate", "message": "bad"}}
    assert asyncio.run(run_validate(request_, settings))["code"] == "InvalidTemplate"

    mock_validate.return_value = None
    assert asyncio.run(run_validate(request_, settings, dry_run=True)) is None


@patch("rgdeploy.deploy.orchestrate.resources.list_deployments", new_callable=AsyncMock)
def test_run_list_newest_first(mock_list, settings):
    mock_list.return_value = [
        _status("Succeeded", "old", "2024-01-01T00:00:00Z"),
        _status("Running", "pending"),
        _status("Failed", "new", "2024-02-01T00:00:00Z"),
    ]
    names = [d.deployment_name for d in asyncio.run(run_list("web-rg", settings))]
    assert names == ["new", "old", "pending"]


@patch("rgdeploy.deploy.orchestrate.resources.cancel", new_callable=AsyncMock)
@patch("rgdeploy.deploy.orchestrate.resources.get_status", new_callable=AsyncMock)
def test_run_stop_running(mock_status, mock_cancel, settings):
    mock_status.return_value = _status("Running")
    mock_cancel.return_value = True
    assert asyncio.run(run_stop("web-rg", "site-1", settings)) is True
    mock_cancel.assert_awaited_once_with("web-rg", "site-1", settings, dry_run=False)


@patch("rgdeploy.deploy.orchestrate.resources.cancel", new_callable=AsyncMock)
@patch("rgdeploy.deploy.orchestrate.resources.get_status", new_callable=AsyncMock)
def test_run_stop_finished(mock_status, mock_cancel, settings):
    mock_status.return_value = _status("Succeeded")
    assert asyncio.run(run_stop("web-rg", "site-1", settings)) is False
    mock_cancel.assert_not_called()
