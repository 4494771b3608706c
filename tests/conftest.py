"""Shared pytest fixtures for all test modules."""

import json
import os
import subprocess
import sys

import httpx
import pytest

import rgdeploy.redact as redact_module
from rgdeploy.config import Settings


PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root, tmp_path_factory):
    """Return a callable that invokes the rgdeploy CLI as a subprocess."""
    home = tmp_path_factory.mktemp("home")

    def _run(*args, env=None):
        full_env = dict(os.environ)
        full_env.pop("AZURE_ACCESS_TOKEN", None)
        full_env.pop("RGDEPLOY_CONFIG", None)
        full_env["HOME"] = str(home)
        full_env.update(env or {})
        result = subprocess.run(
            [sys.executable, "-m", "rgdeploy.rgdeploy", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env=full_env,
        )
        return result.returncode, result.stdout, result.stderr

    return _run


# ── Unit-test fixtures ──────────────────────────────────────────────


SAMPLE_TEMPLATE = {
    "$schema": "https://schema.management.azure.com/schemas/2015-01-01/deploymentTemplate.json#",
    "contentVersion": "1.0.0.0",
    "parameters": {
        "siteName": {
            "type": "string",
            "metadata": {"description": "Name of the web site"},
        },
        "sku": {
            "type": "string",
            "defaultValue": "Free",
            "allowedValues": ["Free", "Shared", "Standard"],
        },
        "workerCount": {"type": "int", "defaultValue": 1},
        "adminPassword": {"type": "securestring"},
        "tags": {"type": "object", "defaultValue": {}},
    },
    "resources": [],
}


@pytest.fixture
def sample_template():
    """Return a fresh copy of the sample template dict."""
    return json.loads(json.dumps(SAMPLE_TEMPLATE))


@pytest.fixture
def write_json(tmp_path):
    """Return a factory that writes a JSON document under tmp_path."""

    def _write(name, content):
        path = tmp_path / name
        if isinstance(content, str):
            path.write_text(content)
        else:
            path.write_text(json.dumps(content))
        return str(path)

    return _write


@pytest.fixture
def template_file(write_json, sample_template):
    """Path to the sample template written to disk."""
    return write_json("azuredeploy.json", sample_template)


@pytest.fixture
def settings():
    return Settings(
        subscription_id="00000000-0000-0000-0000-000000000000",
        access_token="test-access-token-value",
        api_url="https://management.example.com",
        gallery_url="https://gallery.example.com",
        poll_interval=0,
        timeout=5,
    )


@pytest.fixture
def mock_http(monkeypatch):
    """Route every httpx.AsyncClient through a MockTransport.

    Returns a function that installs a handler(request) -> httpx.Response and
    the list of requests seen so far.
    """
    real_client = httpx.AsyncClient
    seen = []

    def _install(handler):
        def _recording(request):
            seen.append(request)
            return handler(request)

        def _client(**kwargs):
            return real_client(transport=httpx.MockTransport(_recording), **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", _client)
        return seen

    return _install


@pytest.fixture(autouse=True)
def _reset_redaction():
    """Keep secrets registered by one test from leaking into the next."""
    redact_module._registered.clear()
    redact_module._patterns = None
    yield
    redact_module._registered.clear()
    redact_module._patterns = None
