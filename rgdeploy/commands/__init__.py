"""Shared helpers for CLI command handlers."""

import asyncio
import logging
import sys

import httpx

from rgdeploy.config import load_settings
from rgdeploy.errors import RgDeployError

logger = logging.getLogger(__name__)


def add_source_arguments(parser):
    """Add the three mutually exclusive template source options.

    Exclusivity is checked by resolve_source() so the error names the
    conflicting options the same way for library and CLI callers.
    """
    parser.add_argument("--gallery-template", default=None, help="Identity of the template in the gallery")
    parser.add_argument("--template-file", default=None, help="Local path to the template file")
    parser.add_argument("--template-uri", default=None, help="URI of the template file")


def add_parameter_arguments(parser):
    """Add the inline parameter object and parameter file options."""
    parser.add_argument(
        "--template-parameter-object",
        default=None,
        help='Template parameters as a JSON object, e.g. \'{"size": "Small"}\'',
    )
    parser.add_argument("--template-parameter-file", default=None, help="JSON file with template parameter values")


def add_target_arguments(parser):
    """Add --resource-group and --name."""
    parser.add_argument("--resource-group", "-g", required=True, help="Target resource group name")
    parser.add_argument("--name", "-n", required=True, help="Deployment name")


def _error_message(response: httpx.Response) -> str:
    """Pull the Resource Manager error message out of a failed response."""
    try:
        error = response.json().get("error", {})
    except ValueError:
        return response.text.strip()
    if not isinstance(error, dict):
        return str(error)
    code = error.get("code", "")
    message = error.get("message", "")
    return f"{code}: {message}" if code else message


def run_command(coro):
    """Run a handler coroutine; report expected failures and exit 1."""
    try:
        return asyncio.run(coro)
    except (RgDeployError, ValueError, FileNotFoundError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except httpx.HTTPStatusError as e:
        logger.error(
            f"Error: {e.request.method} {e.request.url} failed with HTTP {e.response.status_code}. "
            f"{_error_message(e.response)}"
        )
        sys.exit(1)
    except httpx.HTTPError as e:
        logger.error(f"Error: request failed: {e}")
        sys.exit(1)


def settings_from_args(args):
    return load_settings(getattr(args, "config", None))
