"""CLI logging setup: simple %(message)s format for standalone commands."""

import logging
import sys

from rgdeploy.redact import SecretRedactingFilter


def setup_cli_logging(verbose=False):
    """Configure root logger with plain message format for CLI commands.

    Produces output identical to print(). With ``verbose``, debug records
    (request URLs, schema fetches) are shown too.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(SecretRedactingFilter())
    root.addHandler(handler)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
