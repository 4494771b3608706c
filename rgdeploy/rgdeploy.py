#!/usr/bin/env python3
"""Resource group template deployment tools: CLI entrypoint."""

import argparse

from rgdeploy.commands.deploy import register_deploy_command
from rgdeploy.commands.template import register_template_command
from rgdeploy.logging_setup import setup_cli_logging


def build_parser():
    parser = argparse.ArgumentParser(prog="rgdeploy", description="Resource group template deployment tools")
    parser.add_argument("--config", default=None, help="Settings file (default: $RGDEPLOY_CONFIG or ~/.rgdeploy.yaml)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_deploy_command(subparsers)
    register_template_command(subparsers)
    return parser


def main(argv=None):
    parser = build_parser()
    # Template parameters are only known once the template is read, so
    # unrecognized options are handed to commands that accept them.
    args, template_args = parser.parse_known_args(argv)
    if template_args and not getattr(args, "accepts_template_args", False):
        parser.error(f"unrecognized arguments: {' '.join(template_args)}")
    args.template_args = template_args

    setup_cli_logging(verbose=args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
