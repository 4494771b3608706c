"""'deploy show', 'deploy list' and 'deploy stop'."""

import logging

from rgdeploy.commands import add_target_arguments, run_command, settings_from_args
from rgdeploy.deploy.orchestrate import run_list, run_show, run_stop
from rgdeploy.deploy.result import format_deployment

logger = logging.getLogger(__name__)


async def _handle_show(args):
    deployment = await run_show(args.resource_group, args.name, settings_from_args(args))
    logger.info(format_deployment(deployment))


async def _handle_list(args):
    deployments = await run_list(args.resource_group, settings_from_args(args))
    if not deployments:
        logger.info(f"No deployments in resource group '{args.resource_group}'.")
        return
    for i, deployment in enumerate(deployments):
        if i:
            logger.info("")
        logger.info(format_deployment(deployment))


async def _handle_stop(args):
    stopped = await run_stop(args.resource_group, args.name, settings_from_args(args), dry_run=args.dry_run)
    if stopped and not args.dry_run:
        logger.info(f"Cancel requested for deployment '{args.name}'.")


def handle_show(args):
    """Handle 'deploy show'."""
    run_command(_handle_show(args))


def handle_list(args):
    """Handle 'deploy list'."""
    run_command(_handle_list(args))


def handle_stop(args):
    """Handle 'deploy stop'."""
    run_command(_handle_stop(args))


def register_status_targets(subparsers):
    """Register 'deploy show', 'deploy list' and 'deploy stop'."""
    show_parser = subparsers.add_parser("show", help="Show the status of a deployment")
    add_target_arguments(show_parser)
    show_parser.set_defaults(func=handle_show)

    list_parser = subparsers.add_parser("list", help="List deployments in a resource group")
    list_parser.add_argument("--resource-group", "-g", required=True, help="Resource group name")
    list_parser.set_defaults(func=handle_list)

    stop_parser = subparsers.add_parser("stop", help="Cancel a running deployment")
    add_target_arguments(stop_parser)
    stop_parser.add_argument("--dry-run", action="store_true", help="Print requests without sending them")
    stop_parser.set_defaults(func=handle_stop)
