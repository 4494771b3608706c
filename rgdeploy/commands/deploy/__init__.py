"""'deploy' command: new, validate, show, list and stop."""

from rgdeploy.commands.deploy.new import register_new_target, register_validate_target
from rgdeploy.commands.deploy.status import register_status_targets


def register_deploy_command(subparsers):
    """Register the 'deploy' command with its action subparsers."""
    deploy_parser = subparsers.add_parser("deploy", help="Manage resource group deployments")
    action_subparsers = deploy_parser.add_subparsers(dest="action", required=True)

    register_new_target(action_subparsers)
    register_validate_target(action_subparsers)
    register_status_targets(action_subparsers)
