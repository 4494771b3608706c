"""'deploy new' and 'deploy validate': deploy a template with dynamic parameters."""

import argparse
import logging
import sys

from rgdeploy.commands import (
    add_parameter_arguments,
    add_source_arguments,
    add_target_arguments,
    run_command,
    settings_from_args,
)
from rgdeploy.deploy.orchestrate import prepare_deployment, run_deploy, run_validate
from rgdeploy.deploy.result import format_deployment
from rgdeploy.deploy.types import DeploymentMode
from rgdeploy.redact import register_secret
from rgdeploy.template.params import coerce_value, parse_parameter_object
from rgdeploy.template.schema import discover
from rgdeploy.template.source import describe_source, resolve_source
from rgdeploy.template.types import ParameterDiscovery

logger = logging.getLogger(__name__)


def fixed_parameter_names(parser: argparse.ArgumentParser) -> set[str]:
    """Names already taken by the command's own options.

    Template parameters with one of these names cannot become dynamic options
    and must be supplied through the parameter object or file instead.
    """
    names = set()
    for action in parser._actions:
        names.add(action.dest)
        for option in action.option_strings:
            stripped = option.lstrip("-")
            names.add(stripped)
            names.add(stripped.replace("-", "_"))
    return names


def build_template_parser(discovery: ParameterDiscovery, prog: str) -> argparse.ArgumentParser:
    """Build a parser with one --<name> option per still-missing template parameter.

    Options are never argparse-required: a missing mandatory parameter is
    reported by check_mandatory() as MissingMandatoryParameter.
    """
    parser = argparse.ArgumentParser(prog=prog, add_help=False, allow_abbrev=False)
    for descriptor in discovery.descriptors:
        label = "required" if descriptor.mandatory else f"default: {descriptor.default!r}"
        parser.add_argument(
            f"--{descriptor.name}",
            dest=descriptor.name,
            default=None,
            metavar=descriptor.type.upper(),
            help=f"{descriptor.help} ({label})",
        )
    return parser


def bind_template_arguments(discovery: ParameterDiscovery, template_args: list[str], prog: str) -> dict:
    """Parse dynamic template options and coerce them to their declared types."""
    namespace = build_template_parser(discovery, prog).parse_args(template_args)
    bindings = {}
    for descriptor in discovery.descriptors:
        raw = getattr(namespace, descriptor.name)
        if raw is not None:
            bindings[descriptor.name] = coerce_value(descriptor, raw)
    return bindings


async def _prepare(args):
    source = resolve_source(args.gallery_template, args.template_file, args.template_uri)
    settings = settings_from_args(args)
    inline_params = parse_parameter_object(args.template_parameter_object)

    discovery = await discover(
        source,
        inline_params,
        args.template_parameter_file,
        bound_names=args.fixed_names | set(vars(args)),
        settings=settings,
    )
    if discovery.descriptors:
        logger.debug(f"Template parameters from {describe_source(source)}: {', '.join(discovery.names)}")
    bindings = bind_template_arguments(discovery, args.template_args, args.prog)

    request = await prepare_deployment(
        resource_group=args.resource_group,
        name=args.name,
        source=source,
        inline_params=inline_params,
        parameter_file=args.template_parameter_file,
        bindings=bindings,
        mode=DeploymentMode.parse(args.mode),
        template_version=args.template_version,
        discovery=discovery,
        settings=settings,
    )
    values = {name.lower(): value for name, value in request.parameters.items()}
    for descriptor in discovery.declared:
        if descriptor.is_secure and descriptor.name.lower() in values:
            register_secret(values[descriptor.name.lower()])
    return settings, request


async def _handle_new(args):
    settings, request = await _prepare(args)
    deployment = await run_deploy(request, settings, wait=args.wait, timeout=args.timeout, dry_run=args.dry_run)
    if deployment is None:
        logger.info("Deployment submitted (dry-run, not deployed).")
        return
    logger.info(format_deployment(deployment))


async def _handle_validate(args):
    settings, request = await _prepare(args)
    error = await run_validate(request, settings, dry_run=args.dry_run)
    if error is None:
        logger.info("Template validated (dry-run, not sent).")
    elif error:
        logger.error(f"Template is invalid: {error.get('code', '')}: {error.get('message', '')}")
        for detail in error.get("details", []):
            logger.error(f"  {detail.get('code', '')}: {detail.get('message', '')}")
        sys.exit(1)
    else:
        logger.info("Template is valid.")


def handle_new(args):
    """Handle 'deploy new'."""
    run_command(_handle_new(args))


def handle_validate(args):
    """Handle 'deploy validate'."""
    run_command(_handle_validate(args))


def _add_common(parser):
    add_target_arguments(parser)
    add_source_arguments(parser)
    add_parameter_arguments(parser)
    parser.add_argument("--template-version", default=None, help="Expected content version of the template")
    parser.add_argument(
        "--mode",
        default=DeploymentMode.INCREMENTAL.value,
        choices=[m.value for m in DeploymentMode],
        type=lambda v: DeploymentMode.parse(v).value,
        help="Deployment mode (default: Incremental)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Print requests without sending them")
    parser.set_defaults(accepts_template_args=True, fixed_names=fixed_parameter_names(parser), prog=parser.prog)


def register_new_target(subparsers):
    """Register 'deploy new'."""
    parser = subparsers.add_parser(
        "new",
        help="Deploy a template to a resource group",
        description="Template parameters not given by object or file are accepted as --<parameterName> VALUE.",
        allow_abbrev=False,
    )
    parser.add_argument("--wait", action="store_true", help="Wait until the deployment finishes")
    parser.add_argument("--timeout", type=float, default=None, help="Seconds to wait with --wait (default: from config)")
    _add_common(parser)
    parser.set_defaults(func=handle_new)


def register_validate_target(subparsers):
    """Register 'deploy validate'."""
    parser = subparsers.add_parser(
        "validate",
        help="Validate a template and parameters without deploying",
        allow_abbrev=False,
    )
    _add_common(parser)
    parser.set_defaults(func=handle_validate)
