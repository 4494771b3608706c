"""'template params' command: list the parameters a template still needs."""

import logging

from rgdeploy.commands import add_parameter_arguments, add_source_arguments, run_command, settings_from_args
from rgdeploy.template.params import parse_parameter_object
from rgdeploy.template.schema import discover
from rgdeploy.template.source import describe_source, resolve_source

logger = logging.getLogger(__name__)


async def _handle_params(args):
    source = resolve_source(args.gallery_template, args.template_file, args.template_uri)
    settings = settings_from_args(args)
    discovery = await discover(
        source,
        parse_parameter_object(args.template_parameter_object),
        args.template_parameter_file,
        settings=settings,
    )

    logger.info(f"Template: {describe_source(source)}")
    if not discovery.declared:
        logger.info("The template declares no parameters.")
        return

    missing = {d.name for d in discovery.descriptors}
    for descriptor in discovery.declared:
        if descriptor.name not in missing:
            status = "supplied"
        elif descriptor.mandatory:
            status = "required"
        else:
            status = f"optional, default {descriptor.default!r}"
        logger.info(f"  --{descriptor.name} ({descriptor.type}, {status})")
        if descriptor.help != descriptor.name:
            logger.info(f"      {descriptor.help}")
        if descriptor.allowed_values:
            logger.info(f"      allowed: {', '.join(str(v) for v in descriptor.allowed_values)}")


def handle_params(args):
    """Handle 'template params'."""
    run_command(_handle_params(args))


def register_template_command(subparsers):
    """Register the 'template' command."""
    template_parser = subparsers.add_parser("template", help="Inspect deployment templates")
    action_subparsers = template_parser.add_subparsers(dest="action", required=True)

    params_parser = action_subparsers.add_parser("params", help="List template parameters and which are still missing")
    add_source_arguments(params_parser)
    add_parameter_arguments(params_parser)
    params_parser.set_defaults(func=handle_params)
