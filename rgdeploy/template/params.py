"""Parameter merging: inline object, parameter file and bound dynamic parameters."""

import json
import os

from rgdeploy.errors import (
    MissingMandatoryParameter,
    ParameterFileInvalid,
    ParameterFileNotFound,
    ParameterValueInvalid,
)
from rgdeploy.template.types import ParameterDescriptor, ParameterValueSet

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


def _resolve_path(parameter_file: str) -> str:
    return os.path.abspath(os.path.expanduser(parameter_file))


def load_parameter_file(parameter_file: str) -> dict:
    """Read a parameter file and return {name: value}.

    Accepts the flat form ``{"<name>": {"value": <any>}}`` and the full
    deployment parameters document with a top-level "parameters" object.
    """
    path = _resolve_path(parameter_file)
    if not os.path.isfile(path):
        raise ParameterFileNotFound(f"Parameter file not found: {parameter_file}", name=parameter_file)

    with open(path, encoding="utf-8-sig") as f:
        try:
            content = json.load(f)
        except ValueError as e:
            raise ParameterFileInvalid(f"Parameter file '{parameter_file}' is not valid JSON: {e}", name=parameter_file) from e

    if isinstance(content, dict) and "$schema" in content and isinstance(content.get("parameters"), dict):
        content = content["parameters"]

    if not isinstance(content, dict):
        raise ParameterFileInvalid(f"Parameter file '{parameter_file}' must contain a JSON object", name=parameter_file)

    values = {}
    for name, wrapper in content.items():
        if not isinstance(wrapper, dict) or "value" not in wrapper:
            raise ParameterFileInvalid(
                f"Parameter file '{parameter_file}': entry '{name}' must be an object with a 'value' key",
                name=parameter_file,
            )
        values[name] = wrapper["value"]
    return values


def file_parameter_names(parameter_file: str | None) -> list[str]:
    """Names defined in a parameter file; empty if no path or no file."""
    if not parameter_file or not os.path.isfile(_resolve_path(parameter_file)):
        return []
    return list(load_parameter_file(parameter_file))


def _overlay(merged: dict, values: dict) -> dict:
    # Names match case-insensitively; the later spelling replaces the earlier one in place.
    for name, value in values.items():
        existing = next((key for key in merged if key.lower() == name.lower()), None)
        if existing is None or existing == name:
            merged[name] = value
        else:
            merged = {(name if key == existing else key): (value if key == existing else v) for key, v in merged.items()}
    return merged


def merge(inline_params: dict | None = None, parameter_file: str | None = None, bindings: dict | None = None) -> ParameterValueSet:
    """Merge the three parameter sources into one value set.

    Later sources override earlier ones: inline object, then parameter file,
    then values bound to discovered parameters. Names are matched
    case-insensitively, so each parameter ends up with exactly one value.
    Inputs are not modified.
    """
    merged = _overlay({}, inline_params or {})
    if parameter_file:
        merged = _overlay(merged, load_parameter_file(parameter_file))
    merged = _overlay(merged, bindings or {})
    return ParameterValueSet(merged)


def check_mandatory(declared, values) -> None:
    """Raise MissingMandatoryParameter if a mandatory parameter has no value."""
    supplied = {name.lower() for name in values}
    for descriptor in declared:
        if descriptor.mandatory and descriptor.name.lower() not in supplied:
            raise MissingMandatoryParameter(
                f"Missing value for mandatory template parameter '{descriptor.name}' ({descriptor.help})",
                name=descriptor.name,
            )


def coerce_value(descriptor: ParameterDescriptor, raw: str):
    """Convert a command-line string to the descriptor's declared type."""
    kind = descriptor.normalized_type
    try:
        if kind == "int":
            value = int(raw)
        elif kind == "bool":
            lowered = raw.strip().lower()
            if lowered in _TRUE_STRINGS:
                value = True
            elif lowered in _FALSE_STRINGS:
                value = False
            else:
                raise ValueError(f"expected true or false, got '{raw}'")
        elif kind in ("object", "secureobject"):
            value = json.loads(raw)
            if not isinstance(value, dict):
                raise ValueError("expected a JSON object")
        elif kind == "array":
            value = json.loads(raw)
            if not isinstance(value, list):
                raise ValueError("expected a JSON array")
        else:
            value = raw
    except ValueError as e:
        raise ParameterValueInvalid(
            f"Invalid value for parameter '{descriptor.name}' of type {descriptor.type}: {e}",
            name=descriptor.name,
        ) from e

    if descriptor.allowed_values and value not in descriptor.allowed_values:
        allowed = ", ".join(str(v) for v in descriptor.allowed_values)
        raise ParameterValueInvalid(
            f"Invalid value '{raw}' for parameter '{descriptor.name}'. Allowed values: {allowed}",
            name=descriptor.name,
        )
    return value


def parse_parameter_object(raw: str | None) -> dict:
    """Parse the --template-parameter-object JSON string."""
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError as e:
        raise ParameterValueInvalid(f"--template-parameter-object is not valid JSON: {e}", name="--template-parameter-object") from e
    if not isinstance(value, dict):
        raise ParameterValueInvalid("--template-parameter-object must be a JSON object", name="--template-parameter-object")
    return value
