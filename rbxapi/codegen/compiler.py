"""Compile documented operations into ``GeneratedMethod`` values.

For every path and HTTP verb the compiler decides where each parameter is
sent (URL, query string, headers, JSON body or form), which parameters are
required, what the method is called and how it is documented. The result is
rendered to Python by ``rbxapi.codegen.renderer``.
"""

import logging
import re

from rbxapi.codegen.models import Operation, Parameter, resolve_schema
from rbxapi.codegen.types import (
    LOCATIONS,
    GeneratedMethod,
    GroupValue,
    LogicalParameter,
    NameValue,
    OutputTarget,
    RequestSpec,
    Value,
)
from rbxapi.codegen.utils import (
    normalize_parameter_name,
    sanitize_method_name,
    to_title_case,
)
from rbxapi.exceptions import EndpointGenerationError, UnsupportedFeatureError

logger = logging.getLogger(__name__)

__all__ = [
    'build_method_doc',
    'build_method_name',
    'build_parameters',
    'build_request',
    'compile_endpoint',
    'compile_operation',
    'find_path_placeholders',
    'order_parameters',
]

_PLACEHOLDER = re.compile(r'\{([a-zA-Z0-9_\-]+)[^}]*\}')
_VERSION_SEGMENT = re.compile(r'^v[\d.]+$')
_PLACEHOLDER_SEGMENT = re.compile(r'^\{.*?\}$')
# Names the generated methods already bind: the instance and the runtime guards
_RESERVED_NAMES = {'self', 'required', 'REQUIRED'}


def find_path_placeholders(path: str) -> dict[str, str]:
    """Map each ``{name}`` placeholder name of a path template to its text."""
    return {match.group(1): match.group(0) for match in _PLACEHOLDER.finditer(path)}


def order_parameters(parameters: list[Parameter]) -> list[Parameter]:
    """Move required parameters first, keeping the relative order otherwise."""
    return [p for p in parameters if p.required] + [
        p for p in parameters if not p.required
    ]


def _type_label(schema, definitions) -> str | None:
    if schema.type == 'array':
        items = resolve_schema(schema.items, definitions)
        return f"array<{items.type or 'any'}>"
    return schema.type


def _parameter_type(param: Parameter, definitions) -> str | None:
    if param.schema_ is not None:
        return _type_label(resolve_schema(param.schema_, definitions), definitions)
    if param.type == 'array' and param.items is not None:
        items = resolve_schema(param.items, definitions)
        return f"array<{items.type or 'any'}>"
    return param.type


def _enum_values(values) -> tuple[str, ...] | None:
    if not values:
        return None
    return tuple(f"'{value}'" for value in values)


def _one_line(text: str | None) -> str:
    return ' '.join((text or '').split())


def _unique(name: str, taken: set[str]) -> str:
    if name in _RESERVED_NAMES:
        name = f'{name}_'
    candidate, index = name, 2
    while candidate in taken:
        candidate = f'{name}{index}'
        index += 1
    taken.add(candidate)
    return candidate


def build_parameters(
    path: str, operation: Operation, definitions: dict
) -> tuple[list[LogicalParameter], dict[str, str], bool]:
    """Resolve the logical parameters of an operation.

    When the operation declares a single parameter whose schema is an object,
    each property of that object becomes a required parameter of its own and
    all of them are sent together, as one object, where the original
    parameter goes.

    Returns:
        The parameters, the path placeholders and whether the parameters
        are grouped into one object.
    """
    placeholders = find_path_placeholders(path)
    declared = order_parameters(operation.parameters)
    taken: set[str] = set()

    if len(declared) == 1 and declared[0].schema_ is not None:
        param = declared[0]
        schema = resolve_schema(param.schema_, definitions)
        if schema.type == 'object' and schema.properties:
            target = OutputTarget(
                param=param.name,
                location='path' if param.name in placeholders else param.in_,
            )
            grouped = []
            for prop_name, prop_node in schema.properties.items():
                prop = resolve_schema(prop_node, definitions)
                grouped.append(
                    LogicalParameter(
                        name=_unique(normalize_parameter_name(prop_name), taken),
                        original_name=prop_name,
                        type=_type_label(prop, definitions),
                        target=target,
                        required=True,
                        description=_one_line(prop.description),
                        enum=_enum_values(prop.enum),
                    )
                )
            return grouped, placeholders, True

    params = []
    for param in declared:
        params.append(
            LogicalParameter(
                name=_unique(normalize_parameter_name(param.name), taken),
                original_name=param.name,
                type=_parameter_type(param, definitions),
                target=OutputTarget(
                    param=param.name,
                    location='path' if param.name in placeholders else param.in_,
                ),
                required=param.required,
                description=_one_line(param.description),
                enum=_enum_values(param.enum),
            )
        )
    return params, placeholders, False


def build_method_doc(
    description: str | None, deprecated: bool, params: list[LogicalParameter]
) -> str:
    """Build the docstring of a generated method.

    Methods without parameters that are not deprecated only get the
    description line.
    """
    description = _one_line(description) or 'No description'
    if not params and not deprecated:
        return description

    lines = [description]
    if deprecated:
        lines += ['', 'Deprecated.']
    if params:
        lines += ['', 'Args:']
        for param in params:
            kind = '|'.join(param.enum) if param.enum else param.type or 'any'
            name = param.name if param.required else f'[{param.name}]'
            line = f'    {name} ({kind})'
            if param.description:
                line += f': {param.description}'
            lines.append(line)
    return '\n'.join(lines)


def build_method_name(api_name: str, path: str) -> str:
    """Derive a method name from a path template.

    Version segments (``v1``, ``v1.1``) and placeholder segments are dropped,
    as is a leading segment naming the API itself when others remain:
    ``/v1/users/authenticated`` of ``Users`` becomes ``Authenticated``.
    """
    parts = [
        part
        for part in re.split(r'[-/]', path)
        if part
        and not _VERSION_SEGMENT.match(part)
        and not _PLACEHOLDER_SEGMENT.match(part)
    ]
    if len(parts) > 1 and re.search(re.escape(api_name), parts[0], re.IGNORECASE):
        parts = parts[1:]
    return ''.join(to_title_case(part) for part in parts)


def _interpolate(
    url: list[str | Value], placeholder: str, value: Value
) -> list[str | Value]:
    for index, part in enumerate(url):
        if isinstance(part, str) and placeholder in part:
            before, after = part.split(placeholder, 1)
            pieces = [piece for piece in (before, value, after) if piece != '']
            return url[:index] + pieces + url[index + 1 :]
    return url


def build_request(
    method_name: str,
    verb: str,
    url: str,
    path: str,
    params: list[LogicalParameter],
    placeholders: dict[str, str],
    grouped: bool,
) -> RequestSpec:
    """Place every parameter in the HTTP call.

    Raises:
        UnsupportedFeatureError: A parameter location has no mapping.
        EndpointGenerationError: More than one parameter claims the body.
    """
    parts: list[str | Value] = [url]
    query: list[tuple[str, Value]] = []
    headers: list[tuple[str, Value]] = []
    form: list[tuple[str, str]] = []
    files: list[tuple[str, str]] = []
    body: Value | None = None
    group_form: GroupValue | None = None

    def unsupported(location, name):
        return UnsupportedFeatureError(
            f"parameter location '{location}' of '{name}' in {verb.upper()} {path}",
            suggestion=f'Supported locations: {", ".join(LOCATIONS)}',
        )

    def place_in_path(target: OutputTarget, value: Value):
        nonlocal parts
        placeholder = placeholders.get(target.param)
        if placeholder is None:
            logger.warning(
                f"Path parameter '{target.param}' has no placeholder in {path}"
            )
            return
        parts = _interpolate(parts, placeholder, value)

    if grouped and params:
        target = params[0].target
        group = GroupValue(tuple((p.original_name, p.name) for p in params))
        if target.location == 'path':
            place_in_path(target, group)
        elif target.location == 'query':
            query.append((target.param, group))
        elif target.location == 'header':
            headers.append((target.param, group))
        elif target.location == 'body':
            body = group
        elif target.location == 'formData':
            group_form = group
        else:
            raise unsupported(target.location, target.param)
    else:
        for param in params:
            location = param.target.location
            value = NameValue(param.name)
            if location == 'path':
                place_in_path(param.target, value)
            elif location == 'query':
                query.append((param.target.param, value))
            elif location == 'header':
                headers.append((param.target.param, value))
            elif location == 'body':
                if body is not None or form or files:
                    raise EndpointGenerationError(
                        method_name,
                        verb,
                        path,
                        reason=f"'{param.original_name}' is a second body parameter",
                    )
                body = value
            elif location == 'formData':
                if body is not None:
                    raise EndpointGenerationError(
                        method_name,
                        verb,
                        path,
                        reason=f"form field '{param.original_name}' conflicts with the body",
                    )
                if param.type == 'file':
                    files.append((param.target.param, param.name))
                else:
                    form.append((param.target.param, param.name))
            else:
                raise unsupported(location, param.original_name)

    return RequestSpec(
        method=verb.lower(),
        url=tuple(parts),
        params=tuple(query),
        headers=tuple(headers),
        json=body,
        data=group_form or (GroupValue(tuple(form)) if form else None),
        files=GroupValue(tuple(files)) if files else None,
    )


def compile_operation(
    name: str,
    verb: str,
    base_url: str,
    path: str,
    operation: Operation,
    definitions: dict,
) -> GeneratedMethod:
    """Compile one HTTP verb of one path."""
    params, placeholders, grouped = build_parameters(path, operation, definitions)
    return GeneratedMethod(
        name=name,
        doc=build_method_doc(operation.summary, operation.deprecated, params),
        parameters=tuple(params),
        request=build_request(
            name, verb, base_url + path, path, params, placeholders, grouped
        ),
    )


def compile_endpoint(
    api_name: str,
    base_url: str,
    path: str,
    operations: dict[str, Operation],
    definitions: dict,
) -> list[GeneratedMethod]:
    """Compile every documented HTTP verb of a path.

    When a path documents several verbs, each method name is prefixed with
    its verb (``GetMessage``, ``PostMessage``).
    """
    base_name = build_method_name(api_name, path)
    prefixed = len(operations) > 1
    methods = []

    for verb, operation in operations.items():
        name = (to_title_case(verb) if prefixed else '') + base_name
        name = sanitize_method_name(name) or to_title_case(verb)
        methods.append(
            compile_operation(name, verb, base_url, path, operation, definitions)
        )

    return methods
