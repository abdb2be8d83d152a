"""Render compiled methods as Python AST.

Each ``GeneratedMethod`` becomes an ``async def`` on its version class::

    async def Friends(self, *, userId: int = REQUIRED) -> Any:
        if userId is REQUIRED:
            required('userId', 'Friends')
        return await self.client.request('get', f'https://friends.roblox.com/v1/users/{userId}/friends')
"""

import ast

from rbxapi.codegen.ast_utils import (
    _argument,
    _assign,
    _async_func,
    _attr,
    _call,
    _class,
    _dict,
    _docstring,
    _func,
    _name,
    _subscript,
    _union_expr,
)
from rbxapi.codegen.types import GeneratedMethod, GroupValue, LogicalParameter, Value

__all__ = [
    'annotation_for',
    'render_class',
    'render_method',
    'render_url',
    'render_value',
]

ImportDict = dict[str, set[str]]

_PRIMITIVES = {
    'string': 'str',
    'integer': 'int',
    'number': 'float',
    'boolean': 'bool',
    'object': 'dict',
}


def annotation_for(type_label: str | None) -> tuple[ast.expr | None, ImportDict]:
    """Map a documented type (``integer``, ``array<string>``...) to an annotation.

    Returns:
        The annotation, or None for unknown types, and the imports it needs.
    """
    if not type_label:
        return None, {}
    if type_label.startswith('array<') and type_label.endswith('>'):
        inner, imports = annotation_for(type_label[len('array<') : -1])
        if inner is None:
            inner, imports = _name('Any'), {'typing': {'Any'}}
        return _subscript('list', inner), imports
    if type_label == 'array':
        return _name('list'), {}
    if type_label == 'file':
        return _name('Any'), {'typing': {'Any'}}
    if type_label in _PRIMITIVES:
        return _name(_PRIMITIVES[type_label]), {}
    return None, {}


def render_value(value: Value) -> ast.expr:
    if isinstance(value, GroupValue):
        return _dict((key, _name(name)) for key, name in value.fields)
    return _name(value.name)


def render_url(parts: tuple) -> ast.expr:
    """Build a constant, or an f-string when values are interpolated."""
    if all(isinstance(part, str) for part in parts):
        return ast.Constant(value=''.join(parts))

    return ast.JoinedStr(
        values=[
            ast.Constant(value=part)
            if isinstance(part, str)
            else ast.FormattedValue(value=render_value(part), conversion=-1)
            for part in parts
        ]
    )


def _parameter_arg(param: LogicalParameter, imports: ImportDict) -> ast.arg:
    annotation, needed = annotation_for(param.type)
    for module, names in needed.items():
        imports.setdefault(module, set()).update(names)
    if annotation is not None and not param.required:
        annotation = _union_expr([annotation, ast.Constant(value=None)])
    return _argument(param.name, annotation)


def _required_guard(param: LogicalParameter, method_name: str) -> ast.If:
    return ast.If(
        test=ast.Compare(
            left=_name(param.name), ops=[ast.Is()], comparators=[_name('REQUIRED')]
        ),
        body=[
            ast.Expr(
                value=_call(
                    _name('required'),
                    args=[
                        ast.Constant(value=param.name),
                        ast.Constant(value=method_name),
                    ],
                )
            )
        ],
        orelse=[],
    )


def _request_call(method: GeneratedMethod) -> ast.Await:
    request = method.request
    keywords = []

    if request.params:
        keywords.append(
            ast.keyword(
                arg='params',
                value=_dict((key, render_value(v)) for key, v in request.params),
            )
        )
    if request.headers:
        keywords.append(
            ast.keyword(
                arg='headers',
                value=_dict((key, render_value(v)) for key, v in request.headers),
            )
        )
    if request.json is not None:
        keywords.append(ast.keyword(arg='json', value=render_value(request.json)))
    if request.data is not None:
        keywords.append(ast.keyword(arg='data', value=render_value(request.data)))
    if request.files is not None:
        keywords.append(ast.keyword(arg='files', value=render_value(request.files)))

    return ast.Await(
        value=_call(
            _attr(_attr('self', 'client'), 'request'),
            args=[ast.Constant(value=request.method), render_url(request.url)],
            keywords=keywords,
        )
    )


def render_method(method: GeneratedMethod) -> tuple[ast.AsyncFunctionDef, ImportDict]:
    """Render one compiled method.

    Every parameter is keyword-only. Required parameters default to the
    ``REQUIRED`` sentinel and are checked when the method is called, so an
    explicit ``None`` is a valid value.

    Returns:
        The method definition and the imports it needs.
    """
    imports: ImportDict = {'typing': {'Any'}}
    kwonlyargs = [_parameter_arg(param, imports) for param in method.parameters]
    kw_defaults = [
        _name('REQUIRED') if param.required else ast.Constant(value=None)
        for param in method.parameters
    ]

    body: list[ast.stmt] = [_docstring(method.doc)]
    for param in method.required_parameters:
        body.append(_required_guard(param, method.name))
    if method.required_parameters:
        imports['rbxapi.runtime'] = {'REQUIRED', 'required'}
    body.append(ast.Return(value=_request_call(method)))

    return _async_func(
        name=method.name,
        args=[_argument('self')],
        body=body,
        kwonlyargs=kwonlyargs,
        kw_defaults=kw_defaults,
        returns=_name('Any'),
    ), imports


def render_class(
    name: str, doc: str, methods: list[GeneratedMethod]
) -> tuple[ast.ClassDef, ImportDict]:
    """Render a version class holding the shared client and its methods."""
    imports: ImportDict = {'rbxapi.client': {'AuthenticatedClient'}}

    init = _func(
        name='__init__',
        args=[_argument('self'), _argument('client', _name('AuthenticatedClient'))],
        body=[
            _docstring('Bind the client used for web requests.'),
            _assign(_attr('self', 'client'), _name('client')),
        ],
        returns=ast.Constant(value=None),
    )

    body: list[ast.stmt] = [_docstring(doc), init]
    for method in methods:
        method_ast, needed = render_method(method)
        body.append(method_ast)
        for module, names in needed.items():
            imports.setdefault(module, set()).update(names)

    return _class(name, body), imports
