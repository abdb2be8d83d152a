"""Write the generated package to disk.

The output directory receives one module per API version under ``apis/``
and a root ``__init__.py`` that wires every version class to one shared
authenticated client::

    roblox_api/
        __init__.py        # RbxApiClient, create_rbx_client
        apis/
            __init__.py
            Users_v1.py    # class Users_v1
            Friends_v1.py
"""

import ast
import logging
from pathlib import Path

import black
from upath import UPath

from rbxapi.codegen.ast_utils import (
    ImportCollector,
    _all,
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
from rbxapi.codegen.renderer import render_class
from rbxapi.codegen.types import ApiNode, ApiTree
from rbxapi.codegen.utils import version_identifier, version_key
from rbxapi.exceptions import OutputError

logger = logging.getLogger(__name__)

__all__ = ['ApiEmitter', 'build_index_module', 'build_version_module']

# The factory resolves the current user through this method when it exists
IDENTITY_API = 'Users'
IDENTITY_VERSION = 'v1'
IDENTITY_METHOD = 'Authenticated'


def version_class_name(api_name: str, version: str) -> str:
    return f'{api_name}_{version_identifier(version)}'


def build_version_module(api: ApiNode, version: str) -> list[ast.stmt]:
    """Build the module holding the class of one API version."""
    class_name = version_class_name(api.meta.identifier, version)
    class_def, imports = render_class(class_name, api.meta.title, api.versions[version])

    collector = ImportCollector()
    collector.add_imports(imports)
    return [*collector.to_ast(), _all([class_name]), class_def]


def _has_identity_lookup(tree: ApiTree) -> bool:
    api = tree.apis.get(IDENTITY_API)
    if api is None:
        return False
    for version in api.generated_versions():
        if version_key(version) == IDENTITY_VERSION:
            return any(m.name == IDENTITY_METHOD for m in api.versions[version])
    return False


def _token_args() -> tuple[list[ast.arg], list[ast.expr]]:
    # Callable[[], None] | None
    signature = ast.Tuple(
        elts=[ast.List(elts=[], ctx=ast.Load()), ast.Constant(value=None)],
        ctx=ast.Load(),
    )
    callback = _union_expr(
        [_subscript('Callable', signature), ast.Constant(value=None)]
    )
    return (
        [_argument('token', _name('str')), _argument('on_token_expired', callback)],
        [ast.Constant(value=None)],
    )


def _client_class(tree: ApiTree, collector: ImportCollector) -> ast.ClassDef:
    args, defaults = _token_args()
    init_body: list[ast.stmt] = [
        _docstring(
            'Args:\n'
            '    token: Authorization token (.ROBLOSECURITY).\n'
            '    on_token_expired: Called when the token turns out to be expired.'
        ),
        _assign(
            _attr('self', 'direct'),
            _call(_name('create_client'), [_name('token'), _name('on_token_expired')]),
        ),
        _assign(_attr('self', 'user_id'), ast.Constant(value=None)),
        _assign(_attr('self', 'user_name'), ast.Constant(value=None)),
    ]

    for name, api in tree.apis.items():
        versions = []
        for version in api.generated_versions():
            class_name = version_class_name(name, version)
            collector.add_import(f'.apis.{class_name}', class_name)
            versions.append(
                (
                    version_key(version),
                    _call(_name(class_name), [_attr('self', 'direct')]),
                )
            )
        init_body.append(_assign(_attr('self', name), _dict(versions)))

    init = _func(
        name='__init__',
        args=[_argument('self'), *args],
        body=init_body,
        defaults=defaults,
        returns=ast.Constant(value=None),
    )
    return _class(
        'RbxApiClient',
        [_docstring('General class for working with the Roblox API.'), init],
    )


def _factory(tree: ApiTree) -> ast.AsyncFunctionDef:
    args, defaults = _token_args()
    body: list[ast.stmt] = [
        _docstring(
            'Create an RbxApiClient and resolve the authenticated user.\n\n'
            'An expired token does not raise: on_token_expired has already been\n'
            'called by the client, and the returned instance has no user_id.'
        ),
        _assign(
            _name('client'),
            _call(_name('RbxApiClient'), [_name('token'), _name('on_token_expired')]),
        ),
    ]

    if _has_identity_lookup(tree):
        lookup = ast.Await(
            value=_call(
                _attr(
                    _subscript(
                        _attr('client', IDENTITY_API), ast.Constant(IDENTITY_VERSION)
                    ),
                    IDENTITY_METHOD,
                )
            )
        )
        body.append(
            ast.Try(
                body=[
                    _assign(_name('user_info'), lookup),
                    _assign(
                        _attr('client', 'user_id'),
                        _subscript(_name('user_info'), ast.Constant('id')),
                    ),
                    _assign(
                        _attr('client', 'user_name'),
                        _subscript(_name('user_info'), ast.Constant('name')),
                    ),
                ],
                handlers=[
                    ast.ExceptHandler(
                        type=_name('ApiError'),
                        name='error',
                        body=[
                            ast.If(
                                test=ast.Compare(
                                    left=_attr('error', 'status_code'),
                                    ops=[ast.NotEq()],
                                    comparators=[ast.Constant(401)],
                                ),
                                body=[ast.Raise(exc=None, cause=None)],
                                orelse=[],
                            )
                        ],
                    )
                ],
                orelse=[],
                finalbody=[],
            )
        )

    body.append(ast.Return(value=_name('client')))
    return _async_func(
        name='create_rbx_client',
        args=args,
        body=body,
        defaults=defaults,
        returns=_name('RbxApiClient'),
    )


def build_index_module(tree: ApiTree) -> list[ast.stmt]:
    """Build the root module exposing ``RbxApiClient`` and ``create_rbx_client``."""
    collector = ImportCollector()
    collector.add_imports(
        {
            'collections.abc': {'Callable'},
            'rbxapi.client': {'create_client'},
        }
    )
    client_class = _client_class(tree, collector)
    factory = _factory(tree)
    if _has_identity_lookup(tree):
        collector.add_import('rbxapi.exceptions', 'ApiError')

    return [
        *collector.to_ast(),
        _all(['RbxApiClient', 'create_rbx_client']),
        client_class,
        factory,
    ]


class ApiEmitter:
    """Emits the generated package to a directory.

    Every module is checked with ``compile()`` before it is written, then
    formatted with black if requested.
    """

    def __init__(
        self,
        output_dir: str | Path | UPath,
        format_code: bool = True,
        validate_syntax: bool = True,
        year: int | None = None,
    ):
        """Initialize the emitter.

        Args:
            output_dir: Directory where the package will be written.
            format_code: Whether to format code with black.
            validate_syntax: Whether to validate Python syntax before writing.
            year: Year written in the header comment of every module.
        """
        self.output_dir = UPath(output_dir)
        self.format_code = format_code
        self.validate_syntax = validate_syntax
        self.year = year
        self._written_files: list[str] = []

    @property
    def written_files(self) -> list[str]:
        return list(self._written_files)

    def emit(self, tree: ApiTree) -> list[str]:
        """Replace the previous output with the package for ``tree``.

        Version modules are written one by one, the root module last. If a
        module fails, the ones written before it are kept.

        Returns:
            Paths of the written files.
        """
        self.clean()
        self._write_file('apis/__init__.py', '')

        for api in tree.apis.values():
            for version in api.generated_versions():
                name = version_class_name(api.meta.identifier, version)
                self.emit_module(build_version_module(api, version), f'apis/{name}')

        self.emit_module(build_index_module(tree), '__init__')
        return self.written_files

    def clean(self) -> None:
        """Remove the modules written by a previous run."""
        try:
            apis_dir = self.output_dir / 'apis'
            if apis_dir.exists():
                _remove_tree(apis_dir)
            index = self.output_dir / '__init__.py'
            if index.exists():
                index.unlink()
        except OSError as e:
            raise OutputError(str(self.output_dir), cause=e)

    def emit_module(self, body: list[ast.stmt], name: str) -> str:
        """Emit a complete Python module to ``{name}.py``.

        Raises:
            SyntaxError: The generated code is not valid Python.
            OutputError: The file could not be written.
        """
        module = ast.Module(body=body, type_ignores=[])
        ast.fix_missing_locations(module)
        source = ast.unparse(module) + '\n'

        if self.validate_syntax:
            self._validate_syntax(source, name)

        if self.format_code:
            source = self._format_source(source)

        if self.year is not None:
            source = f'# Automatically generated by rbxapi ({self.year})\n{source}'

        return self._write_file(f'{name}.py', source)

    def _write_file(self, filename: str, content: str) -> str:
        file_path = self.output_dir / filename
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding='utf-8')
        except OSError as e:
            raise OutputError(str(file_path), cause=e)
        logger.debug(f'Wrote {file_path}')
        self._written_files.append(str(file_path))
        return str(file_path)

    def _validate_syntax(self, source: str, name: str) -> None:
        try:
            compile(source, f'{name}.py', 'exec')
        except SyntaxError as e:
            raise SyntaxError(f'Generated code for {name} has invalid syntax: {e}')

    def _format_source(self, source: str) -> str:
        return black.format_str(source, mode=black.Mode())


def _remove_tree(path: UPath) -> None:
    for child in path.iterdir():
        if child.is_dir():
            _remove_tree(child)
        else:
            child.unlink()
    path.rmdir()
