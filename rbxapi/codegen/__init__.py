"""Code generation module for rbxapi.

This module discovers the Roblox web APIs, loads their Swagger documents and
turns every operation into an async method of a generated client package.

Main Components:
    - Codegen: The orchestrator running discovery, compilation and emission
    - Fetcher: Shared HTTP client with a cap on concurrent requests
    - compile_endpoint: Turns one Swagger path into generated methods
    - ApiEmitter: Writes version modules and the package index

Example:
    >>> from rbxapi.codegen import Codegen
    >>> from rbxapi.config import CodegenConfig
    >>>
    >>> codegen = Codegen(CodegenConfig(output='./roblox_api'))
    >>> codegen.generate()
"""

from rbxapi.codegen.codegen import Codegen
from rbxapi.codegen.compiler import compile_endpoint, compile_operation
from rbxapi.codegen.discovery import fetch_api_list, merge_api_lists
from rbxapi.codegen.emitter import (
    ApiEmitter,
    build_index_module,
    build_version_module,
)
from rbxapi.codegen.fetcher import Fetcher
from rbxapi.codegen.metadata import MetadataResult, fetch_metadata
from rbxapi.codegen.tree import build_api_tree
from rbxapi.codegen.types import ApiNode, ApiTree, GeneratedMethod, RequestSpec

__all__ = [
    # Main codegen class
    'Codegen',
    # Discovery
    'Fetcher',
    'fetch_api_list',
    'merge_api_lists',
    'fetch_metadata',
    'MetadataResult',
    # Compilation
    'build_api_tree',
    'compile_endpoint',
    'compile_operation',
    'ApiNode',
    'ApiTree',
    'GeneratedMethod',
    'RequestSpec',
    # Code emission
    'ApiEmitter',
    'build_index_module',
    'build_version_module',
]
