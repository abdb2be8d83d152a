"""rbxapi - Generate an always up-to-date Python client for the Roblox web APIs.

rbxapi discovers the documented Roblox API endpoints, reads their Swagger
documentation and generates one class per API version with an async method
per endpoint. The generated package talks to the APIs through a shared,
cookie-authenticated httpx client that refreshes its X-CSRF token on its own.

Quick Start:
    >>> from rbxapi import Codegen, CodegenConfig
    >>>
    >>> Codegen(CodegenConfig(output='./roblox_api')).generate()

    >>> from roblox_api import create_rbx_client
    >>>
    >>> client = await create_rbx_client(token)
    >>> friends = await client.Friends['v1'].Friends(userId=client.user_id)

CLI Usage:
    $ rbxapi generate --output ./roblox_api
"""

from importlib.metadata import PackageNotFoundError, version

from rbxapi.client import AuthenticatedClient, create_client
from rbxapi.codegen.codegen import Codegen
from rbxapi.config import CodegenConfig, EndpointSource, get_config
from rbxapi.exceptions import (
    ApiError,
    CodeGenerationError,
    ConfigurationError,
    DiscoveryError,
    EndpointGenerationError,
    MissingParameterError,
    OutputError,
    RbxApiError,
    SchemaError,
    SchemaLoadError,
    UnsupportedFeatureError,
)

__all__ = [
    # Generation
    'Codegen',
    'CodegenConfig',
    'EndpointSource',
    'get_config',
    # Runtime
    'AuthenticatedClient',
    'create_client',
    # Exceptions
    'RbxApiError',
    'DiscoveryError',
    'SchemaError',
    'SchemaLoadError',
    'CodeGenerationError',
    'EndpointGenerationError',
    'ConfigurationError',
    'OutputError',
    'UnsupportedFeatureError',
    'MissingParameterError',
    'ApiError',
]

try:
    __version__ = version('rbxapi')
except PackageNotFoundError:
    __version__ = 'unknown'
