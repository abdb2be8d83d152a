"""Code generation module for rbxapi.

This module provides the Codegen class that runs the whole pipeline:
discovery, metadata, documentation, compilation and emission.
"""

import asyncio
import logging

import httpx
from rich.console import Console

from rbxapi.codegen.discovery import fetch_api_list
from rbxapi.codegen.emitter import ApiEmitter
from rbxapi.codegen.fetcher import Fetcher
from rbxapi.codegen.metadata import fetch_metadata
from rbxapi.codegen.tree import build_api_tree
from rbxapi.codegen.types import ApiTree
from rbxapi.config import CodegenConfig

logger = logging.getLogger(__name__)


class Codegen:
    """Generates the API client package.

    Every network stage shares one ``Fetcher``, so at most
    ``config.max_concurrent_requests`` requests are in flight at any time.
    Files are only written once the whole API tree has been compiled.

    Attributes:
        config: The CodegenConfig to generate with.
        total_count: Number of discovered endpoints, after a run.
        available_count: Number of endpoints that returned metadata, after a run.

    Example:
        >>> from rbxapi.config import CodegenConfig
        >>> from rbxapi.codegen.codegen import Codegen
        >>>
        >>> codegen = Codegen(CodegenConfig(output='./roblox_api'))
        >>> codegen.generate()
    """

    def __init__(
        self,
        config: CodegenConfig,
        http_client: httpx.AsyncClient | None = None,
        console: Console | None = None,
    ):
        """Initialize the code generator.

        Args:
            config: Generation settings.
            http_client: Optional client for all fetches (used by tests).
            console: Optional console progress messages are printed to.
        """
        self.config = config
        self.total_count = 0
        self.available_count = 0
        self._http_client = http_client
        self._console = console

    def _report(self, message: str) -> None:
        logger.info(message)
        if self._console:
            self._console.print(message)

    async def build_tree(self, fetcher: Fetcher) -> ApiTree:
        """Discover the APIs and compile their documentation.

        Raises:
            DiscoveryError: No API endpoint was found.
            CodeGenerationError: An operation cannot be compiled.
            UnsupportedFeatureError: A parameter location has no mapping.
        """
        self._report('Request for a list of Roblox endpoints...')
        api_list = await fetch_api_list(
            fetcher, self.config.sources, self.config.excludes
        )

        result = await fetch_metadata(fetcher, api_list)
        self.total_count = len(api_list)
        self.available_count = result.available_count
        self._report(
            f'Done. {self.available_count} / {self.total_count} '
            'endpoints are available.'
        )

        self._report('Construction of the API tree.')
        return await build_api_tree(fetcher, result.apis)

    async def run(self) -> list[str]:
        """Run the pipeline and return the paths of the written files."""
        fetcher = Fetcher(
            max_concurrent_requests=self.config.max_concurrent_requests,
            timeout=self.config.timeout,
            http_client=self._http_client,
        )
        async with fetcher:
            tree = await self.build_tree(fetcher)

        self._report('The tree is ready. File generation started.')
        emitter = ApiEmitter(
            self.config.output,
            format_code=self.config.format_code,
            year=self.config.year,
        )
        return emitter.emit(tree)

    def generate(self) -> list[str]:
        """Generate the package synchronously."""
        return asyncio.run(self.run())
