"""Build the API tree: every API, every version, every compiled method."""

import asyncio
import logging

from pydantic import ValidationError

from rbxapi.codegen.compiler import compile_endpoint
from rbxapi.codegen.fetcher import Fetcher
from rbxapi.codegen.models import ApiMetadata, Operation, SchemaDocument
from rbxapi.codegen.types import ApiNode, ApiTree, GeneratedMethod
from rbxapi.exceptions import RbxApiError

logger = logging.getLogger(__name__)

__all__ = ['build_api_tree', 'compile_document']


def _parse_document(content) -> tuple[SchemaDocument, dict[str, dict[str, Operation]]]:
    document = SchemaDocument.model_validate(content)
    return document, {path: document.operations(path) for path in document.paths}


def compile_document(
    meta: ApiMetadata,
    document: SchemaDocument,
    operations: dict[str, dict[str, Operation]] | None = None,
) -> list[GeneratedMethod]:
    """Compile every path of a schema document, in document order."""
    if operations is None:
        operations = {path: document.operations(path) for path in document.paths}

    methods = []
    for path, verbs in operations.items():
        methods.extend(
            compile_endpoint(meta.identifier, meta.url, path, verbs, document.definitions)
        )
    return methods


async def _build_version(
    fetcher: Fetcher, tree: ApiTree, meta: ApiMetadata, version: str
) -> None:
    url = f'{meta.url}/docs/json/{version}'
    try:
        document, operations = _parse_document(await fetcher.get_json(url))
    except (RbxApiError, ValidationError) as e:
        logger.debug(f'Skipping {meta.identifier} {version}: {e}')
        return

    tree.apis[meta.identifier].versions[version] = compile_document(
        meta, document, operations
    )


async def build_api_tree(fetcher: Fetcher, apis: dict[str, ApiMetadata]) -> ApiTree:
    """Fetch the documentation of each API version and compile its methods.

    Versions whose document cannot be fetched or parsed are omitted. Errors
    raised while compiling are not caught and end the run.
    """
    tree = ApiTree(apis={name: ApiNode(meta=meta) for name, meta in apis.items()})

    await asyncio.gather(
        *(
            _build_version(fetcher, tree, meta, version)
            for meta in apis.values()
            for version in meta.versions
        )
    )
    return tree
