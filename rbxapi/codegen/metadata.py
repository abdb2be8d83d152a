"""Fetch the metadata document of every discovered API."""

import asyncio
import dataclasses
import logging

from pydantic import ValidationError

from rbxapi.codegen.fetcher import Fetcher
from rbxapi.codegen.models import ApiMetadata
from rbxapi.codegen.utils import derive_api_name
from rbxapi.exceptions import RbxApiError

logger = logging.getLogger(__name__)

__all__ = ['MetadataResult', 'fetch_metadata']


@dataclasses.dataclass
class MetadataResult:
    apis: dict[str, ApiMetadata]
    available_count: int


async def _fetch_one(fetcher: Fetcher, url: str) -> ApiMetadata | None:
    try:
        meta = await fetcher.get_json(f'{url}/docs/metadata')
    except RbxApiError as e:
        logger.debug(f'{url} is unavailable: {e}')
        return None

    identifier = derive_api_name(url)
    if not identifier:
        logger.debug(f'Cannot derive an API name from {url}')
        return None

    if not isinstance(meta, dict):
        logger.debug(f'Unexpected metadata document at {url}')
        return None

    try:
        return ApiMetadata.model_validate({**meta, 'identifier': identifier, 'url': url})
    except ValidationError as e:
        logger.debug(f'Invalid metadata document at {url}: {e}')
        return None


async def fetch_metadata(fetcher: Fetcher, api_list: list[str]) -> MetadataResult:
    """Request ``{url}/docs/metadata`` for each API.

    Unavailable APIs and URLs without a recognizable sub-domain are left out.
    When two URLs map to the same identifier, the one listed first wins.
    """
    results = await asyncio.gather(*(_fetch_one(fetcher, url) for url in api_list))

    apis: dict[str, ApiMetadata] = {}
    for meta in results:
        if meta is None:
            continue
        if meta.identifier in apis:
            logger.debug(
                f'{meta.url} duplicates {apis[meta.identifier].url}, keeping the first'
            )
            continue
        apis[meta.identifier] = meta

    return MetadataResult(apis=apis, available_count=sum(m is not None for m in results))
