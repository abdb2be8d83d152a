"""Discovery of API base URLs from public listing pages."""

import asyncio
import logging

from rbxapi.codegen.fetcher import Fetcher
from rbxapi.config import EndpointSource
from rbxapi.exceptions import DiscoveryError, RbxApiError

logger = logging.getLogger(__name__)

__all__ = ['fetch_api_list', 'merge_api_lists']


def merge_api_lists(lists: list[list[str]], excludes: list[str]) -> list[str]:
    """Merge candidate lists, dropping duplicates and excluded URLs.

    The first occurrence of a URL decides its position.
    """
    merged = dict.fromkeys(url for urls in lists for url in urls)
    excluded = set(excludes)
    return [url for url in merged if url not in excluded]


async def _fetch_source(fetcher: Fetcher, source: EndpointSource) -> list[str]:
    try:
        return source.parse(await fetcher.get_text(source.url))
    except RbxApiError as e:
        logger.warning(f'Source "{source.url}" is not available: {e}')
        return []


async def fetch_api_list(
    fetcher: Fetcher, sources: list[EndpointSource], excludes: list[str]
) -> list[str]:
    """Retrieve the list of API base URLs from every source.

    A source that cannot be fetched is skipped with a warning.

    Raises:
        DiscoveryError: No source produced a usable URL.
    """
    lists = await asyncio.gather(*(_fetch_source(fetcher, s) for s in sources))
    api_list = merge_api_lists(list(lists), excludes)
    if not api_list:
        raise DiscoveryError([source.url for source in sources])
    logger.info(f'Discovered {len(api_list)} API endpoints')
    return api_list
