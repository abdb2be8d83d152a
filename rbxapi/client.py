"""Authenticated HTTP client used by generated API classes.

Every request carries the session cookie. Successful responses are unwrapped
to their payload, expired sessions are reported through a callback, and
requests rejected for a missing CSRF token are replayed once after the token
has been refreshed.
"""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from rbxapi.exceptions import ApiError, ConfigurationError

logger = logging.getLogger(__name__)

__all__ = ('AuthenticatedClient', 'create_client', 'XCSRF_ENDPOINT')

# POST endpoint whose 403 response carries a fresh X-CSRF token
XCSRF_ENDPOINT = 'https://auth.roblox.com/v2/logout'
XCSRF_HEADER = 'X-CSRF-TOKEN'


def _payload(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _compact(mapping: dict | None) -> dict | None:
    # Optional arguments left as None are not sent
    if mapping is None:
        return None
    return {key: value for key, value in mapping.items() if value is not None}


def _header_map(headers: dict | None) -> dict | None:
    headers = _compact(headers)
    if headers is None:
        return None
    return {key: str(value) for key, value in headers.items()}


def _error_list(response: httpx.Response) -> list:
    try:
        body = response.json()
    except ValueError:
        return []
    if isinstance(body, dict) and isinstance(body.get('errors'), list):
        return body['errors']
    return []


def _api_error(error: httpx.HTTPStatusError) -> ApiError:
    response = error.response
    message = str(error)
    errors = _error_list(response)
    if errors:
        first = errors[0]
        detail = first.get('message') if isinstance(first, dict) else first
        message = f'{message}: {detail}'
    return ApiError(
        message,
        status_code=response.status_code,
        response=response,
        errors=errors,
    )


class AuthenticatedClient:
    """Cookie-authenticated wrapper around ``httpx.AsyncClient``.

    Example:
        >>> async with create_client(token) as client:
        ...     user = await client.get('https://users.roblox.com/v1/users/1')
    """

    def __init__(
        self,
        token: str,
        on_token_expired: Callable[[], None] | None = None,
        **options: Any,
    ):
        """Initialize the client.

        Args:
            token: Session token (.ROBLOSECURITY cookie value).
            on_token_expired: Called without arguments when a request is
                rejected with 401.
            **options: Extra keyword arguments for ``httpx.AsyncClient``.
        """
        headers = {'Cookie': f'.ROBLOSECURITY={token};'}
        headers.update(options.pop('headers', None) or {})
        self.on_token_expired = on_token_expired
        self.http = httpx.AsyncClient(headers=headers, **options)

    @property
    def headers(self) -> httpx.Headers:
        """Default headers sent with every request."""
        return self.http.headers

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict | None = None,
        headers: dict | None = None,
        json: Any = None,
        data: dict | None = None,
        files: dict | None = None,
    ) -> Any:
        """Send a request and return the decoded response payload.

        Raises:
            ApiError: The server answered with an error status.
            ConfigurationError: The CSRF refresh endpoint did not return a token.
            httpx.TransportError: The request could not be sent.
        """
        return await self._send(
            method,
            url,
            refresh=True,
            params=_compact(params),
            headers=_header_map(headers),
            json=json,
            data=_compact(data),
            files=_compact(files),
        )

    async def get(self, url: str, **kwargs: Any) -> Any:
        return await self.request('get', url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        return await self.request('post', url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> Any:
        return await self.request('patch', url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Any:
        return await self.request('put', url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        return await self.request('delete', url, **kwargs)

    async def _send(self, method: str, url: str, *, refresh: bool, **kwargs: Any) -> Any:
        response = await self.http.request(method, url, **kwargs)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as error:
            return await self._handle_error(error, method, url, refresh, kwargs)
        return _payload(response)

    async def _handle_error(
        self,
        error: httpx.HTTPStatusError,
        method: str,
        url: str,
        refresh: bool,
        kwargs: dict,
    ) -> Any:
        status = error.response.status_code

        if status == 401:
            # The session cookie is invalid or outdated
            if self.on_token_expired:
                self.on_token_expired()
        elif status == 403 and url == XCSRF_ENDPOINT:
            token = error.response.headers.get(XCSRF_HEADER)
            if not token:
                raise ConfigurationError(
                    'Cannot get X-CSRF-TOKEN, change API endpoint'
                ) from error
            logger.debug('X-CSRF token refreshed')
            self.http.headers[XCSRF_HEADER] = token
            return None
        elif status == 403 and refresh:
            await self._send('post', XCSRF_ENDPOINT, refresh=False)
            return await self._send(method, url, refresh=False, **kwargs)

        raise _api_error(error) from error

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> 'AuthenticatedClient':
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def create_client(
    token: str,
    on_token_expired: Callable[[], None] | None = None,
    **options: Any,
) -> AuthenticatedClient:
    """Create the authenticated client shared by all generated API classes.

    Args:
        token: Session token (.ROBLOSECURITY cookie value).
        on_token_expired: Called without arguments when the session expires.
        **options: Extra keyword arguments for ``httpx.AsyncClient``.

    Returns:
        A configured AuthenticatedClient.
    """
    return AuthenticatedClient(token, on_token_expired, **options)
