"""Tests for the authenticated runtime client."""

import asyncio
import json

import httpx
import pytest

from rbxapi.client import XCSRF_ENDPOINT, AuthenticatedClient, create_client
from rbxapi.exceptions import ApiError, ConfigurationError

URL = 'https://friends.roblox.com/v1/my/friends/count'


class Recorder:
    """MockTransport handler recording requests and answering from a function."""

    def __init__(self, respond):
        self.respond = respond
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    def urls(self) -> list[str]:
        return [str(request.url) for request in self.requests]


def _client(respond, on_token_expired=None) -> tuple[AuthenticatedClient, Recorder]:
    recorder = Recorder(respond)
    client = create_client(
        'secret', on_token_expired, transport=httpx.MockTransport(recorder)
    )
    return client, recorder


def _request(client, *args, **kwargs):
    async def run():
        async with client:
            return await client.request(*args, **kwargs)

    return asyncio.run(run())


class TestPayload:
    """Tests for successful responses."""

    def test_cookie_header(self):
        """Test that every request carries the session cookie."""
        client, recorder = _client(lambda request: httpx.Response(200, json={}))

        _request(client, 'get', URL)

        assert recorder.requests[0].headers['Cookie'] == '.ROBLOSECURITY=secret;'

    def test_json(self):
        """Test that JSON bodies are decoded."""
        client, _ = _client(lambda request: httpx.Response(200, json={'count': 4}))

        assert _request(client, 'get', URL) == {'count': 4}

    def test_text(self):
        """Test that other bodies are returned as text."""
        client, _ = _client(lambda request: httpx.Response(200, text='pong'))

        assert _request(client, 'get', URL) == 'pong'

    def test_empty(self):
        """Test that an empty body gives None."""
        client, _ = _client(lambda request: httpx.Response(200))

        assert _request(client, 'post', URL) is None

    def test_request_options(self):
        """Test query, header and JSON placement, skipping None values."""
        client, recorder = _client(lambda request: httpx.Response(200, json={}))

        _request(
            client,
            'post',
            URL,
            params={'limit': 10, 'cursor': None, 'ids': [1, 2]},
            headers={'Roblox-Place-Id': 5, 'X-Optional': None},
            json={'message': None},
        )

        request = recorder.requests[0]
        assert request.method == 'POST'
        assert request.url.params.multi_items() == [
            ('limit', '10'),
            ('ids', '1'),
            ('ids', '2'),
        ]
        assert request.headers['Roblox-Place-Id'] == '5'
        assert 'X-Optional' not in request.headers
        assert json.loads(request.content) == {'message': None}

    def test_form_fields_skip_none(self):
        """Test that omitted form fields are not sent."""
        client, recorder = _client(lambda request: httpx.Response(200, json={}))

        _request(
            client,
            'post',
            URL,
            data={'name': 'x', 'note': None},
            files={'file': None},
        )

        request = recorder.requests[0]
        assert request.headers['Content-Type'] == 'application/x-www-form-urlencoded'
        assert request.content == b'name=x'

    def test_files_skip_none(self):
        """Test a multipart upload with omitted optional fields."""
        client, recorder = _client(lambda request: httpx.Response(200, json={}))

        _request(
            client,
            'post',
            URL,
            data={'name': 'x', 'note': None},
            files={'file': b'content', 'thumbnail': None},
        )

        request = recorder.requests[0]
        assert request.headers['Content-Type'].startswith('multipart/form-data')
        assert b'name="name"' in request.content
        assert b'name="file"' in request.content
        assert b'name="note"' not in request.content
        assert b'name="thumbnail"' not in request.content

    def test_verb_helpers(self):
        """Test the get/post/patch/put/delete shortcuts."""
        client, recorder = _client(lambda request: httpx.Response(200))

        async def run():
            async with client:
                await client.get(URL)
                await client.post(URL, json={})
                await client.patch(URL)
                await client.put(URL)
                await client.delete(URL)

        asyncio.run(run())

        assert [r.method for r in recorder.requests] == [
            'GET',
            'POST',
            'PATCH',
            'PUT',
            'DELETE',
        ]


class TestErrors:
    """Tests for error responses."""

    def test_expired_token(self):
        """Test that a 401 calls the callback once and raises."""
        expired = []
        client, recorder = _client(
            lambda request: httpx.Response(401), lambda: expired.append(True)
        )

        with pytest.raises(ApiError) as exc_info:
            _request(client, 'get', URL)

        assert exc_info.value.status_code == 401
        assert expired == [True]
        assert len(recorder.requests) == 1

    def test_expired_without_callback(self):
        """Test a 401 when no callback is set."""
        client, _ = _client(lambda request: httpx.Response(401))

        with pytest.raises(ApiError):
            _request(client, 'get', URL)

    def test_error_messages(self):
        """Test that the first structured error message is appended."""
        client, _ = _client(
            lambda request: httpx.Response(
                429,
                json={'errors': [{'code': 0, 'message': 'Too many requests'}]},
            )
        )

        with pytest.raises(ApiError) as exc_info:
            _request(client, 'get', URL)

        error = exc_info.value
        assert error.status_code == 429
        assert str(error).endswith(': Too many requests')
        assert error.errors == [{'code': 0, 'message': 'Too many requests'}]
        assert isinstance(error.__cause__, httpx.HTTPStatusError)
        assert error.response.status_code == 429

    def test_error_without_payload(self):
        """Test an error response without a body."""
        client, _ = _client(lambda request: httpx.Response(500))

        with pytest.raises(ApiError) as exc_info:
            _request(client, 'get', URL)

        assert exc_info.value.errors == []
        assert '500' in str(exc_info.value)

    def test_transport_error(self):
        """Test that transport errors propagate unchanged."""

        def respond(request):
            raise httpx.ConnectError('unreachable', request=request)

        client, _ = _client(respond)

        with pytest.raises(httpx.ConnectError):
            _request(client, 'get', URL)


class TestCsrf:
    """Tests for the X-CSRF token refresh."""

    def test_refresh_and_replay(self):
        """Test that a 403 refreshes the token and replays the request once."""

        def respond(request):
            if str(request.url) == XCSRF_ENDPOINT:
                return httpx.Response(403, headers={'x-csrf-token': 'fresh'})
            if request.headers.get('X-CSRF-TOKEN') == 'fresh':
                return httpx.Response(200, json={'sent': True})
            return httpx.Response(403)

        client, recorder = _client(respond)

        result = _request(client, 'post', URL, json={'a': 1})

        assert result == {'sent': True}
        assert recorder.urls() == [URL, XCSRF_ENDPOINT, URL]
        assert recorder.requests[2].content == recorder.requests[0].content
        assert client.headers['X-CSRF-TOKEN'] == 'fresh'

    def test_token_kept_for_later_requests(self):
        """Test that later requests send the stored token directly."""

        def respond(request):
            if str(request.url) == XCSRF_ENDPOINT:
                return httpx.Response(403, headers={'x-csrf-token': 'fresh'})
            if request.headers.get('X-CSRF-TOKEN') == 'fresh':
                return httpx.Response(200)
            return httpx.Response(403)

        client, recorder = _client(respond)

        async def run():
            async with client:
                await client.post(URL)
                await client.post(URL)

        asyncio.run(run())

        assert recorder.urls() == [URL, XCSRF_ENDPOINT, URL, URL]

    def test_replay_not_refreshed_again(self):
        """Test that a second 403 is raised instead of looping."""

        def respond(request):
            if str(request.url) == XCSRF_ENDPOINT:
                return httpx.Response(403, headers={'x-csrf-token': 'fresh'})
            return httpx.Response(403)

        client, recorder = _client(respond)

        with pytest.raises(ApiError) as exc_info:
            _request(client, 'post', URL)

        assert exc_info.value.status_code == 403
        assert recorder.urls() == [URL, XCSRF_ENDPOINT, URL]

    def test_refresh_without_token(self):
        """Test that a refresh response without a token is a configuration error."""

        def respond(request):
            return httpx.Response(403)

        client, recorder = _client(respond)

        with pytest.raises(ConfigurationError, match='Cannot get X-CSRF-TOKEN'):
            _request(client, 'post', URL)

        assert recorder.urls() == [URL, XCSRF_ENDPOINT]

    def test_refresh_failure_propagates(self):
        """Test that a failing refresh call is raised to the caller."""

        def respond(request):
            if str(request.url) == XCSRF_ENDPOINT:
                return httpx.Response(500)
            return httpx.Response(403)

        client, _ = _client(respond)

        with pytest.raises(ApiError) as exc_info:
            _request(client, 'post', URL)

        assert exc_info.value.status_code == 500

    def test_direct_refresh_call(self):
        """Test calling the refresh endpoint directly resolves to None."""
        client, _ = _client(
            lambda request: httpx.Response(403, headers={'x-csrf-token': 'tok'})
        )

        assert _request(client, 'post', XCSRF_ENDPOINT) is None
        assert client.headers['X-CSRF-TOKEN'] == 'tok'


class TestLifecycle:
    def test_context_manager_closes(self):
        """Test that leaving the context closes the transport."""
        client, _ = _client(lambda request: httpx.Response(200))

        async def run():
            async with client:
                pass

        asyncio.run(run())

        assert client.http.is_closed

    def test_extra_headers(self):
        """Test that extra default headers are merged with the cookie."""
        client = AuthenticatedClient('secret', headers={'User-Agent': 'rbxapi'})

        assert client.headers['User-Agent'] == 'rbxapi'
        assert client.headers['Cookie'] == '.ROBLOSECURITY=secret;'
