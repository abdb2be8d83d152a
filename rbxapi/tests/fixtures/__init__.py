"""Test fixtures for rbxapi tests.

This module provides sample discovery pages, metadata and schema documents,
and a helper building an httpx client that serves them without network.
"""

import httpx

DEVFORUM_URL = 'https://devforum.roblox.com/t/collected-list-of-apis/557091'
README_URL = 'https://github.com/AntiBoomz/BTRoblox/blob/master/README.md'

DEVFORUM_PAGE = """
<ul>
<li><a href="http://users.roblox.com">Users</a></li>
<li>
  <a href="https://friends.roblox.com">Friends</a></li>
<li><a href="https://friendsite.roblox.com">Friend site</a></li>
</ul>
"""

README_PAGE = """
<p>
<a href="https://users.roblox.com/docs" rel="nofollow">users</a>
<a href="https://chat.roblox.com/docs" rel="nofollow">chat</a>
</p>
"""

USERS_METADATA = {
    'name': 'Users Api',
    'description': 'All endpoints for user information',
    'versions': ['v1'],
}

FRIENDS_METADATA = {
    'name': 'Friends Api',
    'description': 'All endpoints for friends',
    'versions': ['v1', 'v2'],
}

CHAT_METADATA = {
    'name': 'Chat Api',
    'versions': ['v2'],
}

USERS_V1 = {
    'swagger': '2.0',
    'paths': {
        '/v1/users/authenticated': {
            'get': {'summary': 'Gets the minimal authenticated user.'},
        },
        '/v1/users/{userId}': {
            'get': {
                'summary': 'Gets detailed user information by id.',
                'parameters': [
                    {
                        'name': 'userId',
                        'in': 'path',
                        'description': 'The user id.',
                        'required': True,
                        'type': 'integer',
                    }
                ],
            },
        },
        '/v1/usernames/users': {
            'post': {
                'summary': 'Get users by usernames.',
                'parameters': [
                    {
                        'name': 'request',
                        'in': 'body',
                        'required': True,
                        'schema': {'$ref': '#/definitions/MultiGetByUsernameRequest'},
                    }
                ],
            },
        },
    },
    'definitions': {
        'MultiGetByUsernameRequest': {
            'type': 'object',
            'properties': {
                'usernames': {'type': 'array', 'items': {'type': 'string'}},
                'excludeBannedUsers': {
                    'type': 'boolean',
                    'description': 'Whether to exclude banned users',
                },
            },
        },
    },
}

FRIENDS_V1 = {
    'swagger': '2.0',
    'paths': {
        '/v1/users/{userId}/friends': {
            'get': {
                'summary': 'Get list of all friends for the specified user.',
                'parameters': [
                    {
                        'name': 'userId',
                        'in': 'path',
                        'description': 'The user Id to get the friends for.',
                        'required': True,
                        'type': 'integer',
                    }
                ],
            },
        },
        '/v1/my/friends/requests': {
            'get': {
                'summary': 'Get all users that friend requests',
                'parameters': [
                    {
                        'name': 'sortOrder',
                        'in': 'query',
                        'description': 'The order the results are sorted in.',
                        'type': 'string',
                        'enum': ['Asc', 'Desc'],
                    },
                    {
                        'name': 'limit',
                        'in': 'query',
                        'required': True,
                        'type': 'integer',
                    },
                ],
            },
        },
    },
}

FRIENDS_V2 = {'swagger': '2.0', 'paths': {}}

CHAT_V2 = {
    'swagger': '2.0',
    'paths': {
        '/v2/message': {
            'get': {
                'summary': 'Gets a message.',
                'parameters': [
                    {
                        'name': 'messageId',
                        'in': 'query',
                        'required': True,
                        'type': 'integer',
                    }
                ],
            },
            'post': {
                'summary': 'Sends a message.',
                'parameters': [
                    {
                        'name': 'request',
                        'in': 'body',
                        'required': True,
                        'schema': {
                            'type': 'object',
                            'properties': {
                                'conversationId': {'type': 'integer'},
                                'message': {'type': 'string'},
                            },
                        },
                    }
                ],
            },
        },
    },
}

DATASTORES_V1 = {
    'swagger': '2.0',
    'paths': {
        '/v1/{universeId}/datastores': {
            'get': {
                'summary': 'Lists the data stores of a universe.',
                'parameters': [
                    {
                        'name': 'universeId',
                        'in': 'path',
                        'required': True,
                        'type': 'integer',
                    },
                    {'name': 'cursor', 'in': 'query', 'type': 'string'},
                ],
            },
        },
    },
}

COOKIE_V1 = {
    'swagger': '2.0',
    'paths': {
        '/v1/session': {
            'get': {
                'parameters': [{'name': 'session', 'in': 'cookie', 'type': 'string'}],
            },
        },
    },
}

# Every page and document of a full run: three APIs, four versions
ROBLOX_ROUTES = {
    DEVFORUM_URL: DEVFORUM_PAGE,
    README_URL: README_PAGE,
    'https://users.roblox.com/docs/metadata': USERS_METADATA,
    'https://friends.roblox.com/docs/metadata': FRIENDS_METADATA,
    'https://chat.roblox.com/docs/metadata': CHAT_METADATA,
    'https://users.roblox.com/docs/json/v1': USERS_V1,
    'https://friends.roblox.com/docs/json/v1': FRIENDS_V1,
    'https://friends.roblox.com/docs/json/v2': FRIENDS_V2,
    'https://chat.roblox.com/docs/json/v2': CHAT_V2,
}


def mock_http_client(routes: dict) -> httpx.AsyncClient:
    """Build a client answering GET requests from ``routes``.

    A route value is a page (str), a JSON document (dict or list) or a bare
    status code (int). Unknown URLs answer 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(str(request.url))
        if route is None:
            return httpx.Response(404)
        if isinstance(route, int):
            return httpx.Response(route)
        if isinstance(route, str):
            return httpx.Response(200, text=route)
        return httpx.Response(200, json=route)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
