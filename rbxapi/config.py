import datetime
import json
import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from rbxapi.exceptions import ConfigurationError

DEFAULT_FILENAMES = ['rbxapi.yaml', 'rbxapi.yml']


class EndpointSource(BaseModel):
    """A page listing API base URLs together with the rule to extract them."""

    url: str = Field(..., description='Page to fetch.')

    pattern: str = Field(
        ...,
        description='Regular expression whose first group captures a base URL.',
    )

    force_https: bool = Field(
        False, description='Rewrite http: links found on the page to https:.'
    )

    def parse(self, content: str) -> list[str]:
        """Extract candidate base URLs from the page content, in match order."""
        links = [match.group(1) for match in re.finditer(self.pattern, content)]
        if self.force_https:
            links = [link.replace('http:', 'https:', 1) for link in links]
        return links


DEFAULT_SOURCES = [
    EndpointSource(
        url='https://devforum.roblox.com/t/collected-list-of-apis/557091',
        pattern=r'<li>\s*<a href="(https?://[a-zA-Z\-]+?\.roblox\.com)">',
        force_https=True,
    ),
    EndpointSource(
        url='https://github.com/AntiBoomz/BTRoblox/blob/master/README.md',
        pattern=r'<a href="(https://[a-zA-Z\-]+?\.roblox\.com)/docs" rel="nofollow">',
    ),
]

DEFAULT_EXCLUDES = [
    'https://friendsite.roblox.com',  # unavailable
    'roblox.com',  # main domain
]


class CodegenConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='RBXAPI_')

    output: str = Field(
        './roblox_api', description='Output directory for the generated package.'
    )

    max_concurrent_requests: int = Field(
        30,
        gt=0,
        description='How many web requests can be in flight at the same time.',
    )

    timeout: float = Field(30.0, gt=0, description='Per-request timeout in seconds.')

    sources: list[EndpointSource] = Field(
        default_factory=lambda: list(DEFAULT_SOURCES),
        description='Pages the API base URLs are discovered from.',
    )

    excludes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDES),
        description='Base URLs that are never generated.',
    )

    format_code: bool = Field(
        True, description='Format generated modules with black.'
    )

    year: int = Field(
        default_factory=lambda: datetime.date.today().year,
        description='Year written in the header of generated files.',
    )


def load_yaml(path: str | Path) -> dict:
    return yaml.safe_load(Path(path).read_text()) or {}


def load_json(path: str | Path) -> dict:
    return json.loads(Path(path).read_text())


def _load_file(path: str | Path) -> dict:
    try:
        if Path(path).suffix.lower() == '.json':
            return load_json(path)
        return load_yaml(path)
    except FileNotFoundError:
        raise ConfigurationError('Configuration file not found', config_path=str(path))
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f'Cannot read configuration: {e}', config_path=str(path)
        )


def _validate(data: dict, path: str | Path | None = None) -> CodegenConfig:
    if not isinstance(data, dict):
        raise ConfigurationError(
            'Configuration must be a mapping',
            config_path=str(path) if path else None,
        )
    try:
        return CodegenConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(
            f'Invalid configuration: {e}',
            config_path=str(path) if path else None,
        )


def get_config(path: str | None = None) -> CodegenConfig:
    """Load configuration from a file, pyproject.toml or the environment.

    Lookup order:
        1. The explicit ``path`` (YAML or JSON).
        2. ``rbxapi.yaml`` / ``rbxapi.yml`` in the working directory.
        3. The ``[tool.rbxapi]`` table of ``pyproject.toml``.
        4. Defaults, overridden by ``RBXAPI_*`` environment variables.

    Raises:
        ConfigurationError: If a configuration file is missing or invalid.
    """
    if path:
        return _validate(_load_file(path), path)

    cwd = os.getcwd()

    for filename in DEFAULT_FILENAMES:
        candidate = Path(cwd) / filename
        if candidate.exists():
            return _validate(_load_file(candidate), candidate)

    candidate = Path(cwd) / 'pyproject.toml'

    if candidate.exists():
        import tomllib

        pyproject = tomllib.loads(candidate.read_text())
        tools = pyproject.get('tool', {})

        if 'rbxapi' in tools:
            return _validate(tools['rbxapi'], candidate)

    return _validate({})
