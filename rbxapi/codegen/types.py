"""Intermediate representation produced by the compiler.

A ``GeneratedMethod`` describes one wrapper method independently of the
Python syntax used to render it; see ``rbxapi.codegen.renderer``.
"""

import dataclasses

from rbxapi.codegen.models import ApiMetadata

__all__ = [
    'LOCATIONS',
    'ApiNode',
    'ApiTree',
    'GeneratedMethod',
    'GroupValue',
    'LogicalParameter',
    'NameValue',
    'OutputTarget',
    'RequestSpec',
    'Value',
]

LOCATIONS = ('path', 'query', 'header', 'body', 'formData')


@dataclasses.dataclass(frozen=True)
class OutputTarget:
    """Where a parameter's value is sent."""

    param: str
    location: str


@dataclasses.dataclass(frozen=True)
class LogicalParameter:
    name: str
    original_name: str
    type: str | None
    target: OutputTarget
    required: bool
    description: str = ''
    enum: tuple[str, ...] | None = None


@dataclasses.dataclass(frozen=True)
class NameValue:
    """The value of one method argument."""

    name: str


@dataclasses.dataclass(frozen=True)
class GroupValue:
    """A dict built from several method arguments: ``{key: argument}``."""

    fields: tuple[tuple[str, str], ...]


Value = NameValue | GroupValue


@dataclasses.dataclass(frozen=True)
class RequestSpec:
    """The HTTP call a generated method performs.

    ``url`` alternates literal text and interpolated values.
    """

    method: str
    url: tuple[str | Value, ...]
    params: tuple[tuple[str, Value], ...] = ()
    headers: tuple[tuple[str, Value], ...] = ()
    json: Value | None = None
    data: GroupValue | None = None
    files: GroupValue | None = None


@dataclasses.dataclass(frozen=True)
class GeneratedMethod:
    name: str
    doc: str
    parameters: tuple[LogicalParameter, ...]
    request: RequestSpec

    @property
    def required_parameters(self) -> tuple[LogicalParameter, ...]:
        return tuple(param for param in self.parameters if param.required)


@dataclasses.dataclass
class ApiNode:
    """One discovered API and its compiled versions."""

    meta: ApiMetadata
    versions: dict[str, list[GeneratedMethod]] = dataclasses.field(
        default_factory=dict
    )

    def generated_versions(self) -> list[str]:
        """Versions with at least one method, sorted."""
        return sorted(version for version, methods in self.versions.items() if methods)


@dataclasses.dataclass
class ApiTree:
    apis: dict[str, ApiNode] = dataclasses.field(default_factory=dict)
