"""Pydantic models for the documents the generator consumes.

The remote documentation is loosely structured, so every model ignores
unknown fields and only the parts the compiler relies on are typed.

Schema nodes are either a ``Reference`` (``{"$ref": "#/definitions/Name"}``)
or an ``InlineSchema``; ``resolve_schema`` follows at most one reference.
"""

import http
import logging
import re
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag

logger = logging.getLogger(__name__)

__all__ = [
    'HTTP_METHODS',
    'ApiMetadata',
    'InlineSchema',
    'Operation',
    'Parameter',
    'Reference',
    'SchemaDocument',
    'SchemaNode',
    'resolve_schema',
]

HTTP_METHODS = [method.value.lower() for method in http.HTTPMethod]

_DEFINITION_REF = re.compile(r'#/definitions/(.+)')


class _Lenient(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)


class Reference(_Lenient):
    """An indirect schema, resolved by name in the document's definitions."""

    ref: str = Field(..., alias='$ref')

    @property
    def name(self) -> str | None:
        match = _DEFINITION_REF.match(self.ref)
        return match.group(1) if match else None


class InlineSchema(_Lenient):
    """A schema given in place."""

    type: str | None = None
    description: str | None = None
    properties: dict[str, 'SchemaNode'] = Field(default_factory=dict)
    items: 'SchemaNode | None' = None
    enum: list[Any] | None = None


def _schema_kind(data: Any) -> str:
    if isinstance(data, dict):
        return 'ref' if '$ref' in data else 'inline'
    return 'ref' if isinstance(data, Reference) else 'inline'


SchemaNode = Annotated[
    Annotated[Reference, Tag('ref')] | Annotated[InlineSchema, Tag('inline')],
    Discriminator(_schema_kind),
]

InlineSchema.model_rebuild()


class Parameter(_Lenient):
    """A documented operation parameter (Swagger 2.0 shape)."""

    name: str
    in_: str | None = Field(None, alias='in')
    type: str | None = None
    items: SchemaNode | None = None
    schema_: SchemaNode | None = Field(None, alias='schema')
    required: bool = False
    enum: list[Any] | None = None
    description: str | None = None


class Operation(_Lenient):
    summary: str | None = None
    description: str | None = None
    deprecated: bool = False
    parameters: list[Parameter] = Field(default_factory=list)


class SchemaDocument(_Lenient):
    """Full documentation of one API version."""

    paths: dict[str, dict[str, Any]] = Field(default_factory=dict)
    definitions: dict[str, SchemaNode] = Field(default_factory=dict)

    def operations(self, path: str) -> dict[str, Operation]:
        """Return the documented HTTP verbs of a path, in document order.

        Keys that are not HTTP methods (such as path-level ``parameters``)
        are skipped.
        """
        return {
            verb: Operation.model_validate(info or {})
            for verb, info in self.paths.get(path, {}).items()
            if verb.lower() in HTTP_METHODS
        }


class ApiMetadata(BaseModel):
    """Metadata document of one API, plus where it was found."""

    model_config = ConfigDict(extra='allow')

    identifier: str
    url: str
    name: str | None = None
    description: str | None = None
    versions: list[str] = Field(default_factory=list)

    @property
    def title(self) -> str:
        """One-line summary used in generated docstrings."""
        name = self.name or self.identifier
        return f'{name}: {self.description}' if self.description else name


def resolve_schema(
    node: Reference | InlineSchema | None,
    definitions: dict[str, Reference | InlineSchema],
) -> InlineSchema:
    """Return the schema a node describes, following one level of ``$ref``.

    A reference to a missing definition, or a definition that is itself a
    reference, resolves to an untyped schema.
    """
    if node is None:
        return InlineSchema()
    if isinstance(node, InlineSchema):
        return node

    target = definitions.get(node.name) if node.name else None
    if isinstance(target, InlineSchema):
        return target

    logger.warning(f'Cannot resolve schema reference {node.ref!r}')
    return InlineSchema()
