"""Custom exceptions for rbxapi.

This module defines the exceptions raised by the generator pipeline and by the
runtime client that generated code depends on.
"""


class RbxApiError(Exception):
    """Base exception for all rbxapi errors.

    All exceptions raised by rbxapi inherit from this class, making it easy
    to catch every rbxapi-related error with a single except clause.

    Example:
        try:
            codegen.generate()
        except RbxApiError as e:
            print(f"rbxapi error: {e}")
    """

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class DiscoveryError(RbxApiError):
    """No candidate API endpoints could be discovered.

    Raised when every discovery source failed or produced nothing after
    exclusions were applied. There is nothing to generate in that case.

    Attributes:
        sources: The source URLs that were consulted.
    """

    def __init__(self, sources: list[str] | None = None):
        self.sources = sources or []
        message = 'API list not found'
        if self.sources:
            message += f' (sources: {", ".join(self.sources)})'
        super().__init__(message)


class SchemaError(RbxApiError):
    """Base exception for schema-related errors."""

    pass


class SchemaLoadError(SchemaError):
    """Failed to load a metadata or schema document.

    Attributes:
        source: The URL that failed to load.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, source: str, cause: Exception | None = None):
        self.source = source
        self.cause = cause
        message = f"Failed to load document from '{source}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class CodeGenerationError(RbxApiError):
    """Error during code generation.

    Attributes:
        context: Additional context about what was being generated.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self, message: str, context: str | None = None, cause: Exception | None = None
    ):
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f'{message} (while generating {context})'
        if cause:
            full_message += f': {cause}'
        super().__init__(full_message)


class EndpointGenerationError(CodeGenerationError):
    """Error generating a wrapper method for one endpoint.

    Attributes:
        method_name: The name of the method being generated.
        method: The HTTP method of the endpoint.
        path: The URL path of the endpoint.
        reason: What went wrong.
    """

    def __init__(
        self,
        method_name: str,
        method: str | None = None,
        path: str | None = None,
        reason: str | None = None,
    ):
        self.method_name = method_name
        self.method = method
        self.path = path
        self.reason = reason
        message = f"Failed to generate method '{method_name}'"
        if method and path:
            message += f' ({method.upper()} {path})'
        if reason:
            message += f': {reason}'
        super().__init__(message)


class ConfigurationError(RbxApiError):
    """Error in configuration.

    Raised both for invalid generator configuration and when the runtime
    client cannot obtain the state it needs (for example a CSRF token).

    Attributes:
        config_path: The path to the configuration file, if applicable.
        field: The specific configuration field that is invalid.
    """

    def __init__(
        self, message: str, config_path: str | None = None, field: str | None = None
    ):
        self.config_path = config_path
        self.field = field
        full_message = message
        if config_path:
            full_message = f"{message} in '{config_path}'"
        if field:
            full_message += f' (field: {field})'
        super().__init__(full_message)


class OutputError(RbxApiError):
    """Error writing generated output.

    Attributes:
        output_path: The path where output was being written.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, output_path: str, cause: Exception | None = None):
        self.output_path = output_path
        self.cause = cause
        message = f"Failed to write output to '{output_path}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class UnsupportedFeatureError(RbxApiError):
    """The documentation uses a shape the generator has no mapping for.

    Attributes:
        feature: Description of the unsupported feature.
        suggestion: Optional suggestion for a workaround.
    """

    def __init__(self, feature: str, suggestion: str | None = None):
        self.feature = feature
        self.suggestion = suggestion
        message = f'Unsupported feature: {feature}'
        if suggestion:
            message += f'. {suggestion}'
        super().__init__(message)


class MissingParameterError(RbxApiError, TypeError):
    """A generated method was called without one of its required arguments.

    Attributes:
        parameter: Name of the missing argument.
        method_name: Name of the generated method.
    """

    def __init__(self, parameter: str, method_name: str):
        self.parameter = parameter
        self.method_name = method_name
        super().__init__(
            f'Required parameter "{parameter}" of method "{method_name}" is not specified'
        )


class ApiError(RbxApiError):
    """An API call returned an error status.

    The first message of a structured ``errors`` payload is appended to the
    transport error's message.

    Attributes:
        status_code: HTTP status code of the response.
        response: The httpx response.
        errors: The ``errors`` list from the payload, if any.
    """

    def __init__(self, message: str, *, status_code: int, response=None, errors=None):
        self.status_code = status_code
        self.response = response
        self.errors = errors or []
        super().__init__(message)
