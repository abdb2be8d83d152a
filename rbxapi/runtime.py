"""Helpers imported by generated API classes."""

from rbxapi.exceptions import MissingParameterError

__all__ = ('REQUIRED', 'required')


class _Required:
    """Default value marking a keyword argument the caller must supply."""

    def __repr__(self) -> str:
        return 'REQUIRED'

    def __bool__(self) -> bool:
        return False


REQUIRED = _Required()


def required(param: str, method_name: str):
    """Raise for a required argument that was not supplied.

    Args:
        param: Argument name.
        method_name: Name of the generated method that was called.

    Raises:
        MissingParameterError: Always.
    """
    raise MissingParameterError(param, method_name)
