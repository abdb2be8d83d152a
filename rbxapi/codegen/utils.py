import keyword
import re
import unicodedata

__all__ = (
    'to_title_case',
    'derive_api_name',
    'normalize_parameter_name',
    'sanitize_method_name',
    'version_key',
    'version_identifier',
)

_SUBDOMAIN = re.compile(r'/([a-zA-Z\-]+?)\.')


def to_title_case(input_string: str) -> str:
    """Raise the first letter to uppercase and the rest to lowercase."""
    if not input_string:
        return ''
    return input_string[0].upper() + input_string[1:].lower()


def remove_accents(input_str):
    nfkd_form = unicodedata.normalize('NFKD', input_str)
    return ''.join(c for c in nfkd_form if not unicodedata.combining(c))


def sanitize_name_python_keywords(name: str) -> str:
    if keyword.iskeyword(name):
        return f'{name}_'
    return name


def _strip_invalid(name: str) -> str:
    sanitized = re.sub(r'[^A-Za-z0-9_]', '', remove_accents(name))
    if sanitized and sanitized[0].isdigit():
        sanitized = '_' + sanitized
    return sanitized


def derive_api_name(url: str) -> str | None:
    """Derive the PascalCase API identifier from a base URL's sub-domain.

    ``https://game-internationalization.roblox.com`` becomes
    ``GameInternationalization``. Returns None when the URL has no
    recognizable sub-domain.
    """
    match = _SUBDOMAIN.search(url)
    if not match:
        return None
    name = ''.join(to_title_case(part) for part in match.group(1).split('-'))
    return name or None


def normalize_parameter_name(name: str) -> str:
    """Convert a documented parameter name into a Python argument name.

    Parts separated by ``-`` or ``.`` are joined, every part after the first
    being title-cased: ``request.cursor-token`` becomes ``requestCursorToken``
    and ``Roblox-Place-Id`` becomes ``RobloxPlaceId``.
    """
    parts = re.split(r'[-.]', name)
    joined = parts[0] + ''.join(to_title_case(part) for part in parts[1:])
    sanitized = _strip_invalid(joined) or 'param'
    return sanitize_name_python_keywords(sanitized)


def sanitize_method_name(name: str) -> str:
    """Make a derived method name a valid identifier."""
    return sanitize_name_python_keywords(_strip_invalid(name))


def version_key(version: str) -> str:
    """Version string as exposed on the client: ``v1.0`` becomes ``v1``."""
    return re.sub(r'\.0$', '', version)


def version_identifier(version: str) -> str:
    """Version as used in module and class names: ``v1.5`` becomes ``v1_5``."""
    return re.sub(r'[^A-Za-z0-9_]', '_', version_key(version).replace('.', '_'))
