"""Helpers for the scalar and bracketed-list values used in metadata lines."""

import logging

import yaml

logger = logging.getLogger(__name__)


def unquote(value: str) -> str:
    """Strip one pair of surrounding quotes from a scalar value.

    Double-quoted values are decoded as YAML scalars so that escaped
    quotes and backslashes survive a serialize/parse round trip.

    Args:
        value: Raw value text (already stripped of surrounding whitespace).

    Returns:
        The unquoted value, or the input unchanged if it is not quoted.
    """
    if len(value) < 2 or value[0] != value[-1] or value[0] not in ('"', "'"):
        return value

    if value[0] == '"':
        try:
            decoded = yaml.safe_load(value)
        except yaml.YAMLError:
            logger.debug("Could not decode quoted value %r, stripping quotes", value)
        else:
            if isinstance(decoded, str):
                return decoded

    return value[1:-1]


def quote(value: str) -> str:
    """Render a string as a double-quoted scalar, escaping backslashes and quotes."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def split_list_value(value: str) -> list[str]:
    """Parse a "[a, b]" or "a, b" value into a list of strings.

    Empty elements are dropped and quotes around each element are stripped.
    A bare scalar yields a one-element list.

    Args:
        value: Raw value text.

    Returns:
        List of element strings.
    """
    cleaned = value.strip()
    if cleaned.startswith("["):
        cleaned = cleaned[1:]
    if cleaned.endswith("]"):
        cleaned = cleaned[:-1]
    items = [unquote(item.strip()) for item in cleaned.split(",")]
    return [item for item in items if item]


def format_list_value(items: list[str], quoted: bool = False) -> str:
    """Render a list in bracketed "[a, b]" form.

    Args:
        items: Elements to render.
        quoted: Whether to wrap each element in double quotes.

    Returns:
        The bracketed list text.
    """
    rendered = [quote(item) if quoted else item for item in items]
    return f"[{', '.join(rendered)}]"
