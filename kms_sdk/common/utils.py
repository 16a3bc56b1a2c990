import asyncio
import functools
import re
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Optional, Union

executor = ThreadPoolExecutor(thread_name_prefix="kms-sdk")

# payload.items[0]["name"] -> "payload", 0, "name"
_PATH_TOKEN_RE = re.compile(
    r"""
    (?P<name>[^.\[\]]+)
    |\[(?P<index>-?\d+)\]
    |\[(?P<quote>["'])(?P<key>.*?)(?P=quote)\]
    |(?P<dot>\.)
    """,
    re.VERBOSE,
)

_PRIMITIVE_TYPES = (str, bytes, bytearray, int, float, bool)


def parse_property_path(path: str) -> List[Union[str, int]]:
    """
    Split a message property expression into its segments.

    Supports dotted names and bracket notation, e.g.
    ``payload.items[0]["name"]`` -> ``["payload", "items", 0, "name"]``.
    A leading ``msg.`` prefix is ignored.

    Args:
        path (str): The property expression.

    Returns:
        List[Union[str, int]]: Segments; bracketed integers become ints.

    Raises:
        ValueError: If the expression is empty or malformed.
    """
    if not path:
        raise ValueError("Property path must not be empty")
    if path.startswith("msg."):
        path = path[len("msg.") :]

    segments: List[Union[str, int]] = []
    position = 0
    while position < len(path):
        match = _PATH_TOKEN_RE.match(path, position)
        if match is None:
            raise ValueError(f"Invalid property path: {path}")
        if match.group("name") is not None:
            segments.append(match.group("name"))
        elif match.group("index") is not None:
            segments.append(int(match.group("index")))
        elif match.group("quote") is not None:
            segments.append(match.group("key"))
        position = match.end()

    if not segments:
        raise ValueError(f"Invalid property path: {path}")
    return segments


def get_child(value: Any, segment: Union[str, int]) -> Optional[Any]:
    """
    Read one level below ``value``.

    Returns None when ``value`` is not a structured object (primitives,
    None) or the child does not exist. Never raises for missing data.
    """
    if value is None or isinstance(value, _PRIMITIVE_TYPES):
        return None
    if isinstance(value, Mapping):
        if segment in value:
            return value[segment]
        # dotted paths only produce string segments
        if isinstance(segment, str) and segment.lstrip("-").isdigit():
            return value.get(int(segment))
        return None
    if isinstance(value, Sequence):
        try:
            return value[int(segment)]
        except (ValueError, IndexError):
            return None
    if isinstance(segment, str):
        return getattr(value, segment, None)
    return None


def get_nested_value(value: Any, segments: Sequence[Union[str, int]]) -> Optional[Any]:
    """Walk ``segments`` below ``value``, returning None as soon as a level is missing."""
    result = value
    for segment in segments:
        result = get_child(result, segment)
        if result is None:
            return None
    return result


def run_sync(func: Callable) -> Callable:
    """Run a blocking function in the shared thread pool executor.

    Args:
        func: The function to run in thread pool.

    Returns:
        An async wrapper function that runs the input function in a thread pool.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            executor, functools.partial(func, *args, **kwargs)
        )

    return wrapper
