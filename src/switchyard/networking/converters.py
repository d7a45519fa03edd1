"""Response body converters.

A converter factory receives the return type a caller asked for and
returns a function decoding a response into that type, or None when it
does not handle the type. Factories are consulted in order.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

import requests

from .errors import ConfigurationError

BodyDecoder = Callable[[requests.Response], Any]
ConverterFactory = Callable[[object], Optional[BodyDecoder]]


def _discard(response: requests.Response) -> None:
    response.close()
    return None


def unit_converter(returns: object) -> BodyDecoder | None:
    """Close the body for calls that only care about the status."""
    return _discard if returns is None else None


def response_converter(returns: object) -> BodyDecoder | None:
    if returns is requests.Response:
        return lambda response: response
    return None


def bytes_converter(returns: object) -> BodyDecoder | None:
    if returns is bytes:
        return lambda response: response.content
    if returns is str:
        return lambda response: response.text
    return None


def json_converter(returns: object) -> BodyDecoder | None:
    if returns in (dict, list, object, Any):
        return lambda response: response.json()
    return None


DEFAULT_CONVERTERS: tuple[ConverterFactory, ...] = (
    unit_converter,
    response_converter,
    bytes_converter,
    json_converter,
)


def resolve_decoder(
    converters: Sequence[ConverterFactory], returns: object
) -> BodyDecoder:
    for factory in converters:
        decoder = factory(returns)
        if decoder is not None:
            return decoder
    raise ConfigurationError(f"no body converter handles {returns!r}")
