"""reqmap — bind HTTP request fields onto plain Python objects.

Mark attributes with the request source they read from; reqmap compiles a
binding plan per class on first use and reuses it for every request.

Basic usage::

    from typing import Annotated

    from reqmap import FromHeader, FromQuery, generate

    class Session:
        UserId: Annotated[int, FromQuery()] = 0
        SessionToken: Annotated[str, FromHeader()] = ""

    session = generate(Session, request)

Lookups try the attribute name, then the name with its first letter's
case flipped (``UserId`` also matches ``userId``).
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "ConverterRegistry",
    "FromBody",
    "FromForm",
    "FromHeader",
    "FromQuery",
    "InvalidMarker",
    "InvalidName",
    "Mapper",
    "MapperConfig",
    "Marker",
    "MarkerRegistry",
    "NoConverterRegistered",
    "PayloadTooLarge",
    "ReqmapError",
    "Request",
    "Source",
    "UnsupportedCharacter",
    "UploadFile",
    "default_mapper",
    "generate",
    "map_request",
    "register_converter",
    "register_marker",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import reqmap`` fast while providing a clean top-level API.
    """
    if name in (
        "Mapper",
        "default_mapper",
        "generate",
        "map_request",
        "register_converter",
        "register_marker",
    ):
        from reqmap import mapper as _mapper

        return getattr(_mapper, name)

    if name == "MapperConfig":
        from reqmap.config import MapperConfig

        return MapperConfig

    if name in (
        "FromBody",
        "FromForm",
        "FromHeader",
        "FromQuery",
        "Marker",
        "MarkerRegistry",
        "Source",
    ):
        from reqmap import markers as _markers

        return getattr(_markers, name)

    if name == "ConverterRegistry":
        from reqmap.converters import ConverterRegistry

        return ConverterRegistry

    if name == "Request":
        from reqmap.http.request import Request

        return Request

    if name == "UploadFile":
        from reqmap.http.forms import UploadFile

        return UploadFile

    if name in (
        "ConfigurationError",
        "InvalidMarker",
        "InvalidName",
        "NoConverterRegistered",
        "PayloadTooLarge",
        "ReqmapError",
        "UnsupportedCharacter",
    ):
        from reqmap import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
