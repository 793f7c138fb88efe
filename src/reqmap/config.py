"""Mapper configuration.

MapperConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

import sys
from dataclasses import dataclass, field

from reqmap.deserialize import Deserializer, NullDeserializer


@dataclass(frozen=True, slots=True)
class MapperConfig:
    """Mapper configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = MapperConfig(encoding="latin-1", max_content_length=1024 * 1024)
    """

    # Body decoding
    encoding: str = "utf-8"

    # Limits (defaults to the largest string the interpreter can address)
    max_content_length: int = sys.maxsize

    # Complex body binding is inert until the host wires in a real deserializer
    deserializer: Deserializer = field(default_factory=NullDeserializer)
