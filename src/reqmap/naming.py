"""Attribute name resolution.

Each bound attribute is looked up under two keys: its declared name and
the same name with the first character's case flipped (``userId`` and
``UserId``). Only the first character changes; this is not a general
camel/snake case conversion.
"""

from reqmap.errors import InvalidName, UnsupportedCharacter

# Distance between ASCII upper and lower case letters
_CASE_OFFSET = 32


def alternate_name(name: str, *, target: type | None = None) -> str:
    """Return *name* with the case of its first character flipped.

    Raises:
        InvalidName: If *name* is empty.
        UnsupportedCharacter: If the first character is not an ASCII letter.
    """
    if not name:
        raise InvalidName(name, target=target)
    first = name[0]
    if "a" <= first <= "z":
        return chr(ord(first) - _CASE_OFFSET) + name[1:]
    if "A" <= first <= "Z":
        return chr(ord(first) + _CASE_OFFSET) + name[1:]
    raise UnsupportedCharacter(name, target=target)


def resolve_names(name: str, *, target: type | None = None) -> tuple[str, str]:
    """Return ``(canonical, alternate)`` lookup keys for an attribute name."""
    return name, alternate_name(name, target=target)
