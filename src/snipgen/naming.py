"""Identifier casing shared by the body graph builder, the renderer and imports.

Every generated name goes through these helpers: path accessors, property
names, model class names, variable names and import paths. Keeping one
word-splitting rule is what lets the import resolver predict the names the
renderer writes.

Word splitting treats camelCase boundaries and any non-alphanumeric
character as separators::

    >>> words("userPrincipalName")
    ['user', 'Principal', 'Name']
    >>> words("@odata.id")
    ['odata', 'id']
    >>> words("message-id")
    ['message', 'id']
"""

from __future__ import annotations

import re

# Matches any character that is not alphanumeric.
_SEPARATOR_RE = re.compile(r"[^a-zA-Z0-9]+")


def words(name: str) -> list[str]:
    """Split *name* into words on case boundaries and separators."""
    result = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", name)
    result = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", result)
    return [w for w in _SEPARATOR_RE.split(result) if w]


def pascal(name: str) -> str:
    """``message-id`` -> ``MessageId``, ``displayName`` -> ``DisplayName``."""
    return "".join(w[:1].upper() + w[1:] for w in words(name))


def camel(name: str) -> str:
    """``message-id`` -> ``messageId``, ``@odata.id`` -> ``odataId``."""
    result = pascal(name)
    return result[:1].lower() + result[1:]


def snake(name: str) -> str:
    """``displayName`` -> ``display_name``, ``@odata.id`` -> ``odata_id``.

    A leading digit is prefixed with an underscore; an empty result becomes
    ``"value"``.
    """
    result = "_".join(w.lower() for w in words(name))
    if not result:
        return "value"
    if result[0].isdigit():
        result = f"_{result}"
    return result


def first_upper(name: str) -> str:
    return name[:1].upper() + name[1:]


def first_lower(name: str) -> str:
    return name[:1].lower() + name[1:]


def singularize(name: str) -> str:
    """Naive English singular used for element and variable names.

    >>> singularize("messages"), singularize("policies"), singularize("address")
    ('message', 'policy', 'address')
    """
    if name.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if name.endswith("s") and not name.endswith("ss") and len(name) > 1:
        return name[:-1]
    return name


def key_accessor(param_name: str) -> str:
    """Name of the keyed-access method for a collection key parameter.

    >>> key_accessor("message-id")
    'byMessageId'
    """
    return "by" + pascal(param_name)


def alternate_key_accessor(collection: str, key_name: str) -> str:
    """Name of the alternate-key builder for a collection.

    >>> alternate_key_accessor("users", "userPrincipalName")
    'usersWithUserPrincipalName'
    """
    return camel(collection) + "With" + pascal(key_name)
