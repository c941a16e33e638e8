"""Built-in target languages and the id lookup over them.

Language ids are matched case-insensitively against each profile's
``language_id`` and ``aliases``::

    get_profile("C#")          # CSharpProfile
    get_profile("javascript")  # TypeScriptProfile
    get_profile("cobol")       # raises UnsupportedLanguageError
"""

from __future__ import annotations

from snipgen.exceptions import UnsupportedLanguageError
from snipgen.render.languages.csharp import CSharpProfile
from snipgen.render.languages.go import GoProfile
from snipgen.render.languages.graphcli import GraphCliProfile
from snipgen.render.languages.java import JavaProfile
from snipgen.render.languages.php import PhpProfile
from snipgen.render.languages.python import PythonProfile
from snipgen.render.languages.typescript import TypeScriptProfile
from snipgen.render.profile import LanguageProfile

PROFILES: tuple[LanguageProfile, ...] = (
    CSharpProfile(),
    JavaProfile(),
    PythonProfile(),
    GoProfile(),
    TypeScriptProfile(),
    PhpProfile(),
    GraphCliProfile(),
)

_BY_ID: dict[str, LanguageProfile] = {}
for _profile in PROFILES:
    for _name in (_profile.language_id, *_profile.aliases):
        _BY_ID[_name.lower()] = _profile


def language_ids() -> tuple[str, ...]:
    """Every accepted language id, primary ids first."""
    primary = tuple(p.language_id for p in PROFILES)
    aliases = tuple(alias for p in PROFILES for alias in p.aliases)
    return primary + aliases


def get_profile(language_id: str) -> LanguageProfile:
    """Return the profile for *language_id*.

    Raises:
        UnsupportedLanguageError: If no profile answers to the id.
    """
    profile = _BY_ID.get(language_id.strip().lower())
    if profile is None:
        raise UnsupportedLanguageError(
            f"Unsupported language '{language_id}'. "
            f"Supported: {', '.join(p.language_id for p in PROFILES)}",
            language=language_id,
        )
    return profile


__all__ = [
    "CSharpProfile",
    "GoProfile",
    "GraphCliProfile",
    "JavaProfile",
    "PROFILES",
    "PhpProfile",
    "PythonProfile",
    "TypeScriptProfile",
    "get_profile",
    "language_ids",
]
