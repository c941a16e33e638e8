"""Rendering -- turn a resolved request and its body graph into snippet text.

Sub-modules:

* :mod:`~snipgen.render.profile` -- :class:`LanguageProfile`, the contract
  every target language implements, its initializer, setter and command
  bases, and naming helpers shared between profiles and the import
  resolver.
* :mod:`~snipgen.render.engine` -- :class:`SnippetRenderer`, the single
  generic walk over path segments and the property graph.
* :mod:`~snipgen.render.languages` -- the built-in profiles and
  :func:`get_profile`.
"""

from snipgen.render.engine import SnippetRenderer
from snipgen.render.languages import PROFILES, get_profile, language_ids
from snipgen.render.profile import (
    CommandProfile,
    InitializerProfile,
    LanguageProfile,
    SetterProfile,
    VariableNames,
    builder_name,
    owner_segments,
    package_parts,
)

__all__ = [
    "CommandProfile",
    "InitializerProfile",
    "LanguageProfile",
    "PROFILES",
    "SetterProfile",
    "SnippetRenderer",
    "VariableNames",
    "builder_name",
    "get_profile",
    "language_ids",
    "owner_segments",
    "package_parts",
]
