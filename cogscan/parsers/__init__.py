"""
Language parsers producing ASTs for complexity scoring.

Parsers register themselves for one or more language names; the engine
looks them up by the language detected from a file's extension.
"""

from typing import Dict, List, Type

from cogscan.parsers.base import BaseParser

# Registry of available parsers
_parsers: Dict[str, Type[BaseParser]] = {}

_ALIASES = {
    "c++": "cpp",
    "cxx": "cpp",
    "cc": "cpp",
    "h": "c",
}


class UnsupportedLanguageError(ValueError):
    """No parser is registered for the requested language."""


def register_parser(language: str):
    """Decorator to register a parser for a language."""
    def decorator(cls: Type[BaseParser]) -> Type[BaseParser]:
        _parsers[language.lower()] = cls
        return cls
    return decorator


def get_parser(language: str) -> BaseParser:
    """Get a parser instance for a language."""
    language = language.lower()
    language = _ALIASES.get(language, language)

    if language not in _parsers:
        raise UnsupportedLanguageError(f"No parser available for language: {language}")
    return _parsers[language]()


def list_supported_languages() -> List[str]:
    """List all languages with registered parsers."""
    return sorted(_parsers)


# Import parsers to register them
from cogscan.parsers.cpp_parser import CppParser  # noqa: E402

__all__ = [
    "BaseParser",
    "CppParser",
    "UnsupportedLanguageError",
    "get_parser",
    "register_parser",
    "list_supported_languages",
]
