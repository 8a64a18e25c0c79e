"""
Base parser class for language-specific grammar adapters.
"""

from abc import ABC, abstractmethod
from typing import Optional

from cogscan.core.nodes import AstNode


class BaseParser(ABC):
    """
    Base class for language-specific parsers.

    Each parser turns source text into an ``AstNode`` tree drawn from the
    ``NodeKind`` vocabulary, so the scorer never sees the concrete grammar.
    """

    @property
    @abstractmethod
    def language(self) -> str:
        """Return the language this parser handles."""
        pass

    @abstractmethod
    def parse(self, source: str, file_path: str = "<unknown>") -> Optional[AstNode]:
        """
        Parse source code into an AST.

        Args:
            source: The source code to parse.
            file_path: The file path (for error messages).

        Returns:
            The root AstNode or None if the source is empty.
        """
        pass
