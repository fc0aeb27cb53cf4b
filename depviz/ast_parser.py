"""AST parser for the ECMAScript family using Tree-sitter grammars.

Every supported extension is parsed with a permissive grammar order: the TSX
grammar accepts module syntax, JSX, type annotations and legacy decorators, and
the plain TypeScript grammar is tried as well so angle-bracket casts in ``.ts``
files still parse. A file only counts as parsed when one grammar produces a
tree without syntax errors.
"""

import os
import threading
from typing import Any

from depviz.errors import ParseWarning

TS_FIRST = ("typescript", "tsx")
TSX_FIRST = ("tsx", "typescript")

GRAMMAR_ORDER: dict[str, tuple[str, ...]] = {
    ".ts": TS_FIRST,
    ".mts": TS_FIRST,
    ".cts": TS_FIRST,
    ".tsx": TSX_FIRST,
    ".js": TSX_FIRST,
    ".jsx": TSX_FIRST,
    ".mjs": TSX_FIRST,
    ".cjs": TSX_FIRST,
}


def _load_parser(grammar: str) -> Any:
    """Create a Tree-sitter parser for one grammar."""
    try:
        from tree_sitter_language_pack import get_parser
    except ImportError as e:
        raise RuntimeError(
            "tree-sitter-language-pack is not installed.\n"
            "Please install with: pip install tree-sitter-language-pack"
        ) from e

    try:
        return get_parser(grammar)
    except Exception as e:
        raise RuntimeError(
            f"Failed to load tree-sitter grammar for {grammar}: {e}\n"
            "Please try: pip install --force-reinstall tree-sitter-language-pack"
        ) from e


def first_error_line(node: Any) -> int | None:
    """Return the 1-based line of the first ERROR or MISSING node, if any."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current.start_point[0] + 1
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


class ASTParser:
    """Thread-safe ECMAScript/TypeScript parser.

    Tree-sitter parser objects must not be shared between threads, so each
    worker thread lazily builds its own set.
    """

    def __init__(self):
        self._local = threading.local()

    def _parser(self, grammar: str) -> Any:
        parsers = getattr(self._local, "parsers", None)
        if parsers is None:
            parsers = self._local.parsers = {}
        if grammar not in parsers:
            parsers[grammar] = _load_parser(grammar)
        return parsers[grammar]

    @staticmethod
    def grammars_for(filename: str) -> tuple[str, ...]:
        """Grammar order to try for a file name."""
        ext = os.path.splitext(filename)[1].lower()
        return GRAMMAR_ORDER.get(ext, TSX_FIRST)

    def parse(self, source: str | bytes, filename: str = "<text>") -> Any:
        """Parse source text into a Tree-sitter tree.

        Raises:
            ParseWarning: no grammar produced an error-free tree
        """
        content = source.encode("utf-8") if isinstance(source, str) else source

        error_line = None
        for grammar in self.grammars_for(filename):
            tree = self._parser(grammar).parse(content)
            if not tree.root_node.has_error:
                return tree
            line = first_error_line(tree.root_node)
            if error_line is None:
                error_line = line

        where = f" at line {error_line}" if error_line else ""
        raise ParseWarning(filename, f"syntax error{where}")


_default_parser: ASTParser | None = None


def get_default_parser() -> ASTParser:
    """Process-wide parser instance (parsers themselves are per thread)."""
    global _default_parser
    if _default_parser is None:
        _default_parser = ASTParser()
    return _default_parser
