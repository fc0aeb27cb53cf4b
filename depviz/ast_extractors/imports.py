"""Import specifier extraction for ECMAScript-family files."""

from pathlib import Path

from depviz.ast_extractors.nodes import (
    ExportAllDeclaration,
    ExportFromDeclaration,
    ImportDeclaration,
    lower,
)
from depviz.ast_parser import ASTParser, get_default_parser
from depviz.errors import ParseWarning

LOCAL_PREFIXES = (".", "/")


def is_local_specifier(specifier: str) -> bool:
    """Relative or absolute references; bare package names are not graphed."""
    return specifier.startswith(LOCAL_PREFIXES)


def extract_import_specifiers(
    text: str | bytes,
    filename: str = "<text>",
    parser: ASTParser | None = None,
) -> list[str]:
    """Return the local specifiers of every import / export-from in source order.

    Raises:
        ParseWarning: the text could not be parsed
    """
    tree = (parser or get_default_parser()).parse(text, filename)

    specifiers = []
    for node in lower(tree.root_node):
        if isinstance(node, (ImportDeclaration, ExportFromDeclaration, ExportAllDeclaration)):
            if is_local_specifier(node.source):
                specifiers.append(node.source)
    return specifiers


def extract_file_imports(
    file_path: str | Path,
    parser: ASTParser | None = None,
    max_file_size: int | None = None,
) -> tuple[list[str], ParseWarning | None]:
    """Read one file and extract its local specifiers.

    Failures are isolated to the file: the result is an empty list plus the
    warning describing why, never an exception.
    """
    path = Path(file_path)
    try:
        if max_file_size is not None and path.stat().st_size > max_file_size:
            return [], ParseWarning(str(path), f"file larger than {max_file_size} bytes")
        content = path.read_bytes()
    except OSError as e:
        return [], ParseWarning(str(path), f"unreadable: {e.strerror or e}")

    try:
        return extract_import_specifiers(content, str(path), parser), None
    except ParseWarning as warning:
        return [], warning
