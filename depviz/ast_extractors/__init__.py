"""AST extractors: import specifiers and single-file metrics."""

from .imports import extract_file_imports, extract_import_specifiers, is_local_specifier
from .metrics import FileMetrics, FilePatterns, analyze_code

__all__ = [
    "extract_file_imports",
    "extract_import_specifiers",
    "is_local_specifier",
    "FileMetrics",
    "FilePatterns",
    "analyze_code",
]
