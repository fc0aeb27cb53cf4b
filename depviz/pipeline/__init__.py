"""Pipeline execution infrastructure."""
from .runner import analyze_directory, inspect_file, inspect_node
from .structures import AnalysisResult
from .ui import console, print_header, print_status_panel, print_success, print_warning

__all__ = [
    "AnalysisResult", "analyze_directory", "inspect_file", "inspect_node",
    "console", "print_header", "print_status_panel", "print_success", "print_warning",
]
