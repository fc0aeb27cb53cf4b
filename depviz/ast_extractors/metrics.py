"""Single-file metrics: structural counts, complexity and pattern flags.

The heuristics here are descriptive only. A parse failure never reaches the
caller: the result falls back to zero structural counts and flags guessed from
the file name, with ``parse_error`` set.
"""

import math
import os
import re
from dataclasses import dataclass, field
from typing import Any, assert_never

from depviz.ast_extractors.nodes import (
    AstNode,
    BranchPoint,
    CallExpression,
    ClassDeclaration,
    ExportAllDeclaration,
    ExportDeclaration,
    ExportFromDeclaration,
    FunctionDeclaration,
    ImportDeclaration,
    InterfaceDeclaration,
    JsxElement,
    TypeAliasDeclaration,
    TypeAnnotation,
    lower,
)
from depviz.ast_parser import ASTParser, get_default_parser
from depviz.errors import ParseWarning

TYPED_EXTENSIONS = (".ts", ".tsx", ".mts", ".cts")
JSX_EXTENSIONS = (".jsx", ".tsx")

TEST_NAME_RE = re.compile(r"(\.|_)(test|spec)\.[cm]?[jt]sx?$|(^|/)__tests__/", re.IGNORECASE)
CONFIG_NAME_RE = re.compile(r"(config|\.rc$|rc\.[cm]?[jt]s$|settings)", re.IGNORECASE)
UTILITY_NAME_RE = re.compile(r"(util|helper)", re.IGNORECASE)
HOOK_CALL_RE = re.compile(r"^(React\.)?use[A-Z]\w*$")
TEST_CALLS = frozenset({"describe", "it", "test", "expect", "beforeEach", "afterEach", "beforeAll", "afterAll"})

# Complexity per score point on the 1-10 scale
COMPLEXITY_PER_POINT = 5


@dataclass
class FilePatterns:
    is_react_component: bool = False
    is_config_file: bool = False
    is_test_file: bool = False
    has_typescript: bool = False
    is_utility_file: bool = False
    has_default_export: bool = False

    def to_dict(self) -> dict[str, bool]:
        return {
            "isReactComponent": self.is_react_component,
            "isConfigFile": self.is_config_file,
            "isTestFile": self.is_test_file,
            "hasTypeScript": self.has_typescript,
            "isUtilityFile": self.is_utility_file,
            "hasDefaultExport": self.has_default_export,
        }


@dataclass
class FileMetrics:
    """Descriptive metrics for one file."""

    filename: str
    lines_of_code: int = 0
    functions: int = 0
    classes: int = 0
    interfaces: int = 0
    type_aliases: int = 0
    exports: int = 0
    imports: int = 0
    cyclomatic_complexity: int = 1
    score: int = 1
    explanation: str = ""
    patterns: FilePatterns = field(default_factory=FilePatterns)
    key_features: list[str] = field(default_factory=list)
    summary: str = ""
    purpose: str = ""
    suggestions: list[str] = field(default_factory=list)
    parse_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "summary": self.summary,
            "purpose": self.purpose,
            "metrics": {
                "linesOfCode": self.lines_of_code,
                "functions": self.functions,
                "classes": self.classes,
                "interfaces": self.interfaces,
                "typeAliases": self.type_aliases,
                "exports": self.exports,
                "imports": self.imports,
            },
            "complexity": {
                "cyclomaticComplexity": self.cyclomatic_complexity,
                "score": self.score,
                "explanation": self.explanation,
            },
            "patterns": self.patterns.to_dict(),
            "keyFeatures": list(self.key_features),
            "suggestions": list(self.suggestions),
            "parseError": self.parse_error,
        }


class _MetricsVisitor:
    """Accumulates counts over the typed node stream."""

    def __init__(self):
        self.functions = 0
        self.classes = 0
        self.interfaces = 0
        self.type_aliases = 0
        self.exports = 0
        self.imports = 0
        self.branches = 0
        self.jsx_elements = 0
        self.type_annotations = 0
        self.has_default_export = False
        self.hook_calls: set[str] = set()
        self.test_calls = 0

    def visit(self, node: AstNode) -> None:
        if isinstance(node, ImportDeclaration):
            self.imports += 1
        elif isinstance(node, (ExportFromDeclaration, ExportAllDeclaration)):
            self.exports += 1
        elif isinstance(node, ExportDeclaration):
            self.exports += 1
            self.has_default_export = self.has_default_export or node.is_default
        elif isinstance(node, FunctionDeclaration):
            self.functions += 1
        elif isinstance(node, ClassDeclaration):
            self.classes += 1
        elif isinstance(node, InterfaceDeclaration):
            self.interfaces += 1
        elif isinstance(node, TypeAliasDeclaration):
            self.type_aliases += 1
        elif isinstance(node, CallExpression):
            if HOOK_CALL_RE.match(node.callee):
                self.hook_calls.add(node.callee.rsplit(".", 1)[-1])
            elif node.callee.split(".", 1)[0] in TEST_CALLS:
                self.test_calls += 1
        elif isinstance(node, BranchPoint):
            self.branches += 1
        elif isinstance(node, JsxElement):
            self.jsx_elements += 1
        elif isinstance(node, TypeAnnotation):
            self.type_annotations += 1
        else:
            assert_never(node)


def count_lines(text: str) -> int:
    """Non-blank lines."""
    return sum(1 for line in text.splitlines() if line.strip())


def complexity_score(cyclomatic: int) -> int:
    """Map cyclomatic complexity onto a 1-10 scale."""
    return max(1, min(10, math.ceil(cyclomatic / COMPLEXITY_PER_POINT)))


def _explain(score: int, cyclomatic: int) -> str:
    if score <= 3:
        band = "Low"
    elif score <= 6:
        band = "Medium"
    else:
        band = "High"
    return f"{band} complexity: {cyclomatic} independent paths through the file."


def _name_patterns(filename: str) -> FilePatterns:
    base = os.path.basename(filename)
    ext = os.path.splitext(base)[1].lower()
    normalized = filename.replace("\\", "/")
    return FilePatterns(
        is_react_component=ext in JSX_EXTENSIONS and base[:1].isupper(),
        is_config_file=bool(CONFIG_NAME_RE.search(base)),
        is_test_file=bool(TEST_NAME_RE.search(normalized)),
        has_typescript=ext in TYPED_EXTENSIONS,
        is_utility_file=bool(UTILITY_NAME_RE.search(base)),
    )


def _describe(metrics: FileMetrics) -> None:
    """Fill the human-facing summary fields from counts and flags."""
    p = metrics.patterns
    if p.is_test_file:
        purpose = "Test suite"
    elif p.is_react_component:
        purpose = "UI component"
    elif p.is_config_file:
        purpose = "Configuration"
    elif p.is_utility_file:
        purpose = "Shared utilities"
    elif metrics.interfaces + metrics.type_aliases and not metrics.functions:
        purpose = "Type definitions"
    else:
        purpose = "Application module"
    metrics.purpose = purpose

    features = []
    if metrics.functions:
        features.append(f"{metrics.functions} function(s)")
    if metrics.classes:
        features.append(f"{metrics.classes} class(es)")
    if metrics.interfaces or metrics.type_aliases:
        features.append(f"{metrics.interfaces + metrics.type_aliases} type declaration(s)")
    if p.has_default_export:
        features.append("default export")
    if p.has_typescript:
        features.append("TypeScript syntax")
    metrics.key_features = features

    metrics.summary = (
        f"{purpose} with {metrics.lines_of_code} lines, {metrics.functions} functions, "
        f"{metrics.classes} classes and {metrics.exports} exports."
    )

    suggestions = []
    if metrics.parse_error:
        suggestions.append("File could not be parsed; counts are estimates from its name only.")
    if metrics.score >= 7:
        suggestions.append("Consider splitting branching logic into smaller functions.")
    if metrics.lines_of_code > 300:
        suggestions.append("Large file; consider breaking it into focused modules.")
    if metrics.exports == 0 and not metrics.parse_error and not p.is_test_file:
        suggestions.append("No exports; check whether this file is still used.")
    metrics.suggestions = suggestions


def analyze_code(text: str, filename: str = "<text>", parser: ASTParser | None = None) -> FileMetrics:
    """Compute metrics for one file's text. Never raises on bad syntax."""
    patterns = _name_patterns(filename)
    metrics = FileMetrics(filename=os.path.basename(filename), lines_of_code=count_lines(text), patterns=patterns)

    try:
        tree = (parser or get_default_parser()).parse(text, filename)
    except ParseWarning as warning:
        metrics.parse_error = warning.reason
        metrics.explanation = "Complexity unavailable: file could not be parsed."
        _describe(metrics)
        return metrics

    visitor = _MetricsVisitor()
    for node in lower(tree.root_node):
        visitor.visit(node)

    metrics.functions = visitor.functions
    metrics.classes = visitor.classes
    metrics.interfaces = visitor.interfaces
    metrics.type_aliases = visitor.type_aliases
    metrics.exports = visitor.exports
    metrics.imports = visitor.imports
    metrics.cyclomatic_complexity = 1 + visitor.branches
    metrics.score = complexity_score(metrics.cyclomatic_complexity)
    metrics.explanation = _explain(metrics.score, metrics.cyclomatic_complexity)

    patterns.has_default_export = visitor.has_default_export
    patterns.has_typescript = patterns.has_typescript or bool(
        visitor.interfaces or visitor.type_aliases or visitor.type_annotations
    )
    patterns.is_react_component = bool(visitor.jsx_elements or visitor.hook_calls)
    patterns.is_test_file = patterns.is_test_file or visitor.test_calls >= 2

    _describe(metrics)
    return metrics
