"""Closed set of AST node kinds the extractors consult.

Tree-sitter trees are untyped (every node is identified by a string tag).
``lower`` is the only place those tags are read: it walks a tree once and
yields instances of the small dataclass variants below. Extractors then match
on the variant classes instead of on strings.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class ImportDeclaration:
    """``import x from "./a"``, ``import "./a"``, ``import type {T} from "./a"``."""

    source: str
    line: int


@dataclass(frozen=True)
class ExportFromDeclaration:
    """``export {a, b} from "./a"``."""

    source: str
    line: int


@dataclass(frozen=True)
class ExportAllDeclaration:
    """``export * from "./a"`` and ``export * as ns from "./a"``."""

    source: str
    line: int


@dataclass(frozen=True)
class ExportDeclaration:
    """Local export: ``export const x``, ``export default ...``, ``export {x}``."""

    line: int
    is_default: bool = False


@dataclass(frozen=True)
class FunctionDeclaration:
    """Function declarations and expressions, arrow functions and methods."""

    name: str | None
    line: int


@dataclass(frozen=True)
class ClassDeclaration:
    name: str | None
    line: int


@dataclass(frozen=True)
class InterfaceDeclaration:
    name: str
    line: int


@dataclass(frozen=True)
class TypeAliasDeclaration:
    name: str
    line: int


@dataclass(frozen=True)
class CallExpression:
    callee: str
    line: int


@dataclass(frozen=True)
class BranchPoint:
    """A construct that adds one path to cyclomatic complexity."""

    kind: str
    line: int


@dataclass(frozen=True)
class JsxElement:
    tag: str
    line: int


@dataclass(frozen=True)
class TypeAnnotation:
    line: int


AstNode = Union[
    ImportDeclaration,
    ExportFromDeclaration,
    ExportAllDeclaration,
    ExportDeclaration,
    FunctionDeclaration,
    ClassDeclaration,
    InterfaceDeclaration,
    TypeAliasDeclaration,
    CallExpression,
    BranchPoint,
    JsxElement,
    TypeAnnotation,
]


# ---------------------------------------------------------------------------
# Lowering from Tree-sitter
# ---------------------------------------------------------------------------

MAX_CALLEE_LENGTH = 80


def _text(node: Any) -> str:
    return node.text.decode("utf-8", errors="replace") if node is not None else ""


def _line(node: Any) -> int:
    return node.start_point[0] + 1


def string_value(node: Any) -> str:
    """Literal value of a string node, without its quotes."""
    raw = _text(node)
    if len(raw) >= 2 and raw[0] in "\"'" and raw[-1] == raw[0]:
        return raw[1:-1]
    return raw


def _field_name(node: Any, field: str = "name") -> str | None:
    child = node.child_by_field_name(field)
    return _text(child) if child is not None else None


def _lower_import(node: Any) -> AstNode | None:
    source = node.child_by_field_name("source")
    if source is None:
        # import x = require("./y") has no module source field
        return None
    return ImportDeclaration(string_value(source), _line(node))


def _lower_export(node: Any) -> AstNode | None:
    source = node.child_by_field_name("source")
    child_types = {child.type for child in node.children}
    if source is not None:
        if "*" in child_types or "namespace_export" in child_types:
            return ExportAllDeclaration(string_value(source), _line(node))
        return ExportFromDeclaration(string_value(source), _line(node))
    return ExportDeclaration(_line(node), is_default="default" in child_types)


def _lower_function(node: Any) -> AstNode:
    return FunctionDeclaration(_field_name(node), _line(node))


def _lower_class(node: Any) -> AstNode:
    return ClassDeclaration(_field_name(node), _line(node))


def _lower_interface(node: Any) -> AstNode:
    return InterfaceDeclaration(_field_name(node) or "", _line(node))


def _lower_type_alias(node: Any) -> AstNode:
    return TypeAliasDeclaration(_field_name(node) or "", _line(node))


def _lower_call(node: Any) -> AstNode:
    callee = _text(node.child_by_field_name("function"))
    return CallExpression(callee[:MAX_CALLEE_LENGTH], _line(node))


def _lower_branch(node: Any) -> AstNode:
    return BranchPoint(node.type, _line(node))


def _lower_binary(node: Any) -> AstNode | None:
    operator = node.child_by_field_name("operator")
    if operator is not None and operator.type in ("&&", "||", "??"):
        return BranchPoint(operator.type, _line(node))
    return None


def _lower_jsx(node: Any) -> AstNode:
    if node.type == "jsx_element":
        opening = node.child_by_field_name("open_tag")
        tag = _field_name(opening) if opening is not None else None
    else:
        tag = _field_name(node)
    return JsxElement(tag or "", _line(node))


def _lower_type_annotation(node: Any) -> AstNode:
    return TypeAnnotation(_line(node))


_LOWERERS: dict[str, Callable[[Any], AstNode | None]] = {
    "import_statement": _lower_import,
    "export_statement": _lower_export,
    "function_declaration": _lower_function,
    "generator_function_declaration": _lower_function,
    "function_expression": _lower_function,
    "function": _lower_function,
    "generator_function": _lower_function,
    "arrow_function": _lower_function,
    "method_definition": _lower_function,
    "class_declaration": _lower_class,
    "abstract_class_declaration": _lower_class,
    "class": _lower_class,
    "interface_declaration": _lower_interface,
    "type_alias_declaration": _lower_type_alias,
    "call_expression": _lower_call,
    "if_statement": _lower_branch,
    "for_statement": _lower_branch,
    "for_in_statement": _lower_branch,
    "while_statement": _lower_branch,
    "do_statement": _lower_branch,
    "switch_case": _lower_branch,
    "catch_clause": _lower_branch,
    "ternary_expression": _lower_branch,
    "binary_expression": _lower_binary,
    "jsx_element": _lower_jsx,
    "jsx_self_closing_element": _lower_jsx,
    "type_annotation": _lower_type_annotation,
}


def lower(root: Any) -> Iterator[AstNode]:
    """Yield typed nodes in source order (pre-order, iterative)."""
    stack = [root]
    while stack:
        node = stack.pop()
        # Keyword tokens share type names with named nodes ("class", "function")
        lowerer = _LOWERERS.get(node.type) if node.is_named else None
        if lowerer is not None:
            lowered = lowerer(node)
            if lowered is not None:
                yield lowered
        if node.child_count:
            stack.extend(reversed(node.children))
