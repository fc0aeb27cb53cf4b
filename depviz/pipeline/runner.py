"""Analysis pipeline: scan, extract, resolve, build, detect, classify, lay out.

Per-file extract+resolve work runs on a bounded thread pool. Everything after
the join barrier operates on one immutable Graph value at a time, so a run owns
its result outright and concurrent runs share nothing but the parser cache.
"""

import os
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

import numpy as np

from depviz.ast_extractors import FileMetrics, analyze_code, extract_file_imports
from depviz.ast_parser import ASTParser, get_default_parser
from depviz.config_runtime import load_runtime_config
from depviz.errors import DepvizError, InputError, InternalError, NotFoundError, ParseWarning
from depviz.graph import (
    CycleDetector,
    GraphBuilder,
    LayoutStrategy,
    NodeClassifier,
    SourceFile,
    apply_layout,
)
from depviz.module_resolver import ModuleResolver
from depviz.pipeline.structures import AnalysisResult
from depviz.scanner import Scanner
from depviz.utils.logging import logger, new_run_id


def _absolute(path: str | Path, base_dir: str | Path | None) -> Path:
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = Path(base_dir) / candidate if base_dir else Path.cwd() / candidate
    return candidate


def _source_file(
    file_path: str,
    resolver: ModuleResolver,
    parser: ASTParser,
    max_file_size: int | None,
    root: str | None,
) -> tuple[SourceFile, ParseWarning | None]:
    """Extract and resolve one file. Only unexpected failures escape."""
    specifiers, warning = extract_file_imports(file_path, parser, max_file_size)

    dependencies: dict[str, None] = {}
    for specifier in specifiers:
        resolved = resolver.resolve(specifier, file_path)
        if resolved is not None:
            dependencies.setdefault(resolved, None)

    display_name = os.path.relpath(file_path, root) if root else os.path.basename(file_path)
    source = SourceFile(path=file_path, display_name=display_name, dependencies=tuple(dependencies))
    return source, warning


def collect_source_files(
    files: list[str],
    resolver: ModuleResolver,
    parser: ASTParser,
    workers: int,
    max_file_size: int | None = None,
    root: str | Path | None = None,
) -> tuple[list[SourceFile], list[ParseWarning]]:
    """Fan out extract+resolve, then join. Output order follows ``files``.

    Display names are relative to ``root`` when given, else bare file names.
    """
    root = str(root) if root is not None else None
    sources: list[SourceFile] = []
    warnings: list[ParseWarning] = []

    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        futures = [(path, executor.submit(_source_file, path, resolver, parser, max_file_size, root)) for path in files]

        for path, future in futures:
            try:
                source, warning = future.result()
            except DepvizError:
                raise
            except Exception as e:
                raise InternalError(f"{path}: {e}", operation="extract_imports") from e
            sources.append(source)
            if warning is not None:
                warnings.append(warning)

    return sources, warnings


def analyze_directory(
    root: str | Path | None,
    *,
    strategy: LayoutStrategy | str | None = None,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
    config: dict[str, Any] | None = None,
    base_dir: str | Path | None = None,
) -> AnalysisResult:
    """Run the whole pipeline over one source tree.

    Args:
        root: Directory to analyze; relative paths resolve against base_dir (or cwd)
        strategy: "layered" or "zoned"; defaults to the configured strategy
        rng: Random source for the zoned layout
        seed: Seed for the zoned layout when no rng is given
        config: Pre-loaded configuration; loaded from the root when omitted
        base_dir: Base for relative roots

    Returns:
        AnalysisResult with the laid-out graph and collected parse warnings

    Raises:
        InputError: root is empty or not a directory
        NotFoundError: root does not exist
        InternalError: unexpected failure while processing a file
    """
    if root is None or not str(root).strip():
        raise InputError("Root directory path is required", operation="analyze")

    root_path = _absolute(root, base_dir)
    if not root_path.exists():
        raise NotFoundError(f"Directory not found: {root}", operation="analyze")
    if not root_path.is_dir():
        raise InputError(f"Not a directory: {root}", operation="analyze")

    cfg = config if config is not None else load_runtime_config(root_path)
    try:
        layout_strategy = LayoutStrategy(strategy or cfg["layout"]["strategy"])
    except ValueError as e:
        raise InputError(f"Unknown layout strategy: {strategy or cfg['layout']['strategy']}", operation="analyze") from e

    run_id = new_run_id()
    log = logger.bind(run_id=run_id)
    started = time.perf_counter()

    scanner = Scanner(ignore_dirs=cfg["scan"]["ignore_dirs"], extensions=cfg["scan"]["extensions"])
    files = scanner.scan(root_path)
    log.debug("Scan complete: {} files", len(files))

    resolver = ModuleResolver(root_path.resolve(), extensions=cfg["scan"]["extensions"])
    sources, warnings = collect_source_files(
        files,
        resolver,
        get_default_parser(),
        workers=cfg["limits"]["workers"],
        max_file_size=cfg["limits"]["max_file_size"],
        root=root_path.resolve(),
    )
    for warning in warnings:
        log.warning("Parse warning: {} ({})", warning.file_path, warning.reason)
    log.debug("Resolution complete: {}", resolver.cache_info())

    graph = GraphBuilder().build(sources)
    graph = CycleDetector().annotate(graph)
    graph = NodeClassifier(
        utility_markers=cfg["classify"]["utility_markers"],
        fan_in_threshold=cfg["classify"]["fan_in_threshold"],
    ).classify(graph)
    graph = apply_layout(graph, layout_strategy, cfg["layout"], rng=rng, seed=seed)

    elapsed = time.perf_counter() - started
    stats = graph.stats()
    log.info(
        "Analyzed {}: {} files, {} dependencies, {} circular, {} warnings in {:.2f}s",
        root_path,
        stats.total_files,
        stats.total_dependencies,
        stats.circular_dependencies,
        len(warnings),
        elapsed,
    )

    return AnalysisResult(
        root=root_path,
        graph=graph,
        warnings=tuple(warnings),
        run_id=run_id,
        elapsed=elapsed,
        strategy=layout_strategy.value,
        skipped=tuple(scanner.skipped),
    )


def inspect_file(
    file_path: str | Path | None = None,
    *,
    text: str | None = None,
    filename: str | None = None,
    base_dir: str | Path | None = None,
) -> FileMetrics:
    """Single-file metrics from a path or from raw text.

    Raises:
        InputError: neither a path nor text was given
        NotFoundError: the path is missing or unreadable
    """
    if text is None:
        if file_path is None or not str(file_path).strip():
            raise InputError("File path or text is required", operation="inspect")

        path = _absolute(file_path, base_dir)
        if not path.is_file():
            raise NotFoundError(f"File not found: {file_path}", operation="inspect")
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise NotFoundError(f"Could not read {file_path}: {e.strerror or e}", operation="inspect") from e
        filename = filename or str(path)

    return analyze_code(text, filename or "<text>")


def inspect_node(result: AnalysisResult, node_id: str) -> FileMetrics:
    """Metrics for a node selected from a finished result. The graph is not touched."""
    node = result.graph.node(node_id)
    if node is None:
        raise NotFoundError(f"Unknown node: {node_id}", operation="inspect")
    return inspect_file(node.id)
