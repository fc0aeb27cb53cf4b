"""Dependency graph analysis for a source tree."""

import json
import os
from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from depviz.graph import LayoutStrategy, NodeRole
from depviz.pipeline import (
    AnalysisResult,
    analyze_directory,
    console,
    print_header,
    print_status_panel,
    print_success,
    print_warning,
)
from depviz.pipeline.ui import key_value_table
from depviz.utils.error_handler import handle_exceptions

# Unused files listed before the summary truncates
MAX_LISTED = 20


@click.command("analyze")
@click.argument("root", type=click.Path())
@click.option(
    "--layout",
    "layout",
    type=click.Choice([s.value for s in LayoutStrategy]),
    default=None,
    help="Layout strategy (default: from config, layered)",
)
@click.option("--seed", type=int, default=None, help="Random seed for the zoned layout")
@click.option("--out", "out_file", type=click.Path(dir_okay=False), help="Write the JSON result to a file")
@click.option("--json", "as_json", is_flag=True, help="Print the JSON result to stdout instead of a summary")
@handle_exceptions
def analyze(root, layout, seed, out_file, as_json):
    """Build the import graph of a JavaScript/TypeScript tree and lay it out.

    Scans ROOT for .js/.jsx/.ts/.tsx/.mjs/.cjs files (skipping node_modules,
    .git, build output and similar directories), extracts every relative
    import and re-export, resolves it to a file on disk and builds the graph.
    Nodes on import cycles are flagged, every node gets a role (core,
    utility, standalone) and a position.

    \b
    LAYOUTS:
      layered  Importers above the files they import (deterministic)
      zoned    Core cluster in the middle, utilities left, unused files right
               (force simulation; pass --seed for a repeatable layout)

    \b
    EXAMPLES:
      depviz analyze ./src
      depviz analyze ./src --layout zoned --seed 7 --out graph.json
      depviz analyze ./src --json | jq '.stats'

    \b
    OUTPUT FORMAT (JSON):
      {
        "nodes": [{"id", "label", "dependencyCount", "dependentCount",
                   "isCircular", "role", "position": {"x", "y"}}],
        "edges": [{"id": "e-<source>-<target>", "source", "target"}],
        "stats": {"totalFiles", "totalDependencies", "circularDependencies"},
        "warnings": [{"file", "reason"}]
      }

    \b
    EXIT CODES:
      0 = Success (cycles are reported, not failures)
      1 = Internal error
      2 = ROOT is empty or not a directory
      3 = ROOT does not exist

    Configuration is read from ROOT/.depviz/config.json and DEPVIZ_<SECTION>_<KEY>
    environment variables.
    """
    result = analyze_directory(root, strategy=layout, seed=seed)
    payload = json.dumps(result.to_dict(), indent=2)

    if out_file:
        out_path = Path(out_file)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(payload + "\n", encoding="utf-8")

    if as_json:
        click.echo(payload)
        return

    _print_summary(result)
    if out_file:
        console.print()
        print_success(f"Saved to: [path]{escape(out_file)}[/path]")


def _relative(result: AnalysisResult, path: str) -> str:
    try:
        return os.path.relpath(path, result.root.resolve())
    except ValueError:
        return path


def _print_summary(result: AnalysisResult) -> None:
    stats = result.stats
    print_header("DEPENDENCY GRAPH")

    console.print(
        key_value_table(
            "",
            [
                ("Root", str(result.root)),
                ("Files", str(stats.total_files)),
                ("Dependencies", str(stats.total_dependencies)),
                ("Circular nodes", str(stats.circular_dependencies)),
                ("Parse warnings", str(len(result.warnings))),
                ("Layout", result.strategy),
            ],
        )
    )

    roles = Table(title="Roles", title_justify="left")
    roles.add_column("Role")
    roles.add_column("Files", justify="right")
    for role in NodeRole:
        roles.add_row(f"[{role.value}]{role.value}[/{role.value}]", str(len(result.nodes_with_role(role))))
    console.print(roles)

    unused = result.unused_files
    if unused:
        console.print(f"\n[standalone]Unused files (no imports in or out): {len(unused)}[/standalone]")
        for path in unused[:MAX_LISTED]:
            console.print(f"  {escape(_relative(result, path))}", highlight=False)
        if len(unused) > MAX_LISTED:
            console.print(f"  ... and {len(unused) - MAX_LISTED} more", highlight=False)

    for warning in result.warnings:
        print_warning(escape(f"{_relative(result, warning.file_path)}: {warning.reason}"))

    if stats.circular_dependencies:
        circular = [node for node in result.graph.nodes if node.is_circular]
        print_status_panel(
            "CIRCULAR",
            f"{len(circular)} files sit on import cycles",
            ", ".join(_relative(result, node.id) for node in circular[:5]) + (" ..." if len(circular) > 5 else ""),
            level="warning",
        )
    else:
        print_status_panel("CLEAN", "No circular dependencies", f"{stats.total_files} files analyzed", level="success")
