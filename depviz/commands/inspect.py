"""Single-file metrics."""

import json
import sys

import click
from rich.markup import escape

from depviz.pipeline import console, inspect_file, print_header, print_warning
from depviz.pipeline.ui import key_value_table
from depviz.utils.error_handler import handle_exceptions


@click.command("inspect")
@click.argument("file", required=False, type=click.Path())
@click.option("--text-from-stdin", is_flag=True, help="Read the source text from stdin instead of FILE")
@click.option("--filename", default=None, help="File name used for pattern heuristics with --text-from-stdin")
@click.option("--json", "as_json", is_flag=True, help="Print the metrics as JSON")
@handle_exceptions
def inspect_command(file, text_from_stdin, filename, as_json):
    """Counts, complexity and pattern flags for one JavaScript/TypeScript file.

    Never fails on bad syntax: an unparseable file reports zero structural
    counts, flags guessed from its name, and a parseError.

    \b
    EXAMPLES:
      depviz inspect src/components/Button.tsx
      cat util.ts | depviz inspect --text-from-stdin --filename util.ts --json

    \b
    EXIT CODES:
      0 = Success
      1 = Internal error
      2 = Neither FILE nor --text-from-stdin given
      3 = FILE does not exist or cannot be read
    """
    if text_from_stdin:
        text = sys.stdin.read()
        metrics = inspect_file(text=text, filename=filename or file or "<stdin>")
    else:
        metrics = inspect_file(file)

    if as_json:
        click.echo(json.dumps(metrics.to_dict(), indent=2))
        return

    print_header(escape(metrics.filename))
    console.print(f"[bold]{metrics.purpose}[/bold]: {metrics.summary}", highlight=False)
    if metrics.parse_error:
        print_warning(escape(f"Parse failed ({metrics.parse_error}); counts are name-based estimates"))

    console.print(
        key_value_table(
            "Metrics",
            [
                ("Lines of code", str(metrics.lines_of_code)),
                ("Functions", str(metrics.functions)),
                ("Classes", str(metrics.classes)),
                ("Interfaces", str(metrics.interfaces)),
                ("Type aliases", str(metrics.type_aliases)),
                ("Imports", str(metrics.imports)),
                ("Exports", str(metrics.exports)),
                ("Complexity", f"{metrics.score}/10 (cyclomatic {metrics.cyclomatic_complexity})"),
            ],
        )
    )
    console.print(f"[dim]{metrics.explanation}[/dim]")

    flags = [name for name, value in metrics.patterns.to_dict().items() if value]
    if flags:
        console.print(f"Patterns: {', '.join(flags)}", highlight=False)
    for feature in metrics.key_features:
        console.print(f"  - {feature}", highlight=False)
    for suggestion in metrics.suggestions:
        console.print(f"[warning]Suggestion:[/warning] {suggestion}", highlight=False)
