"""depviz CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click
from rich.table import Table

from depviz import __version__
from depviz.pipeline.ui import console


class VerboseGroup(click.Group):
    """Categorized help generated from the registered commands."""

    def format_commands(self, ctx, formatter):
        """Override to suppress default command listing (we use categorized format in format_help)."""
        pass

    COMMAND_CATEGORIES = {
        "GRAPH_ANALYSIS": {
            "title": "GRAPH ANALYSIS",
            "description": "Import graph, circular dependencies and layout",
            "commands": ["analyze"],
            "command_meta": {
                "analyze": {
                    "use_when": "Need the dependency graph of a source tree",
                    "gives": "Nodes, edges, stats, positions as JSON",
                },
            },
        },
        "FILE_INSPECTION": {
            "title": "FILE INSPECTION",
            "description": "Single-file metrics and pattern flags",
            "commands": ["inspect"],
            "command_meta": {
                "inspect": {
                    "use_when": "Need counts and complexity for one file",
                    "gives": "Functions, classes, exports, complexity score",
                },
            },
        },
    }

    def format_help(self, ctx, formatter):
        """Generate Rich-styled categorized help."""
        super().format_help(ctx, formatter)

        registered = {name: cmd for name, cmd in self.commands.items() if not getattr(cmd, "hidden", False)}

        console.print()
        console.rule("[bold]COMMANDS[/bold]", characters="-")

        for category_data in self.COMMAND_CATEGORIES.values():
            console.print(f"\n[bold cyan]{category_data['title']}[/bold cyan]")
            console.print(f"[dim]{category_data['description']}[/dim]")

            table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
            table.add_column("Command", style="cmd", width=12, overflow="fold")
            table.add_column("Description", style="white", overflow="fold")
            table.add_column("Use", style="dim", width=36, overflow="fold")

            for cmd_name in category_data["commands"]:
                if cmd_name not in registered:
                    continue
                cmd = registered[cmd_name]

                first_line = (cmd.help or "").split("\n")[0].strip()
                period_idx = first_line.find(".")
                short_help = first_line[:period_idx] if period_idx > 0 else first_line

                cmd_meta = category_data.get("command_meta", {}).get(cmd_name, {})
                hint = f"USE: {cmd_meta['use_when']}" if "use_when" in cmd_meta else ""

                table.add_row(cmd_name, short_help, hint)

            console.print(table)

        console.print()
        console.rule(characters="-")
        console.print("For detailed options: [cmd]depviz <command> --help[/cmd]")


@click.group(cls=VerboseGroup)
@click.version_option(version=__version__, prog_name="depviz")
@click.help_option("-h", "--help")
def cli():
    """depviz - Dependency graphs for JavaScript and TypeScript projects

    \b
    QUICK START:
      depviz analyze ./src                 # Summary of the import graph
      depviz analyze ./src --json          # Full graph as JSON on stdout
      depviz inspect ./src/app.tsx         # Metrics for one file"""
    pass


from depviz.commands.analyze import analyze
from depviz.commands.inspect import inspect_command

cli.add_command(analyze)
cli.add_command(inspect_command)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
