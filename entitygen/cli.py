"""Command-line interface for generating class headers from entity schemas."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from . import __version__
from .codegen import (
    GenerationResult,
    GeneratorError,
    Severity,
    generate_from_document,
    get_language_info,
    list_supported_languages,
)
from .codegen.core.config import get_config_manager, load_config
from .logging_config import get_logger, setup_logging
from .utils import SchemaLoaderError, load_schema_document, write_units

logger = get_logger(__name__)

SEVERITY_STYLES = {
    Severity.FATAL: "bold red",
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the entitygen command."""
    parser = argparse.ArgumentParser(
        prog="entitygen",
        description="Generate class headers from an entity schema document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  entitygen schema.json
  entitygen schema.json -o include/ --namespace com.example
  entitygen --url https://example.com/schema.json --split -o out/
  entitygen --list-languages
        """.strip(),
    )

    input_group = parser.add_mutually_exclusive_group()
    input_group.add_argument("schema", nargs="?", help="Schema document (JSON)")
    input_group.add_argument("--url", help="URL to fetch the schema document from")

    parser.add_argument(
        "--output", "-o", metavar="OUTDIR", help="Output directory (default: stdout)"
    )
    parser.add_argument(
        "--language", "-l", default="cpp", help="Target language (default: cpp)"
    )
    parser.add_argument("--config", help="Configuration file path (JSON)")
    parser.add_argument(
        "--namespace", help="Namespace for generated code, overrides the schema"
    )
    parser.add_argument(
        "--split",
        action="store_true",
        help="Emit a separate definition unit for each entity",
    )
    parser.add_argument(
        "--workers", type=int, metavar="N", help="Number of render workers"
    )
    parser.add_argument(
        "--no-comments",
        action="store_true",
        help="Don't add comments to generated code",
    )
    parser.add_argument(
        "--list-languages",
        action="store_true",
        help="List supported languages and exit",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    return parser


def build_config_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Collect configuration overrides given on the command line."""
    overrides: dict[str, Any] = {}

    if args.namespace:
        overrides["namespace"] = args.namespace
    if args.split:
        overrides["split_definitions"] = True
    if args.workers is not None:
        overrides["max_workers"] = args.workers
    if args.no_comments:
        overrides["add_comments"] = False

    return overrides


class CLIHandler:
    """Handle command-line operations for schema code generation."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        logger.debug("CLIHandler initialized")

    def run(self, args: argparse.Namespace) -> int:
        """Run the command described by parsed arguments.

        Returns:
            Exit code (0 for success, 1 for failure).
        """
        if args.list_languages:
            return self.list_languages()

        if not (args.schema or args.url):
            self.console.print("[red]✗[/red] Input required (SCHEMA or --url)")
            return 1

        try:
            source, document = load_schema_document(args.schema, args.url)
        except (SchemaLoaderError, FileNotFoundError) as e:
            self.console.print(f"[red]✗ Failed to load schema:[/red] {e}")
            return 1

        self.console.print(f"📄 Loaded: {source}", highlight=False)

        try:
            language = get_language_info(args.language)["name"]
            config = load_config(
                language,
                custom_config=build_config_overrides(args),
                config_file=args.config,
            )
        except GeneratorError as e:
            self.console.print(f"[red]✗ Configuration error:[/red] {e}")
            logger.debug("Configuration failed", exc_info=True)
            return 1

        for warning in get_config_manager().validate_config(config):
            logger.warning("Configuration: %s", warning)

        try:
            result = generate_from_document(document, language, config)
        except GeneratorError as e:
            self.console.print(f"[red]✗ Error:[/red] {e}")
            return 1

        self.output_units(result, args.output)
        self.print_diagnostics(result)

        if result.has_errors:
            return 1
        return 0

    def output_units(self, result: GenerationResult, output_dir: str | None) -> None:
        """Write units to a directory, or print them in build order."""
        if not result.units:
            return

        if output_dir:
            written = write_units(result.units, output_dir)
            self.console.print(
                f"[green]✓[/green] Wrote {len(written)} file(s) to "
                f"[cyan]{Path(output_dir)}[/cyan]",
                highlight=False,
            )
            return

        for unit_id in result.build_order():
            unit = result.units[unit_id]
            self.console.print()
            self.console.print(
                Panel(
                    Syntax(unit.text, "cpp", theme="monokai", line_numbers=False),
                    title=f"📝 {unit_id}",
                    border_style="green",
                )
            )

    def print_diagnostics(self, result: GenerationResult) -> None:
        """Print diagnostics as a table, or a success line if there are none."""
        if not result.diagnostics:
            self.console.print(
                f"[green]✓ Generated {len(result.units)} unit(s)[/green]"
            )
            return

        table = Table(
            title="🔎 Diagnostics", box=box.ROUNDED, title_style="bold cyan"
        )
        table.add_column("Severity", no_wrap=True)
        table.add_column("Entity", style="bold")
        table.add_column("Kind", style="dim")
        table.add_column("Message")

        for diagnostic in result.diagnostics:
            style = SEVERITY_STYLES[diagnostic.severity]
            table.add_row(
                f"[{style}]{diagnostic.severity.value}[/{style}]",
                diagnostic.entity_name or "[dim]-[/dim]",
                diagnostic.error_kind,
                diagnostic.message,
            )

        self.console.print()
        self.console.print(table)

    def list_languages(self) -> int:
        """List supported languages with details."""
        languages = list_supported_languages()

        if not languages:
            self.console.print("[yellow]⚠️ No code generators available[/yellow]")
            return 0

        table = Table(
            title="📋 Supported Languages", box=box.ROUNDED, title_style="bold cyan"
        )
        table.add_column("Language", style="bold green", no_wrap=True)
        table.add_column("Header", style="cyan")
        table.add_column("Definition", style="cyan")
        table.add_column("Generator Class", style="dim")
        table.add_column("Aliases", style="blue")

        for language in languages:
            info = get_language_info(language)
            aliases = (
                ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
            )
            table.add_row(
                f"🔧 {language}",
                info["file_extension"],
                info["definition_extension"],
                info["class"],
                aliases,
            )

        self.console.print()
        self.console.print(table)
        return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the entitygen console script."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else "WARNING")
    logger.debug("Arguments: %s", args)

    return CLIHandler().run(args)


if __name__ == "__main__":
    sys.exit(main())
