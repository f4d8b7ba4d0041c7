"""Command-line entry point: lint a curriculum corpus and report on it."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from curlint import get_version
from curlint.core.config import merge_overrides, resolve_config
from curlint.core.errors import ConfigError
from curlint.core.logging_setup import configure_logging
from curlint.pipeline.report import RENDERERS, infer_format, print_table, render
from curlint.pipeline.runner import run_lint
from curlint.utils.split_fields import split_fields

LOGGER = logging.getLogger(__name__)
FORMAT_CHOICES = ("table", *RENDERERS)

app = typer.Typer(help="Lint a Markdown curriculum: cross-references, session plan, table of contents.")
console = Console()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"curlint {get_version()}")
        raise typer.Exit()


@app.command()
def lint(
    corpus_dir: Path = typer.Argument(..., exists=True, file_okay=False, help="Directory of Markdown notes."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", dir_okay=False, help="Write the report here instead of stdout."
    ),
    fmt: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help=f"Report format ({', '.join(FORMAT_CHOICES)}). Defaults to a table on stdout or the output suffix.",
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", exists=True, dir_okay=False, help="Lint config YAML (default: <corpus>/curlint.yaml)."
    ),
    plan: Optional[str] = typer.Option(None, "--plan", help="Title of the note holding the session plan."),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", "-x", help="Glob patterns to skip (comma-separated or repeated)."
    ),
    fail_on_warning: bool = typer.Option(
        False, "--fail-on-warning", help="Exit non-zero when warnings are present."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log per-file details to stderr."),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit."
    ),
) -> None:
    configure_logging(verbose)

    if fmt is not None and fmt not in FORMAT_CHOICES:
        raise typer.BadParameter(f"must be one of: {', '.join(FORMAT_CHOICES)}", param_hint="--format")

    try:
        config = resolve_config(corpus_dir, config_path)
        overrides = {"plan_title": plan, "fail_on_warning": True if fail_on_warning else None}
        extra_excludes = split_fields(exclude)
        if output is not None and output.resolve().is_relative_to(corpus_dir.resolve()):
            # a report written into the corpus must not be linted on the next run
            extra_excludes.append(output.resolve().relative_to(corpus_dir.resolve()).as_posix())
        if extra_excludes:
            overrides["exclude"] = [*config.exclude, *extra_excludes]
        config = merge_overrides(config, overrides)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc

    report = run_lint(corpus_dir, config)
    report_format = infer_format(output, fmt)

    if output is None:
        if report_format == "table":
            print_table(report, console)
        else:
            typer.echo(render(report, report_format), nl=False)
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        if report_format == "table":
            with output.open("w", encoding="utf-8") as handle:
                print_table(report, Console(file=handle, width=120, no_color=True))
        else:
            output.write_text(render(report, report_format), encoding="utf-8")
        counts = report.summary()
        console.print(
            f"Report written to {output} ({counts['errors']} errors, {counts['warnings']} warnings)",
            highlight=False,
            soft_wrap=True,
        )

    code = report.exit_code(fail_on_warning=config.fail_on_warning)
    if code:
        LOGGER.debug("Exiting with status %d", code)
        raise typer.Exit(code=code)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
