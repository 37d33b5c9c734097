"""CLI entry point — command definitions using Click.

Commands:
    init          Generate a template config file
    check         Run the jsx-a11y checks and emit a JSON report
    actions       List the quick fixes available at a position
    fix           Ask the AI for a fix at a position and apply it
"""

import json
import sys
from pathlib import Path
from typing import Any

import click

from react_a11y_ai import __version__


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

class ClickNotifier:
    """Routes user-facing pipeline messages to the terminal."""

    def info(self, message: str) -> None:
        click.echo(message)

    def warning(self, message: str) -> None:
        click.echo(f"Warning: {message}", err=True)

    def error(self, message: str) -> None:
        click.echo(f"Error: {message}", err=True)


def _make_extension(ctx: click.Context, root: str):
    """Load config and return an initialised Extension rooted at *root*."""
    from react_a11y_ai.config import load
    from react_a11y_ai.host import Extension, ExtensionContext

    obj = ctx.obj
    config = load(obj["config_path"], required=obj["config_explicit"])

    workspace = str(Path(root).resolve())
    if obj["verbose"]:
        click.echo(f"[verbose] Workspace root: {workspace}", err=True)
        click.echo(f"[verbose] ESLint command: {' '.join(config.eslint_command)}", err=True)

    extension = Extension(ClickNotifier(), config)
    extension.init(ExtensionContext(workspace_root=workspace))
    return extension


def _run_check(ctx: click.Context, extension) -> dict:
    from react_a11y_ai.actions import RUN_CHECK_COMMAND

    mapping = extension.execute_command(RUN_CHECK_COMMAND)
    if mapping is None:
        sys.exit(1)
    if ctx.obj["verbose"]:
        total = sum(len(issues) for issues in mapping.values())
        click.echo(f"[verbose] {total} issue(s) in {len(mapping)} file(s)", err=True)
    return mapping


def _actions_at(extension, file: str, line: int, column: int):
    from react_a11y_ai.diagnostics import TextRange
    from react_a11y_ai.document import TextDocument

    document = TextDocument.from_path(file)
    text_range = TextRange.at(max(line, 1) - 1, max(column, 1) - 1)
    return document, extension.code_actions(document, text_range)


def _emit_json(data: Any, ctx: click.Context) -> None:
    """Write JSON to stdout or to the file specified by --output."""
    obj = ctx.obj
    indent = 2 if obj["pretty"] else None
    text = json.dumps(data, indent=indent, ensure_ascii=False)

    output_path: str | None = obj["output_path"]
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        click.echo(f"Report written to '{output_path}'", err=True)
    else:
        click.echo(text)


def _handle_errors(func):
    """Decorator that catches configuration and ESLint errors and exits cleanly."""
    import functools

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from react_a11y_ai.config import ConfigError
        from react_a11y_ai.host import HostError
        from react_a11y_ai.lint import AnalysisError

        try:
            return func(*args, **kwargs)
        except ConfigError as exc:
            click.echo(f"Configuration error: {exc}", err=True)
            sys.exit(1)
        except AnalysisError as exc:
            click.echo(f"ESLint error: {exc}", err=True)
            sys.exit(1)
        except HostError as exc:
            click.echo(f"Extension error: {exc}", err=True)
            sys.exit(1)
        except OSError as exc:
            click.echo(f"File error: {exc}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default=None,
              help="Path to the configuration file.  [default: a11y-config.yaml]")
@click.option("--output", "output_path", default=None,
              help="Write JSON output to a file instead of stdout.")
@click.option("--pretty", is_flag=True, default=False,
              help="Pretty-print the JSON output.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="react-a11y-ai")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, output_path: str | None,
        pretty: bool, verbose: bool) -> None:
    """React accessibility checks (ESLint jsx-a11y) with AI quick fixes."""
    from react_a11y_ai.config import DEFAULT_CONFIG_PATH

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path or DEFAULT_CONFIG_PATH
    ctx.obj["config_explicit"] = config_path is not None
    ctx.obj["output_path"] = output_path
    ctx.obj["pretty"] = pretty
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="a11y-config.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template a11y-config.yaml file."""
    from react_a11y_ai.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Set OPENAI_API_KEY in your environment before running `fix`.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------

@cli.command("check")
@click.argument("root", default=".", type=click.Path(file_okay=False))
@click.pass_context
@_handle_errors
def check_command(ctx: click.Context, root: str) -> None:
    """Run the accessibility checks on ROOT (default: current directory)."""
    from react_a11y_ai.reports.issues import build_report

    extension = _make_extension(ctx, root)
    try:
        mapping = _run_check(ctx, extension)
        report = build_report(str(Path(root).resolve()), mapping)
    finally:
        extension.shutdown()
    _emit_json(report, ctx)


# ---------------------------------------------------------------------------
# actions
# ---------------------------------------------------------------------------

@cli.command("actions")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.argument("line", type=int)
@click.argument("column", type=int)
@click.option("--root", default=".", show_default=True, type=click.Path(file_okay=False),
              help="Workspace root to lint.")
@click.pass_context
@_handle_errors
def actions_command(ctx: click.Context, file: str, line: int, column: int, root: str) -> None:
    """List quick fixes for FILE at 1-based LINE and COLUMN."""
    extension = _make_extension(ctx, root)
    try:
        _run_check(ctx, extension)
        _, actions = _actions_at(extension, file, line, column)
    finally:
        extension.shutdown()

    _emit_json([
        {
            "title":     action.title,
            "kind":      action.kind,
            "preferred": action.is_preferred,
            "issues":    [issue.to_dict() for issue in action.issues],
        }
        for action in actions
    ], ctx)


# ---------------------------------------------------------------------------
# fix
# ---------------------------------------------------------------------------

@cli.command("fix")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.argument("line", type=int)
@click.argument("column", type=int)
@click.option("--root", default=".", show_default=True, type=click.Path(file_okay=False),
              help="Workspace root to lint.")
@click.pass_context
@_handle_errors
def fix_command(ctx: click.Context, file: str, line: int, column: int, root: str) -> None:
    """Apply an AI fix for the first issue in FILE at 1-based LINE and COLUMN."""
    from react_a11y_ai.fixer import FixState

    extension = _make_extension(ctx, root)
    try:
        _run_check(ctx, extension)
        _, actions = _actions_at(extension, file, line, column)
        if not actions:
            click.echo(f"No accessibility issue at {file}:{line}:{column}", err=True)
            sys.exit(1)

        action = actions[0]
        if ctx.obj["verbose"]:
            click.echo(f"[verbose] {action.title}", err=True)
        state = extension.execute_command(action.command.command, *action.command.arguments)
    finally:
        extension.shutdown()

    if state is not FixState.FIX_APPLIED:
        sys.exit(1)
