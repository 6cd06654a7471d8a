"""mvscript parser CLI."""

from __future__ import annotations

import sys
from enum import Enum
from pathlib import Path

import click

from mvscript import __version__
from mvscript.config import find_config, load_config
from mvscript.errors import CompileError, DiagnosticRenderer
from mvscript.parser import ENTRY_POINTS, Parser

SOURCE_SUFFIX = ".mvs"


def _report(err: CompileError, renderer: DiagnosticRenderer) -> None:
    for diag in err.diagnostics:
        click.echo(renderer.render(diag), err=True)


def _check_project(project_path: Path, sources: str, entry: str, *, color: bool) -> bool:
    """Parse all .mvs files under the source directory. Returns True if OK."""
    src_dir = project_path / sources
    if not src_dir.is_dir():
        src_dir = project_path  # fallback to project root

    mvs_files = sorted(src_dir.rglob(f"*{SOURCE_SUFFIX}"))
    if not mvs_files:
        click.echo(f"warning: no {SOURCE_SUFFIX} files found", err=True)
        return True

    renderer = DiagnosticRenderer(color=color)
    had_errors = False

    for mvs_file in mvs_files:
        try:
            source = mvs_file.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            had_errors = True
            click.echo(f"error: cannot read {mvs_file}: {e}", err=True)
            continue
        try:
            Parser(source, str(mvs_file)).parse_entry(entry)
        except CompileError as e:
            had_errors = True
            _report(e, renderer)

    return not had_errors


@click.group()
@click.version_option(__version__, prog_name="mvscript")
def main() -> None:
    """The mvscript language parser."""


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
def check(path: str) -> None:
    """Parse every source file of an mvscript project."""
    try:
        config_path = find_config(Path(path))
        config = load_config(config_path)
    except FileNotFoundError:
        click.echo("error: no mvscript.toml found", err=True)
        raise SystemExit(1)
    except ValueError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"checking {config.package.name}...")
    ok = _check_project(
        config_path.parent,
        config.parse.sources,
        config.parse.entry,
        color=config.diagnostics.color,
    )
    if not ok:
        raise SystemExit(1)
    click.echo(f"checked {config.package.name}: no errors")


@main.command()
@click.argument("file", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--entry",
    type=click.Choice(ENTRY_POINTS),
    default="program",
    show_default=True,
    help="Grammar production to parse the input with.",
)
@click.option("--stdin", "use_stdin", is_flag=True, help="Read source from stdin.")
@click.option("--color/--no-color", default=True, help="Colorize diagnostics.")
def view(file: str | None, entry: str, use_stdin: bool, color: bool) -> None:
    """View the AST of an mvscript source file."""
    if use_stdin:
        source = sys.stdin.read()
        filename = "<stdin>"
    elif file is not None:
        try:
            source = Path(file).read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            click.echo(f"error: cannot read {file}: {e}", err=True)
            raise SystemExit(1)
        filename = str(file)
    else:
        raise click.UsageError("pass a FILE or --stdin")

    try:
        node = Parser(source, filename).parse_entry(entry)
    except CompileError as e:
        renderer = DiagnosticRenderer(color=color)
        renderer.add_source(filename, source)
        _report(e, renderer)
        raise SystemExit(1)

    _dump_ast(node)


def _format_value(value: object) -> str:
    try:
        return repr(value)
    except ValueError:
        # ints past the str conversion digit limit
        return hex(value)  # type: ignore[arg-type]


def _dump_ast(root: object) -> None:
    """Print a readable AST dump, one node or field per line."""
    stack: list[tuple[int, object]] = [(0, root)]
    while stack:
        depth, node = stack.pop()
        if isinstance(node, str):
            click.echo(node)
            continue
        indent = "  " * depth
        name = type(node).__name__
        if not hasattr(node, "__dataclass_fields__"):
            click.echo(f"{indent}{name}: {_format_value(node)}")
            continue

        click.echo(f"{indent}{name}")
        # Children are pushed in reverse so they pop in field order.
        pending: list[tuple[int, object]] = []
        for field_name in node.__dataclass_fields__:  # type: ignore[union-attr]
            if field_name == "filename":
                continue
            value = getattr(node, field_name)
            if isinstance(value, tuple):
                if value:
                    pending.append((0, f"{indent}  {field_name}:"))
                    pending.extend((depth + 2, item) for item in value)
                else:
                    pending.append((0, f"{indent}  {field_name}: []"))
            elif hasattr(value, "__dataclass_fields__"):
                pending.append((0, f"{indent}  {field_name}:"))
                pending.append((depth + 2, value))
            elif isinstance(value, Enum):
                pending.append((0, f"{indent}  {field_name}: {value.name}"))
            elif value is not None:
                pending.append((0, f"{indent}  {field_name}: {_format_value(value)}"))
        stack.extend(reversed(pending))
