"""Main CLI for codenav."""

import functools
import json
import logging
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.config import DEFAULT_CONFIG_FILE, CodeNavConfig, load_config
from ..errors import CodeNavError, ErrorTranslator
from ..indexing import IndexQuery, IndexStore, build_default_registry, locate_store, scan as scan_tree
from ..indexing.context import render_context
from ..indexing.entrypoints import ENTRY_POINT_KINDS
from ..indexing.graph import render_graph_dot, render_graph_text
from ..indexing.impact import render_impact_text
from ..indexing.indexer import resolve_root
from ..indexing.locate import render_locate_text
from ..indexing.models import SymbolKind
from ..indexing.testmap import render_test_map_text
from ..utils.rich_logging import setup_logging

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

SYMBOL_KINDS = [k.value for k in SymbolKind if k is not SymbolKind.FILE]

root_option = click.option(
    "--root", "-r", type=click.Path(file_okay=False), default=None,
    help="Project root (default: nearest indexed directory above the working directory)",
)
max_option = click.option(
    "--max", "-n", "max_results", type=click.IntRange(min=1), default=None, help="Maximum results",
)


def handle_errors(func):
    """Report codenav, filesystem and configuration errors and exit 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (CodeNavError, OSError, ValueError, yaml.YAMLError) as exc:
            _fail(click.get_current_context(), exc)

    return wrapper


def _fail(ctx: click.Context, exc: Exception) -> None:
    logger.debug("Command failed", exc_info=True)
    if ctx.obj.get("json"):
        click.echo(json.dumps({"error": str(exc)}), err=True)
    else:
        translator = ErrorTranslator()
        err_console.print(translator.format_for_cli(translator.translate(exc)), highlight=False)
    ctx.exit(1)


def _configure(ctx: click.Context, root: Optional[Path]) -> CodeNavConfig:
    """Load the project config and set up logging for the running command."""
    config_path = ctx.obj["config_path"]
    if config_path is None:
        config_path = (root or Path.cwd()) / DEFAULT_CONFIG_FILE
    config = load_config(config_path)

    level = ctx.obj["log_level"] or config.logging.level
    setup_logging(
        log_level=level,
        log_file=config.logging.file,
        use_json=config.logging.json_format,
        command=ctx.info_name,
    )
    return config


def _open_query(ctx: click.Context, root: Optional[str]) -> IndexQuery:
    root_path = Path(root) if root else None
    config = _configure(ctx, root_path)
    store = locate_store(root_path, config.indexing.store_dir)
    index = store.load()
    logger.debug("Loaded %d entries from %s", len(index.entries), store.index_dir)
    return IndexQuery(index, build_default_registry(), config)


def _emit_json(data) -> None:
    if isinstance(data, BaseModel):
        click.echo(data.model_dump_json(indent=2, by_alias=True))
    else:
        click.echo(json.dumps([item.model_dump(mode="json", by_alias=True) for item in data], indent=2))


def _location(path: str, line: int) -> str:
    return f"{path}:{line}" if line else path


@click.group()
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of text")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Config file (default: <root>/.codenav.yaml)")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default=None, help="Override the configured log level")
@click.version_option(package_name="codenav")
@click.pass_context
def cli(ctx, as_json, config_path, log_level):
    """codenav - project-local code index and symbol cross-reference."""
    ctx.ensure_object(dict)
    ctx.obj["json"] = as_json
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["log_level"] = log_level


@cli.command()
@click.argument("root", type=click.Path(), default=".")
@click.pass_context
@handle_errors
def scan(ctx, root):
    """Index every file under ROOT and persist the result."""
    root_path = resolve_root(root)
    config = _configure(ctx, root_path)

    index = scan_tree(root_path, build_default_registry(), config)
    meta = IndexStore(root_path, config.indexing.store_dir).save(index)

    if ctx.obj["json"]:
        _emit_json(meta)
        return

    symbols = len(index.entries) - meta.file_count
    console.print(
        f"[green]✓[/] Indexed [bold]{meta.file_count}[/] files, [bold]{symbols}[/] symbols "
        f"in {meta.package_count} packages"
    )
    console.print(f"[dim]{escape(meta.root)}[/]", highlight=False)


@cli.command()
@click.argument("query")
@click.option("--exact", is_flag=True, help="Plain substring match on name and path, unranked")
@root_option
@max_option
@click.pass_context
@handle_errors
def lookup(ctx, query, exact, root, max_results):
    """Find files and symbols by name, ranked by relevance."""
    q = _open_query(ctx, root)

    if exact:
        entries = q.match_exact(query, max_results)
        if ctx.obj["json"]:
            _emit_json(entries)
            return
        rows = [(e, None) for e in entries]
    else:
        scored = q.match_scored(query, max_results)
        if ctx.obj["json"]:
            _emit_json(scored)
            return
        rows = [(s.entry, s.score) for s in scored]

    if not rows:
        console.print(f"No matches for {escape(query)!r}")
        return

    table = Table()
    table.add_column("Kind")
    table.add_column("Name")
    table.add_column("Location")
    if not exact:
        table.add_column("Score", justify="right")
    for entry, score in rows:
        cells = [entry.kind, escape(entry.name), escape(_location(entry.path, entry.line))]
        if score is not None:
            cells.append(f"{score:.1f}")
        table.add_row(*cells)
    console.print(table)


@cli.command()
@click.argument("pattern")
@root_option
@max_option
@click.pass_context
@handle_errors
def search(ctx, pattern, root, max_results):
    """Regular-expression search across indexed files."""
    q = _open_query(ctx, root)
    matches = q.search(pattern, max_results)

    if ctx.obj["json"]:
        _emit_json(matches)
        return
    if not matches:
        console.print("No matches")
        return
    for m in matches:
        console.print(f"[cyan]{escape(m.path)}:{m.line}[/]  {escape(m.content)}", highlight=False)


@cli.command()
@click.argument("symbol")
@root_option
@max_option
@click.pass_context
@handle_errors
def refs(ctx, symbol, root, max_results):
    """Show where SYMBOL is defined and every place that uses it."""
    q = _open_query(ctx, root)
    result = q.refs(symbol, max_results)

    if ctx.obj["json"]:
        _emit_json(result)
        return

    if result.definition:
        d = result.definition
        console.print(
            f"[bold]Definition:[/] [cyan]{escape(d.path)}:{d.line}[/]  {escape(d.content)}",
            highlight=False,
        )
    else:
        console.print("[yellow]No definition found[/]")

    console.print(f"[bold]References ({result.total_refs}):[/]")
    for ref in result.references:
        console.print(f"  [cyan]{escape(ref.path)}:{ref.line}[/]  {escape(ref.content)}", highlight=False)


@cli.command()
@click.option("--focus", "-f", default=None, help="Only the neighbourhood of this file")
@click.option("--depth", "-d", type=click.IntRange(min=0), default=None,
              help="Hops from --focus (0 or unset: unlimited)")
@click.option("--format", "fmt", type=click.Choice(["list", "dot"]), default="list", help="Text output format")
@root_option
@click.pass_context
@handle_errors
def graph(ctx, focus, depth, fmt, root):
    """File-level import graph."""
    q = _open_query(ctx, root)
    result = q.focused_graph(focus, depth) if focus else q.graph()

    if ctx.obj["json"]:
        _emit_json(result)
    elif fmt == "dot":
        click.echo(render_graph_dot(result), nl=False)
    else:
        click.echo(render_graph_text(result))


@cli.command()
@click.argument("file")
@root_option
@click.pass_context
@handle_errors
def related(ctx, file, root):
    """Imports, importers and test files of FILE."""
    q = _open_query(ctx, root)
    result = q.related(file)

    if ctx.obj["json"]:
        _emit_json(result)
        return

    for title, paths in (
        ("Imports", result.imports),
        ("Imported by", result.importers),
        ("Tests", result.test_files),
    ):
        console.print(f"[bold]{title} ({len(paths)}):[/]")
        for path in paths:
            console.print(f"  {escape(path)}", highlight=False)


@cli.command()
@click.argument("target")
@click.option("--depth", "-d", type=click.IntRange(min=0), default=None,
              help="Layers to follow (0: until no new dependents)")
@root_option
@max_option
@click.pass_context
@handle_errors
def impact(ctx, target, depth, root, max_results):
    """Blast radius of changing a symbol or file."""
    q = _open_query(ctx, root)
    result = q.impact(target, depth, max_results)

    if ctx.obj["json"]:
        _emit_json(result)
    else:
        click.echo(render_impact_text(result))


@cli.command("dead-code")
@click.option("--kind", "-k", type=click.Choice(SYMBOL_KINDS), default=None, help="Only symbols of this kind")
@click.option("--path", "-p", "path_prefix", default=None, help="Only files under this path prefix")
@root_option
@max_option
@click.pass_context
@handle_errors
def dead_code(ctx, kind, path_prefix, root, max_results):
    """Exported symbols with no references outside their declaration."""
    q = _open_query(ctx, root)
    result = q.dead_code(kind, path_prefix, max_results)

    if ctx.obj["json"]:
        _emit_json(result)
        return
    if not result.candidates:
        console.print("[green]No unreferenced exported symbols[/]")
        return

    table = Table(title=f"Dead code candidates ({result.total_candidates})")
    table.add_column("Kind")
    table.add_column("Name")
    table.add_column("Location")
    for c in result.candidates:
        table.add_row(c.kind, escape(c.name), escape(_location(c.path, c.line)))
    console.print(table)
    if result.total_candidates > len(result.candidates):
        console.print(f"[dim]... {result.total_candidates - len(result.candidates)} more (use --max)[/]")


def _print_symbols(matches, title: Optional[str] = None) -> None:
    table = Table(title=title)
    table.add_column("Kind")
    table.add_column("Name")
    table.add_column("Location")
    table.add_column("Signature")
    for m in matches:
        name = f"{m.parent}.{m.name}" if m.parent else m.name
        table.add_row(m.kind, escape(name), escape(_location(m.path, m.line)), escape(m.signature))
    console.print(table)


@cli.command()
@click.argument("query")
@click.option("--kind", "-k", type=click.Choice(SYMBOL_KINDS), default=None, help="Only symbols of this kind")
@root_option
@max_option
@click.pass_context
@handle_errors
def symbols(ctx, query, kind, root, max_results):
    """Search declarations by name across the project."""
    q = _open_query(ctx, root)
    result = q.symbols(query, kind, max_results)

    if ctx.obj["json"]:
        _emit_json(result)
        return
    if not result.matches:
        console.print(f"No symbols matching {escape(query)!r}")
        return
    _print_symbols(result.matches, title=f"{result.total} symbols")


@cli.command()
@click.argument("scope")
@root_option
@click.pass_context
@handle_errors
def exports(ctx, scope, root):
    """Exported symbols of a file or of the files in a directory."""
    q = _open_query(ctx, root)
    result = q.exports(scope)

    if ctx.obj["json"]:
        _emit_json(result)
        return
    if not result.symbols:
        console.print(f"No exported symbols in {escape(result.scope)}")
        return
    _print_symbols(result.symbols)


@cli.command()
@click.argument("file")
@root_option
@click.pass_context
@handle_errors
def outline(ctx, file, root):
    """Symbols declared in FILE, in source order."""
    q = _open_query(ctx, root)
    matches = q.outline(file)

    if ctx.obj["json"]:
        _emit_json(matches)
        return
    if not matches:
        console.print(f"No symbols in {escape(file)}")
        return
    _print_symbols(matches)


@cli.command()
@root_option
@click.pass_context
@handle_errors
def stale(ctx, root):
    """Files added, deleted or modified since the last scan."""
    q = _open_query(ctx, root)
    result = q.stale()

    if ctx.obj["json"]:
        _emit_json(result)
        return

    if not result.is_stale:
        console.print(f"[green]✓ Index is up to date[/] (scanned {result.scanned_at})")
        return

    console.print(f"[yellow]Index is stale[/] (scanned {result.scanned_at})")
    for title, paths in (
        ("New", result.new_files),
        ("Deleted", result.deleted_files),
        ("Modified", result.modified_files),
    ):
        if paths:
            console.print(f"[bold]{title} ({len(paths)}):[/]")
            for path in paths:
                console.print(f"  {escape(path)}", highlight=False)
    console.print("[dim]Run 'codenav scan' to refresh[/]")


@cli.command()
@click.argument("symbol")
@click.argument("file")
@root_option
@click.pass_context
@handle_errors
def context(ctx, symbol, file, root):
    """Source of SYMBOL in FILE with its doc comment and the file's imports."""
    q = _open_query(ctx, root)
    result = q.context(symbol, file)

    if ctx.obj["json"]:
        _emit_json(result)
    else:
        click.echo(render_context(result))


@cli.command()
@click.argument("query")
@root_option
@max_option
@click.pass_context
@handle_errors
def locate(ctx, query, root, max_results):
    """Files, declarations and lines matching QUERY, best first."""
    q = _open_query(ctx, root)
    result = q.locate(query, max_results)

    if ctx.obj["json"]:
        _emit_json(result)
    else:
        click.echo(render_locate_text(result))


@cli.command("test-map")
@click.option("--path", "-p", "path_prefix", default=None, help="Only files under this path prefix")
@click.option("--untested", is_flag=True, help="Only source files without a test file")
@click.option("--tested", is_flag=True, help="Only source files with a test file")
@root_option
@max_option
@click.pass_context
@handle_errors
def test_map(ctx, path_prefix, untested, tested, root, max_results):
    """Source files and their conventional test files."""
    q = _open_query(ctx, root)
    result = q.test_map(path_prefix, untested, tested, max_results)

    if ctx.obj["json"]:
        _emit_json(result)
    else:
        click.echo(render_test_map_text(result))


@cli.command("entry-points")
@click.option("--kind", "-k", type=click.Choice(ENTRY_POINT_KINDS), default=None, help="Only entry points of this kind")
@root_option
@max_option
@click.pass_context
@handle_errors
def entry_points(ctx, kind, root, max_results):
    """Program mains, HTTP routes, CLI commands and app setup calls."""
    q = _open_query(ctx, root)
    result = q.entry_points(kind, max_results)

    if ctx.obj["json"]:
        _emit_json(result)
        return
    if not result.entry_points:
        console.print("No entry points found")
        return

    table = Table(title=f"Entry points ({result.total})")
    table.add_column("Kind")
    table.add_column("Location")
    table.add_column("Source")
    for ep in result.entry_points:
        table.add_row(ep.kind, escape(_location(ep.path, ep.line)), escape(ep.signature))
    console.print(table)


@cli.command()
@click.option("--file", "-f", default=None, help="Only functions in this file")
@click.option("--min", "min_complexity", type=click.IntRange(min=0), default=0,
              help="Only functions at least this complex")
@root_option
@max_option
@click.pass_context
@handle_errors
def complexity(ctx, file, min_complexity, root, max_results):
    """Functions ranked by cyclomatic complexity."""
    q = _open_query(ctx, root)
    result = q.complexity(file, max_results, min_complexity)

    if ctx.obj["json"]:
        _emit_json(result)
        return

    console.print(
        f"[bold]{result.total_functions} functions[/]  avg {result.avg_complexity:.1f}  "
        f"max {result.max_complexity}  high (>=10) {result.high_complexity_count}",
        highlight=False,
    )
    if not result.functions:
        return
    table = Table()
    table.add_column("Complexity", justify="right")
    table.add_column("Depth", justify="right")
    table.add_column("Lines", justify="right")
    table.add_column("Name")
    table.add_column("Location")
    for f in result.functions:
        style = "red" if f.complexity >= 10 else None
        table.add_row(
            str(f.complexity), str(f.max_depth), str(f.lines),
            escape(f.name), escape(_location(f.path, f.line)), style=style,
        )
    console.print(table)


@cli.command()
@click.option("--tag", "-t", type=click.Choice(["TODO", "FIXME", "HACK", "XXX"], case_sensitive=False),
              default=None, help="Only comments with this tag")
@root_option
@max_option
@click.pass_context
@handle_errors
def todos(ctx, tag, root, max_results):
    """TODO, FIXME, HACK and XXX comments."""
    q = _open_query(ctx, root)
    result = q.todos(tag, max_results)

    if ctx.obj["json"]:
        _emit_json(result)
        return

    counts = "  ".join(f"{t}: {n}" for t, n in result.by_tag.items())
    console.print(f"[bold]{result.total} markers[/]  {escape(counts)}", highlight=False)
    for c in result.comments:
        console.print(f"  [cyan]{escape(c.path)}:{c.line}[/]  [yellow]{c.tag}[/] {escape(c.message)}", highlight=False)


@cli.command()
@click.argument("directory", default=".")
@click.option("--recursive", "-R", is_flag=True, help="Include subdirectories")
@root_option
@click.pass_context
@handle_errors
def scope(ctx, directory, recursive, root):
    """Size, declarations and dependencies of DIRECTORY."""
    q = _open_query(ctx, root)
    result = q.scope(directory, recursive)

    if ctx.obj["json"]:
        _emit_json(result)
        return
    if not result.file_count:
        console.print(f"No indexed files in {escape(result.directory)}")
        return

    console.print(f"[bold]{escape(result.directory)}[/]  {result.file_count} files, {result.loc} lines", highlight=False)
    if result.symbols:
        table = Table()
        table.add_column("Kind")
        table.add_column("Exported", justify="right")
        table.add_column("Internal", justify="right")
        for kind, count in result.symbols.items():
            table.add_row(kind, str(count.exported), str(count.internal))
        console.print(table)
    for title, paths in (
        ("Depends on", result.dependencies),
        ("Depended on by", result.dependents),
    ):
        console.print(f"[bold]{title} ({len(paths)}):[/]")
        for path in paths:
            console.print(f"  {escape(path)}", highlight=False)


if __name__ == "__main__":
    cli()
