"""Blast-radius analysis: what depends, directly or transitively, on a target."""

import logging
from typing import Optional

from codenav.errors import FileNotIndexedError, InvalidQueryError
from codenav.indexing.imports import ImportResolver
from codenav.indexing.models import (
    CodebaseIndex,
    ImpactLayer,
    ImpactRef,
    ImpactResult,
    ImpactSummary,
    ImpactTarget,
)
from codenav.indexing.refs import ReferenceFinder
from codenav.indexing.symbols import ParsedFiles

logger = logging.getLogger(__name__)

DEFAULT_DEPTH = 3
DEFAULT_MAX = 100


def layer_label(depth: int, file_mode: bool) -> str:
    if depth == 1:
        return "direct importers" if file_mode else "direct references"
    noun = "importers" if file_mode else "dependents"
    if depth == 2:
        return f"transitive {noun}"
    return f"depth-{depth} {noun}"


def is_file_target(index: CodebaseIndex, target: str) -> bool:
    return index.has_file(target) or "/" in target or "." in target


class ImpactAnalyzer:
    """Layered dependents of a symbol (via references) or a file (via importers).

    Symbol mode walks from each reference site to the symbol enclosing it and
    continues with that symbol's references. File mode walks the reverse
    import graph. A visited set of names or paths stops cycles from being
    expanded twice, so ``depth`` of None or 0 still terminates.
    """

    def __init__(
        self,
        index: CodebaseIndex,
        parsed: ParsedFiles,
        resolver: Optional[ImportResolver] = None,
    ) -> None:
        self._index = index
        self._parsed = parsed
        self._finder = ReferenceFinder(index, parsed.sources)
        self._resolver = resolver or ImportResolver(index, parsed.sources)

    def analyze(
        self,
        target: str,
        depth: Optional[int] = DEFAULT_DEPTH,
        max_refs: int = DEFAULT_MAX,
    ) -> ImpactResult:
        target = target.strip()
        if not target:
            raise InvalidQueryError("query must not be empty")

        if is_file_target(self._index, target):
            result = self._file_impact(target, depth, max_refs)
        else:
            result = self._symbol_impact(target, depth, max_refs)

        result.summary = _summarize(result.layers)
        logger.debug(
            "Impact of %s: %d sites across %d layers",
            target, result.summary.total_ref_sites, len(result.layers),
        )
        return result

    def _symbol_impact(self, name: str, depth: Optional[int], max_refs: int) -> ImpactResult:
        definition = self._index.find_definition(name)
        target = ImpactTarget(name=name)
        if definition is not None:
            target = ImpactTarget(name=name, file=definition.path, line=definition.line, kind=definition.kind)

        visited = {name}
        seen_sites: set[tuple[str, int]] = set()
        frontier = [name]
        layers: list[ImpactLayer] = []
        total = 0
        level = 0

        while frontier and total < max_refs and not (depth and level >= depth):
            level += 1
            refs: list[ImpactRef] = []
            next_frontier: list[str] = []
            for symbol in frontier:
                found = self._finder.refs(symbol, max_refs)
                for ref in found.references:
                    site = (ref.path, ref.line)
                    if site in seen_sites:
                        continue
                    if total >= max_refs:
                        break
                    seen_sites.add(site)
                    enclosing = self._parsed.enclosing(ref.path, ref.line)
                    enclosing_name = enclosing.name if enclosing else ""
                    refs.append(ImpactRef(
                        file=ref.path,
                        line=ref.line,
                        content=ref.content,
                        enclosing_symbol=enclosing_name,
                    ))
                    total += 1
                    if enclosing_name and enclosing_name not in visited:
                        visited.add(enclosing_name)
                        next_frontier.append(enclosing_name)
            if not refs:
                break
            layers.append(ImpactLayer(depth=level, label=layer_label(level, file_mode=False), refs=refs))
            frontier = next_frontier

        return ImpactResult(target=target, layers=layers)

    def _file_impact(self, path: str, depth: Optional[int], max_refs: int) -> ImpactResult:
        if not self._index.has_file(path):
            raise FileNotIndexedError(path)

        reverse = self._resolver.reverse_adjacency(self._resolver.forward_adjacency())
        visited = {path}
        frontier = [path]
        layers: list[ImpactLayer] = []
        total = 0
        level = 0

        while frontier and total < max_refs and not (depth and level >= depth):
            level += 1
            refs: list[ImpactRef] = []
            next_frontier: list[str] = []
            for imported in frontier:
                for importer in sorted(reverse.get(imported, [])):
                    if importer in visited:
                        continue
                    if total >= max_refs:
                        break
                    visited.add(importer)
                    refs.append(ImpactRef(file=importer, content=f"imports {imported}"))
                    total += 1
                    next_frontier.append(importer)
            if not refs:
                break
            layers.append(ImpactLayer(depth=level, label=layer_label(level, file_mode=True), refs=refs))
            frontier = next_frontier

        return ImpactResult(target=ImpactTarget(name=path, file=path, kind="file"), layers=layers)


def _summarize(layers: list[ImpactLayer]) -> ImpactSummary:
    files = {ref.file for layer in layers for ref in layer.refs}
    return ImpactSummary(
        total_files=len(files),
        total_ref_sites=sum(len(layer.refs) for layer in layers),
        max_depth_reached=layers[-1].depth if layers else 0,
    )


def render_impact_text(result: ImpactResult) -> str:
    target = result.target
    if target.kind == "file":
        lines = [f'Impact analysis for file "{target.name}"']
    elif target.file:
        lines = [f'Impact analysis for symbol "{target.name}" ({target.file}:{target.line})']
    else:
        lines = [f'Impact analysis for symbol "{target.name}"']

    if not result.layers:
        lines.append("")
        lines.append("  No dependents found")
        return "\n".join(lines)

    for layer in result.layers:
        lines.append("")
        lines.append(f"Depth {layer.depth}: {layer.label} ({len(layer.refs)}):")
        for ref in layer.refs:
            location = f"{ref.file}:{ref.line}" if ref.line else ref.file
            detail = f" [in {ref.enclosing_symbol}]" if ref.enclosing_symbol else ""
            lines.append(f"  {location}{detail}  {ref.content}")

    lines.append("")
    lines.append(
        f"Total blast radius: {result.summary.total_files} files, "
        f"{result.summary.total_ref_sites} reference sites"
    )
    return "\n".join(lines)
