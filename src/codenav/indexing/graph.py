"""File-level import graph: whole-project view, focused subgraph, neighbourhood."""

from collections import deque
from typing import Optional

from codenav.errors import FileNotIndexedError
from codenav.indexing.imports import ImportResolver
from codenav.indexing.models import GraphEdge, GraphNode, GraphResult, GraphStats, RelatedResult


def _graph_result(edges: list[tuple[str, str]], focus: str = "") -> GraphResult:
    fan_in: dict[str, int] = {}
    fan_out: dict[str, int] = {}
    for src, dst in edges:
        fan_out[src] = fan_out.get(src, 0) + 1
        fan_in[dst] = fan_in.get(dst, 0) + 1

    paths = set(fan_in) | set(fan_out)
    nodes = [
        GraphNode(path=p, fan_in=fan_in.get(p, 0), fan_out=fan_out.get(p, 0))
        for p in paths
    ]
    nodes.sort(key=lambda n: (-n.fan_in, n.path))

    stats = GraphStats(total_files=len(nodes), total_edges=len(edges))
    if nodes:
        stats.most_imported = nodes[0].path
        best_fan_out = 0
        for node in nodes:
            if node.fan_out > best_fan_out:
                best_fan_out = node.fan_out
                stats.most_dependent = node.path

    return GraphResult(
        nodes=nodes,
        edges=[GraphEdge(from_=src, to=dst) for src, dst in sorted(edges)],
        stats=stats,
        focus=focus,
    )


def build_graph(resolver: ImportResolver) -> GraphResult:
    """Every resolved import edge in the project."""
    forward = resolver.forward_adjacency()
    edges = [(src, dst) for src, imports in forward.items() for dst in imports]
    return _graph_result(edges)


def focused_graph(resolver: ImportResolver, focus: str, depth: Optional[int] = None) -> GraphResult:
    """Subgraph reachable from ``focus`` along imports and importers.

    Each node is expanded only while its distance is below ``depth``; a depth
    of None or 0 means unlimited. The visited set bounds the walk on cycles.
    """
    if not resolver.is_indexed(focus):
        raise FileNotIndexedError(focus)

    forward = resolver.forward_adjacency()
    reverse = resolver.reverse_adjacency(forward)

    visited = {focus}
    queue = deque([(focus, 0)])
    while queue:
        path, dist = queue.popleft()
        if depth and dist >= depth:
            continue
        for neighbour in (*forward.get(path, ()), *reverse.get(path, ())):
            if neighbour not in visited:
                visited.add(neighbour)
                queue.append((neighbour, dist + 1))

    edges = [
        (src, dst)
        for src in visited
        for dst in forward.get(src, ())
        if dst in visited
    ]
    return _graph_result(edges, focus=focus)


def related(resolver: ImportResolver, path: str) -> RelatedResult:
    """Imports, importers and conventional test files of one file."""
    if not resolver.is_indexed(path):
        raise FileNotIndexedError(path)

    reverse = resolver.reverse_adjacency(resolver.forward_adjacency())
    return RelatedResult(
        file=path,
        imports=list(resolver.imports_of(path)),
        importers=sorted(reverse.get(path, [])),
        test_files=resolver.test_files_of(path),
    )


def render_graph_text(result: GraphResult, top: int = 10) -> str:
    lines = [f"Import graph ({result.stats.total_files} files, {result.stats.total_edges} edges):"]
    if not result.edges:
        lines.append("")
        lines.append("  No import relationships found")
        return "\n".join(lines)

    lines.append("")
    lines.append("Most imported (highest fan-in):")
    for node in [n for n in result.nodes if n.fan_in > 0][:top]:
        lines.append(f"  {node.path:<50s} <- {node.fan_in} files")

    lines.append("")
    lines.append("Most dependencies (highest fan-out):")
    by_fan_out = sorted((n for n in result.nodes if n.fan_out > 0), key=lambda n: (-n.fan_out, n.path))
    for node in by_fan_out[:top]:
        lines.append(f"  {node.path:<50s} -> {node.fan_out} files")

    lines.append("")
    lines.append(f"All edges ({len(result.edges)}):")
    for edge in result.edges:
        lines.append(f"  {edge.from_} -> {edge.to}")
    return "\n".join(lines)


def render_graph_dot(result: GraphResult) -> str:
    lines = ["digraph imports {", "  rankdir=LR;"]
    for edge in result.edges:
        lines.append(f'  "{edge.from_}" -> "{edge.to}";')
    lines.append("}")
    return "\n".join(lines) + "\n"
