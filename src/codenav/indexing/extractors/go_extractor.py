"""Go symbol extractor built on the tree-sitter Go grammar."""

import logging
from typing import Optional

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from codenav.errors import ExtractionError
from codenav.indexing.extractors.base import BaseExtractor
from codenav.indexing.models import Symbol, SymbolKind

logger = logging.getLogger(__name__)

GO_LANGUAGE = Language(tree_sitter_go.language())

_TYPE_KINDS = {
    "struct_type": SymbolKind.STRUCT,
    "interface_type": SymbolKind.INTERFACE,
}


def _text(node: Optional[Node]) -> str:
    if node is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _end_line(node: Node) -> int:
    return node.end_point[0] + 1


def _is_exported(name: str) -> bool:
    return name[:1].isupper()


class GoExtractor(BaseExtractor):
    """Walks top-level declarations of a concrete syntax tree.

    tree-sitter recovers from syntax errors, so a malformed file still yields
    every declaration the parser could isolate.
    """

    extensions = (".go",)

    def __init__(self) -> None:
        self._parser = Parser(GO_LANGUAGE)

    def extract_symbols(self, file_path: str, source: str) -> list[Symbol]:
        if not source.strip():
            return []

        try:
            tree = self._parser.parse(source.encode("utf-8"))
        except (ValueError, RuntimeError) as exc:
            raise ExtractionError(file_path, str(exc)) from exc

        if tree.root_node.has_error:
            logger.debug("Syntax errors in %s, keeping partial symbols", file_path)

        symbols: list[Symbol] = []
        for node in tree.root_node.named_children:
            if node.type == "function_declaration":
                symbols.extend(self._function(node))
            elif node.type == "method_declaration":
                symbols.extend(self._method(node))
            elif node.type == "type_declaration":
                symbols.extend(self._types(node))
            elif node.type in ("const_declaration", "var_declaration"):
                symbols.extend(self._values(node))
        return symbols

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _function(self, node: Node) -> list[Symbol]:
        name = _text(node.child_by_field_name("name"))
        if not name:
            return []
        return [Symbol(
            name=name,
            kind=SymbolKind.FUNC,
            line=_line(node),
            end_line=_end_line(node),
            exported=_is_exported(name),
            signature=self._func_signature(node, name),
        )]

    def _method(self, node: Node) -> list[Symbol]:
        name = _text(node.child_by_field_name("name"))
        if not name:
            return []
        receiver = node.child_by_field_name("receiver")
        return [Symbol(
            name=name,
            kind=SymbolKind.METHOD,
            line=_line(node),
            end_line=_end_line(node),
            exported=_is_exported(name),
            signature=self._func_signature(node, name, receiver),
            parent=self._receiver_type_name(receiver),
        )]

    def _types(self, node: Node) -> list[Symbol]:
        symbols: list[Symbol] = []
        for spec in node.named_children:
            if spec.type not in ("type_spec", "type_alias"):
                continue
            name = _text(spec.child_by_field_name("name"))
            if not name:
                continue
            type_node = spec.child_by_field_name("type")
            kind = SymbolKind.TYPE
            if spec.type == "type_spec" and type_node is not None:
                kind = _TYPE_KINDS.get(type_node.type, SymbolKind.TYPE)
            symbols.append(Symbol(
                name=name,
                kind=kind,
                line=_line(spec),
                end_line=_end_line(spec),
                exported=_is_exported(name),
                signature=f"type {name}",
            ))
        return symbols

    def _values(self, node: Node) -> list[Symbol]:
        kind = SymbolKind.CONST if node.type == "const_declaration" else SymbolKind.VAR
        symbols: list[Symbol] = []
        for spec in self._value_specs(node):
            for name_node in spec.children_by_field_name("name"):
                name = _text(name_node)
                if not name or name == "_":
                    continue
                symbols.append(Symbol(
                    name=name,
                    kind=kind,
                    line=_line(name_node),
                    end_line=_end_line(spec),
                    exported=_is_exported(name),
                    signature=f"{kind.value} {name}",
                ))
        return symbols

    @staticmethod
    def _value_specs(node: Node) -> list[Node]:
        specs: list[Node] = []
        for child in node.named_children:
            if child.type in ("const_spec", "var_spec"):
                specs.append(child)
            elif child.type == "var_spec_list":
                specs.extend(c for c in child.named_children if c.type == "var_spec")
        return specs

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _func_signature(self, node: Node, name: str, receiver: Optional[Node] = None) -> str:
        parts = ["func "]
        if receiver is not None:
            parts.append(f"({self._receiver_type_text(receiver)}) ")
        parts.append(name)
        parts.append(_text(node.child_by_field_name("type_parameters")))
        parts.append(_text(node.child_by_field_name("parameters")) or "()")
        result = _text(node.child_by_field_name("result"))
        if result:
            parts.append(f" {result}")
        return self._truncate_signature("".join(parts))

    @staticmethod
    def _receiver_type_text(receiver: Node) -> str:
        for param in receiver.named_children:
            if param.type == "parameter_declaration":
                return _text(param.child_by_field_name("type"))
        return ""

    @staticmethod
    def _receiver_type_name(receiver: Optional[Node]) -> str:
        """Bare type name of a receiver such as ``(s *Server[T])``."""
        if receiver is None:
            return ""
        stack = [receiver]
        while stack:
            current = stack.pop()
            if current.type == "type_identifier":
                return _text(current)
            stack.extend(reversed(current.named_children))
        return ""
