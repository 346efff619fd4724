"""Signature extraction from tree-sitter trees.

C and C++ share one declarator-based extractor; C++ additionally collects
class and struct members. The JavaScript family (JS, JSX, TS, TSX) records
function declarations, classes with their methods, and functions bound to
variables.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from tree_sitter import Node

from codex_explorer.models import ClassSignature, FunctionSignature, MethodSignature

_NAME_TYPES = frozenset({"identifier", "field_identifier", "destructor_name", "operator_name"})
_CLASS_TYPES = frozenset({"class_specifier", "struct_specifier"})
_MEMBER_TYPES = frozenset({"function_definition", "declaration", "field_declaration"})

_JS_FUNCTION_DECLS = frozenset({"function_declaration", "generator_function_declaration"})
_JS_CLASS_DECLS = frozenset({"class_declaration", "abstract_class_declaration"})
_JS_BINDING_DECLS = frozenset({"lexical_declaration", "variable_declaration"})
_JS_FUNCTION_VALUES = frozenset({"arrow_function", "function_expression", "function", "generator_function"})


def _text(source: bytes, node: Node) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _walk_named(root: Node, descend: Callable[[Node], bool] | None = None) -> Iterator[Node]:
    """Pre-order walk over named nodes in source order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if descend is None or descend(node):
            stack.extend(reversed(node.named_children))


def _find_descendant(root: Node, pred: Callable[[Node], bool]) -> Node | None:
    for node in _walk_named(root):
        if pred(node):
            return node
    return None


# ---------------------------------------------------------------------------
# C / C++
# ---------------------------------------------------------------------------


def _function_declarators(node: Node) -> list[Node]:
    """Function declarators reachable through the ``declarator`` fields of a declaration."""
    found = []
    for decl in node.children_by_field_name("declarator"):
        fdecl = _find_descendant(decl, lambda n: n.type == "function_declarator")
        if fdecl is not None:
            found.append(fdecl)
    return found


def declarator_name(fdecl: Node, source: bytes) -> str:
    """Name of a ``function_declarator``, keeping ``Ns::`` / ``Class::`` qualifiers."""
    target = fdecl.child_by_field_name("declarator") or fdecl
    name_node = _find_descendant(target, lambda n: n.type == "qualified_identifier") or _find_descendant(
        target, lambda n: n.type in _NAME_TYPES
    )
    return _text(source, name_node) if name_node is not None else ""


def declarator_params(fdecl: Node, source: bytes) -> list[str]:
    params = fdecl.child_by_field_name("parameters")
    if params is None:
        return []
    return [_text(source, p).strip() for p in params.named_children if p.type != "comment"]


def extract_c_functions(root: Node, source: bytes, skip_class_bodies: bool = False) -> list[FunctionSignature]:
    out: list[FunctionSignature] = []

    def descend(node: Node) -> bool:
        if node.type == "function_definition":
            return False
        return not (skip_class_bodies and node.type in _CLASS_TYPES)

    for node in _walk_named(root, descend):
        if node.type not in ("function_definition", "declaration"):
            continue
        where = "definition" if node.type == "function_definition" else "declaration"
        for fdecl in _function_declarators(node):
            out.append(
                FunctionSignature(
                    name=declarator_name(fdecl, source),
                    params=declarator_params(fdecl, source),
                    where=where,
                )
            )
    return out


def _member_methods(body: Node, source: bytes) -> list[MethodSignature]:
    methods: list[MethodSignature] = []
    for child in body.named_children:
        member = child
        if member.type == "template_declaration":
            member = next((c for c in member.named_children if c.type in _MEMBER_TYPES), member)
        if member.type not in _MEMBER_TYPES:
            continue
        where = "definition" if member.type == "function_definition" else "declaration"
        for fdecl in _function_declarators(member):
            name = declarator_name(fdecl, source)
            if name:
                methods.append(MethodSignature(name=name, params=declarator_params(fdecl, source), where=where))
    return methods


def extract_cpp_classes(root: Node, source: bytes) -> list[ClassSignature]:
    classes: list[ClassSignature] = []
    for node in _walk_named(root):
        if node.type not in _CLASS_TYPES:
            continue
        body = node.child_by_field_name("body")
        if body is None:
            # Forward declaration or elaborated type use.
            continue
        name_node = node.child_by_field_name("name")
        name = _text(source, name_node) if name_node is not None else "(anonymous)"
        classes.append(ClassSignature(name=name, methods=_member_methods(body, source)))
    return classes


def extract_c_signatures(root: Node, source: bytes) -> list[FunctionSignature | MethodSignature | ClassSignature]:
    return list(extract_c_functions(root, source))


def extract_cpp_signatures(root: Node, source: bytes) -> list[FunctionSignature | MethodSignature | ClassSignature]:
    funcs = extract_c_functions(root, source, skip_class_bodies=True)
    return [*funcs, *extract_cpp_classes(root, source)]


# ---------------------------------------------------------------------------
# JavaScript / TypeScript
# ---------------------------------------------------------------------------


def _js_params(fn: Node, source: bytes) -> list[str]:
    params = fn.child_by_field_name("parameters")
    if params is None:
        # Single-parameter arrow function without parentheses: ``x => x``.
        single = fn.child_by_field_name("parameter")
        return [_text(source, single)] if single is not None else []
    return [_text(source, p) for p in params.named_children if p.type != "comment"]


def _js_class(node: Node, source: bytes) -> ClassSignature | None:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None
    methods: list[MethodSignature] = []
    body = node.child_by_field_name("body")
    if body is not None:
        for child in body.named_children:
            if child.type != "method_definition":
                continue
            method_name = child.child_by_field_name("name")
            if method_name is not None:
                methods.append(MethodSignature(name=_text(source, method_name), params=_js_params(child, source)))
    return ClassSignature(name=_text(source, name_node), methods=methods)


def extract_js_signatures(root: Node, source: bytes) -> list[FunctionSignature | MethodSignature | ClassSignature]:
    out: list[FunctionSignature | MethodSignature | ClassSignature] = []
    for node in _walk_named(root):
        if node.type in _JS_FUNCTION_DECLS:
            name_node = node.child_by_field_name("name")
            if name_node is not None:
                out.append(FunctionSignature(name=_text(source, name_node), params=_js_params(node, source)))
        elif node.type in _JS_CLASS_DECLS:
            cls = _js_class(node, source)
            if cls is not None:
                out.append(cls)
        elif node.type in _JS_BINDING_DECLS:
            for decl in node.named_children:
                if decl.type != "variable_declarator":
                    continue
                name_node = decl.child_by_field_name("name")
                value = decl.child_by_field_name("value")
                if name_node is None or value is None or value.type not in _JS_FUNCTION_VALUES:
                    continue
                out.append(FunctionSignature(name=_text(source, name_node), params=_js_params(value, source)))
    return out
