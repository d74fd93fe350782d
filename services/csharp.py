"""C# code structure: read types and members with tree-sitter and edit them in place.

Edits splice text at the byte ranges of syntax nodes, so everything outside
the edited member keeps its formatting. An edit that would turn a file
without syntax errors into one with errors is refused before writing.
"""
import codecs
import json
import logging
import textwrap
import threading
from collections.abc import Callable, Iterator
from dataclasses import asdict
from pathlib import Path

from tree_sitter import Node, Parser, Tree
from tree_sitter_language_pack import get_parser

from models.code import (
    CodeEvent,
    CodeField,
    CodeMembers,
    CodeMethod,
    CodeParameter,
    CodeProperty,
    CodeTypeDefinition,
    CodeTypeKind,
    MemberKind,
)
from paths.authority import PathAuthority

logger = logging.getLogger(__name__)

LANGUAGE = "csharp"

TYPE_NODE_KINDS = {
    "class_declaration": CodeTypeKind.CLASS,
    "interface_declaration": CodeTypeKind.INTERFACE,
    "struct_declaration": CodeTypeKind.STRUCT,
    "enum_declaration": CodeTypeKind.ENUM,
    "record_declaration": CodeTypeKind.RECORD,
    "record_struct_declaration": CodeTypeKind.RECORD,
}

MEMBER_NODE_TYPES = {
    MemberKind.METHOD: "method_declaration",
    MemberKind.PROPERTY: "property_declaration",
    MemberKind.FIELD: "field_declaration",
}

VISIBILITIES = ("public", "private", "protected", "internal")
MODIFIER_KEYWORDS = {
    "public", "private", "protected", "internal", "static", "abstract", "sealed",
    "partial", "virtual", "override", "async", "readonly", "const", "extern",
    "new", "unsafe", "volatile", "required", "file",
}
PARAMETER_KEYWORDS = {"ref", "out", "in", "params", "this", "scoped"}
MAX_SYNTAX_ERRORS = 10
INDENT = "    "


class CodeStructureError(Exception):
    """A type or member that cannot be found, or an edit that cannot be applied."""


def node_text(node: Node) -> str:
    return node.text.decode("utf8")


def syntax_errors(root: Node) -> list[str]:
    """Describe the first syntax errors of a parse tree in document order."""
    errors = []
    stack = [root]
    while stack and len(errors) < MAX_SYNTAX_ERRORS:
        node = stack.pop()
        line = node.start_point[0] + 1
        if node.is_missing:
            errors.append(f"Line {line}: missing '{node.type}'")
        elif node.is_error:
            snippet = node_text(node).splitlines()[0][:40] if node.text else ""
            errors.append(f"Line {line}: unexpected '{snippet}'")
        elif node.has_error:
            stack.extend(reversed(node.children))
    return errors


def iter_type_nodes(node: Node, namespace: str = "") -> Iterator[tuple[Node, str]]:
    """Yield every type declaration below node with its namespace, nested types included."""
    for child in node.named_children:
        if child.type == "namespace_declaration":
            body = child.child_by_field_name("body")
            if body is not None:
                yield from iter_type_nodes(body, _qualify(namespace, child))
        elif child.type == "file_scoped_namespace_declaration":
            # applies to the declarations that follow it
            namespace = _qualify(namespace, child)
            yield from iter_type_nodes(child, namespace)
        elif child.type in TYPE_NODE_KINDS:
            yield child, namespace
            body = child.child_by_field_name("body")
            if body is not None:
                yield from iter_type_nodes(body, namespace)


def _qualify(namespace: str, declaration: Node) -> str:
    name = declaration.child_by_field_name("name")
    if name is None:
        return namespace
    return f"{namespace}.{node_text(name)}" if namespace else node_text(name)


def _usings(node: Node) -> list[str]:
    usings = []
    for child in node.named_children:
        if child.type == "using_directive":
            usings.append(node_text(child).removeprefix("global").strip().removeprefix("using").strip(" ;"))
        elif child.type in ("namespace_declaration", "file_scoped_namespace_declaration"):
            body = child.child_by_field_name("body")
            usings.extend(_usings(body if body is not None else child))
    return usings


def _modifiers(node: Node) -> set[str]:
    found = set()
    for child in node.children:
        if child.type == "modifier":
            found.add(node_text(child).strip())
        elif child.type in MODIFIER_KEYWORDS:
            found.add(child.type)
    return found


def _visibility(modifiers: set[str], default: str = "private") -> str:
    return next((v for v in VISIBILITIES if v in modifiers), default)


def _attributes(node: Node) -> list[str]:
    names = []
    for attribute_list in (c for c in node.children if c.type == "attribute_list"):
        for attribute in attribute_list.named_children:
            if attribute.type == "attribute":
                name = attribute.child_by_field_name("name")
                names.append(node_text(name if name is not None else attribute))
    return names


def _doc_comments(node: Node) -> list[Node]:
    comments = []
    sibling = node.prev_sibling
    while sibling is not None and sibling.type == "comment" and sibling.text.startswith(b"///"):
        comments.append(sibling)
        sibling = sibling.prev_sibling
    return list(reversed(comments))


def _documentation(node: Node) -> str | None:
    lines = [node_text(comment)[3:].strip() for comment in _doc_comments(node)]
    return "\n".join(lines) or None


def _initializer(node: Node) -> str | None:
    for child in node.children:
        if child.type == "equals_value_clause":
            return node_text(child).lstrip("=").strip()
        if child.type == "=":
            return node.text[child.end_byte - node.start_byte:].decode("utf8").strip(" ;\r\n\t")
    return None


def _lines(node: Node) -> dict:
    return {"start_line": node.start_point[0] + 1, "end_line": node.end_point[0] + 1}


def _text_of_field(node: Node, *names: str, default: str = "") -> str:
    for name in names:
        child = node.child_by_field_name(name)
        if child is not None:
            return node_text(child)
    return default


def _child_of_type(node: Node, node_type: str) -> Node | None:
    return next((c for c in node.named_children if c.type == node_type), None)


def _field_or_child(node: Node, field_name: str, node_type: str) -> Node | None:
    child = node.child_by_field_name(field_name)
    return child if child is not None else _child_of_type(node, node_type)


def _declarator_names(variable_declaration: Node | None) -> list[tuple[str, Node]]:
    if variable_declaration is None:
        return []
    names = []
    for declarator in variable_declaration.named_children:
        if declarator.type != "variable_declarator":
            continue
        name = _field_or_child(declarator, "name", "identifier")
        if name is not None:
            names.append((node_text(name), declarator))
    return names


def member_names(node: Node) -> list[str]:
    """Names declared by a member node; a field declaration can declare several."""
    if node.type in ("field_declaration", "event_field_declaration"):
        return [name for name, _ in _declarator_names(_child_of_type(node, "variable_declaration"))]
    name = node.child_by_field_name("name")
    return [node_text(name)] if name is not None else []


def parse_parameters(method: Node) -> list[CodeParameter]:
    parameter_list = _field_or_child(method, "parameters", "parameter_list")
    if parameter_list is None:
        return []

    parameters = []
    params_array: list[Node] | None = None
    for child in parameter_list.children:
        if child.type == "parameter":
            parameters.append(_parse_parameter(child))
        elif child.type == "params":
            params_array = []
        elif params_array is not None and child.is_named and child.type != "attribute_list":
            # 'params T[] name' written directly in the parameter list
            params_array.append(child)
            if len(params_array) == 2:
                type_node, name_node = params_array
                parameters.append(CodeParameter(node_text(name_node), node_text(type_node), is_params=True))
                params_array = None
    return parameters


def _parse_parameter(node: Node) -> CodeParameter:
    keywords = {
        node_text(child) for child in node.children
        if child.type in PARAMETER_KEYWORDS or child.type in ("modifier", "parameter_modifier")
    }
    return CodeParameter(
        name=_text_of_field(node, "name"),
        type=_text_of_field(node, "type", default="var"),
        default_value=_initializer(node),
        is_out="out" in keywords,
        is_ref="ref" in keywords,
        is_params="params" in keywords,
    )


def parse_method(node: Node) -> CodeMethod:
    modifiers = _modifiers(node)
    body = node.child_by_field_name("body")
    return CodeMethod(
        name=_text_of_field(node, "name"),
        visibility=_visibility(modifiers),
        return_type=_text_of_field(node, "returns", "type", default="void"),
        parameters=parse_parameters(node),
        is_static="static" in modifiers,
        is_async="async" in modifiers,
        is_virtual="virtual" in modifiers,
        is_override="override" in modifiers,
        is_abstract="abstract" in modifiers,
        body=node_text(body) if body is not None else None,
        attributes=_attributes(node),
        documentation=_documentation(node),
        **_lines(node),
    )


def parse_property(node: Node) -> CodeProperty:
    modifiers = _modifiers(node)
    accessors = _field_or_child(node, "accessors", "accessor_list")
    kinds = set()
    if accessors is not None:
        for accessor in accessors.named_children:
            if accessor.type != "accessor_declaration":
                continue
            name = accessor.child_by_field_name("name")
            if name is not None:
                kinds.add(node_text(name))
            else:
                kinds.update(c.type for c in accessor.children if c.type in ("get", "set", "init"))
    expression_bodied = accessors is None and _child_of_type(node, "arrow_expression_clause") is not None
    return CodeProperty(
        name=_text_of_field(node, "name"),
        type=_text_of_field(node, "type"),
        visibility=_visibility(modifiers),
        has_getter="get" in kinds or expression_bodied,
        has_setter="set" in kinds,
        is_static="static" in modifiers,
        is_virtual="virtual" in modifiers,
        is_override="override" in modifiers,
        **_lines(node),
    )


def parse_fields(node: Node) -> list[CodeField]:
    modifiers = _modifiers(node)
    declaration = _child_of_type(node, "variable_declaration")
    field_type = _text_of_field(declaration, "type") if declaration is not None else ""
    return [
        CodeField(
            name=name,
            type=field_type,
            visibility=_visibility(modifiers),
            is_static="static" in modifiers,
            is_readonly="readonly" in modifiers,
            is_const="const" in modifiers,
            default_value=_initializer(declarator),
            **_lines(node),
        )
        for name, declarator in _declarator_names(declaration)
    ]


def parse_events(node: Node) -> list[CodeEvent]:
    modifiers = _modifiers(node)
    common = dict(visibility=_visibility(modifiers), is_static="static" in modifiers, **_lines(node))
    if node.type == "event_declaration":
        return [CodeEvent(name=_text_of_field(node, "name"), type=_text_of_field(node, "type"), **common)]
    declaration = _child_of_type(node, "variable_declaration")
    event_type = _text_of_field(declaration, "type") if declaration is not None else ""
    return [CodeEvent(name=name, type=event_type, **common) for name, _ in _declarator_names(declaration)]


def parse_type(node: Node, namespace: str, file_path: str, usings: list[str]) -> CodeTypeDefinition:
    kind = TYPE_NODE_KINDS[node.type]
    modifiers = _modifiers(node)
    bases = []
    base_list = _child_of_type(node, "base_list")
    if base_list is not None:
        bases = [node_text(b).split("(", 1)[0].strip() for b in base_list.named_children if b.type != "argument_list"]

    base_type, interfaces = None, bases
    if bases and kind in (CodeTypeKind.CLASS, CodeTypeKind.RECORD, CodeTypeKind.ENUM):
        base_type, interfaces = bases[0], bases[1:]

    members = CodeMembers()
    body = node.child_by_field_name("body")
    for child in body.named_children if body is not None else ():
        if child.type == "method_declaration":
            members.methods.append(parse_method(child))
        elif child.type == "property_declaration":
            members.properties.append(parse_property(child))
        elif child.type == "field_declaration":
            members.fields.extend(parse_fields(child))
        elif child.type in ("event_field_declaration", "event_declaration"):
            members.events.extend(parse_events(child))

    return CodeTypeDefinition(
        name=_text_of_field(node, "name"),
        kind=kind,
        file_path=file_path,
        namespace=namespace,
        visibility=_visibility(modifiers, default="internal"),
        is_static="static" in modifiers,
        is_abstract="abstract" in modifiers,
        is_sealed="sealed" in modifiers,
        is_partial="partial" in modifiers,
        base_type=base_type,
        interfaces=interfaces,
        members=members,
        usings=usings,
        attributes=_attributes(node),
        documentation=_documentation(node),
        **_lines(node),
    )


def _line_start(data: bytes, position: int) -> int:
    return data.rfind(b"\n", 0, position) + 1


def _line_end(data: bytes, position: int) -> int:
    """Position just past the newline ending the line that contains position."""
    end = data.find(b"\n", position)
    return len(data) if end == -1 else end + 1


def _indentation(data: bytes, position: int) -> str:
    start = _line_start(data, position)
    line = data[start:_line_end(data, position)]
    return line[:len(line) - len(line.lstrip(b" \t"))].decode("utf8")


def _newline(data: bytes) -> str:
    return "\r\n" if b"\r\n" in data else "\n"


def indent_block(code: str, indent: str, newline: str = "\n") -> str:
    """Dedent code and re-indent every non-blank line, ending with a newline."""
    lines = textwrap.dedent(code.replace("\r\n", "\n")).strip("\n").split("\n")
    return newline.join(indent + line.rstrip() if line.strip() else "" for line in lines) + newline


class CSharpService:
    """Reads and edits the types declared in C# files under the base directory."""

    def __init__(self, authority: PathAuthority):
        self._authority = authority
        self._parser: Parser | None = None
        self._lock = threading.Lock()

    def parse(self, source: bytes) -> Tree:
        # one parser shared by worker threads
        with self._lock:
            if self._parser is None:
                self._parser = get_parser(LANGUAGE)
            return self._parser.parse(source)

    def check_syntax(self, path: str) -> list[str]:
        """Syntax errors of a file, empty when it parses cleanly."""
        _, _, data = self._load(path)
        return syntax_errors(self.parse(data).root_node)

    def analyze_file(self, path: str) -> list[CodeTypeDefinition]:
        """Every type declared in path, nested types included."""
        _, _, data = self._load(path)
        root = self.parse(data).root_node
        relative = self._authority.relative_path(path)
        usings = _usings(root)
        types = [parse_type(node, namespace, relative, usings) for node, namespace in iter_type_nodes(root)]
        logger.debug(f"Parsed {len(types)} types from {relative}")
        return types

    def get_type(self, path: str, type_name: str) -> CodeTypeDefinition:
        for definition in self.analyze_file(path):
            if definition.name == type_name:
                return definition
        raise CodeStructureError(f"Type '{type_name}' not found in file '{path}'")

    def read_member(self, path: str, type_name: str, member_type: str, member_name: str) -> str:
        """Source of a method body, or a JSON description of a property or field.

        A missing property or field is reported in the returned text; a
        missing method raises.
        """
        kind = MemberKind.parse(member_type)
        if kind is MemberKind.METHOD:
            _, _, data = self._load(path)
            type_node = self._find_type_node(self.parse(data).root_node, type_name, path)
            node = self._find_member_node(type_node, kind, member_name)
            if node is None:
                raise CodeStructureError(f"Method '{member_name}' not found")
            body = node.child_by_field_name("body")
            return node_text(body if body is not None else node)

        definition = self.get_type(path, type_name)
        if kind is MemberKind.PROPERTY:
            member = definition.find_property(member_name)
        else:
            member = definition.find_field(member_name)
        if member is None:
            return f"{kind.value.capitalize()} not found"
        return json.dumps(asdict(member), indent=2)

    def add_member(self, path: str, type_name: str, member_type: str, member_name: str, member_code: str) -> str:
        """Insert member_code as the last member of a type."""
        kind = MemberKind.parse(member_type)
        full_path, bom, data = self._load(path)
        root = self.parse(data).root_node
        type_node = self._find_type_node(root, type_name, path)
        if self._find_member_node(type_node, kind, member_name) is not None:
            raise CodeStructureError(
                f"{kind.value.capitalize()} '{member_name}' already exists in type '{type_name}'"
            )

        body = type_node.child_by_field_name("body")
        if type_node.type == "enum_declaration" or body is None or body.children[-1].type != "}":
            raise CodeStructureError(f"Members cannot be added to type '{type_name}'")

        position, text = self._insertion(data, type_node, body, member_code)
        self._apply(
            full_path, bom, data, root, position, position, text,
            check=self._requires_member(path, type_name, kind, member_name),
        )
        logger.info(f"Added {kind.value} '{member_name}' to {type_name} in {path}")
        return f"Added {kind.value} '{member_name}' to type '{type_name}' in {path}"

    def remove_member(self, path: str, type_name: str, member_type: str, member_name: str) -> str:
        """Delete a member with its documentation comment.

        A field declaration declaring several variables is removed whole.
        """
        kind = MemberKind.parse(member_type)
        full_path, bom, data = self._load(path)
        root = self.parse(data).root_node
        node = self._require_member_node(root, path, type_name, kind, member_name)

        start, end = self._removal_range(data, node)
        self._apply(full_path, bom, data, root, start, end, "")
        logger.info(f"Removed {kind.value} '{member_name}' from {type_name} in {path}")
        return f"Removed {kind.value} '{member_name}' from type '{type_name}' in {path}"

    def replace_member(
        self,
        path: str,
        type_name: str,
        member_type: str,
        member_name: str,
        new_member_name: str,
        new_member_code: str,
    ) -> str:
        """Replace a member's declaration with new code declaring new_member_name."""
        kind = MemberKind.parse(member_type)
        full_path, bom, data = self._load(path)
        root = self.parse(data).root_node
        node = self._require_member_node(root, path, type_name, kind, member_name)
        type_node = self._find_type_node(root, type_name, path)
        if new_member_name != member_name and self._find_member_node(type_node, kind, new_member_name) is not None:
            raise CodeStructureError(
                f"{kind.value.capitalize()} '{new_member_name}' already exists in type '{type_name}'"
            )

        first = node
        if textwrap.dedent(new_member_code).lstrip().startswith("///"):
            first = (_doc_comments(node) or [node])[0]
        indent = _indentation(data, first.start_byte)
        newline = _newline(data)
        text = indent_block(new_member_code, indent, newline)[len(indent):].removesuffix(newline)

        self._apply(
            full_path, bom, data, root, first.start_byte, node.end_byte, text,
            check=self._requires_member(path, type_name, kind, new_member_name),
        )
        logger.info(f"Replaced {kind.value} '{member_name}' in {type_name} in {path}")
        return f"Replaced {kind.value} '{member_name}' with '{new_member_name}' in type '{type_name}' in {path}"

    def create_type(self, path: str, type_name: str, type_kind: str, type_code: str) -> str:
        """Add a type declaration to a file, creating the file if needed.

        In a file with a block namespace the type goes at the end of the
        last namespace, otherwise at the end of the file.
        """
        try:
            kind = CodeTypeKind(type_kind.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown type kind: {type_kind}. Valid kinds: {', '.join(k.value for k in CodeTypeKind)}"
            ) from None

        full_path = self._authority.resolve(path)
        if full_path.exists():
            full_path, bom, data = self._load(path)
        else:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            bom, data = b"", b""
        root = self.parse(data).root_node
        if any(_text_of_field(node, "name") == type_name for node, _ in iter_type_nodes(root)):
            raise CodeStructureError(f"Type '{type_name}' already exists in file '{path}'")

        namespaces = [c for c in root.named_children if c.type == "namespace_declaration"]
        body = namespaces[-1].child_by_field_name("body") if namespaces else None
        if body is not None and body.children and body.children[-1].type == "}":
            position, text = self._insertion(data, namespaces[-1], body, type_code)
        else:
            newline = _newline(data)
            position = len(data)
            text = indent_block(type_code, "", newline)
            if data.strip():
                text = ("" if data.endswith(newline.encode()) else newline) + newline + text

        def check(new_root: Node) -> None:
            for node, _ in iter_type_nodes(new_root):
                if _text_of_field(node, "name") == type_name and TYPE_NODE_KINDS[node.type] is kind:
                    return
            raise CodeStructureError(f"The new code does not declare {kind.value} '{type_name}'")

        self._apply(full_path, bom, data, root, position, position, text, check=check)
        logger.info(f"Created {kind.value} {type_name} in {path}")
        return f"Created {kind.value} '{type_name}' in {path}"

    def _load(self, path: str) -> tuple[Path, bytes, bytes]:
        full_path = self._authority.resolve(path)
        if not full_path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        raw = full_path.read_bytes()
        bom = codecs.BOM_UTF8 if raw.startswith(codecs.BOM_UTF8) else b""
        return full_path, bom, raw[len(bom):]

    def _find_type_node(self, root: Node, type_name: str, path: str) -> Node:
        for node, _ in iter_type_nodes(root):
            if _text_of_field(node, "name") == type_name:
                return node
        raise CodeStructureError(f"Type '{type_name}' not found in file '{path}'")

    @staticmethod
    def _find_member_node(type_node: Node, kind: MemberKind, name: str) -> Node | None:
        body = type_node.child_by_field_name("body")
        if body is None:
            return None
        for child in body.named_children:
            if child.type == MEMBER_NODE_TYPES[kind] and name in member_names(child):
                return child
        return None

    def _require_member_node(self, root: Node, path: str, type_name: str, kind: MemberKind, name: str) -> Node:
        node = self._find_member_node(self._find_type_node(root, type_name, path), kind, name)
        if node is None:
            raise CodeStructureError(f"{kind.value.capitalize()} '{name}' not found in type '{type_name}'")
        return node

    def _requires_member(self, path: str, type_name: str, kind: MemberKind, name: str) -> Callable[[Node], None]:
        def check(new_root: Node) -> None:
            if self._find_member_node(self._find_type_node(new_root, type_name, path), kind, name) is None:
                raise CodeStructureError(f"The new code does not declare {kind.value} '{name}'")
        return check

    @staticmethod
    def _insertion(data: bytes, container: Node, body: Node, code: str) -> tuple[int, str]:
        """Where and what to insert so code becomes the last declaration in body."""
        newline = _newline(data)
        close = body.children[-1]
        members = [c for c in body.named_children if c.type != "comment"]
        if members and _line_start(data, members[0].start_byte) != _line_start(data, body.start_byte):
            indent = _indentation(data, members[0].start_byte)
        else:
            indent = _indentation(data, container.start_byte) + INDENT
        block = indent_block(code, indent, newline)

        line_start = _line_start(data, close.start_byte)
        if data[line_start:close.start_byte].strip():
            # closing brace shares its line with other code
            return close.start_byte, newline + block + _indentation(data, container.start_byte)
        return line_start, (newline if members else "") + block

    @staticmethod
    def _removal_range(data: bytes, node: Node) -> tuple[int, int]:
        first = (_doc_comments(node) or [node])[0]
        start, end = first.start_byte, node.end_byte
        line_start, line_end = _line_start(data, start), _line_end(data, end)
        if data[line_start:start].strip() or data[end:line_end].strip():
            return start, end

        start, end = line_start, line_end
        if start > 0:
            previous = _line_start(data, start - 1)
            if not data[previous:start].strip():
                start = previous
        return start, end

    def _apply(
        self,
        full_path: Path,
        bom: bytes,
        data: bytes,
        root: Node,
        start: int,
        end: int,
        text: str,
        check: Callable[[Node], None] | None = None,
    ) -> None:
        edited = data[:start] + text.encode("utf8") + data[end:]
        new_root = self.parse(edited).root_node
        if new_root.has_error and not root.has_error:
            raise CodeStructureError(
                "The edit would introduce syntax errors:\n" + "\n".join(syntax_errors(new_root))
            )
        if check is not None:
            check(new_root)
        full_path.write_bytes(bom + edited)
