"""Structural view of C# source files, as returned by the code structure tools."""
from dataclasses import asdict, dataclass, field, replace
from enum import Enum


class CodeTypeKind(str, Enum):
    CLASS = "class"
    INTERFACE = "interface"
    STRUCT = "struct"
    ENUM = "enum"
    RECORD = "record"


class MemberKind(str, Enum):
    """Member categories the edit operations work on."""
    METHOD = "method"
    PROPERTY = "property"
    FIELD = "field"

    @classmethod
    def parse(cls, value: str) -> "MemberKind":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown member type: {value}. Valid types: {', '.join(k.value for k in cls)}"
            ) from None


@dataclass
class CodeParameter:
    name: str
    type: str
    default_value: str | None = None
    is_out: bool = False
    is_ref: bool = False
    is_params: bool = False


@dataclass
class CodeMethod:
    name: str
    visibility: str
    return_type: str
    parameters: list[CodeParameter] = field(default_factory=list)
    is_static: bool = False
    is_async: bool = False
    is_virtual: bool = False
    is_override: bool = False
    is_abstract: bool = False
    body: str | None = None
    attributes: list[str] = field(default_factory=list)
    documentation: str | None = None
    start_line: int = 0
    end_line: int = 0


@dataclass
class CodeProperty:
    name: str
    type: str
    visibility: str
    has_getter: bool = False
    has_setter: bool = False
    is_static: bool = False
    is_virtual: bool = False
    is_override: bool = False
    start_line: int = 0
    end_line: int = 0


@dataclass
class CodeField:
    name: str
    type: str
    visibility: str
    is_static: bool = False
    is_readonly: bool = False
    is_const: bool = False
    default_value: str | None = None
    start_line: int = 0
    end_line: int = 0


@dataclass
class CodeEvent:
    name: str
    type: str
    visibility: str
    is_static: bool = False
    start_line: int = 0
    end_line: int = 0


@dataclass
class CodeMembers:
    methods: list[CodeMethod] = field(default_factory=list)
    properties: list[CodeProperty] = field(default_factory=list)
    fields: list[CodeField] = field(default_factory=list)
    events: list[CodeEvent] = field(default_factory=list)


@dataclass
class CodeTypeDefinition:
    """A class, interface, struct, enum or record declared in a file."""
    name: str
    kind: CodeTypeKind
    file_path: str
    namespace: str = ""
    visibility: str = "internal"
    is_static: bool = False
    is_abstract: bool = False
    is_sealed: bool = False
    is_partial: bool = False
    base_type: str | None = None
    interfaces: list[str] = field(default_factory=list)
    members: CodeMembers = field(default_factory=CodeMembers)
    usings: list[str] = field(default_factory=list)
    attributes: list[str] = field(default_factory=list)
    documentation: str | None = None
    start_line: int = 0
    end_line: int = 0

    def find_method(self, name: str) -> CodeMethod | None:
        return next((m for m in self.members.methods if m.name == name), None)

    def find_property(self, name: str) -> CodeProperty | None:
        return next((p for p in self.members.properties if p.name == name), None)

    def find_field(self, name: str) -> CodeField | None:
        return next((f for f in self.members.fields if f.name == name), None)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


def without_method_names(definition: CodeTypeDefinition) -> CodeTypeDefinition:
    """Copy of definition whose methods keep their shape but not their names."""
    methods = [replace(method, name="") for method in definition.members.methods]
    return replace(definition, members=replace(definition.members, methods=methods))
