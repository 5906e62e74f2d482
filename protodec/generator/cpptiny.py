"""C++ (tiny) code generator for protobuf decoders."""

import logging

from jinja2 import Environment, PackageLoader

from protodec.proto import DecodeDomain, ScalarType

from .classifier import (
    FieldEmission,
    MessageEmission,
    UnsupportedSchemaConstruct,
    classify_file,
    enum_default_number,
    enum_index,
)
from .descriptor import EnumDescriptorProto, FieldDescriptorProto, FieldType, FileDescriptorSet

logger = logging.getLogger(__name__)

env = Environment(
    loader=PackageLoader("protodec.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("cpptiny.h.j2")

PRIMITIVE_TYPE_MAP = {
    ScalarType.INT32: "int32_t",
    ScalarType.INT64: "int64_t",
    ScalarType.UINT32: "uint32_t",
    ScalarType.UINT64: "uint64_t",
    ScalarType.FLOAT: "float",
    ScalarType.DOUBLE: "double",
    ScalarType.BOOL: "bool",
    ScalarType.STRING: "std::string_view",
    ScalarType.BYTES: "std::string_view",
}

# Integer literal suffixes so large defaults don't overflow int
LITERAL_SUFFIXES = {
    ScalarType.INT64: "LL",
    ScalarType.UINT32: "U",
    ScalarType.UINT64: "ULL",
}

READ_METHODS = {
    DecodeDomain.INTEGRAL: "readIntegral",
    DecodeDomain.ZIGZAG: "readZigzag",
    DecodeDomain.FP: "readFp",
    DecodeDomain.BYTEARRAY: "readBytearray",
}

SPECIAL_FLOATS = {
    "inf": "INFINITY",
    "-inf": "-INFINITY",
    "nan": "NAN",
}

CPP_KEYWORDS = frozenset(
    [
        "auto",
        "bool",
        "break",
        "case",
        "char",
        "class",
        "const",
        "default",
        "delete",
        "do",
        "double",
        "else",
        "enum",
        "explicit",
        "float",
        "for",
        "friend",
        "goto",
        "if",
        "int",
        "long",
        "namespace",
        "new",
        "operator",
        "private",
        "protected",
        "public",
        "register",
        "return",
        "short",
        "signed",
        "sizeof",
        "static",
        "struct",
        "switch",
        "template",
        "this",
        "throw",
        "try",
        "typedef",
        "typename",
        "union",
        "unsigned",
        "using",
        "virtual",
        "void",
        "volatile",
        "while",
    ]
)


def _member_name(emission: FieldEmission) -> str:
    if emission.name in CPP_KEYWORDS or emission.name == "decode":
        return emission.name + "_"
    return emission.name


def _element_type(emission: FieldEmission) -> str:
    if emission.scalar is None:
        return emission.target_type_name
    return PRIMITIVE_TYPE_MAP[emission.scalar]


def _map_type(emission: FieldEmission) -> str:
    """Map a classified field to a C++ member type."""
    if emission.is_repeated:
        return f"std::vector<{_element_type(emission)}>"
    return _element_type(emission)


def _default_value(
    emission: FieldEmission, field: FieldDescriptorProto, enums: dict[str, EnumDescriptorProto]
) -> str:
    """C++ initializer for a member, including the leading ``=`` or braces."""
    text = emission.default_text
    if text is None:
        return "{}"

    if field.type == FieldType.TYPE_ENUM:
        return f" = {enum_default_number(field, enums)}"
    if text in SPECIAL_FLOATS:
        return f" = {SPECIAL_FLOATS[text]}"
    if emission.scalar in LITERAL_SUFFIXES:
        return f" = {text}{LITERAL_SUFFIXES[emission.scalar]}"
    return f" = {text}"


def _gen_member_decl(
    emission: FieldEmission, field: FieldDescriptorProto, enums: dict[str, EnumDescriptorProto]
) -> str:
    default = "" if emission.is_repeated else _default_value(emission, field, enums)
    return f"{_map_type(emission)} {_member_name(emission)}{default};"


def _gen_decode_case(emission: FieldEmission) -> str:
    """Generate the statements of one field's switch case."""
    name = _member_name(emission)

    if emission.decode_domain == DecodeDomain.MESSAGE:
        if emission.is_repeated:
            return f"pb.readMessage(wire_type, {name}.emplace_back()); break;"
        return (
            f"{name} = {emission.target_type_name}{{}}; "
            f"pb.readMessage(wire_type, {name}); {emission.presence_name} = true; break;"
        )

    value = f"{_element_type(emission)}(pb.{READ_METHODS[emission.decode_domain]}(wire_type))"
    if emission.is_repeated:
        return f"{name}.push_back({value}); break;"
    return f"{name} = {value}; {emission.presence_name} = true; break;"


def _dependency_order(messages: list[MessageEmission]) -> list[MessageEmission]:
    """Order messages so that by-value members are declared before use.

    Repeated members are vectors and only need a forward declaration, so
    only singular message fields constrain the order.
    """
    by_name = {message.name: message for message in messages}
    ordered: list[MessageEmission] = []
    stack: list[str] = []
    done: set[str] = set()

    def visit(message: MessageEmission) -> None:
        if message.name in done:
            return
        if message.name in stack:
            cycle = " -> ".join(stack[stack.index(message.name) :] + [message.name])
            raise UnsupportedSchemaConstruct(f"Message {message.name} contains itself by value ({cycle})")
        stack.append(message.name)
        for dependency in message.value_dependencies:
            if dependency in by_name:
                visit(by_name[dependency])
        stack.pop()
        done.add(message.name)
        ordered.append(message)

    for message in messages:
        visit(message)
    logger.debug("Declaration order: %s", ", ".join(m.name for m in ordered))
    return ordered


def render(schema: FileDescriptorSet, source_name: str | None = None) -> str:
    """Render the first file of a compiled schema to a C++ header."""
    file = schema.file[0]
    enums = enum_index(file)
    emissions = classify_file(file)
    descriptors = {message.name: message for message in file.message_type}

    messages = [(descriptors[m.name], m) for m in _dependency_order(emissions)]

    return template.render(
        source_name=source_name or file.name or "schema",
        enums=file.enum_type,
        messages=messages,
        zip=zip,
        map_type=_map_type,
        member_name=_member_name,
        gen_member_decl=lambda emission, field: _gen_member_decl(emission, field, enums),
        gen_decode_case=_gen_decode_case,
    )


def runtime() -> str:
    """Generate the C++ runtime support code."""
    runtime_template = env.get_template("cpptiny-protodec.h.j2")
    return runtime_template.render()
