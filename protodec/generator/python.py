"""Python code generator for protobuf decoders."""

import keyword
from importlib import resources

from jinja2 import Environment, PackageLoader

from protodec.proto import DecodeDomain, ScalarType

from .classifier import FieldEmission, classify_file, enum_default_number, enum_index
from .descriptor import EnumDescriptorProto, FieldDescriptorProto, FieldType, FileDescriptorSet

RUNTIME_FILES = [
    "__init__.py",
    "types.py",
    "wire.py",
    "decoder.py",
    "message.py",
]

env = Environment(
    loader=PackageLoader("protodec.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")

# Map scalar types to Python type annotations
PRIMITIVE_TYPE_MAP = {
    ScalarType.INT32: "int",
    ScalarType.INT64: "int",
    ScalarType.UINT32: "int",
    ScalarType.UINT64: "int",
    ScalarType.FLOAT: "float",
    ScalarType.DOUBLE: "float",
    ScalarType.BOOL: "bool",
    ScalarType.STRING: "str",
    ScalarType.BYTES: "bytes",
}

ZERO_VALUES = {
    "int": "0",
    "float": "0.0",
    "bool": "False",
    "str": '""',
    "bytes": 'b""',
}

# Attributes generated messages already define
_RESERVED_NAMES = frozenset(["decode", "decode_from"])

_SPECIAL_FLOATS = frozenset(["inf", "-inf", "nan"])


def _attr_name(emission: FieldEmission) -> str:
    """Python attribute name for a field, avoiding keywords."""
    name = emission.name
    if keyword.iskeyword(name) or name in _RESERVED_NAMES:
        return name + "_"
    return name


def _map_type(emission: FieldEmission) -> str:
    """Map a classified field to a Python type annotation."""
    if emission.scalar is None:
        type_name = emission.target_type_name
    else:
        type_name = PRIMITIVE_TYPE_MAP[emission.scalar]

    if emission.is_repeated:
        return f"list[{type_name}]"
    if emission.decode_domain == DecodeDomain.MESSAGE:
        return f"{type_name} | None"
    return type_name


def _default_value(
    emission: FieldEmission, field: FieldDescriptorProto, enums: dict[str, EnumDescriptorProto]
) -> str:
    """Python expression for a field's initial value."""
    if emission.is_repeated:
        return "_field(default_factory=list)"
    if emission.decode_domain == DecodeDomain.MESSAGE:
        return "None"

    python_type = PRIMITIVE_TYPE_MAP[emission.scalar]  # type: ignore[index]
    text = emission.default_text
    if text is None:
        return ZERO_VALUES[python_type]

    if field.type == FieldType.TYPE_ENUM:
        return str(enum_default_number(field, enums))
    if emission.scalar == ScalarType.STRING:
        return repr(field.default_value)
    if emission.scalar == ScalarType.BYTES:
        return "b" + text
    if emission.scalar == ScalarType.BOOL:
        return "True" if text == "true" else "False"
    if python_type == "float" and text in _SPECIAL_FLOATS:
        return f'float("{text}")'
    return text


def _gen_field_decl(
    emission: FieldEmission, field: FieldDescriptorProto, enums: dict[str, EnumDescriptorProto]
) -> str:
    """Generate the dataclass attribute declaration for a field."""
    return f"{_attr_name(emission)}: {_map_type(emission)} = {_default_value(emission, field, enums)}"


def _gen_read_value(emission: FieldEmission) -> str:
    """Generate the dispatcher call that decodes one value of a field."""
    if emission.decode_domain == DecodeDomain.MESSAGE:
        return f"pb.read_message(wire_type, {emission.target_type_name}())"
    return f'pb.read_{emission.decode_domain}(wire_type, "{emission.scalar}")'


def _gen_decode_field(emission: FieldEmission) -> list[str]:
    """Generate the statements of one field's match case."""
    attr = _attr_name(emission)
    value = _gen_read_value(emission)

    if emission.is_repeated:
        return [f"self.{attr}.append({value})"]
    return [f"self.{attr} = {value}", f"self.{emission.presence_name} = True"]


def render(
    schema: FileDescriptorSet,
    runtime_import: str = "protodec.proto",
    source_name: str | None = None,
) -> str:
    """Render the first file of a compiled schema to Python source code."""
    file = schema.file[0]
    enums = enum_index(file)
    messages = list(zip(file.message_type, classify_file(file)))

    return template.render(
        source_name=source_name or file.name or "schema",
        enums=file.enum_type,
        messages=messages,
        zip=zip,
        gen_field_decl=lambda emission, field: _gen_field_decl(emission, field, enums),
        gen_decode_field=_gen_decode_field,
        runtime_import=runtime_import,
    )


def runtime() -> dict[str, str]:
    """Return the Python runtime files as a dict of filename -> content."""
    result: dict[str, str] = {}
    for filename in RUNTIME_FILES:
        content = resources.files("protodec.proto").joinpath(filename).read_text()
        result[filename] = content
    return result
