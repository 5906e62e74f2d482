"""Field classification: how each schema field is decoded and stored."""

import logging
from dataclasses import dataclass, replace

from dataclasses_json import DataClassJsonMixin

from protodec.proto import DecodeDomain, ScalarType

from .descriptor import (
    DescriptorProto,
    EnumDescriptorProto,
    FieldDescriptorProto,
    FieldLabel,
    FieldType,
    FileDescriptorProto,
)

logger = logging.getLogger(__name__)


class UnsupportedSchemaConstruct(RuntimeError):
    """Raised when a schema uses a feature the generator can't emit."""


DOMAIN_MAP: dict[FieldType, DecodeDomain] = {
    FieldType.TYPE_DOUBLE: DecodeDomain.FP,
    FieldType.TYPE_FLOAT: DecodeDomain.FP,
    FieldType.TYPE_SINT32: DecodeDomain.ZIGZAG,
    FieldType.TYPE_SINT64: DecodeDomain.ZIGZAG,
    FieldType.TYPE_STRING: DecodeDomain.BYTEARRAY,
    FieldType.TYPE_BYTES: DecodeDomain.BYTEARRAY,
    FieldType.TYPE_MESSAGE: DecodeDomain.MESSAGE,
}

# See FieldDescriptor::CppType in google/protobuf/descriptor.h
SCALAR_TYPE_MAP: dict[FieldType, ScalarType] = {
    FieldType.TYPE_INT32: ScalarType.INT32,
    FieldType.TYPE_SINT32: ScalarType.INT32,
    FieldType.TYPE_SFIXED32: ScalarType.INT32,
    FieldType.TYPE_INT64: ScalarType.INT64,
    FieldType.TYPE_SINT64: ScalarType.INT64,
    FieldType.TYPE_SFIXED64: ScalarType.INT64,
    FieldType.TYPE_UINT32: ScalarType.UINT32,
    FieldType.TYPE_FIXED32: ScalarType.UINT32,
    FieldType.TYPE_UINT64: ScalarType.UINT64,
    FieldType.TYPE_FIXED64: ScalarType.UINT64,
    FieldType.TYPE_DOUBLE: ScalarType.DOUBLE,
    FieldType.TYPE_FLOAT: ScalarType.FLOAT,
    FieldType.TYPE_BOOL: ScalarType.BOOL,
    FieldType.TYPE_ENUM: ScalarType.INT32,
    FieldType.TYPE_STRING: ScalarType.STRING,
    FieldType.TYPE_BYTES: ScalarType.BYTES,
}


@dataclass(frozen=True)
class FieldEmission(DataClassJsonMixin):
    """Everything an emitter needs to declare and decode one field."""

    name: str
    number: int
    decode_domain: DecodeDomain
    target_type_name: str
    is_repeated: bool
    is_required: bool
    default_text: str | None
    presence_name: str | None = None

    @property
    def scalar(self) -> ScalarType | None:
        """Scalar target type, or None for message-typed fields."""
        if self.decode_domain == DecodeDomain.MESSAGE:
            return None
        return ScalarType(self.target_type_name)

    @property
    def has_presence(self) -> bool:
        return not self.is_repeated


@dataclass(frozen=True)
class MessageEmission(DataClassJsonMixin):
    """Classified fields of one message type, in declaration order."""

    name: str
    fields: tuple[FieldEmission, ...]

    @property
    def required_fields(self) -> list[FieldEmission]:
        return [f for f in self.fields if f.is_required]

    @property
    def value_dependencies(self) -> list[str]:
        """Message types held by value, i.e. through singular fields."""
        return [
            f.target_type_name
            for f in self.fields
            if f.decode_domain == DecodeDomain.MESSAGE and not f.is_repeated
        ]


def _field_type(field: FieldDescriptorProto) -> FieldType:
    try:
        field_type = FieldType(field.type)
    except ValueError:
        raise UnsupportedSchemaConstruct(f"Field {field.name} has unknown type {field.type}") from None

    if field_type == FieldType.TYPE_GROUP:
        raise UnsupportedSchemaConstruct(f"Field {field.name} is a group, groups are not supported")
    return field_type


def resolve_message_name(type_name: str, package: str = "") -> str:
    """Map a fully-qualified type reference to a top-level message name.

    ``.pkg.Point`` in package ``pkg`` becomes ``Point``.
    """
    name = type_name.removeprefix(".")
    if package:
        name = name.removeprefix(f"{package}.")
    if not name or "." in name:
        raise UnsupportedSchemaConstruct(
            f"Type {type_name} is not a top-level message, nested types are not supported"
        )
    return name


def decode_domain(field: FieldDescriptorProto) -> DecodeDomain:
    """Select the decode primitive for a field."""
    return DOMAIN_MAP.get(_field_type(field), DecodeDomain.INTEGRAL)


def target_type_name(field: FieldDescriptorProto, package: str = "") -> str:
    """Return the scalar type name, or the referenced message name."""
    field_type = _field_type(field)
    if field_type == FieldType.TYPE_MESSAGE:
        return resolve_message_name(field.type_name, package)
    return SCALAR_TYPE_MAP[field_type]


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def default_text(field: FieldDescriptorProto) -> str | None:
    """Render a field's explicit default, or None if it has none.

    Byte-sequence defaults are double-quoted. protoc stores bytes defaults
    already C-escaped, string defaults raw.
    """
    if field.label == FieldLabel.LABEL_REPEATED or not field.has_default_value:
        return None

    field_type = _field_type(field)
    if field_type == FieldType.TYPE_STRING:
        return f'"{_escape(field.default_value)}"'
    if field_type == FieldType.TYPE_BYTES:
        return f'"{field.default_value}"'
    return field.default_value


def classify_field(field: FieldDescriptorProto, package: str = "") -> FieldEmission:
    """Classify a single field descriptor."""
    is_repeated = field.label == FieldLabel.LABEL_REPEATED
    emission = FieldEmission(
        name=field.name,
        number=field.number,
        decode_domain=decode_domain(field),
        target_type_name=target_type_name(field, package),
        is_repeated=is_repeated,
        is_required=field.label == FieldLabel.LABEL_REQUIRED,
        default_text=default_text(field),
        presence_name=None if is_repeated else f"has_{field.name}",
    )
    logger.debug(
        "Field %s (%d): %s -> %s%s",
        emission.name,
        emission.number,
        emission.decode_domain,
        emission.target_type_name,
        " [repeated]" if emission.is_repeated else "",
    )
    return emission


def classify_message(message: DescriptorProto, package: str = "") -> MessageEmission:
    """Classify every field of a message type."""
    try:
        fields = [classify_field(f, package) for f in message.field]
    except UnsupportedSchemaConstruct as e:
        raise UnsupportedSchemaConstruct(f"{message.name}: {e}") from e
    return MessageEmission(name=message.name, fields=_unique_presence_names(fields))


def _unique_presence_names(fields: list[FieldEmission]) -> tuple[FieldEmission, ...]:
    """Suffix presence flags that would clash with a field (``x`` and ``has_x``)."""
    taken = {f.name for f in fields}
    result = []
    for emission in fields:
        if emission.presence_name is not None:
            flag = emission.presence_name
            while flag in taken:
                flag += "_"
            taken.add(flag)
            if flag != emission.presence_name:
                logger.debug("Presence flag for %s renamed to %s", emission.name, flag)
                emission = replace(emission, presence_name=flag)
        result.append(emission)
    return tuple(result)


def classify_file(file: FileDescriptorProto) -> list[MessageEmission]:
    """Classify all top-level message types of a file."""
    logger.debug("Classifying %d message types from %s", len(file.message_type), file.name or "<unnamed>")
    return [classify_message(message, file.package) for message in file.message_type]


def enum_index(file: FileDescriptorProto) -> dict[str, EnumDescriptorProto]:
    """Index a file's enums by fully-qualified name (``.pkg.Outer.Color``)."""
    prefix = f".{file.package}" if file.package else ""
    index = {f"{prefix}.{enum.name}": enum for enum in file.enum_type}
    for message in file.message_type:
        for enum in message.enum_type:
            index[f"{prefix}.{message.name}.{enum.name}"] = enum
    return index


def enum_default_number(field: FieldDescriptorProto, enums: dict[str, EnumDescriptorProto]) -> int:
    """Resolve an enum field's symbolic default to its numeric value."""
    enum = enums.get(field.type_name)
    if enum is None:
        raise UnsupportedSchemaConstruct(f"Field {field.name} uses unknown enum {field.type_name}")

    for value in enum.value:
        if value.name == field.default_value:
            return value.number
    raise UnsupportedSchemaConstruct(
        f"Field {field.name} default {field.default_value} is not a value of {enum.name}"
    )
