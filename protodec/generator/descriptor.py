"""Compiled schema entities, decoded with the protodec runtime itself.

Each entity's decode_from() is written the same way the generator writes
decoders for user messages: a fixed mapping from field number to decode
primitive, with unknown fields skipped. Field numbers follow
google/protobuf/descriptor.proto.
"""

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import IntEnum

from dataclasses_json import DataClassJsonMixin

from protodec.proto import FieldDispatcher, Message


class FieldType(IntEnum):
    """Declared type of a field (FieldDescriptorProto.Type)."""

    TYPE_DOUBLE = 1
    TYPE_FLOAT = 2
    TYPE_INT64 = 3
    TYPE_UINT64 = 4
    TYPE_INT32 = 5
    TYPE_FIXED64 = 6
    TYPE_FIXED32 = 7
    TYPE_BOOL = 8
    TYPE_STRING = 9
    TYPE_GROUP = 10
    TYPE_MESSAGE = 11
    TYPE_BYTES = 12
    TYPE_UINT32 = 13
    TYPE_ENUM = 14
    TYPE_SFIXED32 = 15
    TYPE_SFIXED64 = 16
    TYPE_SINT32 = 17
    TYPE_SINT64 = 18


class FieldLabel(IntEnum):
    """Cardinality of a field (FieldDescriptorProto.Label)."""

    LABEL_OPTIONAL = 1
    LABEL_REQUIRED = 2
    LABEL_REPEATED = 3


@dataclass
class EnumValueDescriptorProto(Message, DataClassJsonMixin):
    """A single named enum constant."""

    name: str = ""
    number: int = 0

    has_name: bool = False
    has_number: bool = False

    def decode_from(self, pb: FieldDispatcher) -> None:
        for field_num, wire_type in pb:
            match field_num:
                case 1:
                    self.name = pb.read_bytearray(wire_type, "string")
                    self.has_name = True
                case 2:
                    self.number = pb.read_integral(wire_type, "int32")
                    self.has_number = True
                case _:
                    pb.skip_field(wire_type)


@dataclass
class EnumDescriptorProto(Message, DataClassJsonMixin):
    """An enum type definition."""

    name: str = ""
    value: list[EnumValueDescriptorProto] = dataclass_field(default_factory=list)

    has_name: bool = False

    def decode_from(self, pb: FieldDispatcher) -> None:
        for field_num, wire_type in pb:
            match field_num:
                case 1:
                    self.name = pb.read_bytearray(wire_type, "string")
                    self.has_name = True
                case 2:
                    self.value.append(pb.read_message(wire_type, EnumValueDescriptorProto()))
                case _:
                    pb.skip_field(wire_type)


@dataclass
class FieldDescriptorProto(Message, DataClassJsonMixin):
    """A field within a message type.

    ``type`` and ``label`` are kept as raw integers so that values unknown
    to FieldType/FieldLabel survive decoding and can be reported by the
    classifier.
    """

    name: str = ""
    number: int = 0
    label: int = FieldLabel.LABEL_OPTIONAL
    type: int = 0
    type_name: str = ""
    default_value: str = ""
    json_name: str = ""

    has_name: bool = False
    has_number: bool = False
    has_label: bool = False
    has_type: bool = False
    has_type_name: bool = False
    has_default_value: bool = False
    has_json_name: bool = False

    def decode_from(self, pb: FieldDispatcher) -> None:
        for field_num, wire_type in pb:
            match field_num:
                case 1:
                    self.name = pb.read_bytearray(wire_type, "string")
                    self.has_name = True
                case 3:
                    self.number = pb.read_integral(wire_type, "int32")
                    self.has_number = True
                case 4:
                    self.label = pb.read_integral(wire_type, "int32")
                    self.has_label = True
                case 5:
                    self.type = pb.read_integral(wire_type, "int32")
                    self.has_type = True
                case 6:
                    self.type_name = pb.read_bytearray(wire_type, "string")
                    self.has_type_name = True
                case 7:
                    self.default_value = pb.read_bytearray(wire_type, "string")
                    self.has_default_value = True
                case 10:
                    self.json_name = pb.read_bytearray(wire_type, "string")
                    self.has_json_name = True
                case _:
                    pb.skip_field(wire_type)


@dataclass
class DescriptorProto(Message, DataClassJsonMixin):
    """A message type definition.

    Nested message types (field 3) are present on the wire but skipped.
    """

    name: str = ""
    field: list[FieldDescriptorProto] = dataclass_field(default_factory=list)
    enum_type: list[EnumDescriptorProto] = dataclass_field(default_factory=list)

    has_name: bool = False

    def decode_from(self, pb: FieldDispatcher) -> None:
        for field_num, wire_type in pb:
            match field_num:
                case 1:
                    self.name = pb.read_bytearray(wire_type, "string")
                    self.has_name = True
                case 2:
                    self.field.append(pb.read_message(wire_type, FieldDescriptorProto()))
                case 4:
                    self.enum_type.append(pb.read_message(wire_type, EnumDescriptorProto()))
                case _:
                    pb.skip_field(wire_type)


@dataclass
class FileDescriptorProto(Message, DataClassJsonMixin):
    """A single .proto file."""

    name: str = ""
    package: str = ""
    dependency: list[str] = dataclass_field(default_factory=list)
    message_type: list[DescriptorProto] = dataclass_field(default_factory=list)
    enum_type: list[EnumDescriptorProto] = dataclass_field(default_factory=list)
    syntax: str = ""

    has_name: bool = False
    has_package: bool = False
    has_syntax: bool = False

    def decode_from(self, pb: FieldDispatcher) -> None:
        for field_num, wire_type in pb:
            match field_num:
                case 1:
                    self.name = pb.read_bytearray(wire_type, "string")
                    self.has_name = True
                case 2:
                    self.package = pb.read_bytearray(wire_type, "string")
                    self.has_package = True
                case 3:
                    self.dependency.append(pb.read_bytearray(wire_type, "string"))
                case 4:
                    self.message_type.append(pb.read_message(wire_type, DescriptorProto()))
                case 5:
                    self.enum_type.append(pb.read_message(wire_type, EnumDescriptorProto()))
                case 12:
                    self.syntax = pb.read_bytearray(wire_type, "string")
                    self.has_syntax = True
                case _:
                    pb.skip_field(wire_type)


@dataclass
class FileDescriptorSet(Message, DataClassJsonMixin):
    """The output of ``protoc --descriptor_set_out``."""

    file: list[FileDescriptorProto] = dataclass_field(default_factory=list)

    def decode_from(self, pb: FieldDispatcher) -> None:
        for field_num, wire_type in pb:
            match field_num:
                case 1:
                    self.file.append(pb.read_message(wire_type, FileDescriptorProto()))
                case _:
                    pb.skip_field(wire_type)
