"""Compiled schema loader.

The schema is itself protobuf-encoded (``protoc -o schema.pbs``), so it is
decoded with the same runtime the generated code uses.
"""

import logging

from .classifier import resolve_message_name
from .descriptor import FieldType, FileDescriptorSet

logger = logging.getLogger(__name__)


class ValidationError(RuntimeError):
    """Raised when schema validation fails."""


def validate(schema: FileDescriptorSet) -> None:
    """Validate a decoded schema against what the generator supports."""
    if not schema.file:
        raise ValidationError("Schema contains no files")

    if len(schema.file) > 1:
        logger.info("Schema has %d files, only %s is generated", len(schema.file), schema.file[0].name)

    file = schema.file[0]
    message_names = {message.name for message in file.message_type}

    for message in file.message_type:
        for field in message.field:
            if field.type != FieldType.TYPE_MESSAGE:
                continue
            name = resolve_message_name(field.type_name, file.package)
            if name not in message_names:
                raise ValidationError(
                    f"{message.name}.{field.name} references {field.type_name}, which is not declared in {file.name}"
                )


def parse(data: bytes | bytearray | memoryview) -> FileDescriptorSet:
    """Decode and validate a compiled schema (a FileDescriptorSet)."""
    schema = FileDescriptorSet.decode(data)
    logger.debug("Decoded %d schema files from %d bytes", len(schema.file), len(data))

    validate(schema)

    return schema
