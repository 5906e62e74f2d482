"""Base class for generated protobuf message types."""

from typing import Self

from .decoder import FieldDispatcher
from .wire import DecodeError


class MissingRequiredField(DecodeError):
    """Raised when a required field never appeared in a decoded message."""

    def __init__(self, message_name: str, field_name: str) -> None:
        super().__init__(f"Decoded protobuf has no required field {message_name}.{field_name}")
        self.message_name = message_name
        self.field_name = field_name


class Message:
    """Base class for generated message types.

    Subclasses should be @dataclass decorated, default-constructible, and
    implement decode_from(). Singular fields carry a ``has_<name>`` flag,
    repeated fields are lists.

    Example:
        @dataclass
        class Ping(Message):
            seq: int = 0
            has_seq: bool = False

            def decode_from(self, pb: FieldDispatcher) -> None:
                for field_num, wire_type in pb:
                    match field_num:
                        case 1:
                            self.seq = pb.read_integral(wire_type, "uint32")
                            self.has_seq = True
                        case _:
                            pb.skip_field(wire_type)
                if not self.has_seq:
                    raise MissingRequiredField("Ping", "seq")
    """

    def decode_from(self, pb: FieldDispatcher) -> None:
        """Populate this message from a dispatcher. Generated code overrides this."""
        raise NotImplementedError("decode_from() must be implemented by generated code")

    @classmethod
    def decode(cls, data: bytes | bytearray | memoryview) -> Self:
        """Decode a complete message buffer.

        Args:
            data: The wire-encoded message.

        Returns:
            A new, fully populated instance.
        """
        message = cls()
        message.decode_from(FieldDispatcher(data))
        return message
