"""Unit tests configuration file."""

import pytest
from hypothesis import settings

from protodec.generator.descriptor import FieldLabel, FieldType
from protodec.tests.encoding import enum_proto, field_proto, file_set, message_proto

settings.register_profile("default", max_examples=200, deadline=None)
settings.load_profile("default")


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def filter_schema():
    """A compiled schema exercising every decode domain and label."""
    sub_message = message_proto(
        "SubMessage",
        field_proto("id", 1, FieldType.TYPE_UINT32),
        field_proto("tag", 2, FieldType.TYPE_STRING),
    )
    filter_message = message_proto(
        "Filter",
        field_proto("size", 1, FieldType.TYPE_INT64, FieldLabel.LABEL_REQUIRED),
        field_proto("altitude", 2, FieldType.TYPE_SINT32),
        field_proto("weight", 3, FieldType.TYPE_FLOAT),
        field_proto("name", 4, FieldType.TYPE_STRING, default="DEFAULT NAME"),
        field_proto("msg", 5, FieldType.TYPE_MESSAGE, type_name=".demo.SubMessage"),
        field_proto("color", 6, FieldType.TYPE_ENUM, type_name=".demo.Color", default="GREEN"),
        field_proto("enabled", 7, FieldType.TYPE_BOOL, default="true"),
        field_proto("more_ints", 11, FieldType.TYPE_UINT32, FieldLabel.LABEL_REPEATED),
        field_proto("more_sints", 12, FieldType.TYPE_SINT64, FieldLabel.LABEL_REPEATED),
        field_proto("more_floats", 13, FieldType.TYPE_DOUBLE, FieldLabel.LABEL_REPEATED),
        field_proto("more_strings", 14, FieldType.TYPE_STRING, FieldLabel.LABEL_REPEATED),
        field_proto(
            "more_msgs", 15, FieldType.TYPE_MESSAGE, FieldLabel.LABEL_REPEATED, type_name=".demo.SubMessage"
        ),
    )
    return file_set(
        filter_message,
        sub_message,
        name="filter.proto",
        package="demo",
        enums=(enum_proto("Color", RED=0, GREEN=1, BLUE=2),),
    )
