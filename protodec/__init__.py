"""protodec - protobuf decoder generator from compiled schemas."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("protodec")
except PackageNotFoundError:
    __version__ = "(local)"
