"""protodec decoder generator."""

from .classifier import FieldEmission as FieldEmission
from .classifier import MessageEmission as MessageEmission
from .classifier import UnsupportedSchemaConstruct as UnsupportedSchemaConstruct
from .classifier import classify_field as classify_field
from .classifier import classify_file as classify_file
from .classifier import classify_message as classify_message
from .descriptor import *
from .parser import ValidationError as ValidationError
from .parser import parse as parse
