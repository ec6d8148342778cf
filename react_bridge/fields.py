# Copyright 2026 The Pigweed Authors
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not
# use this file except in compliance with the License. You may obtain a copy of
# the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.
"""Classifies message fields by how they are represented in a record.

A dynamic record only has slots for booleans, strings, numbers, nested records
and arrays, so every protobuf wire type collapses into one of a few shapes.
Integers of every width share the INT shape and both floating point types
share FLOAT64; the generated code narrows values when writing them back.
"""

import enum

from google.protobuf import descriptor_pb2

from react_bridge.errors import InvalidMapEntryError
from react_bridge.proto_tree import ProtoMessage, ProtoMessageField
from react_bridge.proto_tree import SchemaRegistry

_FieldType = descriptor_pb2.FieldDescriptorProto


class Shape(enum.Enum):
    """The record representation of a field."""

    BOOL = 'bool'
    STRING = 'string'
    INT = 'int'
    FLOAT64 = 'float64'
    ENUM = 'enum'
    BYTES = 'bytes'
    MESSAGE = 'message'

    # The field has no record representation. Emitters render nothing for it.
    UNSUPPORTED = 'unsupported'


_SHAPES: dict[int, Shape] = {
    _FieldType.TYPE_BOOL: Shape.BOOL,
    _FieldType.TYPE_STRING: Shape.STRING,
    _FieldType.TYPE_INT32: Shape.INT,
    _FieldType.TYPE_INT64: Shape.INT,
    _FieldType.TYPE_UINT32: Shape.INT,
    _FieldType.TYPE_UINT64: Shape.INT,
    _FieldType.TYPE_SINT32: Shape.INT,
    _FieldType.TYPE_SINT64: Shape.INT,
    _FieldType.TYPE_FIXED32: Shape.INT,
    _FieldType.TYPE_FIXED64: Shape.INT,
    _FieldType.TYPE_SFIXED32: Shape.INT,
    _FieldType.TYPE_SFIXED64: Shape.INT,
    _FieldType.TYPE_FLOAT: Shape.FLOAT64,
    _FieldType.TYPE_DOUBLE: Shape.FLOAT64,
    _FieldType.TYPE_ENUM: Shape.ENUM,
    _FieldType.TYPE_BYTES: Shape.BYTES,
    _FieldType.TYPE_MESSAGE: Shape.MESSAGE,
}


def classify(field: ProtoMessageField) -> Shape:
    """Returns the shape of a field; never raises."""
    return _SHAPES.get(field.type(), Shape.UNSUPPORTED)


def _package(message: ProtoMessage) -> str:
    proto_file = message.proto_file()
    return proto_file.package if proto_file is not None else ''


def field_message(
    field: ProtoMessageField, scope: ProtoMessage, registry: SchemaRegistry
) -> ProtoMessage:
    """Looks up the message type of a message field."""
    return registry.lookup_message(_package(scope), field.type_name())


def is_map(
    field: ProtoMessageField, scope: ProtoMessage, registry: SchemaRegistry
) -> bool:
    """True if the field is a map, i.e. repeated map entry messages.

    Raises:
      UnresolvedTypeError: The field's message type is not in the registry.
    """
    if not field.is_repeated() or classify(field) is not Shape.MESSAGE:
        return False

    return field_message(field, scope, registry).is_map_entry()


def map_entry_fields(
    field: ProtoMessageField, scope: ProtoMessage, registry: SchemaRegistry
) -> tuple[ProtoMessageField, ProtoMessageField, ProtoMessage]:
    """Returns the key field, value field and entry message of a map field."""
    entry = field_message(field, scope, registry)

    keys = [f for f in entry.fields() if f.name() == 'key']
    values = [f for f in entry.fields() if f.name() == 'value']
    if len(keys) != 1 or len(values) != 1:
        raise InvalidMapEntryError(
            'map entries must have exactly one key and one value field',
            entry,
            field,
        )

    return keys[0], values[0], entry
