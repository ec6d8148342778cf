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
"""Common bridge codegen utilities."""

import abc
import contextlib
from dataclasses import dataclass
import logging
from typing import Iterator

from react_bridge import names
from react_bridge.errors import NestingTooDeepError, RecursiveMessageError
from react_bridge.errors import UnsupportedFieldError
from react_bridge.fields import Shape, classify
from react_bridge.output_file import OutputFile
from react_bridge.proto_tree import ProtoFile, ProtoMessage, ProtoMessageField
from react_bridge.proto_tree import ProtoService, ProtoServiceMethod
from react_bridge.proto_tree import SchemaRegistry

_LOG = logging.getLogger(__name__)

PLUGIN_NAME = 'protoc-gen-react'

DEFAULT_MAX_DEPTH = 32

NULL_RESULT_CODE = 'null'
NULL_RESULT_MESSAGE = 'response is null'


@dataclass
class GeneratorOptions:
    target: str = 'java'
    package_name: str | None = None
    strict: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH


@dataclass(frozen=True)
class FieldSite:
    """A field being converted, and the variables it is converted between.

    record is the dynamic record variable and value is the typed variable: the
    builder when decoding or the message when encoding. Names of generated
    locals are derived from these, so they are unique along any nesting path.
    """

    field: ProtoMessageField
    shape: Shape
    record: str
    value: str

    @property
    def key(self) -> str:
        return names.to_record_key(self.field.name())

    @property
    def accessor(self) -> str:
        return names.to_accessor_suffix(self.field.name())

    def local(self, prefix: str) -> str:
        """A generated local variable owned by this field."""
        return f'{prefix}_{self.record}_{self.key}'

    def nested_record(self, suffix: str = '') -> str:
        """The record variable for a nested message of this field."""
        tail = f'_{suffix}' if suffix else ''
        return f'{self.record}_{self.key}{tail}'

    def nested_value(self, suffix: str = '') -> str:
        """The typed variable for a nested message of this field."""
        tail = f'_{suffix}' if suffix else ''
        return f'{self.value}_{self.key}{tail}'


class CodeGenerator(abc.ABC):
    """Generates bridge code for one target language.

    Subclasses define one hook per piece of emitted code; the decode and encode
    emitters decide which hooks to call and in what order.
    """

    EXTENSION = ''
    INDENT_WIDTH = 4

    # Names of the variables at the root of a method's conversions.
    REQUEST_RECORD = 'in'
    REQUEST_BUILDER = 'builder'
    RESPONSE_VALUE = 'result'
    RESPONSE_RECORD = 'out'

    # Accessors every service module defines alongside the bridged methods.
    MODULE_ACCESSORS = frozenset(('getName', 'getConstants'))

    def __init__(
        self,
        output_filename: str,
        registry: SchemaRegistry,
        proto_file: ProtoFile,
    ):
        self.output = OutputFile(output_filename, self.INDENT_WIDTH)
        self.registry = registry
        self.proto_file = proto_file

    def line(self, line: str = '') -> None:
        self.output.write_line(line)

    def open(self, line: str) -> None:
        """Writes a line that starts a block and indents what follows."""
        self.line(line)
        self.output.push_indent()

    def close(self, line: str | None = None) -> None:
        """Ends the innermost block, optionally with a closing line."""
        self.output.pop_indent()
        if line is not None:
            self.line(line)

    @abc.abstractmethod
    def name(self) -> str:
        """Name of the target, e.g. java."""

    def default_package(self) -> str:
        """Package of the generated code when none is configured."""
        return self.proto_file.package

    # File and service structure.

    @abc.abstractmethod
    def header(self, package_name: str) -> None:
        """Package declaration and imports at the top of the file."""

    @abc.abstractmethod
    def service_begin(self, service: ProtoService) -> None:
        """Opens the module for a service, with its constructor and name."""

    @abc.abstractmethod
    def service_end(self, service: ProtoService) -> None:
        """Closes the module for a service."""

    @abc.abstractmethod
    def method_begin(
        self, method: ProtoServiceMethod, request: ProtoMessage
    ) -> None:
        """Opens a bridged method, up to the creation of the request builder."""

    @abc.abstractmethod
    def method_invoke(
        self, method: ProtoServiceMethod, response: ProtoMessage
    ) -> None:
        """Invokes the RPC and opens the success continuation.

        The continuation rejects a null result and then creates the response
        record.
        """

    @abc.abstractmethod
    def method_end(self, method: ProtoServiceMethod) -> None:
        """Resolves the response record and forwards failures."""

    # Record -> builder.

    @abc.abstractmethod
    def decode_singular(self, site: FieldSite) -> None:
        """Sets a scalar, enum or bytes field if its key is present."""

    @abc.abstractmethod
    def decode_message_begin(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        """Opens a present nested record and creates its builder."""

    @abc.abstractmethod
    def decode_message_end(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        """Sets the nested builder on the parent builder."""

    @abc.abstractmethod
    def decode_repeated_begin(
        self, site: FieldSite, message: ProtoMessage | None
    ) -> None:
        """Opens a present array and loops over its elements."""

    @abc.abstractmethod
    def decode_repeated_element(self, site: FieldSite) -> None:
        """Collects one scalar or bytes element."""

    @abc.abstractmethod
    def decode_repeated_message_begin(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        """Creates the builder for one message element."""

    @abc.abstractmethod
    def decode_repeated_message_end(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        """Collects one built message element."""

    @abc.abstractmethod
    def decode_repeated_end(self, site: FieldSite) -> None:
        """Closes the loop and adds the collected elements to the builder."""

    @abc.abstractmethod
    def decode_repeated_enum(self, site: FieldSite) -> None:
        """Repeated enums are not converted; emits only the presence check."""

    @abc.abstractmethod
    def decode_map_begin(
        self, site: FieldSite, key_field: ProtoMessageField
    ) -> None:
        """Opens a present nested record and loops over its keys."""

    @abc.abstractmethod
    def decode_map_entry(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        value_field: ProtoMessageField,
    ) -> None:
        """Puts one scalar, enum or bytes entry."""

    @abc.abstractmethod
    def decode_map_message_begin(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        message: ProtoMessage,
    ) -> None:
        """Creates the builder for one message value."""

    @abc.abstractmethod
    def decode_map_message_end(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        message: ProtoMessage,
    ) -> None:
        """Puts one built message value."""

    @abc.abstractmethod
    def decode_map_end(self, site: FieldSite) -> None:
        """Closes the key loop."""

    # Message -> record.

    @abc.abstractmethod
    def encode_singular(self, site: FieldSite) -> None:
        """Writes a scalar, enum or bytes field to the record."""

    @abc.abstractmethod
    def encode_message_begin(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        """Creates the nested record for a message field."""

    @abc.abstractmethod
    def encode_message_end(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        """Attaches the nested record to the parent record."""

    @abc.abstractmethod
    def encode_repeated_begin(
        self, site: FieldSite, message: ProtoMessage | None
    ) -> None:
        """Creates the array and loops over the field's elements."""

    @abc.abstractmethod
    def encode_repeated_element(self, site: FieldSite) -> None:
        """Appends one scalar, enum or bytes element."""

    @abc.abstractmethod
    def encode_repeated_message_begin(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        """Creates the record for one message element."""

    @abc.abstractmethod
    def encode_repeated_message_end(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        """Appends the record of one message element."""

    @abc.abstractmethod
    def encode_repeated_end(self, site: FieldSite) -> None:
        """Closes the loop and attaches the array to the record."""

    @abc.abstractmethod
    def encode_map_begin(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        value_field: ProtoMessageField,
        message: ProtoMessage | None,
    ) -> None:
        """Creates the inner record and loops over the map's entries."""

    @abc.abstractmethod
    def encode_map_entry(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        value_field: ProtoMessageField,
    ) -> None:
        """Writes one scalar, enum or bytes entry."""

    @abc.abstractmethod
    def encode_map_message_begin(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        message: ProtoMessage,
    ) -> None:
        """Creates the record for one message value."""

    @abc.abstractmethod
    def encode_map_message_end(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        message: ProtoMessage,
    ) -> None:
        """Writes the record of one message value."""

    @abc.abstractmethod
    def encode_map_end(self, site: FieldSite) -> None:
        """Closes the entry loop and attaches the inner record."""


class MessageWalker:
    """Walks the fields of a message, recursing into nested messages.

    The path of messages being converted is tracked so that recursive schemas
    fail with an error instead of recursing forever.
    """

    def __init__(
        self,
        generator: CodeGenerator,
        registry: SchemaRegistry,
        options: GeneratorOptions,
    ):
        self._gen = generator
        self._registry = registry
        self._options = options
        self._path: list[ProtoMessage] = []

    @contextlib.contextmanager
    def _entering(
        self, message: ProtoMessage, field: ProtoMessageField | None = None
    ) -> Iterator[None]:
        if message in self._path:
            cycle = ' -> '.join(m.proto_path() for m in self._path)
            raise RecursiveMessageError(
                f'recursive message {message.proto_path()} '
                f'(path: {cycle} -> {message.proto_path()})',
                message,
                field,
            )

        if len(self._path) >= self._options.max_depth:
            raise NestingTooDeepError(
                f'messages nest more than {self._options.max_depth} deep',
                message,
                field,
            )

        self._path.append(message)
        try:
            yield
        finally:
            self._path.pop()

    def _sites(
        self, message: ProtoMessage, record: str, value: str
    ) -> Iterator[FieldSite]:
        """Yields a site for each field that has a record representation."""
        for field in message.fields():
            shape = classify(field)
            if shape is Shape.UNSUPPORTED:
                self._unsupported(message, field)
                continue

            yield FieldSite(field, shape, record, value)

    def _unsupported(
        self, message: ProtoMessage, field: ProtoMessageField
    ) -> None:
        if self._options.strict:
            raise UnsupportedFieldError(
                f'field type {field.type()} has no record representation',
                message,
                field,
            )

        _LOG.warning(
            'Skipping %s.%s: field type %d has no record representation',
            message.proto_path(),
            field.name(),
            field.type(),
        )
