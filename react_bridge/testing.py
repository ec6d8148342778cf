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
"""Utilities for testing bridge code generation without protoc.

Protos are written as text format FileDescriptorProtos. Generated Python
bridges are imported and run against message classes built from the same
descriptors, with fakes standing in for the gRPC stubs and the React Native
host.
"""

import importlib.util
import os
from pathlib import Path
import sys
import tempfile
from types import ModuleType
from typing import Any, Callable, Iterable
from unittest import mock

from google.protobuf import descriptor_pb2, descriptor_pool
from google.protobuf import message_factory, text_format
from google.protobuf.compiler import plugin_pb2

from react_bridge import generate
from react_bridge.codegen import GeneratorOptions
from react_bridge.codegen_python import module_name
from react_bridge.proto_tree import ProtoMessage, SchemaRegistry

# A message with a field of every shape, and a service that sends it.
KITCHEN_SINK_PROTO = """
name: "convert.proto"
package: "convert"
syntax: "proto3"
enum_type {
  name: "Color"
  value { name: "RED" number: 0 }
  value { name: "GREEN" number: 1 }
  value { name: "BLUE" number: 2 }
}
message_type {
  name: "Leaf"
  field { name: "name" number: 1 type: TYPE_STRING label: LABEL_OPTIONAL }
  field { name: "count" number: 2 type: TYPE_INT32 label: LABEL_OPTIONAL }
}
message_type {
  name: "Kitchen"
  field { name: "flag" number: 1 type: TYPE_BOOL label: LABEL_OPTIONAL }
  field { name: "text" number: 2 type: TYPE_STRING label: LABEL_OPTIONAL }
  field { name: "small" number: 3 type: TYPE_INT32 label: LABEL_OPTIONAL }
  field { name: "big" number: 4 type: TYPE_INT64 label: LABEL_OPTIONAL }
  field { name: "unsigned" number: 5 type: TYPE_UINT32 label: LABEL_OPTIONAL }
  field { name: "ratio" number: 6 type: TYPE_FLOAT label: LABEL_OPTIONAL }
  field { name: "precise" number: 7 type: TYPE_DOUBLE label: LABEL_OPTIONAL }
  field {
    name: "color"
    number: 8
    type: TYPE_ENUM
    label: LABEL_OPTIONAL
    type_name: ".convert.Color"
  }
  field { name: "data" number: 9 type: TYPE_BYTES label: LABEL_OPTIONAL }
  field {
    name: "leaf"
    number: 10
    type: TYPE_MESSAGE
    label: LABEL_OPTIONAL
    type_name: ".convert.Leaf"
  }
  field { name: "tags" number: 11 type: TYPE_STRING label: LABEL_REPEATED }
  field { name: "numbers" number: 12 type: TYPE_INT64 label: LABEL_REPEATED }
  field {
    name: "leaves"
    number: 13
    type: TYPE_MESSAGE
    label: LABEL_REPEATED
    type_name: ".convert.Leaf"
  }
  field {
    name: "colors"
    number: 14
    type: TYPE_ENUM
    label: LABEL_REPEATED
    type_name: ".convert.Color"
  }
  field { name: "chunks" number: 15 type: TYPE_BYTES label: LABEL_REPEATED }
  field {
    name: "counts"
    number: 16
    type: TYPE_MESSAGE
    label: LABEL_REPEATED
    type_name: ".convert.Kitchen.CountsEntry"
  }
  field {
    name: "names_by_id"
    number: 17
    type: TYPE_MESSAGE
    label: LABEL_REPEATED
    type_name: ".convert.Kitchen.NamesByIdEntry"
  }
  field {
    name: "leaf_by_flag"
    number: 18
    type: TYPE_MESSAGE
    label: LABEL_REPEATED
    type_name: ".convert.Kitchen.LeafByFlagEntry"
  }
  field {
    name: "color_by_name"
    number: 19
    type: TYPE_MESSAGE
    label: LABEL_REPEATED
    type_name: ".convert.Kitchen.ColorByNameEntry"
  }
  field {
    name: "my_field_name"
    number: 20
    type: TYPE_SINT32
    label: LABEL_OPTIONAL
  }
  nested_type {
    name: "CountsEntry"
    field { name: "key" number: 1 type: TYPE_STRING label: LABEL_OPTIONAL }
    field { name: "value" number: 2 type: TYPE_INT32 label: LABEL_OPTIONAL }
    options { map_entry: true }
  }
  nested_type {
    name: "NamesByIdEntry"
    field { name: "key" number: 1 type: TYPE_INT64 label: LABEL_OPTIONAL }
    field { name: "value" number: 2 type: TYPE_STRING label: LABEL_OPTIONAL }
    options { map_entry: true }
  }
  nested_type {
    name: "LeafByFlagEntry"
    field { name: "key" number: 1 type: TYPE_BOOL label: LABEL_OPTIONAL }
    field {
      name: "value"
      number: 2
      type: TYPE_MESSAGE
      label: LABEL_OPTIONAL
      type_name: ".convert.Leaf"
    }
    options { map_entry: true }
  }
  nested_type {
    name: "ColorByNameEntry"
    field { name: "key" number: 1 type: TYPE_STRING label: LABEL_OPTIONAL }
    field {
      name: "value"
      number: 2
      type: TYPE_ENUM
      label: LABEL_OPTIONAL
      type_name: ".convert.Color"
    }
    options { map_entry: true }
  }
}
service {
  name: "Convert"
  method {
    name: "Echo"
    input_type: ".convert.Kitchen"
    output_type: ".convert.Kitchen"
  }
}
"""


def file_descriptor(text_proto: str) -> descriptor_pb2.FileDescriptorProto:
    """Parses a FileDescriptorProto from its text format."""
    return text_format.Parse(text_proto, descriptor_pb2.FileDescriptorProto())


def registry(*text_protos: str) -> SchemaRegistry:
    return SchemaRegistry(file_descriptor(text) for text in text_protos)


def message(schema: SchemaRegistry, proto_path: str) -> ProtoMessage:
    """Looks up a message by its fully-qualified name, e.g. pkg.Msg."""
    return schema.lookup_message('', f'.{proto_path}')


def code_generator_request(
    *text_protos: str,
    files_to_generate: Iterable[str] | None = None,
    parameter: str = '',
) -> plugin_pb2.CodeGeneratorRequest:
    """Builds a request as protoc would send it to the plugin.

    By default, every file is generated.
    """
    request = plugin_pb2.CodeGeneratorRequest(parameter=parameter)
    for text in text_protos:
        request.proto_file.append(file_descriptor(text))

    if files_to_generate is None:
        files_to_generate = [f.name for f in request.proto_file]
    request.file_to_generate.extend(files_to_generate)

    return request


class MessageClasses:
    """Creates Python classes for the messages in text format protos."""

    def __init__(self, *text_protos: str):
        self._pool = descriptor_pool.DescriptorPool()
        for text in text_protos:
            self._pool.AddSerializedFile(
                file_descriptor(text).SerializeToString()
            )

    def __getitem__(self, proto_path: str) -> Any:
        return message_factory.GetMessageClass(
            self._pool.FindMessageTypeByName(proto_path)
        )


class FakeFuture:
    """A completed future with the interface of a grpc.Future."""

    def __init__(self, result: Any = None, error: Exception | None = None):
        self._result = result
        self._error = error

    def exception(self) -> Exception | None:
        return self._error

    def result(self) -> Any:
        if self._error is not None:
            raise self._error
        return self._result

    def add_done_callback(self, callback: Callable[['FakeFuture'], None]):
        callback(self)


class FakeUnaryMethod:
    """Records the requests sent through a stub method."""

    def __init__(self, respond: Callable[[Any], FakeFuture]):
        self._respond = respond
        self.requests: list[Any] = []

    def future(self, request: Any) -> FakeFuture:
        self.requests.append(request)
        return self._respond(request)


class FakeStub:
    def __init__(self, **responders: Callable[[Any], FakeFuture]):
        self.channels: list[Any] = []
        self.methods: dict[str, FakeUnaryMethod] = {}
        self.respond_with(**responders)

    def respond_with(self, **responders: Callable[[Any], FakeFuture]) -> None:
        for name, respond in responders.items():
            self.methods[name] = FakeUnaryMethod(respond)

    def __call__(self, channel: Any) -> 'FakeStub':
        self.channels.append(channel)
        return self

    def __getattr__(self, name: str) -> FakeUnaryMethod:
        try:
            return self.__dict__['methods'][name]
        except KeyError:
            raise AttributeError(name) from None


class FakeEngine:
    """Stands in for the host's channel provider."""

    def __init__(self):
        self.service_names: list[str] = []

    def byServiceName(self, name: str) -> str:  # pylint: disable=invalid-name
        self.service_names.append(name)
        return f'channel:{name}'


class FakePromise:
    def __init__(self):
        self.resolved: list[Any] = []
        self.rejected: list[tuple[Any, ...]] = []

    def resolve(self, value: Any) -> None:
        self.resolved.append(value)

    def reject(self, *args: Any) -> None:
        self.rejected.append(args)


_PB2_TEMPLATE = '''\
from react_bridge import testing

CLASSES = testing.MessageClasses({text_proto!r})
'''

_PB2_GRPC_TEMPLATE = '''\
from react_bridge import testing
'''


def _import_module(name: str, path: Path) -> ModuleType:
    spec = importlib.util.spec_from_file_location(name, path)
    module = importlib.util.module_from_spec(spec)  # type: ignore[arg-type]
    spec.loader.exec_module(module)  # type: ignore[union-attr]
    return module


def _write_and_import(directory: str, name: str, source: str) -> ModuleType:
    path = Path(directory, f'{name}.py')
    path.write_text(source)
    return _import_module(name, path)


def _pb2_source(
    text_proto: str, descriptor: descriptor_pb2.FileDescriptorProto
) -> str:
    lines = [_PB2_TEMPLATE.format(text_proto=text_proto)]
    for proto_message in descriptor.message_type:
        path = proto_message.name
        if descriptor.package:
            path = f'{descriptor.package}.{path}'
        lines.append(f'{proto_message.name} = CLASSES[{path!r}]\n')
    return ''.join(lines)


def _pb2_grpc_source(descriptor: descriptor_pb2.FileDescriptorProto) -> str:
    lines = [_PB2_GRPC_TEMPLATE]
    for service in descriptor.service:
        lines.append(f'{service.name}Stub = testing.FakeStub()\n')
    return ''.join(lines)


class PythonBridge:
    """Generates and imports the Python bridge for one text format proto.

    The bridge is written to a temporary directory next to stand-in _pb2 and
    _pb2_grpc modules, and each file is imported from its path. The _pb2
    module holds real message classes for the file's top-level messages; the
    _pb2_grpc module holds a FakeStub for each service, which answers with the
    given responders.
    """

    def __init__(
        self,
        text_proto: str,
        options: GeneratorOptions | None = None,
        **responders: Callable[[Any], FakeFuture],
    ):
        descriptor = file_descriptor(text_proto)
        options = options or GeneratorOptions(target='python')

        (output,) = generate.process_request(
            [descriptor], [descriptor.name], options
        )
        self.source = output.content()
        self.engine = FakeEngine()

        package = options.package_name or ''
        pb2_name = module_name(descriptor.name, '_pb2', package)
        grpc_name = module_name(descriptor.name, '_pb2_grpc', package)
        bridge_name, _ = os.path.splitext(os.path.basename(output.name()))

        with tempfile.TemporaryDirectory(prefix='react_bridge_') as tempdir:
            pb2 = _write_and_import(
                tempdir, pb2_name, _pb2_source(text_proto, descriptor)
            )
            grpc = _write_and_import(
                tempdir, grpc_name, _pb2_grpc_source(descriptor)
            )

            # The bridge imports its protobuf modules by name.
            with mock.patch.dict(
                sys.modules, {pb2_name: pb2, grpc_name: grpc}
            ):
                self.module = _write_and_import(
                    tempdir, bridge_name, self.source
                )

        self.classes: MessageClasses = pb2.CLASSES
        self.stubs: dict[str, FakeStub] = {}
        for service in descriptor.service:
            stub = getattr(grpc, f'{service.name}Stub')
            stub.respond_with(**responders)
            self.stubs[service.name] = stub

    def service(self, name: str) -> Any:
        """Creates the bridge class generated for a service."""
        return getattr(self.module, f'{name}Module')(None, self.engine)
