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
"""Generates bridge modules for the services of a batch of .proto files."""

import logging
from typing import Iterable

from google.protobuf import descriptor_pb2

from react_bridge import names
from react_bridge.codegen import CodeGenerator, GeneratorOptions
from react_bridge.codegen_java import JavaCodeGenerator
from react_bridge.codegen_python import PythonCodeGenerator
from react_bridge.decode import DecodeEmitter
from react_bridge.encode import EncodeEmitter
from react_bridge.errors import MethodNameCollisionError
from react_bridge.output_file import OutputFile
from react_bridge.proto_tree import ProtoFile, ProtoMessage, ProtoService
from react_bridge.proto_tree import ProtoServiceMethod, SchemaRegistry

_LOG = logging.getLogger(__name__)

TARGETS: dict[str, type[CodeGenerator]] = {
    'java': JavaCodeGenerator,
    'python': PythonCodeGenerator,
}


def create_generator(
    options: GeneratorOptions, registry: SchemaRegistry, proto_file: ProtoFile
) -> CodeGenerator:
    generator_class = TARGETS[options.target]
    return generator_class(
        names.output_filename(proto_file.name, generator_class.EXTENSION),
        registry,
        proto_file,
    )


def generate_method(
    method: ProtoServiceMethod,
    generator: CodeGenerator,
    options: GeneratorOptions,
) -> None:
    """Generates the bridged method for a unary RPC.

    Streaming RPCs cannot be bridged to a single promise, so nothing is
    generated for them.
    """
    if method.server_streaming() or method.client_streaming():
        _LOG.debug(
            'Skipping %s.%s: %s RPCs are not bridged',
            method.service().proto_path(),
            method.name(),
            method.type().value,
        )
        return

    bridged_name = names.to_record_key(method.name())
    if bridged_name in generator.MODULE_ACCESSORS:
        raise MethodNameCollisionError(
            f'method {method.name()} would replace the module accessor '
            f'{bridged_name}()',
            method.service(),
        )

    registry = generator.registry
    package = generator.proto_file.package
    request = registry.lookup_message(package, method.request_type())
    response = registry.lookup_message(package, method.response_type())

    generator.method_begin(method, request)
    DecodeEmitter(generator, registry, options).emit(
        request, generator.REQUEST_RECORD, generator.REQUEST_BUILDER
    )
    generator.method_invoke(method, response)
    EncodeEmitter(generator, registry, options).emit(
        response, generator.RESPONSE_RECORD, generator.RESPONSE_VALUE
    )
    generator.method_end(method)


def generate_service(
    service: ProtoService,
    generator: CodeGenerator,
    options: GeneratorOptions,
) -> None:
    _LOG.info('Generating %s module', service.proto_path())

    generator.service_begin(service)
    for method in service.methods():
        generate_method(method, generator, options)
    generator.service_end(service)


def generate_file(
    file_name: str, registry: SchemaRegistry, options: GeneratorOptions
) -> OutputFile:
    """Generates the bridge modules of every service in one file."""
    generator = create_generator(options, registry, registry.file(file_name))

    generator.header(options.package_name or generator.default_package())
    for service in registry.services(file_name):
        generate_service(service, generator, options)

    _LOG.info(
        'Generated %s bridge %s', generator.name(), generator.output.name()
    )
    return generator.output


def process_request(
    proto_files: Iterable[descriptor_pb2.FileDescriptorProto],
    files_to_generate: Iterable[str],
    options: GeneratorOptions,
) -> list[OutputFile]:
    """Generates output for each file to generate.

    Every file in proto_files is used to resolve types, but only those named in
    files_to_generate produce output.

    Raises:
      CodegenError: Generation of any file failed. No output is returned.
    """
    registry = SchemaRegistry(proto_files)
    return [
        generate_file(file_name, registry, options)
        for file_name in files_to_generate
    ]


def _emit_text(
    emitter_class,
    message: ProtoMessage,
    registry: SchemaRegistry,
    options: GeneratorOptions,
    record: str,
    value: str,
) -> str:
    proto_file = message.proto_file()
    assert proto_file is not None

    generator = create_generator(options, registry, proto_file)
    emitter_class(generator, registry, options).emit(message, record, value)
    return generator.output.content()


def emit_decode(
    message: ProtoMessage,
    registry: SchemaRegistry,
    options: GeneratorOptions | None = None,
    record: str | None = None,
    builder: str | None = None,
) -> str:
    """Returns only the record -> builder code for a message.

    The variable names default to those used in generated methods.
    """
    options = options or GeneratorOptions()
    target = TARGETS[options.target]
    return _emit_text(
        DecodeEmitter,
        message,
        registry,
        options,
        record or target.REQUEST_RECORD,
        builder or target.REQUEST_BUILDER,
    )


def emit_encode(
    message: ProtoMessage,
    registry: SchemaRegistry,
    options: GeneratorOptions | None = None,
    value: str | None = None,
    record: str | None = None,
) -> str:
    """Returns only the message -> record code for a message.

    The variable names default to those used in generated methods.
    """
    options = options or GeneratorOptions()
    target = TARGETS[options.target]
    return _emit_text(
        EncodeEmitter,
        message,
        registry,
        options,
        record or target.RESPONSE_RECORD,
        value or target.RESPONSE_VALUE,
    )
