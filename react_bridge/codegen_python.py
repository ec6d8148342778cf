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
"""This module generates Python bridge modules for gRPC services.

Records are dicts and builders are protobuf message instances. Methods call
the grpcio future API of the service's stub and settle a promise object with
the same resolve/reject interface as a React Native Promise.
"""

import keyword
import os

from google.protobuf import descriptor_pb2

from react_bridge import names
from react_bridge.codegen import CodeGenerator, FieldSite
from react_bridge.codegen import NULL_RESULT_CODE, NULL_RESULT_MESSAGE
from react_bridge.codegen import PLUGIN_NAME
from react_bridge.fields import Shape, classify
from react_bridge.proto_tree import ProtoMessage, ProtoMessageField
from react_bridge.proto_tree import ProtoService, ProtoServiceMethod

_FieldType = descriptor_pb2.FieldDescriptorProto

_INT32 = '_int32'


def module_name(proto_file_name: str, suffix: str, package: str = '') -> str:
    """The module protoc generates for a .proto file, e.g. foo.bar_pb2."""
    base = os.path.splitext(proto_file_name)[0]
    module = base.replace('-', '_').replace('/', '.') + suffix
    return f'{package}.{module}' if package else module


def module_alias(module: str) -> str:
    """Import alias for a generated module, as protoc names them."""
    return module.replace('_', '__').replace('.', '_dot_')


def _attr(value: str, field: ProtoMessageField) -> str:
    if keyword.iskeyword(field.name()):
        return f"getattr({value}, '{field.name()}')"
    return f'{value}.{field.name()}'


def _assign(value: str, field: ProtoMessageField, expression: str) -> str:
    if keyword.iskeyword(field.name()):
        return f"setattr({value}, '{field.name()}', {expression})"
    return f'{value}.{field.name()} = {expression}'


_FROM_RECORD = {
    Shape.BOOL: 'bool({})',
    Shape.STRING: 'str({})',
    Shape.INT: 'int({})',
    Shape.FLOAT64: 'float({})',
    Shape.ENUM: 'int({})',
    Shape.BYTES: "str({}).encode('utf-8')",
}

_TO_RECORD = {
    Shape.BOOL: '{}',
    Shape.STRING: '{}',
    Shape.INT: _INT32 + '({})',
    Shape.FLOAT64: '{}',
    Shape.ENUM: '{}',
    Shape.BYTES: "{}.decode('utf-8', 'replace')",
}


def _from_record(field: ProtoMessageField, expression: str) -> str:
    return _FROM_RECORD[classify(field)].format(expression)


def _to_record(field: ProtoMessageField, expression: str) -> str:
    return _TO_RECORD[classify(field)].format(expression)


def _parse_key(field: ProtoMessageField, key: str) -> str:
    if field.type() == _FieldType.TYPE_BOOL:
        return f"{key}.lower() == 'true'"
    if classify(field) is Shape.INT:
        return f'int({key})'
    return key


def _format_key(field: ProtoMessageField, key: str) -> str:
    if field.type() == _FieldType.TYPE_BOOL:
        return f'str({key}).lower()'
    if classify(field) is Shape.INT:
        return f'str({key})'
    return key


class PythonCodeGenerator(CodeGenerator):
    """Generates a Python bridge class for each service in a file."""

    EXTENSION = '.py'

    # 'in' is a keyword in Python.
    REQUEST_RECORD = 'record'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._package = ''

    def name(self) -> str:
        return 'python'

    def default_package(self) -> str:
        # Generated protobuf modules are imported relative to sys.path.
        return ''

    def _module(self, proto_file_name: str, suffix: str = '_pb2') -> str:
        return module_name(proto_file_name, suffix, self._package)

    def type_name(self, message: ProtoMessage) -> str:
        proto_file = message.proto_file()
        assert proto_file is not None

        alias = module_alias(self._module(proto_file.name))
        return f'{alias}.{message.package_path()}'

    def header(self, package_name: str) -> None:
        self._package = package_name

        modules = {self._module(self.proto_file.name)}
        services = self.registry.services(self.proto_file.name)
        for service in services:
            for method in service.methods():
                if method.server_streaming() or method.client_streaming():
                    continue
                request = self.registry.lookup_message(
                    self.proto_file.package, method.request_type()
                )
                request_file = request.proto_file()
                assert request_file is not None
                modules.add(self._module(request_file.name))

        if services:
            modules.add(self._module(self.proto_file.name, '_pb2_grpc'))

        self.line(f'# Code generated by {PLUGIN_NAME}')
        self.line('# DO NOT EDIT!')
        self.line('# pylint: disable=invalid-name')
        self.line(
            '"""React Native bridge modules for the services in '
            f'{self.proto_file.name}."""'
        )
        self.line()
        for module in sorted(modules):
            self.line(f'import {module} as {module_alias(module)}')
        self.line()
        self.line()
        self.open(f'def {_INT32}(value):')
        self.line('return (value + 0x80000000) % 0x100000000 - 0x80000000')
        self.close()

    def service_begin(self, service: ProtoService) -> None:
        name = service.name()

        self.line()
        self.line()
        self.open(f'class {name}{names.MODULE_SUFFIX}:')
        self.line(f'"""Bridges the {service.proto_path()} service."""')
        self.line()
        self.open('def __init__(self, context, engine):')
        self.line('self.context = context')
        self.line('self.engine = engine')
        self.close()
        self.line()
        self.open('def getName(self):')
        self.line(f"return '{name}'")
        self.close()
        self.line()
        self.open('def getConstants(self):')
        self.line(f"return {{'NAME': '{service.proto_path()}'}}")
        self.close()

    def service_end(self, service: ProtoService) -> None:
        self.close()

    def method_begin(
        self, method: ProtoServiceMethod, request: ProtoMessage
    ) -> None:
        service = method.service()
        grpc_module = module_alias(
            self._module(self.proto_file.name, '_pb2_grpc')
        )

        self.line()
        self.open(
            f'def {names.to_record_key(method.name())}'
            f'(self, {self.REQUEST_RECORD}, promise):'
        )
        self.line(
            f"channel = self.engine.byServiceName('{service.proto_path()}')"
        )
        self.line(f'stub = {grpc_module}.{service.name()}Stub(channel)')
        self.line(f'{self.REQUEST_BUILDER} = {self.type_name(request)}()')

    def method_invoke(
        self, method: ProtoServiceMethod, response: ProtoMessage
    ) -> None:
        self.line()
        self.open('def on_done(future):')
        self.line('error = future.exception()')
        self.open('if error is not None:')
        self.line('promise.reject(error)')
        self.line('return')
        self.close()
        self.line(f'{self.RESPONSE_VALUE} = future.result()')
        self.open(f'if {self.RESPONSE_VALUE} is None:')
        self.line(
            f"promise.reject('{NULL_RESULT_CODE}', '{NULL_RESULT_MESSAGE}')"
        )
        self.line('return')
        self.close()
        self.line(f'{self.RESPONSE_RECORD} = {{}}')

    def method_end(self, method: ProtoServiceMethod) -> None:
        self.line(f'promise.resolve({self.RESPONSE_RECORD})')
        self.close()
        self.line()
        self.line(
            f'stub.{method.name()}.future({self.REQUEST_BUILDER})'
            '.add_done_callback(on_done)'
        )
        self.close()

    def _has_key(self, site: FieldSite) -> None:
        self.open(f"if '{site.key}' in {site.record}:")

    def _item(self, site: FieldSite) -> str:
        return f"{site.record}['{site.key}']"

    def decode_singular(self, site: FieldSite) -> None:
        value = _from_record(site.field, self._item(site))

        self._has_key(site)
        self.line(_assign(site.value, site.field, value))
        self.close()

    def decode_message_begin(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        builder = site.nested_value()

        self._has_key(site)
        self.line(f'{site.nested_record()} = {self._item(site)}')
        self.line(f'{builder} = {_attr(site.value, site.field)}')
        self.line(f'{builder}.SetInParent()')

    def decode_message_end(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        self.close()

    def decode_repeated_begin(
        self, site: FieldSite, message: ProtoMessage | None
    ) -> None:
        if message is None:
            item = site.local('item')
        else:
            item = site.nested_record('item')

        self._has_key(site)
        self.open(f'for {item} in {self._item(site)}:')

    def decode_repeated_element(self, site: FieldSite) -> None:
        value = _from_record(site.field, site.local('item'))
        self.line(f'{_attr(site.value, site.field)}.append({value})')

    def decode_repeated_message_begin(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        self.line(
            f'{site.nested_value("item")} = '
            f'{_attr(site.value, site.field)}.add()'
        )

    def decode_repeated_message_end(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        pass

    def decode_repeated_end(self, site: FieldSite) -> None:
        self.close()
        self.close()

    def decode_repeated_enum(self, site: FieldSite) -> None:
        self._has_key(site)
        self.line('# Repeated enum values are not converted.')
        self.line('pass')
        self.close()

    def decode_map_begin(
        self, site: FieldSite, key_field: ProtoMessageField
    ) -> None:
        self._has_key(site)
        self.line(f'{site.local("map")} = {self._item(site)}')
        self.open(f'for {site.local("key")} in {site.local("map")}:')

    def _map_slot(self, site: FieldSite, key_field: ProtoMessageField) -> str:
        key = _parse_key(key_field, site.local('key'))
        return f'{_attr(site.value, site.field)}[{key}]'

    def decode_map_entry(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        value_field: ProtoMessageField,
    ) -> None:
        value = _from_record(
            value_field, f'{site.local("map")}[{site.local("key")}]'
        )
        self.line(f'{self._map_slot(site, key_field)} = {value}')

    def decode_map_message_begin(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        message: ProtoMessage,
    ) -> None:
        self.line(
            f'{site.nested_record("value")} = '
            f'{site.local("map")}[{site.local("key")}]'
        )
        self.line(
            f'{site.nested_value("value")} = '
            f'{self._map_slot(site, key_field)}'
        )

    def decode_map_message_end(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        message: ProtoMessage,
    ) -> None:
        pass

    def decode_map_end(self, site: FieldSite) -> None:
        self.close()
        self.close()

    def encode_singular(self, site: FieldSite) -> None:
        value = _to_record(site.field, _attr(site.value, site.field))
        self.line(f'{self._item(site)} = {value}')

    def encode_message_begin(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        self.line(f'{site.nested_record()} = {{}}')
        self.line(f'{site.nested_value()} = {_attr(site.value, site.field)}')

    def encode_message_end(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        self.line(f'{self._item(site)} = {site.nested_record()}')

    def encode_repeated_begin(
        self, site: FieldSite, message: ProtoMessage | None
    ) -> None:
        self.line(f'{site.local("array")} = []')
        self.open(
            f'for {site.local("item")} in {_attr(site.value, site.field)}:'
        )

    def encode_repeated_element(self, site: FieldSite) -> None:
        value = _to_record(site.field, site.local('item'))
        self.line(f'{site.local("array")}.append({value})')

    def encode_repeated_message_begin(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        self.line(f'{site.nested_record("item")} = {{}}')

    def encode_repeated_message_end(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        self.line(
            f'{site.local("array")}.append({site.nested_record("item")})'
        )

    def encode_repeated_end(self, site: FieldSite) -> None:
        self.close()
        self.line(f'{self._item(site)} = {site.local("array")}')

    def encode_map_begin(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        value_field: ProtoMessageField,
        message: ProtoMessage | None,
    ) -> None:
        self.line(f'{site.local("map")} = {{}}')
        self.open(
            f'for {site.local("key")}, {site.local("value")} in '
            f'{_attr(site.value, site.field)}.items():'
        )

    def _record_slot(
        self, site: FieldSite, key_field: ProtoMessageField
    ) -> str:
        key = _format_key(key_field, site.local('key'))
        return f'{site.local("map")}[{key}]'

    def encode_map_entry(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        value_field: ProtoMessageField,
    ) -> None:
        value = _to_record(value_field, site.local('value'))
        self.line(f'{self._record_slot(site, key_field)} = {value}')

    def encode_map_message_begin(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        message: ProtoMessage,
    ) -> None:
        self.line(f'{site.nested_record("value")} = {{}}')

    def encode_map_message_end(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        message: ProtoMessage,
    ) -> None:
        self.line(
            f'{self._record_slot(site, key_field)} = '
            f'{site.nested_record("value")}'
        )

    def encode_map_end(self, site: FieldSite) -> None:
        self.close()
        self.line(f'{self._item(site)} = {site.local("map")}')
