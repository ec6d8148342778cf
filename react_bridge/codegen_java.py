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
"""This module generates React Native Java modules for gRPC services."""

import os

from google.protobuf import descriptor_pb2

from react_bridge import names
from react_bridge.codegen import CodeGenerator, FieldSite
from react_bridge.codegen import NULL_RESULT_CODE, NULL_RESULT_MESSAGE
from react_bridge.codegen import PLUGIN_NAME
from react_bridge.fields import Shape, classify
from react_bridge.proto_tree import ProtoFile, ProtoMessage, ProtoMessageField
from react_bridge.proto_tree import ProtoService, ProtoServiceMethod

_FieldType = descriptor_pb2.FieldDescriptorProto

_IMPORTS = (
    'com.facebook.react.bridge.*',
    'com.google.common.util.concurrent.FutureCallback',
    'com.google.common.util.concurrent.Futures',
    'com.google.common.util.concurrent.MoreExecutors',
    'com.google.protobuf.ByteString',
    'io.grpc.ManagedChannel',
    None,
    'javax.annotation.Nullable',
    'java.util.ArrayList',
    'java.util.HashMap',
    'java.util.List',
    'java.util.Map',
)

# Primitive and boxed Java types of scalar and bytes fields, by wire type.
_JAVA_TYPES: dict[int, tuple[str, str]] = {
    _FieldType.TYPE_BOOL: ('boolean', 'Boolean'),
    _FieldType.TYPE_STRING: ('String', 'String'),
    _FieldType.TYPE_BYTES: ('ByteString', 'ByteString'),
    _FieldType.TYPE_INT32: ('int', 'Integer'),
    _FieldType.TYPE_UINT32: ('int', 'Integer'),
    _FieldType.TYPE_SINT32: ('int', 'Integer'),
    _FieldType.TYPE_FIXED32: ('int', 'Integer'),
    _FieldType.TYPE_SFIXED32: ('int', 'Integer'),
    _FieldType.TYPE_INT64: ('long', 'Long'),
    _FieldType.TYPE_UINT64: ('long', 'Long'),
    _FieldType.TYPE_SINT64: ('long', 'Long'),
    _FieldType.TYPE_FIXED64: ('long', 'Long'),
    _FieldType.TYPE_SFIXED64: ('long', 'Long'),
    _FieldType.TYPE_FLOAT: ('float', 'Float'),
    _FieldType.TYPE_DOUBLE: ('double', 'Double'),
    # Enums are read and written through their number accessors.
    _FieldType.TYPE_ENUM: ('int', 'Integer'),
}

# Suffix of the ReadableMap/WritableMap accessors for each shape.
_RECORD_ACCESSORS = {
    Shape.BOOL: 'Boolean',
    Shape.STRING: 'String',
    Shape.INT: 'Int',
    Shape.FLOAT64: 'Double',
    Shape.ENUM: 'Int',
    Shape.BYTES: 'String',
}


def _primitive(field: ProtoMessageField) -> str:
    return _JAVA_TYPES[field.type()][0]


def _boxed(field: ProtoMessageField) -> str:
    return _JAVA_TYPES[field.type()][1]


def _from_record(field: ProtoMessageField, expression: str) -> str:
    """Converts a value read from a ReadableMap to the field's Java type."""
    shape = classify(field)
    if shape is Shape.BYTES:
        return f'ByteString.copyFromUtf8({expression})'

    primitive = _primitive(field)
    if primitive in ('long', 'float'):
        return f'({primitive}) {expression}'

    return expression


def _to_record(field: ProtoMessageField, expression: str) -> str:
    """Converts a Java field value to what a WritableMap accepts."""
    shape = classify(field)
    if shape is Shape.BYTES:
        return f'{expression}.toStringUtf8()'

    # Records only hold 32-bit integers, so wider values are truncated.
    if shape is Shape.INT:
        return f'(int) {expression}'

    return expression


def _parse_key(field: ProtoMessageField, key: str) -> str:
    """Parses a string record key into the map's key type."""
    if field.type() == _FieldType.TYPE_BOOL:
        return f'Boolean.parseBoolean({key})'

    if classify(field) is Shape.INT:
        if _primitive(field) == 'long':
            return f'Long.parseLong({key})'
        return f'Integer.parseInt({key})'

    return key


def _outer_class_name(proto_file: ProtoFile) -> str:
    """The class holding a file's types when they are not in their own files."""
    if proto_file.java_outer_classname:
        return proto_file.java_outer_classname

    base = os.path.splitext(os.path.basename(proto_file.name))[0]
    name = names.to_accessor_suffix(base)
    if name in proto_file.top_level_names:
        name += 'OuterClass'

    return name


def java_package(proto_file: ProtoFile) -> str:
    return proto_file.java_package or proto_file.package


class JavaCodeGenerator(CodeGenerator):
    """Generates a ReactContextBaseJavaModule for each service in a file."""

    EXTENSION = '.java'

    def name(self) -> str:
        return 'java'

    def default_package(self) -> str:
        return java_package(self.proto_file)

    def type_name(self, message: ProtoMessage) -> str:
        """The name by which generated code refers to a message class."""
        proto_file = message.proto_file()
        assert proto_file is not None

        name = message.package_path()
        if not proto_file.java_multiple_files:
            name = f'{_outer_class_name(proto_file)}.{name}'

        package = java_package(proto_file)
        if package and package != java_package(self.proto_file):
            name = f'{package}.{name}'

        return name

    def header(self, package_name: str) -> None:
        self.line(f'// Code generated by {PLUGIN_NAME}')
        self.line('// DO NOT EDIT!')
        if package_name:
            self.line(f'package {package_name};')
        self.line()

        for java_import in _IMPORTS:
            self.line(f'import {java_import};' if java_import else '')

        proto_package = java_package(self.proto_file)
        if proto_package:
            self.line()
            self.line(f'import {proto_package}.*;')

    def service_begin(self, service: ProtoService) -> None:
        name = service.name()
        module = f'{name}{names.MODULE_SUFFIX}'

        self.line()
        self.open(f'class {module} extends ReactContextBaseJavaModule {{')
        self.line('private GrpcEngine engine;')
        self.line()
        self.open(
            f'{module}(ReactApplicationContext reactContext, '
            'GrpcEngine engine) {'
        )
        self.line('super(reactContext);')
        self.line('this.engine = engine;')
        self.close('}')
        self.line()
        self.line('/**')
        self.line(
            ' * @return the name of this module. This will be the name used '
            'to {@code require()}'
        )
        self.line(' * this module from javascript.')
        self.line(' */')
        self.line('@Override')
        self.open('public String getName() {')
        self.line(f'return "{name}";')
        self.close('}')
        self.line()
        self.line('@Override')
        self.open('public Map<String, Object> getConstants() {')
        self.line('final Map<String, Object> constants = new HashMap<>();')
        self.line(f'constants.put("NAME", {name}Grpc.SERVICE_NAME);')
        self.line('return constants;')
        self.close('}')

    def service_end(self, service: ProtoService) -> None:
        self.close('}')

    def method_begin(
        self, method: ProtoServiceMethod, request: ProtoMessage
    ) -> None:
        service = method.service().name()
        request_type = self.type_name(request)

        self.line()
        self.line('@ReactMethod')
        self.open(
            f'public void {names.to_record_key(method.name())}'
            f'(ReadableMap {self.REQUEST_RECORD}, final Promise promise) {{'
        )
        self.line(
            'ManagedChannel ch = '
            f'this.engine.byServiceName({service}Grpc.SERVICE_NAME);'
        )
        self.line(
            f'{service}Grpc.{service}FutureStub stub = '
            f'{service}Grpc.newFutureStub(ch);'
        )
        self.line(
            f'{request_type}.Builder {self.REQUEST_BUILDER} = '
            f'{request_type}.newBuilder();'
        )

    def method_invoke(
        self, method: ProtoServiceMethod, response: ProtoMessage
    ) -> None:
        response_type = self.type_name(response)
        call = (
            f'stub.{names.to_record_key(method.name())}'
            f'({self.REQUEST_BUILDER}.build())'
        )

        self.line()
        self.open(
            f'Futures.addCallback({call}, '
            f'new FutureCallback<{response_type}>() {{'
        )
        self.line('@Override')
        self.open(
            f'public void onSuccess(@Nullable {response_type} '
            f'{self.RESPONSE_VALUE}) {{'
        )
        self.open(f'if ({self.RESPONSE_VALUE} == null) {{')
        self.line(
            f'promise.reject("{NULL_RESULT_CODE}", "{NULL_RESULT_MESSAGE}");'
        )
        self.line('return;')
        self.close('}')
        self.line(
            f'WritableMap {self.RESPONSE_RECORD} = Arguments.createMap();'
        )

    def method_end(self, method: ProtoServiceMethod) -> None:
        self.line(f'promise.resolve({self.RESPONSE_RECORD});')
        self.close('}')
        self.line()
        self.line('@Override')
        self.open('public void onFailure(Throwable t) {')
        self.line('promise.reject(t);')
        self.close('}')
        self.close('}, MoreExecutors.directExecutor());')
        self.close('}')

    def _has_key(self, site: FieldSite) -> None:
        self.open(f'if ({site.record}.hasKey("{site.key}")) {{')

    def _read(self, shape: Shape, record: str, key: str) -> str:
        return f'{record}.get{_RECORD_ACCESSORS[shape]}({key})'

    def decode_singular(self, site: FieldSite) -> None:
        value = self._read(site.shape, site.record, f'"{site.key}"')
        setter = f'set{site.accessor}'
        if site.shape is Shape.ENUM:
            setter += 'Value'
        else:
            value = _from_record(site.field, value)

        self._has_key(site)
        self.line(f'{site.value}.{setter}({value});')
        self.close('}')

    def decode_message_begin(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        type_name = self.type_name(message)

        self._has_key(site)
        self.line(
            f'ReadableMap {site.nested_record()} = '
            f'{site.record}.getMap("{site.key}");'
        )
        self.line(
            f'{type_name}.Builder {site.nested_value()} = '
            f'{type_name}.newBuilder();'
        )

    def decode_message_end(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        self.line(
            f'{site.value}.set{site.accessor}({site.nested_value()}.build());'
        )
        self.close('}')

    def decode_repeated_begin(
        self, site: FieldSite, message: ProtoMessage | None
    ) -> None:
        array = site.local('array')
        index = site.local('i')
        if message is None:
            element_type = _boxed(site.field)
        else:
            element_type = self.type_name(message)

        self._has_key(site)
        self.line(
            f'ReadableArray {array} = {site.record}.getArray("{site.key}");'
        )
        self.line(
            f'List<{element_type}> {site.local("list")} = new ArrayList<>();'
        )
        self.open(
            f'for (int {index} = 0; {index} < {array}.size(); {index}++) {{'
        )

    def decode_repeated_element(self, site: FieldSite) -> None:
        value = self._read(site.shape, site.local('array'), site.local('i'))
        self.line(
            f'{site.local("list")}.add({_from_record(site.field, value)});'
        )

    def decode_repeated_message_begin(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        type_name = self.type_name(message)
        self.line(
            f'ReadableMap {site.nested_record("item")} = '
            f'{site.local("array")}.getMap({site.local("i")});'
        )
        self.line(
            f'{type_name}.Builder {site.nested_value("item")} = '
            f'{type_name}.newBuilder();'
        )

    def decode_repeated_message_end(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        self.line(
            f'{site.local("list")}.add({site.nested_value("item")}.build());'
        )

    def decode_repeated_end(self, site: FieldSite) -> None:
        self.close('}')
        self.line(
            f'{site.value}.addAll{site.accessor}({site.local("list")});'
        )
        self.close('}')

    def decode_repeated_enum(self, site: FieldSite) -> None:
        self._has_key(site)
        self.line('// Repeated enum values are not converted.')
        self.close('}')

    def decode_map_begin(
        self, site: FieldSite, key_field: ProtoMessageField
    ) -> None:
        record = site.local('map')
        keys = site.local('iter')

        self._has_key(site)
        self.line(
            f'ReadableMap {record} = {site.record}.getMap("{site.key}");'
        )
        self.line(
            f'ReadableMapKeySetIterator {keys} = {record}.keySetIterator();'
        )
        self.open(f'while ({keys}.hasNextKey()) {{')
        self.line(f'String {site.local("key")} = {keys}.nextKey();')

    def decode_map_entry(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        value_field: ProtoMessageField,
    ) -> None:
        value_shape = classify(value_field)
        value = self._read(value_shape, site.local('map'), site.local('key'))
        putter = f'put{site.accessor}'
        if value_shape is Shape.ENUM:
            putter += 'Value'
        else:
            value = _from_record(value_field, value)

        key = _parse_key(key_field, site.local('key'))
        self.line(f'{site.value}.{putter}({key}, {value});')

    def decode_map_message_begin(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        message: ProtoMessage,
    ) -> None:
        type_name = self.type_name(message)
        self.line(
            f'ReadableMap {site.nested_record("value")} = '
            f'{site.local("map")}.getMap({site.local("key")});'
        )
        self.line(
            f'{type_name}.Builder {site.nested_value("value")} = '
            f'{type_name}.newBuilder();'
        )

    def decode_map_message_end(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        message: ProtoMessage,
    ) -> None:
        key = _parse_key(key_field, site.local('key'))
        self.line(
            f'{site.value}.put{site.accessor}'
            f'({key}, {site.nested_value("value")}.build());'
        )

    def decode_map_end(self, site: FieldSite) -> None:
        self.close('}')
        self.close('}')

    def _write(self, shape: Shape, record: str, key: str, value: str) -> str:
        accessor = _RECORD_ACCESSORS[shape]
        return f'{record}.put{accessor}({key}, {value});'

    def encode_singular(self, site: FieldSite) -> None:
        if site.shape is Shape.ENUM:
            value = f'{site.value}.get{site.accessor}Value()'
        else:
            value = _to_record(site.field, f'{site.value}.get{site.accessor}()')

        self.line(self._write(site.shape, site.record, f'"{site.key}"', value))

    def encode_message_begin(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        self.line(
            f'WritableMap {site.nested_record()} = Arguments.createMap();'
        )
        self.line(
            f'{self.type_name(message)} {site.nested_value()} = '
            f'{site.value}.get{site.accessor}();'
        )

    def encode_message_end(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        self.line(
            f'{site.record}.putMap("{site.key}", {site.nested_record()});'
        )

    def encode_repeated_begin(
        self, site: FieldSite, message: ProtoMessage | None
    ) -> None:
        if message is not None:
            element_type = self.type_name(message)
            elements = f'{site.value}.get{site.accessor}List()'
        elif site.shape is Shape.ENUM:
            element_type = 'int'
            elements = f'{site.value}.get{site.accessor}ValueList()'
        else:
            element_type = _primitive(site.field)
            elements = f'{site.value}.get{site.accessor}List()'

        self.line(
            f'WritableArray {site.local("array")} = Arguments.createArray();'
        )
        self.open(f'for ({element_type} {site.local("item")} : {elements}) {{')

    def encode_repeated_element(self, site: FieldSite) -> None:
        accessor = _RECORD_ACCESSORS[site.shape]
        if site.shape is Shape.ENUM:
            value = site.local('item')
        else:
            value = _to_record(site.field, site.local('item'))

        self.line(f'{site.local("array")}.push{accessor}({value});')

    def encode_repeated_message_begin(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        self.line(
            f'WritableMap {site.nested_record("item")} = '
            'Arguments.createMap();'
        )

    def encode_repeated_message_end(
        self, site: FieldSite, message: ProtoMessage
    ) -> None:
        self.line(
            f'{site.local("array")}.pushMap({site.nested_record("item")});'
        )

    def encode_repeated_end(self, site: FieldSite) -> None:
        self.close('}')
        self.line(
            f'{site.record}.putArray("{site.key}", {site.local("array")});'
        )

    def encode_map_begin(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        value_field: ProtoMessageField,
        message: ProtoMessage | None,
    ) -> None:
        entries = f'{site.value}.get{site.accessor}'
        if message is not None:
            value_type = value_boxed = self.type_name(message)
            entries += 'Map()'
        elif classify(value_field) is Shape.ENUM:
            value_type, value_boxed = 'int', 'Integer'
            entries += 'ValueMap()'
        else:
            value_type, value_boxed = _JAVA_TYPES[value_field.type()]
            entries += 'Map()'

        entry = site.local('entry')
        self.line(
            f'WritableMap {site.local("map")} = Arguments.createMap();'
        )
        self.open(
            f'for (Map.Entry<{_boxed(key_field)}, {value_boxed}> {entry} : '
            f'{entries}.entrySet()) {{'
        )
        self.line(
            f'String {site.local("key")} = '
            f'String.valueOf({entry}.getKey());'
        )
        self.line(
            f'{value_type} {site.local("value")} = {entry}.getValue();'
        )

    def encode_map_entry(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        value_field: ProtoMessageField,
    ) -> None:
        value_shape = classify(value_field)
        value = site.local('value')
        if value_shape is not Shape.ENUM:
            value = _to_record(value_field, value)

        record = site.local('map')
        self.line(self._write(value_shape, record, site.local('key'), value))

    def encode_map_message_begin(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        message: ProtoMessage,
    ) -> None:
        self.line(
            f'WritableMap {site.nested_record("value")} = '
            'Arguments.createMap();'
        )

    def encode_map_message_end(
        self,
        site: FieldSite,
        key_field: ProtoMessageField,
        message: ProtoMessage,
    ) -> None:
        self.line(
            f'{site.local("map")}.putMap'
            f'({site.local("key")}, {site.nested_record("value")});'
        )

    def encode_map_end(self, site: FieldSite) -> None:
        self.close('}')
        self.line(f'{site.record}.putMap("{site.key}", {site.local("map")});')
