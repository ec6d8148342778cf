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
"""This module defines data structures for protobuf entities."""

import abc
import collections
from dataclasses import dataclass
import enum
from typing import Callable, Iterable, Iterator, TypeVar
from typing import cast

from google.protobuf import descriptor_pb2

from react_bridge.errors import UnresolvedTypeError

T = TypeVar('T')  # pylint: disable=invalid-name


@dataclass(frozen=True)
class ProtoFile:
    """The parts of a .proto file that affect generated type names."""

    name: str
    package: str
    java_package: str
    java_multiple_files: bool
    java_outer_classname: str
    top_level_names: frozenset[str]

    @classmethod
    def from_descriptor(
        cls, proto_file: descriptor_pb2.FileDescriptorProto
    ) -> 'ProtoFile':
        names = [m.name for m in proto_file.message_type]
        names.extend(e.name for e in proto_file.enum_type)
        names.extend(s.name for s in proto_file.service)

        return cls(
            name=proto_file.name,
            package=proto_file.package,
            java_package=proto_file.options.java_package,
            java_multiple_files=proto_file.options.java_multiple_files,
            java_outer_classname=proto_file.options.java_outer_classname,
            top_level_names=frozenset(names),
        )


class ProtoNode(abc.ABC):
    """A ProtoNode represents an entity in the schema of a generation run.

    Nodes form a tree beginning at a top-level (global) scope, descending into a
    hierarchy of .proto packages and the messages, enums and services defined
    within them. A single tree holds every file of a batch, so references
    between files resolve.
    """

    class Type(enum.Enum):
        """The type of a ProtoNode.

        PACKAGE is one component of a dotted proto package.
        MESSAGE is a message definition, possibly nested in another message.
        ENUM is an enum definition.
        SERVICE is an RPC service definition.
        """

        PACKAGE = 1
        MESSAGE = 2
        ENUM = 3
        SERVICE = 4

    def __init__(self, name: str, proto_file: ProtoFile | None = None):
        self._name: str = name
        self._children: dict[str, 'ProtoNode'] = collections.OrderedDict()
        self._parent: 'ProtoNode | None' = None
        self._proto_file = proto_file

    @abc.abstractmethod
    def type(self) -> 'ProtoNode.Type':
        """The type of the node."""

    def children(self) -> list['ProtoNode']:
        return list(self._children.values())

    def name(self) -> str:
        return self._name

    def proto_path(self) -> str:
        """Fully-qualified package path of the node."""
        path = '.'.join(self._attr_hierarchy(lambda node: node.name(), None))
        return path.lstrip('.')

    def package_path(self) -> str:
        """Path of the node relative to its package, e.g. Outer.Inner."""
        return '.'.join(
            self._attr_hierarchy(
                lambda node: node.name(),
                None,
                stop=lambda node: node.type() is ProtoNode.Type.PACKAGE,
            )
        )

    def proto_file(self) -> ProtoFile | None:
        """The file in which this node is defined, if it is not a package."""
        node: 'ProtoNode | None' = self
        while node is not None:
            # pylint: disable=protected-access
            if node._proto_file is not None:
                return node._proto_file
            # pylint: enable=protected-access
            node = node.parent()
        return None

    def add_child(self, child: 'ProtoNode') -> None:
        """Inserts a new node into the tree as a child of this node.

        Args:
          child: The node to insert.

        Raises:
          ValueError: This node does not allow nesting the given type of child.
        """
        if not self._supports_child(child):
            raise ValueError(
                'Invalid child %s for node of type %s'
                % (child.type(), self.type())
            )

        # pylint: disable=protected-access
        if child._parent is not None:
            del child._parent._children[child.name()]

        child._parent = self
        self._children[child.name()] = child
        # pylint: enable=protected-access

    def find(self, path: str) -> 'ProtoNode | None':
        """Finds a node within this node's subtree."""
        node = self

        # pylint: disable=protected-access
        for section in path.split('.'):
            child = node._children.get(section)
            if child is None:
                return None
            node = child
        # pylint: enable=protected-access

        return node

    def parent(self) -> 'ProtoNode | None':
        return self._parent

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.proto_path()!r})'

    def _attr_hierarchy(
        self,
        attr_accessor: Callable[['ProtoNode'], T],
        root: 'ProtoNode | None',
        stop: Callable[['ProtoNode'], bool] = lambda node: False,
    ) -> Iterator[T]:
        """Fetches node attributes at each level of the tree from the root.

        Args:
          attr_accessor: Function which extracts attributes from a ProtoNode.
          root: The node at which to terminate.
          stop: Predicate for nodes at which to terminate.

        Returns:
          An iterator to a list of the selected attributes from the root to the
          current node.
        """
        hierarchy = []
        node: 'ProtoNode | None' = self
        while node is not None and node != root and not stop(node):
            hierarchy.append(attr_accessor(node))
            node = node.parent()
        return reversed(hierarchy)

    @abc.abstractmethod
    def _supports_child(self, child: 'ProtoNode') -> bool:
        """Returns True if child is a valid child type for the current node."""


class ProtoPackage(ProtoNode):
    """A protobuf package."""

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.PACKAGE

    def _supports_child(self, child: ProtoNode) -> bool:
        return True


class ProtoEnum(ProtoNode):
    """Representation of an enum in a .proto file."""

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.ENUM

    def _supports_child(self, child: ProtoNode) -> bool:
        # Enums cannot have nested children.
        return False


class ProtoMessage(ProtoNode):
    """Representation of a message in a .proto file."""

    def __init__(
        self,
        name: str,
        proto_file: ProtoFile | None = None,
        map_entry: bool = False,
    ):
        super().__init__(name, proto_file)
        self._fields: list['ProtoMessageField'] = []
        self._map_entry = map_entry

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.MESSAGE

    def fields(self) -> list['ProtoMessageField']:
        return list(self._fields)

    def add_field(self, field: 'ProtoMessageField') -> None:
        self._fields.append(field)

    def is_map_entry(self) -> bool:
        return self._map_entry

    def _supports_child(self, child: ProtoNode) -> bool:
        return (
            child.type() == self.Type.ENUM or child.type() == self.Type.MESSAGE
        )


class ProtoService(ProtoNode):
    """Representation of a service in a .proto file."""

    def __init__(self, name: str, proto_file: ProtoFile | None = None):
        super().__init__(name, proto_file)
        self._methods: list['ProtoServiceMethod'] = []

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.SERVICE

    def methods(self) -> list['ProtoServiceMethod']:
        return list(self._methods)

    def add_method(self, method: 'ProtoServiceMethod') -> None:
        self._methods.append(method)

    def _supports_child(self, child: ProtoNode) -> bool:
        return False


# This class is not a node and does not appear in the proto tree.
# Fields belong to proto messages and are processed separately.
class ProtoMessageField:
    """Representation of a field within a protobuf message."""

    def __init__(
        self,
        field_name: str,
        field_number: int,
        field_type: int,
        type_name: str = '',
        repeated: bool = False,
    ):
        self._field_name = field_name
        self._number: int = field_number
        self._type: int = field_type
        self._type_name: str = type_name
        self._repeated: bool = repeated

    def name(self) -> str:
        return self._field_name

    def number(self) -> int:
        return self._number

    def type(self) -> int:
        return self._type

    def type_name(self) -> str:
        """The referenced message or enum, e.g. .pkg.Message, if any."""
        return self._type_name

    def is_repeated(self) -> bool:
        return self._repeated

    def __repr__(self) -> str:
        return f'ProtoMessageField({self._field_name!r}, {self._number})'


class ProtoServiceMethod:
    """A method defined in a protobuf service."""

    class Type(enum.Enum):
        UNARY = 'unary'
        SERVER_STREAMING = 'server streaming'
        CLIENT_STREAMING = 'client streaming'
        BIDIRECTIONAL_STREAMING = 'bidirectional streaming'

    def __init__(
        self,
        service: ProtoService,
        name: str,
        method_type: Type,
        request_type: str,
        response_type: str,
    ):
        self._service = service
        self._name = name
        self._type = method_type
        self._request_type = request_type
        self._response_type = response_type

    def service(self) -> ProtoService:
        return self._service

    def name(self) -> str:
        return self._name

    def type(self) -> Type:
        return self._type

    def server_streaming(self) -> bool:
        return self._type in (
            self.Type.SERVER_STREAMING,
            self.Type.BIDIRECTIONAL_STREAMING,
        )

    def client_streaming(self) -> bool:
        return self._type in (
            self.Type.CLIENT_STREAMING,
            self.Type.BIDIRECTIONAL_STREAMING,
        )

    def request_type(self) -> str:
        return self._request_type

    def response_type(self) -> str:
        return self._response_type


class SchemaRegistry:
    """Read-only lookup of every message, enum and service in a batch.

    A registry is built once per generation run and passed explicitly to the
    code that needs it; nothing in it changes after construction.
    """

    def __init__(
        self, proto_files: Iterable[descriptor_pb2.FileDescriptorProto]
    ):
        self._root = ProtoPackage('')
        self._files: dict[str, ProtoFile] = collections.OrderedDict()
        self._packages: dict[str, ProtoNode] = {}
        self._services: dict[str, list[ProtoService]] = {}

        descriptors = list(proto_files)

        # Two passes are made through the files. The first builds the tree of
        # all message/enum nodes, then the second creates the fields in each.
        # Field types are only resolved when they are used, after the tree of
        # the entire batch is in memory.
        for proto_file in descriptors:
            self._build_hierarchy(proto_file)

        for proto_file in descriptors:
            self._populate_fields(proto_file)

    def root(self) -> ProtoNode:
        return self._root

    def files(self) -> list[ProtoFile]:
        return list(self._files.values())

    def file(self, name: str) -> ProtoFile:
        return self._files[name]

    def package_root(self, file_name: str) -> ProtoNode:
        return self._packages[file_name]

    def services(self, file_name: str) -> list[ProtoService]:
        return list(self._services.get(file_name, []))

    def lookup(self, package: str, type_name: str) -> ProtoNode:
        """Resolves a type reference as seen from within a package.

        Fully-qualified names (.pkg.Type) are looked up from the root; other
        names are searched for in the package and then each enclosing scope.

        Raises:
          UnresolvedTypeError: No node exists for the reference.
        """
        if type_name.startswith('.'):
            node = self._root.find(type_name[1:])
        else:
            node = None
            scope = package.split('.') if package else []
            while node is None:
                prefix = '.'.join(scope)
                path = f'{prefix}.{type_name}' if prefix else type_name
                node = self._root.find(path)
                if not scope:
                    break
                scope.pop()

        if node is None or node.type() is ProtoNode.Type.PACKAGE:
            raise UnresolvedTypeError(
                f'unknown type {type_name!r} referenced from package '
                f'{package!r}'
            )

        return node

    def lookup_message(self, package: str, type_name: str) -> ProtoMessage:
        node = self.lookup(package, type_name)
        if node.type() is not ProtoNode.Type.MESSAGE:
            raise UnresolvedTypeError(
                f'{type_name!r} is a {node.type().name.lower()}, '
                'not a message',
                node,
            )
        return cast(ProtoMessage, node)

    def lookup_enum(self, package: str, type_name: str) -> ProtoEnum:
        node = self.lookup(package, type_name)
        if node.type() is not ProtoNode.Type.ENUM:
            raise UnresolvedTypeError(
                f'{type_name!r} is a {node.type().name.lower()}, not an enum',
                node,
            )
        return cast(ProtoEnum, node)

    def _build_hierarchy(self, proto_file) -> None:
        """Adds the packages, messages, enums and services of a file."""
        source = ProtoFile.from_descriptor(proto_file)
        self._files[proto_file.name] = source

        package_root: ProtoNode = self._root
        if proto_file.package:
            for part in proto_file.package.split('.'):
                package = package_root.find(part)
                if package is None:
                    package = ProtoPackage(part)
                    package_root.add_child(package)
                package_root = package

        self._packages[proto_file.name] = package_root

        def build_message_subtree(proto_message, file_for_node):
            node = ProtoMessage(
                proto_message.name,
                file_for_node,
                map_entry=proto_message.options.map_entry,
            )
            for proto_enum in proto_message.enum_type:
                node.add_child(ProtoEnum(proto_enum.name))
            for submessage in proto_message.nested_type:
                node.add_child(build_message_subtree(submessage, None))

            return node

        for proto_enum in proto_file.enum_type:
            package_root.add_child(ProtoEnum(proto_enum.name, source))

        for message in proto_file.message_type:
            package_root.add_child(build_message_subtree(message, source))

        services = []
        for service in proto_file.service:
            node = ProtoService(service.name, source)
            package_root.add_child(node)
            services.append(node)

        self._services[proto_file.name] = services

    def _populate_fields(self, proto_file) -> None:
        """Traverses a proto file, adding message fields and service methods."""
        package_root = self._packages[proto_file.name]

        def populate_message(node, message):
            """Recursively populates nested messages."""
            _add_message_fields(node, message)

            for msg in message.nested_type:
                populate_message(node.find(msg.name), msg)

        for message in proto_file.message_type:
            populate_message(package_root.find(message.name), message)

        for service in proto_file.service:
            _add_service_methods(package_root.find(service.name), service)


def _add_message_fields(message: ProtoNode | None, proto_message) -> None:
    """Adds fields from a protobuf message descriptor to a message node."""
    assert message is not None and message.type() == ProtoNode.Type.MESSAGE
    message = cast(ProtoMessage, message)

    for field in proto_message.field:
        repeated = (
            field.label == descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED
        )
        message.add_field(
            ProtoMessageField(
                field.name,
                field.number,
                field.type,
                field.type_name,
                repeated,
            )
        )


def _add_service_methods(service: ProtoNode | None, proto_service) -> None:
    assert service is not None and service.type() == ProtoNode.Type.SERVICE
    service = cast(ProtoService, service)

    for method in proto_service.method:
        if method.client_streaming and method.server_streaming:
            method_type = ProtoServiceMethod.Type.BIDIRECTIONAL_STREAMING
        elif method.client_streaming:
            method_type = ProtoServiceMethod.Type.CLIENT_STREAMING
        elif method.server_streaming:
            method_type = ProtoServiceMethod.Type.SERVER_STREAMING
        else:
            method_type = ProtoServiceMethod.Type.UNARY

        service.add_method(
            ProtoServiceMethod(
                service,
                method.name,
                method_type,
                method.input_type,
                method.output_type,
            )
        )
