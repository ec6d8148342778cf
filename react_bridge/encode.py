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
"""Emits code that writes a typed message into a dynamic record.

This mirrors the decode direction. Repeated fields are written as arrays, so
any record the decoder accepts is produced again by the encoder, except for
repeated enums, which the decoder does not convert.
"""

from react_bridge import fields
from react_bridge.codegen import FieldSite, MessageWalker
from react_bridge.fields import Shape
from react_bridge.proto_tree import ProtoMessage


class EncodeEmitter(MessageWalker):
    """Emits message -> record conversions through a CodeGenerator."""

    def emit(self, message: ProtoMessage, record: str, value: str) -> None:
        with self._entering(message):
            self._emit_fields(message, record, value)

    def _emit_fields(
        self, message: ProtoMessage, record: str, value: str
    ) -> None:
        for site in self._sites(message, record, value):
            if fields.is_map(site.field, message, self._registry):
                self._map(message, site)
            elif site.field.is_repeated():
                self._repeated(message, site)
            elif site.shape is Shape.MESSAGE:
                self._message(message, site)
            else:
                self._gen.encode_singular(site)

    def _message(self, scope: ProtoMessage, site: FieldSite) -> None:
        nested = fields.field_message(site.field, scope, self._registry)

        self._gen.encode_message_begin(site, nested)
        with self._entering(nested, site.field):
            self._emit_fields(
                nested, site.nested_record(), site.nested_value()
            )
        self._gen.encode_message_end(site, nested)

    def _repeated(self, scope: ProtoMessage, site: FieldSite) -> None:
        if site.shape is not Shape.MESSAGE:
            self._gen.encode_repeated_begin(site, None)
            self._gen.encode_repeated_element(site)
            self._gen.encode_repeated_end(site)
            return

        element = fields.field_message(site.field, scope, self._registry)

        self._gen.encode_repeated_begin(site, element)
        self._gen.encode_repeated_message_begin(site, element)
        with self._entering(element, site.field):
            self._emit_fields(
                element, site.nested_record('item'), site.local('item')
            )
        self._gen.encode_repeated_message_end(site, element)
        self._gen.encode_repeated_end(site)

    def _map(self, scope: ProtoMessage, site: FieldSite) -> None:
        key_field, value_field, entry = fields.map_entry_fields(
            site.field, scope, self._registry
        )

        value_shape = fields.classify(value_field)
        if value_shape is Shape.UNSUPPORTED:
            self._unsupported(entry, value_field)
            return

        if value_shape is not Shape.MESSAGE:
            self._gen.encode_map_begin(site, key_field, value_field, None)
            self._gen.encode_map_entry(site, key_field, value_field)
            self._gen.encode_map_end(site)
            return

        value = fields.field_message(value_field, entry, self._registry)

        self._gen.encode_map_begin(site, key_field, value_field, value)
        self._gen.encode_map_message_begin(site, key_field, value)
        with self._entering(value, site.field):
            self._emit_fields(
                value, site.nested_record('value'), site.local('value')
            )
        self._gen.encode_map_message_end(site, key_field, value)
        self._gen.encode_map_end(site)
