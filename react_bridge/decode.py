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
"""Emits code that reads a dynamic record into a message builder.

Every assignment is guarded by a presence check on the record key, so a key
missing from the record leaves the builder field at its default.
"""

from react_bridge import fields
from react_bridge.codegen import FieldSite, MessageWalker
from react_bridge.fields import Shape
from react_bridge.proto_tree import ProtoMessage


class DecodeEmitter(MessageWalker):
    """Emits record -> builder conversions through a CodeGenerator."""

    def emit(self, message: ProtoMessage, record: str, builder: str) -> None:
        with self._entering(message):
            self._emit_fields(message, record, builder)

    def _emit_fields(
        self, message: ProtoMessage, record: str, builder: str
    ) -> None:
        for site in self._sites(message, record, builder):
            if fields.is_map(site.field, message, self._registry):
                self._map(message, site)
            elif site.field.is_repeated():
                self._repeated(message, site)
            elif site.shape is Shape.MESSAGE:
                self._message(message, site)
            else:
                self._gen.decode_singular(site)

    def _message(self, scope: ProtoMessage, site: FieldSite) -> None:
        nested = fields.field_message(site.field, scope, self._registry)

        self._gen.decode_message_begin(site, nested)
        with self._entering(nested, site.field):
            self._emit_fields(
                nested, site.nested_record(), site.nested_value()
            )
        self._gen.decode_message_end(site, nested)

    def _repeated(self, scope: ProtoMessage, site: FieldSite) -> None:
        if site.shape is Shape.ENUM:
            self._gen.decode_repeated_enum(site)
            return

        if site.shape is not Shape.MESSAGE:
            self._gen.decode_repeated_begin(site, None)
            self._gen.decode_repeated_element(site)
            self._gen.decode_repeated_end(site)
            return

        element = fields.field_message(site.field, scope, self._registry)

        self._gen.decode_repeated_begin(site, element)
        self._gen.decode_repeated_message_begin(site, element)
        with self._entering(element, site.field):
            self._emit_fields(
                element,
                site.nested_record('item'),
                site.nested_value('item'),
            )
        self._gen.decode_repeated_message_end(site, element)
        self._gen.decode_repeated_end(site)

    def _map(self, scope: ProtoMessage, site: FieldSite) -> None:
        key_field, value_field, entry = fields.map_entry_fields(
            site.field, scope, self._registry
        )

        value_shape = fields.classify(value_field)
        if value_shape is Shape.UNSUPPORTED:
            self._unsupported(entry, value_field)
            return

        self._gen.decode_map_begin(site, key_field)

        if value_shape is not Shape.MESSAGE:
            self._gen.decode_map_entry(site, key_field, value_field)
            self._gen.decode_map_end(site)
            return

        value = fields.field_message(value_field, entry, self._registry)

        self._gen.decode_map_message_begin(site, key_field, value)
        with self._entering(value, site.field):
            self._emit_fields(
                value,
                site.nested_record('value'),
                site.nested_value('value'),
            )
        self._gen.decode_map_message_end(site, key_field, value)
        self._gen.decode_map_end(site)
