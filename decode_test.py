#!/usr/bin/env python3
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
"""Tests for the record -> builder code emitted for each target."""

import logging
import unittest

from react_bridge import generate, testing
from react_bridge.codegen import GeneratorOptions
from react_bridge.errors import NestingTooDeepError, RecursiveMessageError
from react_bridge.errors import UnsupportedFieldError

_RECURSIVE_PROTO = """
name: "tree.proto"
package: "tree"
message_type {
  name: "Node"
  field { name: "value" number: 1 type: TYPE_INT32 label: LABEL_OPTIONAL }
  field {
    name: "children"
    number: 2
    type: TYPE_MESSAGE
    label: LABEL_REPEATED
    type_name: ".tree.Node"
  }
}
message_type {
  name: "A"
  field {
    name: "b"
    number: 1
    type: TYPE_MESSAGE
    label: LABEL_OPTIONAL
    type_name: ".tree.B"
  }
}
message_type {
  name: "B"
  field {
    name: "a"
    number: 1
    type: TYPE_MESSAGE
    label: LABEL_OPTIONAL
    type_name: ".tree.A"
  }
}
"""

_NESTED_PROTO = """
name: "nested.proto"
package: "nested"
message_type {
  name: "Level1"
  field {
    name: "next"
    number: 1
    type: TYPE_MESSAGE
    label: LABEL_OPTIONAL
    type_name: ".nested.Level2"
  }
}
message_type {
  name: "Level2"
  field {
    name: "next"
    number: 1
    type: TYPE_MESSAGE
    label: LABEL_OPTIONAL
    type_name: ".nested.Level3"
  }
}
message_type {
  name: "Level3"
  field { name: "value" number: 1 type: TYPE_STRING label: LABEL_OPTIONAL }
}
"""

_GROUP_PROTO = """
name: "group.proto"
package: "group"
message_type {
  name: "Holder"
  field {
    name: "legacy"
    number: 1
    type: TYPE_GROUP
    label: LABEL_OPTIONAL
    type_name: ".group.Holder.Legacy"
  }
  nested_type { name: "Legacy" }
}
message_type {
  name: "Mixed"
  field { name: "name" number: 1 type: TYPE_STRING label: LABEL_OPTIONAL }
  field {
    name: "legacy"
    number: 2
    type: TYPE_GROUP
    label: LABEL_OPTIONAL
    type_name: ".group.Holder.Legacy"
  }
}
"""


def _echo(request):
    return testing.FakeFuture(request)


class PythonDecodeTest(unittest.TestCase):
    """Runs the generated Python decode code against real messages."""

    def setUp(self):
        self.bridge = testing.PythonBridge(
            testing.KITCHEN_SINK_PROTO, Echo=_echo
        )
        self.kitchen = self.bridge.classes['convert.Kitchen']
        self.leaf = self.bridge.classes['convert.Leaf']

    def _decode(self, record):
        promise = testing.FakePromise()
        self.bridge.service('Convert').echo(record, promise)
        (request,) = self.bridge.stubs['Convert'].Echo.requests
        return request

    def test_empty_record_leaves_defaults(self):
        request = self._decode({})
        self.assertEqual(request, self.kitchen())
        self.assertFalse(request.HasField('leaf'))

    def test_scalars(self):
        request = self._decode(
            {
                'flag': True,
                'text': 'hello',
                'small': -7,
                'big': 1 << 40,
                'unsigned': 12,
                'ratio': 0.5,
                'precise': 2.25,
                'color': 2,
                'myFieldName': -3,
            }
        )
        self.assertTrue(request.flag)
        self.assertEqual(request.text, 'hello')
        self.assertEqual(request.small, -7)
        self.assertEqual(request.big, 1 << 40)
        self.assertEqual(request.unsigned, 12)
        self.assertEqual(request.ratio, 0.5)
        self.assertEqual(request.precise, 2.25)
        self.assertEqual(request.color, 2)
        self.assertEqual(request.my_field_name, -3)

    def test_only_present_keys_are_set(self):
        request = self._decode({'text': 'only'})
        self.assertEqual(request, self.kitchen(text='only'))

    def test_bytes_are_utf8_encoded(self):
        request = self._decode({'data': 'hé', 'chunks': ['a', 'b']})
        self.assertEqual(request.data, 'hé'.encode('utf-8'))
        self.assertEqual(list(request.chunks), [b'a', b'b'])

    def test_nested_message(self):
        request = self._decode({'leaf': {'name': 'x', 'count': 3}})
        self.assertEqual(request.leaf, self.leaf(name='x', count=3))

    def test_empty_nested_record_sets_message(self):
        request = self._decode({'leaf': {}})
        self.assertTrue(request.HasField('leaf'))
        self.assertEqual(request.leaf, self.leaf())

    def test_repeated(self):
        request = self._decode(
            {
                'tags': ['a', 'b'],
                'numbers': [1, 2, 3],
                'leaves': [{'name': 'first'}, {}, {'count': 2}],
            }
        )
        self.assertEqual(list(request.tags), ['a', 'b'])
        self.assertEqual(list(request.numbers), [1, 2, 3])
        self.assertEqual(
            list(request.leaves),
            [self.leaf(name='first'), self.leaf(), self.leaf(count=2)],
        )

    def test_empty_arrays_and_maps(self):
        request = self._decode(
            {'tags': [], 'leaves': [], 'counts': {}, 'leafByFlag': {}}
        )
        self.assertEqual(request, self.kitchen())

    def test_repeated_enums_are_not_converted(self):
        request = self._decode({'colors': [1, 2]})
        self.assertEqual(list(request.colors), [])

    def test_maps(self):
        request = self._decode(
            {
                'counts': {'a': 1, 'b': 2},
                'namesById': {'7': 'seven', '-1': 'minus one'},
                'colorByName': {'sky': 2},
            }
        )
        self.assertEqual(dict(request.counts), {'a': 1, 'b': 2})
        self.assertEqual(
            dict(request.names_by_id), {7: 'seven', -1: 'minus one'}
        )
        self.assertEqual(dict(request.color_by_name), {'sky': 2})

    def test_map_of_messages_with_bool_keys(self):
        request = self._decode(
            {'leafByFlag': {'true': {'count': 1}, 'false': {}}}
        )
        self.assertEqual(request.leaf_by_flag[True], self.leaf(count=1))
        self.assertEqual(request.leaf_by_flag[False], self.leaf())
        self.assertEqual(len(request.leaf_by_flag), 2)

    def test_bool_keys_ignore_case(self):
        request = self._decode(
            {'leafByFlag': {'True': {'count': 1}, 'FALSE': {'count': 2}}}
        )
        self.assertEqual(request.leaf_by_flag[True], self.leaf(count=1))
        self.assertEqual(request.leaf_by_flag[False], self.leaf(count=2))


class DecodeTextTest(unittest.TestCase):
    """Tests for the decode text of individual messages."""

    def test_java_nested_message(self):
        registry = testing.registry(testing.KITCHEN_SINK_PROTO)
        kitchen = testing.message(registry, 'convert.Kitchen')

        code = generate.emit_decode(kitchen, registry)

        self.assertIn('if (in.hasKey("leaf")) {', code)
        self.assertIn('ReadableMap in_leaf = in.getMap("leaf");', code)
        # The Convert service takes the outer class's default name.
        self.assertIn(
            'ConvertOuterClass.Leaf.Builder builder_leaf = '
            'ConvertOuterClass.Leaf.newBuilder();',
            code,
        )
        self.assertIn('builder_leaf.setName(in_leaf.getString("name"));', code)
        self.assertIn('builder.setLeaf(builder_leaf.build());', code)

    def test_java_conversions(self):
        registry = testing.registry(testing.KITCHEN_SINK_PROTO)
        kitchen = testing.message(registry, 'convert.Kitchen')

        code = generate.emit_decode(kitchen, registry)

        self.assertIn('builder.setBig((long) in.getInt("big"));', code)
        self.assertIn('builder.setRatio((float) in.getDouble("ratio"));', code)
        self.assertIn('builder.setColorValue(in.getInt("color"));', code)
        self.assertIn(
            'builder.setData(ByteString.copyFromUtf8(in.getString("data")));',
            code,
        )
        self.assertIn(
            'builder.setMyFieldName(in.getInt("myFieldName"));', code
        )
        self.assertIn('List<Long> list_in_numbers = new ArrayList<>();', code)
        self.assertIn('builder.addAllNumbers(list_in_numbers);', code)
        self.assertIn(
            'builder.putNamesById(Long.parseLong(key_in_namesById), '
            'map_in_namesById.getString(key_in_namesById));',
            code,
        )
        self.assertIn(
            'builder.putColorByNameValue(key_in_colorByName, '
            'map_in_colorByName.getInt(key_in_colorByName));',
            code,
        )
        self.assertIn('// Repeated enum values are not converted.', code)
        self.assertNotIn('addAllColors', code)

    def test_empty_message_emits_nothing(self):
        registry = testing.registry(_GROUP_PROTO)
        holder = testing.message(registry, 'group.Holder.Legacy')

        self.assertEqual(generate.emit_decode(holder, registry), '')

    def test_unsupported_field_emits_nothing(self):
        registry = testing.registry(_GROUP_PROTO)
        holder = testing.message(registry, 'group.Holder')

        with self.assertLogs('react_bridge', logging.WARNING) as logs:
            code = generate.emit_decode(holder, registry)

        self.assertEqual(code, '')
        self.assertIn('group.Holder.legacy', logs.output[0])

    def test_unsupported_field_is_skipped_among_others(self):
        registry = testing.registry(_GROUP_PROTO)
        mixed = testing.message(registry, 'group.Mixed')

        with self.assertLogs('react_bridge', logging.WARNING):
            code = generate.emit_decode(
                mixed, registry, GeneratorOptions(target='python')
            )

        self.assertEqual(
            code,
            "if 'name' in record:\n"
            "    builder.name = str(record['name'])\n",
        )

    def test_unsupported_field_in_strict_mode(self):
        registry = testing.registry(_GROUP_PROTO)
        holder = testing.message(registry, 'group.Holder')

        with self.assertRaises(UnsupportedFieldError) as context:
            generate.emit_decode(
                holder, registry, GeneratorOptions(strict=True)
            )

        self.assertIn('in field legacy', context.exception.formatted_message())

    def test_recursive_message(self):
        registry = testing.registry(_RECURSIVE_PROTO)

        for name in ('tree.Node', 'tree.A'):
            with self.subTest(message=name):
                with self.assertRaises(RecursiveMessageError):
                    generate.emit_decode(
                        testing.message(registry, name), registry
                    )

    def test_nesting_limit(self):
        registry = testing.registry(_NESTED_PROTO)
        level1 = testing.message(registry, 'nested.Level1')

        self.assertIn(
            'builder_next_next.setValue',
            generate.emit_decode(
                level1, registry, GeneratorOptions(max_depth=3)
            ),
        )

        with self.assertRaises(NestingTooDeepError):
            generate.emit_decode(
                level1, registry, GeneratorOptions(max_depth=2)
            )


if __name__ == '__main__':
    unittest.main()
