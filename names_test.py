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
"""Tests for the naming rules of generated code."""

import unittest

from react_bridge import names


class ToRecordKeyTest(unittest.TestCase):
    """Tests for names.to_record_key."""

    def test_snake_case(self):
        self.assertEqual(names.to_record_key('my_field_name'), 'myFieldName')

    def test_single_word(self):
        self.assertEqual(names.to_record_key('name'), 'name')

    def test_empty(self):
        self.assertEqual(names.to_record_key(''), '')

    def test_upper_camel_case(self):
        self.assertEqual(names.to_record_key('SayHello'), 'sayHello')

    def test_idempotent_on_lower_camel_case(self):
        for identifier in ('myFieldName', 'a', 'sayHello', 'x2Y'):
            with self.subTest(identifier=identifier):
                key = names.to_record_key(identifier)
                self.assertEqual(names.to_record_key(key), key)
                self.assertEqual(key, identifier)

    def test_hyphens_are_separators(self):
        self.assertEqual(names.to_record_key('my-field'), 'myField')

    def test_repeated_and_leading_separators_are_dropped(self):
        self.assertEqual(names.to_record_key('__a__b_'), 'aB')
        self.assertEqual(names.to_record_key('_'), '')

    def test_digits_stay_in_their_word(self):
        self.assertEqual(names.to_record_key('field2_value'), 'field2Value')

    def test_first_word_is_lowercased(self):
        self.assertEqual(names.to_record_key('URL'), 'uRL')


class TypeNameTest(unittest.TestCase):
    """Tests for names.to_type_name and names.to_accessor_suffix."""

    def test_to_type_name(self):
        self.assertEqual(names.to_type_name('echo'), 'Echo')
        self.assertEqual(names.to_type_name('echoService'), 'EchoService')
        self.assertEqual(names.to_type_name(''), '')

    def test_to_accessor_suffix(self):
        self.assertEqual(
            names.to_accessor_suffix('my_field_name'), 'MyFieldName'
        )
        self.assertEqual(names.to_accessor_suffix('id'), 'Id')


class OutputFilenameTest(unittest.TestCase):
    """Tests for names.output_filename."""

    def test_base_name(self):
        self.assertEqual(
            names.output_filename('echo.proto', '.java'), 'EchoModule.java'
        )

    def test_keeps_directory(self):
        self.assertEqual(
            names.output_filename('foo/bar/echo.proto', '.py'),
            'foo/bar/EchoModule.py',
        )


if __name__ == '__main__':
    unittest.main()
