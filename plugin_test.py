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
"""Tests for the protoc-gen-react plugin entry point."""

import io
import logging
from pathlib import Path
import tempfile
import unittest
from unittest import mock

from google.protobuf.compiler import plugin_pb2

from react_bridge import config, plugin, testing
from react_bridge.codegen import GeneratorOptions

_MISSING_TYPE_PROTO = """
name: "missing.proto"
package: "missing"
message_type { name: "Request" }
service {
  name: "Service"
  method {
    name: "Call"
    input_type: ".missing.Request"
    output_type: ".missing.Response"
  }
}
"""


class ParseParameterOptionsTest(unittest.TestCase):
    """Tests for parsing the --react_opt parameter string."""

    def test_empty(self):
        args = plugin.parse_parameter_options('')

        self.assertIsNone(args.package_name)
        self.assertIsNone(args.target)
        self.assertIsNone(args.strict)
        self.assertIsNone(args.max_depth)
        self.assertIsNone(args.config_file)
        self.assertFalse(args.verbose)

    def test_comma_separated(self):
        args = plugin.parse_parameter_options(
            '--target=python,--package,gen.bridge,--strict,--max-depth=3'
        )

        self.assertEqual(args.target, 'python')
        self.assertEqual(args.package_name, 'gen.bridge')
        self.assertTrue(args.strict)
        self.assertEqual(args.max_depth, 3)

    def test_config_file_and_verbose(self):
        args = plugin.parse_parameter_options(
            '--config-file=conf/react.yaml,--verbose'
        )

        self.assertEqual(args.config_file, Path('conf/react.yaml'))
        self.assertTrue(args.verbose)

    def test_unknown_target(self):
        with mock.patch('sys.stderr', io.StringIO()):
            with self.assertRaises(SystemExit):
                plugin.parse_parameter_options('--target=swift')


class GeneratorOptionsTest(unittest.TestCase):
    """Tests for combining defaults, config settings and parameters."""

    def test_defaults(self):
        options = plugin.generator_options(
            plugin.parse_parameter_options(''), {}
        )
        self.assertEqual(options, GeneratorOptions())

    def test_config_overrides_defaults(self):
        options = plugin.generator_options(
            plugin.parse_parameter_options(''),
            {'target': 'python', 'package': 'cfg', 'strict': True},
        )
        self.assertEqual(
            options,
            GeneratorOptions(target='python', package_name='cfg', strict=True),
        )

    def test_parameters_override_config(self):
        options = plugin.generator_options(
            plugin.parse_parameter_options('--package=param,--max-depth=2'),
            {'package': 'cfg', 'max_depth': 8, 'target': 'python'},
        )
        self.assertEqual(
            options,
            GeneratorOptions(
                target='python', package_name='param', max_depth=2
            ),
        )

    def test_config_target_is_validated(self):
        with self.assertRaises(config.ConfigError):
            plugin.generator_options(
                plugin.parse_parameter_options(''), {'target': 'swift'}
            )

    def test_depth_must_be_positive(self):
        with self.assertRaises(config.ConfigError):
            plugin.generator_options(
                plugin.parse_parameter_options('--max-depth=0'), {}
            )


class ProcessProtoRequestTest(unittest.TestCase):
    """Tests for plugin.process_proto_request."""

    def setUp(self):
        self.response = plugin_pb2.CodeGeneratorResponse()

    def _process(self, *text_protos, **kwargs) -> bool:
        request = testing.code_generator_request(*text_protos, **kwargs)
        with mock.patch.dict('os.environ', clear=True):
            return plugin.process_proto_request(request, self.response)

    def test_writes_generated_files(self):
        self.assertTrue(self._process(testing.KITCHEN_SINK_PROTO))

        (generated,) = self.response.file
        self.assertEqual(generated.name, 'ConvertModule.java')
        self.assertIn('public void echo(ReadableMap in', generated.content)

    def test_parameters_are_applied(self):
        self.assertTrue(
            self._process(
                testing.KITCHEN_SINK_PROTO, parameter='--target=python'
            )
        )

        (generated,) = self.response.file
        self.assertEqual(generated.name, 'ConvertModule.py')
        self.assertIn('class ConvertModule:', generated.content)

    def test_codegen_error_writes_nothing(self):
        with self.assertLogs('react_bridge', logging.ERROR) as logs:
            result = self._process(
                testing.KITCHEN_SINK_PROTO, _MISSING_TYPE_PROTO
            )

        self.assertFalse(result)
        self.assertEqual(len(self.response.file), 0)
        self.assertIn('.missing.Response', logs.output[0])

    def test_strict_mode_error_writes_nothing(self):
        group_proto = """
        name: "group.proto"
        package: "group"
        message_type {
          name: "Holder"
          field { name: "g" number: 1 type: TYPE_GROUP label: LABEL_OPTIONAL }
        }
        service {
          name: "Groups"
          method {
            name: "Get"
            input_type: ".group.Holder"
            output_type: ".group.Holder"
          }
        }
        """

        with self.assertLogs('react_bridge', logging.ERROR) as logs:
            result = self._process(group_proto, parameter='--strict')

        self.assertFalse(result)
        self.assertEqual(len(self.response.file), 0)
        self.assertIn('in field g', logs.output[0])

    def test_config_file(self):
        with tempfile.TemporaryDirectory() as folder:
            path = Path(folder, 'react.yaml')
            path.write_text(
                f'{config.CONFIG_SECTION_TITLE}:\n  target: python\n'
            )

            self.assertTrue(
                self._process(
                    testing.KITCHEN_SINK_PROTO,
                    parameter=f'--config-file={path}',
                )
            )

        (generated,) = self.response.file
        self.assertEqual(generated.name, 'ConvertModule.py')

    def test_config_error_writes_nothing(self):
        with tempfile.TemporaryDirectory() as folder:
            path = Path(folder, 'react.yaml')
            path.write_text(f'{config.CONFIG_SECTION_TITLE}:\n  color: blue\n')

            with self.assertLogs('react_bridge', logging.ERROR):
                result = self._process(
                    testing.KITCHEN_SINK_PROTO,
                    parameter=f'--config-file={path}',
                )

        self.assertFalse(result)
        self.assertEqual(len(self.response.file), 0)

    def test_only_requested_files(self):
        self.assertTrue(
            self._process(
                testing.KITCHEN_SINK_PROTO,
                _MISSING_TYPE_PROTO,
                files_to_generate=['convert.proto'],
            )
        )
        self.assertEqual(
            [f.name for f in self.response.file], ['ConvertModule.java']
        )


if __name__ == '__main__':
    unittest.main()
