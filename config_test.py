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
"""Tests for loading protoc-gen-react settings from YAML files."""

from pathlib import Path
import tempfile
from typing import Any
import unittest

import yaml

from react_bridge import config

_TITLE = config.CONFIG_SECTION_TITLE


class LoadConfigFileTest(unittest.TestCase):
    """Tests for config.load_config_file."""

    def setUp(self):
        self._folder = tempfile.TemporaryDirectory()
        self.path = Path(self._folder.name, 'react.yaml')

    def tearDown(self):
        self._folder.cleanup()

    def load(self, *documents: Any) -> dict[str, Any]:
        self.path.write_text(yaml.safe_dump_all(documents))
        return config.load_config_file(self.path)

    def test_section(self):
        settings = self.load(
            {_TITLE: {'target': 'python', 'package': 'gen', 'max_depth': 4}}
        )
        self.assertEqual(
            settings, {'target': 'python', 'package': 'gen', 'max_depth': 4}
        )

    def test_config_title(self):
        settings = self.load({'config_title': _TITLE, 'strict': True})
        self.assertEqual(settings, {'strict': True})

    def test_later_documents_override(self):
        settings = self.load(
            {_TITLE: {'target': 'python', 'strict': False}},
            {'config_title': _TITLE, 'strict': True},
        )
        self.assertEqual(settings, {'target': 'python', 'strict': True})

    def test_empty_section(self):
        self.assertEqual(self.load({_TITLE: None}), {})

    def test_empty_file(self):
        self.path.write_text('')
        self.assertEqual(config.load_config_file(self.path), {})

    def test_unknown_setting(self):
        with self.assertRaises(config.ConfigError) as context:
            self.load({_TITLE: {'language': 'java'}})
        self.assertIn('language', str(context.exception))

    def test_wrong_type(self):
        with self.assertRaises(config.ConfigError):
            self.load({_TITLE: {'strict': 'yes'}})

        with self.assertRaises(config.ConfigError):
            self.load({_TITLE: {'max_depth': '8'}})

    def test_bool_is_not_a_depth(self):
        with self.assertRaises(config.ConfigError):
            self.load({_TITLE: {'max_depth': True}})

    def test_section_must_be_a_mapping(self):
        with self.assertRaises(config.ConfigError):
            self.load({_TITLE: ['java']})

    def test_missing_title(self):
        with self.assertRaises(config.MissingConfigTitle):
            self.load({'target': 'java'})

    def test_invalid_yaml(self):
        self.path.write_text('protoc_gen_react: [unclosed\n')
        with self.assertRaises(config.ConfigError):
            config.load_config_file(self.path)

    def test_missing_file(self):
        with self.assertRaises(config.ConfigError):
            config.load_config_file(Path(self._folder.name, 'missing.yaml'))


class LoadConfigTest(unittest.TestCase):
    """Tests for choosing the config file with config.load_config."""

    def setUp(self):
        self._folder = tempfile.TemporaryDirectory()
        self.folder = Path(self._folder.name)

    def tearDown(self):
        self._folder.cleanup()

    def write(self, name: str, settings: dict[str, Any]) -> Path:
        path = self.folder / name
        path.write_text(yaml.safe_dump({_TITLE: settings}))
        return path

    def test_nothing_configured(self):
        self.assertEqual(config.load_config(environ={}), {})

    def test_empty_environment_variable(self):
        self.assertEqual(
            config.load_config(environ={config.ENVIRONMENT_VAR: ''}), {}
        )

    def test_environment_variable(self):
        path = self.write('env.yaml', {'target': 'python'})

        settings = config.load_config(
            environ={config.ENVIRONMENT_VAR: str(path)}
        )

        self.assertEqual(settings, {'target': 'python'})

    def test_config_file_takes_precedence(self):
        env_path = self.write('env.yaml', {'target': 'python'})
        file_path = self.write('file.yaml', {'target': 'java'})

        settings = config.load_config(
            file_path, environ={config.ENVIRONMENT_VAR: str(env_path)}
        )

        self.assertEqual(settings, {'target': 'java'})


if __name__ == '__main__':
    unittest.main()
