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
"""YAML configuration file loading for protoc-gen-react.

A config file holds one or more YAML documents. Settings are read either from
a ``protoc_gen_react`` section:

::

   protoc_gen_react:
     target: java
     package: com.example.bridge

or from a document that declares its title:

::

   ---
   config_title: protoc_gen_react
   strict: true
   max_depth: 16

Later documents override earlier ones.
"""

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

_LOG = logging.getLogger(__name__)

CONFIG_SECTION_TITLE = 'protoc_gen_react'
ENVIRONMENT_VAR = 'REACT_BRIDGE_CONFIG_FILE'

# Accepted settings and their types.
_SETTINGS: dict[str, type] = {
    'package': str,
    'target': str,
    'strict': bool,
    'max_depth': int,
}


class ConfigError(Exception):
    """A config file could not be loaded or holds invalid settings."""


class MissingConfigTitle(ConfigError):
    """A YAML document has neither the config section nor config_title."""


def _load_documents(file_path: Path) -> list[Any]:
    try:
        return list(yaml.safe_load_all(file_path.read_text()))
    except yaml.YAMLError as err:
        raise ConfigError(f'Invalid YAML in {file_path}: {err}') from err


def _update_config(
    config: dict[str, Any], section: Any, file_path: Path
) -> None:
    if section is None:
        return

    if not isinstance(section, dict):
        raise ConfigError(
            f'The "{CONFIG_SECTION_TITLE}" settings in {file_path} must be a '
            'mapping'
        )

    for key, value in section.items():
        if key not in _SETTINGS:
            raise ConfigError(
                f'Unknown setting "{key}" in {file_path}; expected one of '
                + ', '.join(_SETTINGS)
            )

        expected = _SETTINGS[key]
        # bool is a subclass of int, but is not a valid depth.
        if not isinstance(value, expected) or (
            expected is int and isinstance(value, bool)
        ):
            raise ConfigError(
                f'Setting "{key}" in {file_path} must be of type '
                f'{expected.__name__}, not {type(value).__name__}'
            )

        config[key] = value


def load_config_file(file_path: Path) -> dict[str, Any]:
    """Loads the protoc-gen-react settings from a YAML file.

    Raises:
      ConfigError: The file is missing, malformed or has invalid settings.
    """
    if not file_path.is_file():
        raise ConfigError(f'Cannot load config file: {file_path}')

    config: dict[str, Any] = {}

    for document in _load_documents(file_path):
        if document is None:
            continue

        if not isinstance(document, dict):
            raise ConfigError(f'Expected a mapping in {file_path}')

        if CONFIG_SECTION_TITLE in document:
            _update_config(config, document[CONFIG_SECTION_TITLE], file_path)
        elif document.get('config_title') == CONFIG_SECTION_TITLE:
            section = dict(document)
            del section['config_title']
            _update_config(config, section, file_path)
        else:
            raise MissingConfigTitle(
                f'The config file "{file_path}" is missing the expected '
                f'"config_title: {CONFIG_SECTION_TITLE}" setting.'
            )

    _LOG.debug('Loaded settings %s from %s', sorted(config), file_path)
    return config


def load_config(
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Loads settings from config_file, or from the file named in the env.

    Returns an empty dict if neither is set.
    """
    if config_file is None:
        environment = os.environ if environ is None else environ
        environment_config = environment.get(ENVIRONMENT_VAR)
        if not environment_config:
            return {}
        config_file = Path(environment_config)

    return load_config_file(Path(os.path.expandvars(config_file.expanduser())))
