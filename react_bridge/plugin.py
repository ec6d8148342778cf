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
"""protoc-gen-react compiler plugin.

This file implements a protobuf compiler plugin which generates React Native
bridge modules for the gRPC services in .proto files.
"""

import logging
import sys
from argparse import ArgumentParser, Namespace
from pathlib import Path
from shlex import shlex
from typing import Any

from google.protobuf.compiler import plugin_pb2

from react_bridge import config, generate, log
from react_bridge.codegen import DEFAULT_MAX_DEPTH, GeneratorOptions
from react_bridge.errors import CodegenError

_LOG = logging.getLogger(__name__)


def parse_parameter_options(parameter: str) -> Namespace:
    """Parses parameters passed through from protoc.

    These parameters come in via passing `--react_opt` parameters to protoc,
    as protoc-gen-react is the name of the plugin.
    """
    parser = ArgumentParser(prog='protoc-gen-react')
    parser.add_argument(
        '--package',
        dest='package_name',
        metavar='PACKAGE',
        help='Package of the generated code; defaults to the java_package '
        'option or the proto package',
    )
    parser.add_argument(
        '--target',
        choices=sorted(generate.TARGETS),
        help='Language of the generated modules (default: java)',
    )
    parser.add_argument(
        '--strict',
        action='store_true',
        default=None,
        help='Fail on fields that have no record representation instead of '
        'skipping them',
    )
    parser.add_argument(
        '--max-depth',
        dest='max_depth',
        metavar='N',
        type=int,
        help=f'Maximum message nesting depth (default: {DEFAULT_MAX_DEPTH})',
    )
    parser.add_argument(
        '--config-file',
        dest='config_file',
        metavar='FILE',
        type=Path,
        help='YAML file with a protoc_gen_react section; defaults to '
        f'${config.ENVIRONMENT_VAR}',
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Log each generated module and skipped method',
    )

    # protoc passes the custom arguments in shell quoted form, separated by
    # commas. Use shlex to split them, correctly handling quoted sections, with
    # equivalent options to IFS=","
    lex = shlex(parameter)
    lex.whitespace_split = True
    lex.whitespace = ','
    lex.commenters = ''
    args = list(lex)

    return parser.parse_args(args)


def generator_options(
    args: Namespace, settings: dict[str, Any]
) -> GeneratorOptions:
    """Combines defaults, config file settings and plugin parameters.

    Raises:
      ConfigError: The resulting options are invalid.
    """
    options = GeneratorOptions()

    overrides = {
        'package_name': settings.get('package'),
        'target': settings.get('target'),
        'strict': settings.get('strict'),
        'max_depth': settings.get('max_depth'),
    }
    for name in overrides:
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value

    for name, value in overrides.items():
        if value is not None:
            setattr(options, name, value)

    if options.target not in generate.TARGETS:
        raise config.ConfigError(
            f'Unknown target "{options.target}"; expected one of '
            + ', '.join(sorted(generate.TARGETS))
        )

    if options.max_depth < 1:
        raise config.ConfigError(
            f'max_depth must be at least 1, not {options.max_depth}'
        )

    return options


def process_proto_request(
    req: plugin_pb2.CodeGeneratorRequest, res: plugin_pb2.CodeGeneratorResponse
) -> bool:
    """Handles a protoc CodeGeneratorRequest message.

    Generates code for the files in the request and writes the output to the
    specified CodeGeneratorResponse message. If any file fails, nothing is
    written to the response.

    Args:
      req: A CodeGeneratorRequest for a proto compilation.
      res: A CodeGeneratorResponse to populate with the plugin's output.
    """
    args = parse_parameter_options(req.parameter)
    if args.verbose:
        log.set_level(logging.DEBUG)

    try:
        options = generator_options(args, config.load_config(args.config_file))
    except config.ConfigError as err:
        _LOG.error('%s', err)
        return False

    try:
        output_files = generate.process_request(
            req.proto_file, req.file_to_generate, options
        )
    except CodegenError as err:
        _LOG.error('%s', err.formatted_message())
        return False

    for output_file in output_files:
        fd = res.file.add()
        fd.name = output_file.name()
        fd.content = output_file.content()

    return True


def main() -> int:
    """Protobuf compiler plugin entrypoint.

    Reads a CodeGeneratorRequest proto from stdin and writes a
    CodeGeneratorResponse to stdout.
    """
    log.install()

    data = sys.stdin.buffer.read()
    request = plugin_pb2.CodeGeneratorRequest.FromString(data)
    response = plugin_pb2.CodeGeneratorResponse()

    # Declare that this plugin supports optional fields in proto3.
    response.supported_features |= (  # type: ignore[attr-defined]
        response.FEATURE_PROTO3_OPTIONAL
    )  # type: ignore[attr-defined]

    if not process_proto_request(request, response):
        _LOG.error('protoc-gen-react failed to generate bridge modules')
        return 1

    sys.stdout.buffer.write(response.SerializeToString())
    return 0


if __name__ == '__main__':
    sys.exit(main())
