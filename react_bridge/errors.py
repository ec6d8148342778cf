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
"""Errors raised while generating bridge code."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from react_bridge.proto_tree import ProtoMessageField, ProtoNode


class CodegenError(Exception):
    """A failure that aborts generation of the whole batch."""

    def __init__(
        self,
        error_message: str,
        node: ProtoNode | None = None,
        field: ProtoMessageField | None = None,
    ):
        super().__init__(f'react codegen error: {error_message}')
        self.error_message = error_message
        self.node = node
        self.field = field

    def formatted_message(self) -> str:
        lines = [f'react codegen error: {self.error_message}']

        if self.node is not None:
            lines.append(f'    at {self.node.proto_path()}')

        if self.field is not None:
            lines.append(f'    in field {self.field.name()}')

        return '\n'.join(lines)


class UnresolvedTypeError(CodegenError):
    """A field or method refers to a type that is not in the batch."""


class InvalidMapEntryError(CodegenError):
    """A map entry message does not have a single value field."""


class RecursiveMessageError(CodegenError):
    """A message refers back to itself along the current conversion path."""


class NestingTooDeepError(CodegenError):
    """Nested messages exceed the configured conversion depth."""


class UnsupportedFieldError(CodegenError):
    """A field has a type with no record representation (strict mode only)."""


class MethodNameCollisionError(CodegenError):
    """A bridged method has the name of a generated module accessor."""
