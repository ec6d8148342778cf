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
"""Defines a class for generating indented output files."""


class OutputFile:
    """A buffer to which data is written.

    Example:

    ```
    output = OutputFile('HelloModule.java')
    output.write_line('void hello() {')
    with output.indent():
        output.write_line('log("Hello, world");')
    output.write_line('}')

    print(output.content())
    ```

    Produces:
    ```
    void hello() {
        log("Hello, world");
    }
    ```
    """

    def __init__(self, filename: str, indent_width: int = 4):
        self._filename: str = filename
        self._content: list[str] = []
        self._indentation: int = 0
        self._indent_width: int = indent_width

    def write_line(self, line: str = '') -> None:
        if line:
            self._content.append(' ' * self._indentation)
            self._content.append(line)
        self._content.append('\n')

    def indent(
        self, width: int | None = None
    ) -> 'OutputFile._IndentationContext':
        """Increases the indentation level of the output."""
        return self._IndentationContext(
            self, width if width is not None else self._indent_width
        )

    def push_indent(self, width: int | None = None) -> None:
        self._indentation += width if width is not None else self._indent_width

    def pop_indent(self, width: int | None = None) -> None:
        self._indentation -= width if width is not None else self._indent_width
        assert self._indentation >= 0

    def name(self) -> str:
        return self._filename

    def content(self) -> str:
        return ''.join(self._content)

    class _IndentationContext:
        """Context that increases the output's indentation when it is active."""

        def __init__(self, output: 'OutputFile', width: int):
            self._output = output
            self._width = width

        def __enter__(self):
            self._output.push_indent(self._width)

        def __exit__(self, typ, value, traceback):
            self._output.pop_indent(self._width)
