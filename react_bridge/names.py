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
"""Naming rules shared by every piece of generated code.

The decode and encode directions must agree on the record key of a field, so
all identifiers in generated code are derived from the functions in this
module and nowhere else.
"""

import os

_SEPARATORS = frozenset('_-')

MODULE_SUFFIX = 'Module'


def _words(identifier: str) -> list[str]:
    """Splits an identifier at separators and uppercase letters."""
    words: list[str] = []
    word = ''

    for char in identifier:
        if char in _SEPARATORS:
            if word:
                words.append(word)
            word = ''
        elif char.isupper() and word:
            words.append(word)
            word = char
        else:
            word += char

    if word:
        words.append(word)

    return words


def to_type_name(identifier: str) -> str:
    """Uppercases the first character of an identifier."""
    return identifier[:1].upper() + identifier[1:]


def to_record_key(identifier: str) -> str:
    """Converts a schema identifier to the lowerCamelCase record key.

      my_field_name -> myFieldName
      myFieldName   -> myFieldName
      SayHello      -> sayHello
    """
    words = _words(identifier)
    if not words:
        return ''

    return words[0].lower() + ''.join(to_type_name(w) for w in words[1:])


def to_accessor_suffix(identifier: str) -> str:
    """Name used after get/set/addAll/put in builder accessors."""
    return to_type_name(to_record_key(identifier))


def output_filename(proto_file_name: str, extension: str) -> str:
    """Returns the generated file name for a .proto file.

    The directory is kept and the base name is title-cased, e.g.
    foo/echo.proto -> foo/EchoModule.java.
    """
    directory, base = os.path.split(os.path.splitext(proto_file_name)[0])
    name = f'{to_type_name(base)}{MODULE_SUFFIX}{extension}'
    return f'{directory}/{name}' if directory else name
