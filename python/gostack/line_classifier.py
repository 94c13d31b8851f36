# Copyright (c) Yugabyte, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not use this file except
# in compliance with the License.  You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software distributed under the License
# is distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express
# or implied.  See the License for the specific language governing permissions and limitations
# under the License.

r"""
Recognizers for the individual line shapes of a goroutine dump, e.g.:

goroutine 1 [chan receive, 5 minutes, locked to thread]:
main.worker(0xc000010000, 0x2, ...)
        /home/user/go/src/example.com/app/main.go:42 +0x1d
...additional frames elided...
created by main.main
        /home/user/go/src/example.com/app/main.go:17 +0x5a

None of the functions here have side effects. Each returns None if the line has a different shape.
Lines are passed in with their terminator, which may be "\n", "\r\n" or nothing at all for the last
line of the input.
"""

import re

from typing import Optional, Tuple

from gostack.errors import MalformedFieldError
from gostack.stack_types import Arg, Call, Func, Signature


LINE_END_RE_STR = r'\r?\n?\Z'
INDENT_RE_STR = r'(?:\t| +)'

LOCKED_TO_THREAD = 'locked to thread'
ARGS_ELIDED = '...'
MAX_UINT64 = (1 << 64) - 1

ROUTINE_HEADER_RE = re.compile(r'^[\t ]*goroutine ([0-9]+) \[([^\]]+)\]:' + LINE_END_RE_STR)
MINUTES_RE = re.compile(r'^([0-9]+) minutes$')
UNAVAILABLE_RE = re.compile(
    '^' + INDENT_RE_STR + r'goroutine running on other thread; stack unavailable')

# - The compiler, not the runtime, emits frames located in "<autogenerated>".
# - Frames of cgo code may be located in "??".
# - " +0x123" is the pc offset within the function. It is missing for functions generated at run
#   time, e.g. the closures of "go func() { ... }()" statements.
# - " fp=0x123 sp=0x123" is appended to C calls when the runtime is already throwing.
# Both suffixes are discarded.
FILE_RE = re.compile(
    '^' + INDENT_RE_STR +
    r'(\?\?|<autogenerated>|.+\.(?:c|go|s)):([0-9]+)'
    r'(?: \+0x[0-9a-f]+)?'
    r'(?: fp=0x[0-9a-f]+ sp=0x[0-9a-f]+)?' + LINE_END_RE_STR)

CREATED_RE = re.compile(r'^[\t ]*created by (.+?)' + LINE_END_RE_STR)
FUNC_RE = re.compile(r'^(.+)\((.*)\)' + LINE_END_RE_STR)
ELIDED_RE = re.compile(r'^[\t ]*\.\.\.additional frames elided\.\.\.' + LINE_END_RE_STR)


class FuncLine:
    """
    A parsed call line. If one of the arguments could not be parsed, the call still holds the
    arguments before it and error is set.
    """
    call: Call
    error: Optional[MalformedFieldError]

    def __init__(self, call: Call, error: Optional[MalformedFieldError] = None) -> None:
        self.call = call
        self.error = error


def is_blank_line(line: str) -> bool:
    return line == '\n' or line == '\r\n'


def parse_routine_header(line: str) -> Optional[Tuple[int, Signature]]:
    """
    Parses "goroutine <id> [<state>, <N> minutes, locked to thread]:". The items after the state
    are optional and may come in any order. Unknown items are ignored.
    """
    match = ROUTINE_HEADER_RE.match(line)
    if not match:
        return None
    goroutine_id = int(match.group(1))
    items = match.group(2).split(', ')
    sleep_minutes = 0
    locked = False
    for item in items[1:]:
        if item == LOCKED_TO_THREAD:
            locked = True
            continue
        minutes_match = MINUTES_RE.match(item)
        if minutes_match:
            sleep_minutes = int(minutes_match.group(1))
    return goroutine_id, Signature(items[0], sleep_minutes=sleep_minutes, locked=locked)


def is_unavailable_line(line: str) -> bool:
    return UNAVAILABLE_RE.match(line) is not None


def parse_file_line(line: str) -> Optional[Tuple[str, int]]:
    """
    :return: (source path, line number) for a source location line.
    """
    match = FILE_RE.match(line)
    if not match:
        return None
    return match.group(1), int(match.group(2))


def parse_created_line(line: str) -> Optional[Func]:
    match = CREATED_RE.match(line)
    if not match:
        return None
    return Func(match.group(1))


def is_elided_line(line: str) -> bool:
    return ELIDED_RE.match(line) is not None


def parse_uint64(value_str: str) -> Optional[int]:
    # Go base-0 notation: "0x", "0o" or "0b" prefixed, octal with a leading zero, or decimal.
    if not value_str or value_str[0] in '+-' or value_str != value_str.strip():
        return None
    try:
        if len(value_str) > 1 and value_str[0] == '0' and value_str[1].isdigit():
            value = int(value_str, 8)
        else:
            value = int(value_str, 0)
    except ValueError:
        return None
    if value > MAX_UINT64:
        return None
    return value


def parse_func_line(line: str) -> Optional[FuncLine]:
    """
    Parses "<function>(<arg>, <arg>, ...)". The function name is kept as is. Arguments are raw
    unsigned integers; a literal "..." marks the list as elided and an empty item ends it.
    """
    match = FUNC_RE.match(line)
    if not match:
        return None
    call = Call(Func(match.group(1)))
    for arg_str in match.group(2).split(', '):
        if arg_str == ARGS_ELIDED:
            call.args.elided = True
            continue
        if arg_str == '':
            # Remaining values were dropped.
            break
        value = parse_uint64(arg_str)
        if value is None:
            return FuncLine(call, MalformedFieldError(line))
        call.args.values.append(Arg(value))
    return FuncLine(call)
