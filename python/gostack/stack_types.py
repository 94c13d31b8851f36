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

"""
Structured representation of a goroutine dump: a Context holds Goroutines, each Goroutine holds a
Stack of Calls.
"""

import os

from typing import Dict, Iterator, List, Optional


# Source path used for the single synthetic frame of a goroutine whose stack was not printed.
UNAVAILABLE_SRC_PATH = '<unavailable>'


class Func:
    # Function name exactly as printed, e.g. "github.com/foo/bar.(*Baz).Run.func1".
    raw: str

    def __init__(self, raw: str = '') -> None:
        self.raw = raw

    @property
    def name(self) -> str:
        """
        The function name without its package path, e.g. "bar.(*Baz).Run.func1".
        """
        return self.raw.rsplit('/', 1)[-1]

    def __repr__(self) -> str:
        return 'Func(%r)' % self.raw


class Arg:
    value: int

    def __init__(self, value: int) -> None:
        self.value = value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Arg) and other.value == self.value

    def __repr__(self) -> str:
        return 'Arg(0x%x)' % self.value


class Args:
    values: List[Arg]
    # True if the runtime printed "..." because there were more arguments.
    elided: bool

    def __init__(self) -> None:
        self.values = []
        self.elided = False


class Call:
    func: Func
    args: Args
    src_path: str
    line: int
    local_src_path: Optional[str]
    is_stdlib: bool

    def __init__(self, func: Optional[Func] = None, src_path: str = '', line: int = 0) -> None:
        self.func = func if func is not None else Func()
        self.args = Args()
        self.src_path = src_path
        self.line = line
        # Set once the source roots are known, see root_resolver.update_locations().
        self.local_src_path = None
        self.is_stdlib = False

    @property
    def src_name(self) -> str:
        return os.path.basename(self.src_path)

    @property
    def full_src_line(self) -> str:
        return '%s:%d' % (self.src_path, self.line)

    def __repr__(self) -> str:
        return 'Call(%s @ %s)' % (self.func.raw, self.full_src_line)


class Signature:
    state: str
    sleep_min: int
    sleep_max: int
    locked: bool
    created_by: Call

    def __init__(self, state: str, sleep_minutes: int = 0, locked: bool = False) -> None:
        self.state = state
        self.sleep_min = sleep_minutes
        self.sleep_max = sleep_minutes
        self.locked = locked
        self.created_by = Call()

    @property
    def has_created_by(self) -> bool:
        return self.created_by.func.raw != ''


class Stack:
    calls: List[Call]
    # True if the runtime omitted some frames.
    elided: bool

    def __init__(self) -> None:
        self.calls = []
        self.elided = False


class Goroutine:
    id: int
    signature: Signature
    stack: Stack
    first: bool

    def __init__(self, goroutine_id: int, signature: Signature, first: bool) -> None:
        self.id = goroutine_id
        self.signature = signature
        self.stack = Stack()
        # The first goroutine printed is the one that triggered the dump, e.g. by panicking.
        self.first = first

    @property
    def state(self) -> str:
        return self.signature.state

    @property
    def created_by(self) -> Optional[Call]:
        if self.signature.has_created_by:
            return self.signature.created_by
        return None

    def all_calls(self) -> Iterator[Call]:
        """
        Iterates over the stack frames followed by the creation site, if one was printed.
        """
        for call in self.stack.calls:
            yield call
        if self.signature.has_created_by:
            yield self.signature.created_by

    def __repr__(self) -> str:
        return 'Goroutine(%d [%s], %d calls)' % (self.id, self.state, len(self.stack.calls))


class Context:
    goroutines: List[Goroutine]

    # The standard library root as it appeared in the dump, not the one on this host. Empty if it
    # could not be determined.
    stdlib_root: str

    # Workspace roots as they appeared in the dump, mapped to the matching local directory. None if
    # root guessing was not requested.
    workspace_roots: Optional[Dict[str, str]]

    local_stdlib_root: Optional[str]
    local_workspace_roots: List[str]

    def __init__(self, goroutines: List[Goroutine]) -> None:
        self.goroutines = goroutines
        self.stdlib_root = ''
        self.workspace_roots = None
        self.local_stdlib_root = None
        self.local_workspace_roots = []

    def get_src_paths(self) -> List[str]:
        """
        Returns all the distinct source paths referenced by the dump, sorted.
        """
        return sorted(set(
            call.src_path for goroutine in self.goroutines for call in goroutine.all_calls()))
