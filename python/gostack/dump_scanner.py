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
Collects goroutines from the output of a Go program that dumped all of its goroutine stacks, e.g.
because it panicked or received SIGQUIT. Lines that are not part of the dump are handed back to the
caller unchanged.
"""

import enum
import logging

from typing import List, Optional

from gostack import line_classifier
from gostack.errors import UnexpectedLineError
from gostack.stack_types import Call, Goroutine, UNAVAILABLE_SRC_PATH


class ScanState(enum.Enum):
    # Outside of a dump. The initial state.
    NORMAL = 0
    # After the blank line that ends a goroutine.
    BETWEEN_ROUTINES = 1
    # After "goroutine 1 [running]:".
    GOT_ROUTINE_HEADER = 2
    # After "main.main()".
    GOT_FUNC = 3
    # After "created by main.main".
    GOT_CREATED = 4
    # After the location of a call, e.g. "\t/foo/bar/baz.go:116 +0x35".
    GOT_FILE_FUNC = 5
    # After the location of a "created by" line.
    GOT_FILE_CREATED = 6
    # After "\tgoroutine running on other thread; stack unavailable".
    GOT_UNAVAIL = 7


class DumpScanner:
    goroutines: List[Goroutine]
    state: ScanState

    def __init__(self) -> None:
        self.goroutines = []
        self.state = ScanState.NORMAL

    def current_goroutine(self) -> Goroutine:
        # Only called in states that are entered after a goroutine header.
        assert self.goroutines
        return self.goroutines[-1]

    def process_line(self, line: str) -> Optional[str]:
        """
        :param line: a line of program output, including its terminator
        :return: the line if it is not part of a dump and the caller needs to handle (print) it
                 itself, None otherwise.
        :raises DumpParseError: if the line breaks the dump format. Scanning must stop then.
        """
        state = self.state

        if state in (ScanState.NORMAL, ScanState.BETWEEN_ROUTINES):
            header = line_classifier.parse_routine_header(line)
            if header:
                goroutine_id, signature = header
                self.goroutines.append(
                    Goroutine(goroutine_id, signature, first=not self.goroutines))
                self.state = ScanState.GOT_ROUTINE_HEADER
                return None
            self.state = ScanState.NORMAL
            return line

        if state == ScanState.GOT_ROUTINE_HEADER:
            goroutine = self.current_goroutine()
            if line_classifier.is_unavailable_line(line):
                # Stand-in frame, the next line is expected to be blank.
                goroutine.stack.calls = [Call(src_path=UNAVAILABLE_SRC_PATH)]
                self.state = ScanState.GOT_UNAVAIL
                return None
            if self.append_call(goroutine, line):
                return None
            raise UnexpectedLineError(
                "expected a function after a goroutine header, got", line)

        if state == ScanState.GOT_FUNC:
            location = line_classifier.parse_file_line(line)
            if location:
                # There is at least one call when in this state.
                call = self.current_goroutine().stack.calls[-1]
                call.src_path, call.line = location
                self.state = ScanState.GOT_FILE_FUNC
                return None
            raise UnexpectedLineError("expected a file after a function, got", line)

        if state == ScanState.GOT_CREATED:
            location = line_classifier.parse_file_line(line)
            if location:
                created_by = self.current_goroutine().signature.created_by
                created_by.src_path, created_by.line = location
                self.state = ScanState.GOT_FILE_CREATED
                return None
            raise UnexpectedLineError("expected a file after a created line, got", line)

        if state == ScanState.GOT_FILE_FUNC:
            goroutine = self.current_goroutine()
            if self.set_created_by(goroutine, line):
                return None
            if line_classifier.is_elided_line(line):
                goroutine.stack.elided = True
                return None
            if self.append_call(goroutine, line):
                return None
            if line_classifier.is_blank_line(line):
                self.state = ScanState.BETWEEN_ROUTINES
                return None
            return self.end_dump(line)

        if state == ScanState.GOT_FILE_CREATED:
            if line_classifier.is_blank_line(line):
                self.state = ScanState.BETWEEN_ROUTINES
                return None
            return self.end_dump(line)

        if state == ScanState.GOT_UNAVAIL:
            if line_classifier.is_blank_line(line):
                self.state = ScanState.BETWEEN_ROUTINES
                return None
            if self.set_created_by(self.current_goroutine(), line):
                return None
            raise UnexpectedLineError("expected empty line after unavailable stack, got", line)

        raise AssertionError("Unknown scan state: %s" % state)

    def append_call(self, goroutine: Goroutine, line: str) -> bool:
        func_line = line_classifier.parse_func_line(line)
        if func_line is None:
            return False
        goroutine.stack.calls.append(func_line.call)
        self.state = ScanState.GOT_FUNC
        if func_line.error is not None:
            raise func_line.error
        return True

    def set_created_by(self, goroutine: Goroutine, line: str) -> bool:
        func = line_classifier.parse_created_line(line)
        if func is None:
            return False
        goroutine.signature.created_by.func = func
        self.state = ScanState.GOT_CREATED
        return True

    def end_dump(self, line: str) -> str:
        logging.debug(
            "End of goroutine dump after %d goroutines, at line: %r", len(self.goroutines), line)
        self.state = ScanState.NORMAL
        return line
