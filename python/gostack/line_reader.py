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

from typing import Iterator, TextIO


MAX_TOKEN_SIZE = 64 * 1024


def scan_lines(stream: TextIO, max_token_size: int = MAX_TOKEN_SIZE) -> Iterator[str]:
    r"""
    Yields the lines of a text stream with their terminators. Unlike iterating over the stream,
    a line longer than max_token_size is returned in several chunks instead of being buffered in
    full. The last line is returned even if it has no terminator.

    Open files with newline='\n' so that lines end at "\n" only and "\r\n" reaches the parser
    unchanged.
    """
    assert max_token_size > 0
    while True:
        line = stream.readline(max_token_size)
        if not line:
            return
        yield line
