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
Errors raised while scanning a goroutine dump. Every one of them is fatal to further structured
parsing: scanning stops at the first one and is never resumed.
"""

from typing import Any, Optional


class DumpParseError(ValueError):
    line: str
    # Set by parse_dump() to the partially built Context before the error is re-raised.
    context: Optional[Any]

    def __init__(self, message: str, line: str) -> None:
        super().__init__("%s: %r" % (message, line.strip()))
        self.line = line
        self.context = None


class MalformedFieldError(DumpParseError):
    """
    A line matched one of the known shapes, but a numeric field in it could not be parsed.
    """

    def __init__(self, line: str) -> None:
        super().__init__("failed to parse int on line", line)


class UnexpectedLineError(DumpParseError):
    """
    The scanner was in a state that requires a specific continuation and the line was not one.
    """
