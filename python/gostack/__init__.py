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
Parser for the goroutine stack dumps printed by Go programs.
"""

from gostack.dump_context import parse_dump, parse_dump_text
from gostack.errors import DumpParseError, MalformedFieldError, UnexpectedLineError
from gostack.roots_config import RootsConfig
from gostack.stack_types import Arg, Args, Call, Context, Func, Goroutine, Signature, Stack

__all__ = [
    'Arg',
    'Args',
    'Call',
    'Context',
    'DumpParseError',
    'Func',
    'Goroutine',
    'MalformedFieldError',
    'RootsConfig',
    'Signature',
    'Stack',
    'UnexpectedLineError',
    'parse_dump',
    'parse_dump_text',
]
