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

import io
import logging

from typing import Optional, TextIO, Tuple

from gostack.dump_scanner import DumpScanner
from gostack.errors import DumpParseError
from gostack.line_reader import scan_lines
from gostack.root_resolver import FileOracle, LocalFileOracle, find_roots, update_locations
from gostack.roots_config import RootsConfig
from gostack.stack_types import Context


def parse_dump(
        stream: TextIO,
        out: TextIO,
        guess_paths: bool = True,
        config: Optional[RootsConfig] = None,
        oracle: Optional[FileOracle] = None) -> Optional[Context]:
    """
    Parses the goroutines dumped by a Go program from stream. Everything that is not part of the
    dump is written to out, in the original order.

    :param guess_paths: whether to look for the standard library and workspace roots on this host
                        and fill in the local source path of every call
    :param config: local roots to match against, by default taken from the environment
    :param oracle: file existence check, the local file system by default
    :return: None if no goroutine was found
    :raises DumpParseError: if the dump is malformed. The goroutines parsed up to that point are
                            available as the context attribute of the exception.
    """
    scanner = DumpScanner()
    parse_error: Optional[DumpParseError] = None
    for line in scan_lines(stream):
        try:
            passthrough = scanner.process_line(line)
        except DumpParseError as ex:
            parse_error = ex
            break
        if passthrough is not None:
            out.write(passthrough)

    if not scanner.goroutines:
        logging.debug("No goroutine dump detected")
        return None

    context = Context(scanner.goroutines)
    if guess_paths:
        if config is None:
            config = RootsConfig.from_env()
        context.local_stdlib_root = config.stdlib_root
        context.local_workspace_roots = list(config.workspace_roots)
        find_roots(
            context,
            config.stdlib_root,
            config.workspace_roots,
            oracle if oracle is not None else LocalFileOracle())
        update_locations(context)

    if parse_error is not None:
        parse_error.context = context
        raise parse_error
    return context


def parse_dump_text(text: str, **kwargs) -> Tuple[Optional[Context], str]:
    """
    Same as parse_dump(), for a dump that is already in memory.

    :return: the context and the text that was not part of the dump
    """
    out = io.StringIO()
    context = parse_dump(io.StringIO(text), out, **kwargs)
    return context, out.getvalue()
