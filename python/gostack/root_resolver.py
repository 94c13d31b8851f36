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
Guesses where the source files referenced by a dump live on this host.

A dump contains the source paths of the machine the program was built on, e.g.
/build/go/src/example.com/app/main.go. The part below the workspace or standard library root
(example.com/app/main.go) is usually the same locally, so we try the longest suffix of the path
first and stop at the first one that exists as a file under a local root. The remaining prefix
(/build/go/src) is then the remote root. This is a heuristic: paths that do not exist locally are
simply left unresolved.
"""

import logging
import os

from typing import Dict, Iterable, List, Optional

from overrides import overrides, EnforceOverrides

from gostack.stack_types import Call, Context


class FileOracle(EnforceOverrides):
    """
    Answers whether a regular file exists at the given local path.
    """

    def is_file(self, path: str) -> bool:
        raise NotImplementedError()


class LocalFileOracle(FileOracle):

    @overrides
    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)


def has_path_prefix(path: str, prefix: str) -> bool:
    # "a/b" is a prefix of "a/b/c" but not of "a/bc".
    return path.startswith(prefix + '/')


def split_path(path: str) -> List[str]:
    """
    Splits a slash-separated path into components. Leading slashes stay attached to the first
    component, so that absolute and relative paths can be told apart.

    >>> split_path('/build/src/main.go')
    ['/build', 'src', 'main.go']
    """
    leading = len(path) - len(path.lstrip('/'))
    components = [component for component in path[leading:].split('/') if component]
    if leading:
        if components:
            components[0] = path[:leading] + components[0]
        else:
            components = [path]
    return components


def rooted_in(local_root: str, components: List[str], oracle: FileOracle) -> Optional[str]:
    """
    :return: the remote root if a suffix of the path exists as a file under local_root, trying the
             longest suffix first. The root always keeps at least one component.
    """
    for i in range(1, len(components)):
        suffix = os.path.join(*components[i:])
        if oracle.is_file(os.path.join(local_root, suffix)):
            return '/'.join(components[:i])
    return None


def find_roots(
        context: Context,
        local_stdlib_root: Optional[str],
        local_workspace_roots: Iterable[str],
        oracle: FileOracle) -> None:
    """
    Sets context.stdlib_root and context.workspace_roots. Roots that are already known are kept.
    """
    local_workspace_roots = list(local_workspace_roots)
    if context.workspace_roots is None:
        context.workspace_roots = {}
    workspace_roots = context.workspace_roots

    for src_path in context.get_src_paths():
        if context.stdlib_root and has_path_prefix(src_path, context.stdlib_root):
            continue
        if any(has_path_prefix(src_path, remote_root) for remote_root in workspace_roots):
            continue

        components = split_path(src_path)
        if not context.stdlib_root and local_stdlib_root:
            remote_root = rooted_in(local_stdlib_root, components, oracle)
            if remote_root:
                logging.info(
                    "Found standard library root %s, local: %s", remote_root, local_stdlib_root)
                context.stdlib_root = remote_root
                continue

        for local_root in local_workspace_roots:
            remote_root = rooted_in(local_root, components, oracle)
            if remote_root:
                logging.info("Found workspace root %s, local: %s", remote_root, local_root)
                workspace_roots[remote_root] = local_root
                break
        else:
            logging.debug("Could not find %s locally", src_path)


def update_call_location(
        call: Call,
        stdlib_root: str,
        local_stdlib_root: Optional[str],
        workspace_roots: Dict[str, str]) -> None:
    src_path = call.src_path
    if src_path:
        if stdlib_root and local_stdlib_root and has_path_prefix(src_path, stdlib_root):
            call.is_stdlib = True
            call.local_src_path = os.path.join(
                local_stdlib_root, src_path[len(stdlib_root) + 1:])
            return
        for remote_root, local_root in workspace_roots.items():
            if has_path_prefix(src_path, remote_root):
                call.local_src_path = os.path.join(local_root, src_path[len(remote_root) + 1:])
                return
    call.local_src_path = src_path


def update_locations(context: Context) -> None:
    """
    Fills in local_src_path and is_stdlib of every call, including creation sites. This has to run
    even if the standard library root is the same locally, since it sets is_stdlib.
    """
    workspace_roots = context.workspace_roots or {}
    for goroutine in context.goroutines:
        for call in goroutine.all_calls():
            update_call_location(
                call, context.stdlib_root, context.local_stdlib_root, workspace_roots)
