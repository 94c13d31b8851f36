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
Local directories that source paths found in a dump are matched against: the Go standard library
root (GOROOT) and the workspace roots (GOPATH).

Example YAML file accepted by RootsConfig.from_yaml_file:

stdlib_root: /usr/local/go
workspace_roots:
  - /home/user/go
  - /home/user/vendor-go
"""

import logging
import os
import shutil
import subprocess

from typing import Any, Dict, List, Optional

import ruamel.yaml


def get_local_stdlib_root() -> Optional[str]:
    goroot = os.getenv('GOROOT')
    if goroot:
        return goroot

    go_path = shutil.which('go')
    if go_path is None:
        logging.info(
            "GOROOT is not set and go is not on PATH, not looking for the standard library")
        return None
    try:
        goroot = subprocess.check_output([go_path, 'env', 'GOROOT']).decode('utf-8').strip()
    except (OSError, subprocess.CalledProcessError) as ex:
        logging.info("Failed to run '%s env GOROOT': %s", go_path, ex)
        return None
    return goroot or None


def get_local_workspace_roots() -> List[str]:
    roots = [root for root in os.getenv('GOPATH', '').split(os.pathsep) if root]
    if not roots:
        roots = [os.path.join(os.path.expanduser('~'), 'go')]
    return roots


class RootsConfig:
    stdlib_root: Optional[str]
    workspace_roots: List[str]

    def __init__(self, stdlib_root: Optional[str], workspace_roots: List[str]) -> None:
        self.stdlib_root = stdlib_root
        self.workspace_roots = workspace_roots

    @staticmethod
    def from_env() -> 'RootsConfig':
        return RootsConfig(get_local_stdlib_root(), get_local_workspace_roots())

    @staticmethod
    def from_yaml_file(file_path: str) -> 'RootsConfig':
        """
        Keys missing from the file are taken from the environment, as in from_env().
        """
        yaml = ruamel.yaml.YAML(typ='safe')
        with open(file_path) as config_file:
            data: Optional[Dict[str, Any]] = yaml.load(config_file)
        data = data or {}
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping at the top level of {file_path}, found: {data}")

        stdlib_root = data.get('stdlib_root')
        if stdlib_root is None:
            stdlib_root = get_local_stdlib_root()

        workspace_roots = data.get('workspace_roots')
        if workspace_roots is None:
            workspace_roots = get_local_workspace_roots()
        elif not isinstance(workspace_roots, list):
            raise ValueError(
                f"Expected workspace_roots in {file_path} to be a list, found: {workspace_roots}")
        return RootsConfig(stdlib_root, [str(root) for root in workspace_roots])

    def __repr__(self) -> str:
        return 'RootsConfig(stdlib_root=%r, workspace_roots=%r)' % (
            self.stdlib_root, self.workspace_roots)
