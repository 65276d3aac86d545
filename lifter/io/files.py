# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Artifact writing and post-processing for lifter.

Writes extracted payloads at their final path and makes them executable on
POSIX systems. OSError from the filesystem is re-raised as
PathPermissionError so the orchestrator can report it per section.
"""

from __future__ import annotations

import os
from pathlib import Path
import stat

from lifter.exceptions import PathPermissionError
from lifter.logging import Logger, get_global_logger

EXECUTABLE_PERMISSIONS = 0o755


def write_artifact(path: Path, data: bytes) -> None:
    """Write `data` to `path`, replacing any existing file.

    Raises:
        PathPermissionError: If the file cannot be written.
    """
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as err:
        raise PathPermissionError(f"Failed to write {path}: {err}") from err


def ensure_executable(path: Path, *, logger: Logger | None = None) -> bool:
    """Set mode 0755 on `path` unless some execute bit is already set.

    The mode is read first so files that are already executable are left
    untouched. Does nothing on non-POSIX systems.

    Args:
        path: File to update.
        logger: Optional logger; falls back to the global logger.

    Returns:
        True if the mode was changed.

    Raises:
        PathPermissionError: If the mode cannot be read or set.
    """
    if os.name != "posix":
        return False
    if logger is None:
        logger = get_global_logger()

    try:
        mode = stat.S_IMODE(os.stat(path).st_mode)
        if mode & 0o111:
            return False
        logger.debug("FILE", f"File {path} is not yet executable, setting bits.")
        os.chmod(path, EXECUTABLE_PERMISSIONS)
    except OSError as err:
        raise PathPermissionError(
            f"Failed to set executable permission on {path}: {err}"
        ) from err
    return True
