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
"""Console output for lifter.

Library code never prints directly. It asks for a logger (passed in, or the
process-wide one from get_global_logger) and reports through five channels:

- step: numbered progress lines, always shown
- verbose: per-section detail, shown with -v
- debug: HTTP and archive internals, shown with -d (which also enables -v)
- warning: a section did not get what it wanted, always shown
- error: a section failed, always shown, traceback appended on request

Each line is tagged with a prefix. Section work uses the section name, so
output from parallel workers can still be told apart.

Example:
    ```python
    from lifter.logging import get_logger, set_global_logger

    set_global_logger(get_logger(verbose=True))
    ```

    Functions that accept a logger fall back to the global one:

        def check_section(logger=None):
            logger = logger or get_global_logger()
            logger.debug("HTTP", "GET https://...")

Note:
    Until the CLI installs a DefaultLogger the global logger is a
    SilentLogger, so importing lifter as a library produces no output.
"""

from __future__ import annotations

import threading
import traceback
from typing import Protocol


class Logger(Protocol):
    """Anything with the five lifter output channels."""

    def step(self, step: int, total: int, message: str) -> None:
        """Report progress as ``[step/total] message``."""
        ...

    def verbose(self, prefix: str, message: str) -> None:
        """Report detail for the section or subsystem named by prefix."""
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Report low-level detail such as "HTTP" or "EXTRACT" traffic."""
        ...

    def warning(self, prefix: str, message: str) -> None:
        """Report a non-fatal problem."""
        ...

    def error(self, prefix: str, message: str, exc_info: bool = False) -> None:
        """Report a failure.

        Args:
            prefix: Section name or subsystem tag.
            message: Text of the error.
            exc_info: Append the traceback of the exception being handled.
        """
        ...


class DefaultLogger:
    """Writes to stdout, one whole line per call.

    Calls from different worker threads take a lock so a traceback is never
    split by another section's output.
    """

    def __init__(self, verbose: bool = False, debug: bool = False) -> None:
        self._verbose = verbose or debug
        self._debug = debug
        self._lock = threading.Lock()

    def _emit(self, text: str) -> None:
        with self._lock:
            print(text, flush=True)

    def step(self, step: int, total: int, message: str) -> None:
        self._emit(f"[{step}/{total}] {message}")

    def verbose(self, prefix: str, message: str) -> None:
        if self._verbose:
            self._emit(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        if self._debug:
            self._emit(f"[{prefix}] {message}")

    def warning(self, prefix: str, message: str) -> None:
        self._emit(f"[{prefix}] WARNING: {message}")

    def error(self, prefix: str, message: str, exc_info: bool = False) -> None:
        text = f"[{prefix}] ERROR: {message}"
        if exc_info:
            text = f"{text}\n{traceback.format_exc().rstrip()}"
        self._emit(text)


class SilentLogger:
    """Discards everything. Used by validation and as the library default."""

    def step(self, step: int, total: int, message: str) -> None:
        pass

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def debug(self, prefix: str, message: str) -> None:
        pass

    def warning(self, prefix: str, message: str) -> None:
        pass

    def error(self, prefix: str, message: str, exc_info: bool = False) -> None:
        pass


_global_logger: Logger = SilentLogger()


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Build a stdout logger honouring the -v and -d flags."""
    return DefaultLogger(verbose=verbose, debug=debug)


def get_global_logger() -> Logger:
    """Return the process-wide logger (silent unless replaced)."""
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Replace the process-wide logger used when no logger is passed in."""
    global _global_logger
    _global_logger = logger
