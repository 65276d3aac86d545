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

"""Exception hierarchy for lifter.

Library users can distinguish between the kinds of faults a section run can
hit:

- ConfigError: Configuration problems (unknown template, bad placeholder)
- FetchError: Transport failures or retryable statuses that never cleared
- UnexpectedStatus: A non-retryable HTTP status (subclass of FetchError)
- DiscoveryError: Broken JSON-path expressions or unusable API payloads
- ExtractionError: Corrupt archives or bad member patterns
- PathPermissionError: The artifact could not be written or made executable

"No match" outcomes (selector matched nothing, version not newer, archive
member missing) are NOT exceptions. They end a section run normally.

All exceptions inherit from LifterError, so a single except clause is enough
to isolate one section's failure from its siblings.

Example:
    Catching specific error types:
        ```python
        from lifter.core import run_section
        from lifter.exceptions import ConfigError, FetchError

        try:
            result = run_section("rg", store, Path("lifter.ini"))
        except ConfigError as e:
            print(f"Configuration error: {e}")
        except FetchError as e:
            print(f"Network error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "LifterError",
    "ConfigError",
    "TemplateNotFound",
    "FetchError",
    "UnexpectedStatus",
    "DiscoveryError",
    "ExtractionError",
    "PathPermissionError",
]


class LifterError(Exception):
    """Base exception for all lifter errors."""

    pass


class ConfigError(LifterError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - Loading or parsing the configuration store
    - Placeholders that name fields the section does not define
    - Unknown fetch methods or comparators
    - Fields a strategy needs but the section never set
    """

    pass


class TemplateNotFound(ConfigError):
    """Raised when a section references a template that was never defined."""

    def __init__(self, template_name: str, available: list[str]) -> None:
        self.template_name = template_name
        self.available = list(available)
        super().__init__(
            f"The specified template {template_name!r} was not found in the "
            f"list of available templates: {self.available}"
        )


class FetchError(LifterError):
    """Raised when a page or artifact could not be fetched.

    Covers connection failures and retryable statuses (429, 503, ...) that
    persisted through every attempt.
    """

    def __init__(
        self, message: str, *, url: str | None = None, status_code: int | None = None
    ) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class UnexpectedStatus(FetchError):
    """Raised for a terminal, non-retryable HTTP status.

    Attributes:
        status_code: The HTTP status returned by the server.
        body: The response body, kept for diagnostics.
    """

    def __init__(self, url: str, status_code: int, body: str) -> None:
        self.body = body
        super().__init__(
            f"Unexpected HTTP status {status_code} for {url}",
            url=url,
            status_code=status_code,
        )


class DiscoveryError(LifterError):
    """Raised when a page or API payload cannot be searched at all.

    A selector that simply matches nothing is not a DiscoveryError. This is
    for structurally broken input: an unparsable JSON-path expression, a
    JSON-path that yields no results, an invalid JSON body, or an anchor-text
    regex that does not compile.
    """

    pass


class ExtractionError(LifterError):
    """Raised when a downloaded archive is corrupt or cannot be read."""

    pass


class PathPermissionError(LifterError):
    """Raised when the artifact cannot be written or its mode cannot be set."""

    pass
