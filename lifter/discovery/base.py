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

"""Hit extractor protocol and registry for lifter.

This module defines the foundational components for the discovery system:

- HitExtractor protocol: Interface that all extraction strategies implement
- Strategy registry: Global dict mapping fetch-method names to implementations
- Registration and lookup functions: register_strategy() and get_strategy()

A strategy receives an already-fetched page or API body and searches it for
a (version, download_url) pair. Fetching is the orchestrator's job, so
strategies never touch the network and are trivial to test with literal
HTML or JSON.

- html_scrape: CSS selectors over an HTML page, anchor text full-match
- json_api: JSON-path over an API payload, URL substring search

Conventions:
    - A strategy is any class with find_hit() and validate_entry()
    - Each strategy module registers itself when lifter.discovery is imported
    - get_strategy() builds a fresh instance per section

Example:
    Implementing a custom strategy:
        ```python
        from lifter.discovery.base import register_strategy

        class PlainTextStrategy:
            def find_hit(self, entry, body, *, logger=None):
                ...

            def validate_entry(self, entry):
                return []

        register_strategy("plain_text", PlainTextStrategy)
        ```

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from lifter.exceptions import ConfigError
from lifter.versioning import Hit

if TYPE_CHECKING:
    from lifter.config import EntrySpec
    from lifter.logging import Logger

# -------------------------------
# Strategy Protocol
# -------------------------------


class HitExtractor(Protocol):
    """Protocol for hit extraction strategies."""

    def find_hit(
        self, entry: EntrySpec, body: str, *, logger: Logger | None = None
    ) -> Hit | None:
        """Search a fetched body for the entry's download link and version.

        Args:
            entry: Resolved section configuration.
            body: Page or API response body.
            logger: Optional logger; falls back to the global logger.

        Returns:
            The hit, or None when nothing matched (a normal outcome,
                logged as a warning).

        Raises:
            ConfigError: If the entry lacks a field the strategy needs.
            DiscoveryError: If the body or expressions are structurally
                unusable.

        """
        ...

    def validate_entry(self, entry: EntrySpec) -> list[str]:
        """Check strategy-specific fields without touching the network.

        Returns:
            List of error messages. Empty list if the entry is usable.

        """
        ...


# -------------------------------
# Strategy Registry
# -------------------------------

_STRATEGY_REGISTRY: dict[str, type[HitExtractor]] = {}


def register_strategy(name: str, strategy_class: type[HitExtractor]) -> None:
    """Register a hit extraction strategy by fetch-method name.

    Registering the same name twice overwrites the previous registration
    (allows monkey-patching for tests).

    Args:
        name: Fetch-method name (e.g., "html_scrape"), the value used in the
            `method` field of a section.
        strategy_class: Class implementing the HitExtractor protocol.

    """
    _STRATEGY_REGISTRY[name] = strategy_class


def get_strategy(name: str) -> HitExtractor:
    """Get a new strategy instance by fetch-method name.

    Args:
        name: Fetch-method name. Case-sensitive.

    Returns:
        A new instance of the requested strategy.

    Raises:
        ConfigError: If the name is not registered. The error message
            lists the available strategies.

    """
    if name not in _STRATEGY_REGISTRY:
        available = ", ".join(_STRATEGY_REGISTRY.keys())
        raise ConfigError(
            f"Unknown fetch method: {name!r}. Available: {available or '(none)'}"
        )
    return _STRATEGY_REGISTRY[name]()
