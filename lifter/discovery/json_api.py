"""JSON API hit extractor for lifter.

Reads a JSON release API (GitHub's `releases/latest`, vendor endpoints) for
the version and download URL of one tracked artifact. Selected with
`method = json_api`.

Extraction:

- `version_tag` is a JSON-path expression; the FIRST result, as a string,
  is the version.
- `anchor_tag` is a JSON-path expression; every string result is a
  candidate URL.
- The first candidate in which the `anchor_text` regex can be FOUND
  (substring search, not anchored) is the download URL.

Unlike html_scrape, an unparsable JSON-path expression or one that yields
no results at all raises DiscoveryError. Only "candidates exist but none
match anchor_text" is a soft miss.

Section Configuration:

    [rg]
    method = json_api
    page_url = https://api.github.com/repos/BurntSushi/ripgrep/releases/latest
    version_tag = $.tag_name
    anchor_tag = $.assets[*].browser_download_url
    anchor_text = ripgrep-(\\d+\\.\\d+\\.\\d+)-x86_64-unknown-linux-musl.tar.gz

Note:
    JSON-path expressions are parsed with jsonpath-ng.
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any

from jsonpath_ng import parse as jsonpath_parse

from lifter.exceptions import ConfigError, DiscoveryError
from lifter.logging import Logger, get_global_logger
from lifter.versioning import Hit

from .base import register_strategy

if TYPE_CHECKING:
    from lifter.config import EntrySpec


def _query(expression: str, data: Any, field_name: str) -> list[Any]:
    """Evaluate a JSON-path expression, requiring at least one result."""
    try:
        matches = jsonpath_parse(expression).find(data)
    except Exception as err:
        raise DiscoveryError(
            f"Invalid {field_name} JSON-path {expression!r}: {err}"
        ) from err

    if not matches:
        raise DiscoveryError(
            f"{field_name} {expression!r} did not match anything in API response"
        )
    return [m.value for m in matches]


class JsonApiStrategy:
    """Hit extractor for JSON release APIs.

    Configuration example:
        [fd]
        method = json_api
        page_url = https://api.github.com/repos/sharkdp/fd/releases/latest
        version_tag = $.tag_name
        anchor_tag = $.assets[*].browser_download_url
        anchor_text = x86_64-unknown-linux-musl\\.tar\\.gz$
    """

    def find_hit(
        self, entry: EntrySpec, body: str, *, logger: Logger | None = None
    ) -> Hit | None:
        """Extract the version and first matching download URL.

        Args:
            entry: Resolved section configuration.
            body: JSON text of the API response.
            logger: Optional logger; falls back to the global logger.

        Returns:
            The hit, or None if no candidate URL matched anchor_text.

        Raises:
            ConfigError: If the entry has no version_selector.
            DiscoveryError: On invalid JSON, an invalid anchor_text regex,
                an unparsable JSON-path, or a JSON-path with no results.

        Example:
            >>> body = '{"tag_name": "13.0.0", "assets": [{"browser_download_url": "https://x/ripgrep-13.0.0-x86_64-unknown-linux-musl.tar.gz"}]}'
            >>> hit = JsonApiStrategy().find_hit(entry, body)
            >>> hit.version
            '13.0.0'
        """
        if logger is None:
            logger = get_global_logger()
        section = entry.section

        if not entry.version_selector:
            raise ConfigError(
                f"json_api section {section!r} requires 'version_tag' in config"
            )

        try:
            re_pat = re.compile(entry.anchor_text_pattern)
        except re.error as err:
            raise DiscoveryError(
                f"Invalid anchor_text regex {entry.anchor_text_pattern!r}: {err}"
            ) from err

        try:
            data = json.loads(body)
        except json.JSONDecodeError as err:
            raise DiscoveryError(
                f"Invalid JSON response from {entry.page_url}. Response: {body[:200]}"
            ) from err

        logger.debug(section, f"Extracting version from path: {entry.version_selector}")
        version = str(_query(entry.version_selector, data, "version_tag")[0])
        logger.debug(section, f"Extracted version: {version}")

        logger.debug(section, f"Extracting download URLs from path: {entry.anchor_selector}")
        candidates = [
            value
            for value in _query(entry.anchor_selector, data, "anchor_tag")
            if isinstance(value, str)
        ]

        for candidate in candidates:
            logger.debug(section, f"possible download_url?: {candidate}")
            if re_pat.search(candidate):
                logger.verbose(section, f"Found a match for anchor_text: {candidate}")
                return Hit(version=version, download_url=candidate)

        logger.warning(
            section,
            f"None of {len(candidates)} URL(s) at {entry.page_url} matched "
            f"anchor_text {entry.anchor_text_pattern!r}",
        )
        return None

    def validate_entry(self, entry: EntrySpec) -> list[str]:
        """Validate json_api fields without making network calls.

        Args:
            entry: Resolved section configuration.

        Returns:
            List of error messages (empty if valid).
        """
        errors = []

        for field_name, expression in (
            ("anchor_tag", entry.anchor_selector),
            ("version_tag", entry.version_selector),
        ):
            if not expression or not expression.strip():
                errors.append(f"Missing required field: {field_name}")
                continue
            try:
                jsonpath_parse(expression)
            except Exception as err:
                errors.append(f"Invalid {field_name} JSON-path: {err}")

        try:
            re.compile(entry.anchor_text_pattern)
        except re.error as err:
            errors.append(f"Invalid anchor_text regex: {err}")

        return errors


# Register this strategy when the module is imported
register_strategy("json_api", JsonApiStrategy)
