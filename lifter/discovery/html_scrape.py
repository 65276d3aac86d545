"""HTML scraping hit extractor for lifter.

Scrapes a release page for the download link and the version of one tracked
artifact. Selected with `method = html_scrape` (the default).

Link Finding:

- `anchor_tag` is a CSS selector; every matching element is a candidate,
  checked in document order.
- The candidate's text (its text nodes joined with spaces, trimmed) must
  FULLY match the `anchor_text` regex. `ripgrep-.*-musl\\.tar\\.gz` does not
  match "ripgrep-13.0.0-x86_64-unknown-linux-musl.tar.gz (sha256)".
- Candidates without an `href` are ignored.

URL Resolution:

- Absolute hrefs (`http...`) are used as is.
- Root-relative (`/x`) and parent-relative (`../x`) hrefs resolve against
  the domain root of the page.
- Scheme-relative hrefs (`//host/x`) take the page's scheme.
- Anything else resolves relative to the page URL.

Version Finding:

- After the first matching link, `version_tag` is a CSS selector whose FIRST
  match anywhere on the page gives the version (trimmed text).

Negative Outcomes (warnings, no hit):

- A CSS selector that fails to parse
- No candidate whose text matches
- A matching link but no version element

Section Configuration:

    [rg]
    page_url = https://github.com/BurntSushi/ripgrep/releases
    anchor_tag = details .Box a
    anchor_text = ripgrep-\\d+\\.\\d+\\.\\d+-x86_64-unknown-linux-musl\\.tar\\.gz
    version_tag = .release-header .f1 a
    version = 12.1.1

Note:
    - BeautifulSoup4 with the stdlib "html.parser" backend
    - CSS selectors are compiled by soupsieve (bundled with BeautifulSoup4)
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING
from urllib.parse import urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup
import soupsieve

from lifter.exceptions import ConfigError, DiscoveryError
from lifter.logging import Logger, get_global_logger
from lifter.versioning import Hit

from .base import register_strategy

if TYPE_CHECKING:
    from lifter.config import EntrySpec


def resolve_href(page_url: str, href: str) -> str:
    """Turn an anchor href into an absolute download URL.

    Example:
        ```python
        resolve_href("https://example.com/sub/page", "/abs/path")
        # 'https://example.com/abs/path'
        resolve_href("https://example.com/sub/page", "rel/path")
        # 'https://example.com/sub/rel/path'
        ```
    """
    if href.startswith("http"):
        return href

    parts = urlsplit(page_url)
    if href.startswith("/") or href.startswith("../"):
        # Relative to the domain, whatever path the page lives at
        root = urlunsplit((parts.scheme, parts.netloc, "/", "", ""))
        return urljoin(root, href)

    base = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
    return urljoin(base, href)


def _compile_full_match(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as err:
        raise DiscoveryError(f"Invalid anchor_text regex {pattern!r}: {err}") from err


class HtmlScrapeStrategy:
    """Hit extractor for HTML release pages.

    Configuration example:
        [fd]
        page_url = https://github.com/sharkdp/fd/releases
        anchor_tag = a[href$=".tar.gz"]
        anchor_text = fd-v[\\d.]+-x86_64-unknown-linux-musl\\.tar\\.gz
        version_tag = .release-header a
    """

    def find_hit(
        self, entry: EntrySpec, body: str, *, logger: Logger | None = None
    ) -> Hit | None:
        """Find the first anchor whose text fully matches, plus the version.

        Args:
            entry: Resolved section configuration.
            body: HTML of the release page.
            logger: Optional logger; falls back to the global logger.

        Returns:
            The hit, or None if nothing matched.

        Raises:
            ConfigError: If the entry has no version_selector.
            DiscoveryError: If anchor_text is not a valid regex.

        """
        if logger is None:
            logger = get_global_logger()
        section = entry.section

        if not entry.version_selector:
            raise ConfigError(
                f"html_scrape section {section!r} requires 'version_tag' in config"
            )

        re_pat = _compile_full_match(entry.anchor_text_pattern)

        logger.debug(section, "Setting up parsers")
        soup = BeautifulSoup(body, "html.parser")
        try:
            anchors = soup.select(entry.anchor_selector)
        except soupsieve.SelectorSyntaxError as err:
            logger.warning(
                section, f"Parser error at {entry.page_url}: {entry.anchor_selector!r}: {err}"
            )
            return None

        logger.debug(section, "Looking for matches...")
        for anchor in anchors:
            href = anchor.get("href")
            if not href or not isinstance(href, str):
                continue

            download_url = resolve_href(entry.page_url, href)
            logger.debug(section, f"possible download_url?: {download_url}")

            link_text = anchor.get_text(" ").strip()
            if not re_pat.fullmatch(link_text):
                continue
            logger.debug(section, f"Found a match for anchor_text: {link_text}")

            try:
                version_el = soup.select_one(entry.version_selector)
            except soupsieve.SelectorSyntaxError as err:
                logger.warning(
                    section,
                    f"Parser error at {entry.page_url}: "
                    f"{entry.version_selector!r}: {err}",
                )
                return None

            if version_el is None:
                logger.warning(
                    section,
                    f"Download link {download_url} was found but failed to match "
                    f'version tag "{entry.version_selector}"',
                )
                return None

            version = version_el.get_text().strip()
            logger.verbose(section, f"Found a match on versions tag: {version}")
            return Hit(version=version, download_url=download_url)

        logger.warning(section, f"Matched nothing at url {entry.page_url}")
        return None

    def validate_entry(self, entry: EntrySpec) -> list[str]:
        """Validate html_scrape fields without making network calls.

        Args:
            entry: Resolved section configuration.

        Returns:
            List of error messages (empty if valid).

        """
        errors = []

        for field_name, selector in (
            ("anchor_tag", entry.anchor_selector),
            ("version_tag", entry.version_selector),
        ):
            if not selector or not selector.strip():
                errors.append(f"Missing required field: {field_name}")
                continue
            try:
                soupsieve.compile(selector)
            except soupsieve.SelectorSyntaxError as err:
                errors.append(f"Invalid CSS selector in {field_name}: {err}")

        try:
            re.compile(entry.anchor_text_pattern)
        except re.error as err:
            errors.append(f"Invalid anchor_text regex: {err}")

        return errors


# Register this strategy when the module is imported
register_strategy("html_scrape", HtmlScrapeStrategy)
