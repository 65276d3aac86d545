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

"""
Section resolution for lifter.

Turns one section's raw field map into a fully-resolved EntrySpec by
layering template defaults under the section's own fields and substituting
`{placeholder}` references.

Resolution Order
----------------
1. If the section sets `template`, look the template up (TemplateNotFound if
   absent). Every template field is substituted against the SECTION's raw
   fields.
2. Every section field (except `template`) is substituted against the full
   field set (template-derived values overlaid with the section's raw
   values) and overrides the template-derived value.
3. Missing `page_url` is not an error: a warning is logged and the section
   is skipped (None is returned).
4. `archive_member_pattern` defaults to the section name; `desired_filename`
   defaults to the resolved `archive_member_pattern`.

Substitution
------------
One pass, literal, brace-delimited. `{name}` is replaced when `name` is an
identifier; braces around anything else (such as the `{2}` in a regex
quantifier) are left alone. `{{` and `}}` produce literal braces. Replaced
text is never re-scanned, so a field referencing itself cannot loop.

Field Names
-----------
Sections may use the long-standing field names or the descriptive ones;
the descriptive name wins when both are present:

    anchor_tag                                -> anchor_selector
    anchor_text                               -> anchor_text_pattern
    version_tag                               -> version_selector
    target_filename_to_extract_from_archive   -> archive_member_pattern
    version                                   -> recorded_version
    method                                    -> fetch_method
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Literal, get_args

from lifter.exceptions import ConfigError, TemplateNotFound
from lifter.logging import Logger, get_global_logger
from lifter.versioning import Comparator

FetchMethod = Literal["html_scrape", "json_api"]

_FIELD_ALIASES: dict[str, str] = {
    "anchor_tag": "anchor_selector",
    "anchor_text": "anchor_text_pattern",
    "version_tag": "version_selector",
    "target_filename_to_extract_from_archive": "archive_member_pattern",
    "version": "recorded_version",
    "method": "fetch_method",
}

_PLACEHOLDER = re.compile(r"\{\{|\}\}|\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass(frozen=True)
class EntrySpec:
    """Fully-resolved configuration for one tracked artifact.

    Attributes:
        section: Section name (the artifact identifier).
        page_url: Page or API endpoint to fetch.
        anchor_selector: CSS selector (html_scrape) or JSON-path (json_api)
            locating candidate download links.
        anchor_text_pattern: Regex filtering candidates. Full match against
            link text for html_scrape, search against the URL for json_api.
        version_selector: CSS selector or JSON-path locating the version.
        archive_member_pattern: Regex (full match) for the member to pull
            out of an archive.
        desired_filename: Final on-disk path of the artifact.
        recorded_version: Version last written to the store, if any.
        fetch_method: Extraction strategy name.
        template_name: Template the section was built from, if any.
        comparator: Version ordering used by the update gate.
    """

    section: str
    page_url: str
    anchor_selector: str
    anchor_text_pattern: str
    version_selector: str | None
    archive_member_pattern: str
    desired_filename: str
    recorded_version: str | None = None
    fetch_method: FetchMethod = "html_scrape"
    template_name: str | None = None
    comparator: Comparator = "lexicographic"


def substitute(value: str, variables: dict[str, str]) -> str:
    """Replace `{name}` placeholders in a single pass.

    Args:
        value: Raw field value.
        variables: Placeholder name -> replacement text.

    Returns:
        The substituted string.

    Raises:
        ConfigError: If a placeholder names a field not in `variables`.

    Example:
        ```python
        substitute("https://github.com/{project}/releases", {"project": "a/b"})
        # 'https://github.com/a/b/releases'
        substitute(r"v(\\d{2})", {})  # quantifier braces are untouched
        ```
    """

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token == "{{":
            return "{"
        if token == "}}":
            return "}"
        name = match.group(1)
        if name not in variables:
            raise ConfigError(
                f"Placeholder {{{name}}} in {value!r} does not name a defined field"
            )
        return variables[name]

    return _PLACEHOLDER.sub(_replace, value)


def _canonical(fields: dict[str, str]) -> dict[str, str]:
    """Map long-standing field names onto descriptive ones."""
    out: dict[str, str] = {}
    for key, value in fields.items():
        if key in _FIELD_ALIASES:
            out.setdefault(_FIELD_ALIASES[key], value)
    for key, value in fields.items():
        if key not in _FIELD_ALIASES:
            out[key] = value
    return out


def resolve_template_fields(
    template_fields: dict[str, str], variables: dict[str, str]
) -> dict[str, str]:
    """Substitute every template field against the given variables.

    Pure function: neither input is modified.
    """
    return {key: substitute(value, variables) for key, value in template_fields.items()}


def resolve_entry(
    section: str,
    fields: dict[str, str],
    templates: dict[str, dict[str, str]],
    *,
    logger: Logger | None = None,
) -> EntrySpec | None:
    """Resolve one section into an EntrySpec.

    Args:
        section: Section name.
        fields: The section's raw field map.
        templates: Template name -> raw field map.
        logger: Optional logger; falls back to the global logger.

    Returns:
        The resolved entry, or None if the section has no `page_url` after
            template resolution (logged as a warning).

    Raises:
        TemplateNotFound: If the section names an undefined template.
        ConfigError: On unknown placeholders, fetch methods or comparators.

    Example:
        ```python
        templates = {"github": {"page_url": "https://github.com/{project}/releases"}}
        entry = resolve_entry("rg", {"template": "github", "project": "a/b"}, templates)
        entry.page_url              # 'https://github.com/a/b/releases'
        entry.archive_member_pattern  # 'rg'
        ```
    """
    if logger is None:
        logger = get_global_logger()

    template_name = fields.get("template") or None
    template_values: dict[str, str] = {}
    if template_name:
        logger.debug(section, f"Section uses template: {template_name}")
        if template_name not in templates:
            raise TemplateNotFound(template_name, list(templates))
        template_values = resolve_template_fields(templates[template_name], fields)

    resolved = _canonical(template_values)

    variables = {**template_values, **fields}
    own = {k: substitute(v, variables) for k, v in fields.items() if k != "template"}
    resolved.update(_canonical(own))
    logger.debug(section, f"Substitutions complete: {resolved}")

    page_url = resolved.get("page_url", "").strip()
    if not page_url:
        logger.warning(
            section, f'Section {section} is missing required field "page_url"'
        )
        return None

    fetch_method = resolved.get("fetch_method") or "html_scrape"
    if fetch_method not in get_args(FetchMethod):
        raise ConfigError(
            f"Unknown fetch method {fetch_method!r} in section {section!r}. "
            f"Available: {', '.join(get_args(FetchMethod))}"
        )

    comparator = resolved.get("comparator") or "lexicographic"
    if comparator not in get_args(Comparator):
        raise ConfigError(
            f"Unknown comparator {comparator!r} in section {section!r}. "
            f"Available: {', '.join(get_args(Comparator))}"
        )

    member_pattern = resolved.get("archive_member_pattern") or section
    desired_filename = resolved.get("desired_filename") or member_pattern

    return EntrySpec(
        section=section,
        page_url=page_url,
        anchor_selector=resolved.get("anchor_selector", ""),
        anchor_text_pattern=resolved.get("anchor_text_pattern", ""),
        version_selector=resolved.get("version_selector") or None,
        archive_member_pattern=member_pattern,
        desired_filename=desired_filename,
        recorded_version=resolved.get("recorded_version") or None,
        fetch_method=fetch_method,  # type: ignore[arg-type]
        template_name=template_name,
        comparator=comparator,  # type: ignore[arg-type]
    )
