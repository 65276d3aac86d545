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

"""Configuration store validation.

Checks a store without making network calls or writing files, for quick
feedback while editing a store and in CI pre-checks.

Validation Checks:

- The file exists and parses (ini or YAML)
- Every referenced template exists
- Every placeholder names a defined field
- Every section has a page_url (warning only, matching the runtime skip)
- The fetch method and comparator are known
- CSS selectors compile (html_scrape) or JSON-path expressions parse
  (json_api)
- anchor_text is a valid regex
- The archive member pattern is a valid regex (warning only: it is used
  for tar and zip downloads alone)

Example:
    Validate a store and handle results:
        ```python
        from pathlib import Path
        from lifter.validation import validate_store

        result = validate_store(Path("lifter.ini"))
        if result.status == "valid":
            print(f"Store is valid with {result.section_count} section(s)")
        else:
            for error in result.errors:
                print(f"Error: {error}")
        ```

"""

from __future__ import annotations

from pathlib import Path
import re

from lifter.config import load_store, resolve_entry
from lifter.discovery import get_strategy
from lifter.exceptions import ConfigError
from lifter.logging import SilentLogger
from lifter.results import ValidationResult

__all__ = ["validate_store"]


def validate_store(config_path: Path, verbose: bool = False) -> ValidationResult:
    """Validate a configuration store without downloading anything.

    Args:
        config_path: Path to the ini or YAML store.
        verbose: If True, print validation progress.

    Returns:
        Validation status, errors, warnings and section count.

    """
    config_path = Path(config_path)
    errors: list[str] = []
    warnings: list[str] = []

    if verbose:
        print(f"Validating store: {config_path}")

    try:
        store = load_store(config_path, logger=SilentLogger())
    except ConfigError as err:
        errors.append(str(err))
        return ValidationResult(
            status="invalid",
            errors=errors,
            warnings=warnings,
            section_count=0,
            config_path=str(config_path),
        )

    if verbose:
        print("  [OK] Store syntax is valid")
        print(
            f"  [OK] Found {len(store.sections)} section(s) "
            f"and {len(store.templates)} template(s)"
        )

    if not store.sections:
        warnings.append("Store defines no tracked sections")

    for section, fields in store.sections.items():
        try:
            entry = resolve_entry(section, fields, store.templates, logger=SilentLogger())
        except ConfigError as err:
            errors.append(f"[{section}] {err}")
            continue

        if entry is None:
            warnings.append(
                f'[{section}] Missing required field "page_url"; section will be skipped'
            )
            continue

        strategy = get_strategy(entry.fetch_method)
        for message in strategy.validate_entry(entry):
            errors.append(f"[{section}] {message}")

        # Only tar and zip downloads use the member pattern, and the download
        # kind is not known until run time.
        try:
            re.compile(entry.archive_member_pattern)
        except re.error as err:
            warnings.append(
                f"[{section}] Invalid archive member pattern: {err}; "
                "tar and zip downloads will fail"
            )

        if verbose:
            print(f"  [OK] [{section}] resolved ({entry.fetch_method})")

    return ValidationResult(
        status="invalid" if errors else "valid",
        errors=errors,
        warnings=warnings,
        section_count=len(store.sections),
        config_path=str(config_path),
    )
