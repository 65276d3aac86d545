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

"""Values handed back by run_all() and validate_store().

Both are frozen dataclasses; callers read them, nothing downstream
edits them.

Example:
    Summarising a run:
        ```python
        from pathlib import Path
        from lifter.core import run_all

        results = run_all(Path("lifter.ini"))
        for r in results:
            print(f"{r.section}: {r.status} {r.version or ''}")
        ```

Note:
    Hit and EntrySpec are internal to discovery and configuration and
    live in those packages instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

SectionStatus = Literal[
    "skipped",
    "no_match",
    "up_to_date",
    "unsupported",
    "updated",
    "failed",
]


@dataclass(frozen=True)
class SectionResult:
    """Outcome of one section's run.

    Attributes:
        section: Section name.
        status: "skipped" (no page_url), "no_match" (no hit or no archive
            member), "up_to_date", "unsupported" (unknown download
            extension), "updated" or "failed".
        version: Discovered version, when one was found.
        path: Artifact path, when one was written.
        detail: Error message for failed sections.
    """

    section: str
    status: SectionStatus
    version: str | None = None
    path: Path | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"


@dataclass(frozen=True)
class ValidationResult:
    """Result from validating a configuration store.

    Attributes:
        status: Validation status ("valid" or "invalid").
        errors: List of error messages (empty if valid).
        warnings: List of warning messages.
        section_count: Number of tracked (non-template) sections.
        config_path: String path to the validated store.
    """

    status: str
    errors: list[str]
    warnings: list[str]
    section_count: int
    config_path: str
