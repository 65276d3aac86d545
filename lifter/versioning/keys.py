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

"""Core version comparison utilities for lifter.

This module is format-agnostic: it does NOT download or read files.
It only orders version strings.

Two comparators exist:

- "lexicographic" (default): plain string ordering. "9.0.0" sorts after
  "10.0.0". Existing configurations rely on this, so it stays the default.
- "semver": numeric release tuple, then prerelease rank, then post-release
  number. Opt in per section with `comparator = semver`.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Literal

Comparator = Literal["lexicographic", "semver"]

# ----------------------------
# Shared DTO
# ----------------------------


@dataclass(frozen=True)
class Hit:
    """A discovered (version, download URL) pair.

    Attributes:
        version: Version text as found on the page or in the payload.
        download_url: Absolute URL of the artifact.

    """

    version: str
    download_url: str


# ----------------------------
# Semver-like key
# ----------------------------

# Known prerelease tag ordering (lower = older)
_PRE_TAG_RANK: dict[str, float] = {
    "dev": 0,
    "alpha": 1,
    "a": 1,
    "pre": 1,
    "preview": 1,
    "beta": 2,
    "b": 2,
    "rc": 3,
}
_UNKNOWN_PRE_RANK = 2.5
_FINAL_RANK = 4.0
_POST_TAGS = {"post", "p", "rev", "r", "hotfix", "hf"}

_RELEASE = re.compile(r"^\s*v?(\d+(?:[._]\d+)*)", re.IGNORECASE)
_SUFFIX_TAG = re.compile(r"([A-Za-z]+)[._-]?(\d*)")


def _release_and_suffix(text: str) -> tuple[tuple[int, ...], str]:
    """Split "v1.2.3-rc.1+build" into ((1, 2, 3), "-rc.1")."""
    text = text.split("+", 1)[0]
    m = _RELEASE.match(text)
    if not m:
        return (), text
    nums = tuple(int(p) for p in re.split(r"[._]", m.group(1)))
    return nums, text[m.end() :]


def semver_key(text: str) -> tuple:
    """Comparable key for a version-like string.

    Strings with no leading number fall back to ("text", raw) and sort after
    every numeric version.
    """
    release, suffix = _release_and_suffix(text)
    if not release:
        return (1, text)

    # Trailing zeros do not change ordering: 1.2 == 1.2.0
    trimmed = list(release)
    while len(trimmed) > 1 and trimmed[-1] == 0:
        trimmed.pop()

    pre_rank = _FINAL_RANK
    pre_num = 0
    post_num = 0
    m = _SUFFIX_TAG.search(suffix)
    if m:
        tag = m.group(1).lower()
        num = int(m.group(2)) if m.group(2) else 0
        if tag in _POST_TAGS:
            post_num = num or 1
        else:
            pre_rank = _PRE_TAG_RANK.get(tag, _UNKNOWN_PRE_RANK)
            pre_num = num

    return (0, tuple(trimmed), pre_rank, pre_num, post_num)


# ----------------------------
# Comparison
# ----------------------------


def compare_versions(a: str, b: str, *, comparator: Comparator = "lexicographic") -> int:
    """Compare two versions.

    Returns -1 if a < b, 0 if equal, 1 if a > b.
    """
    if comparator == "semver":
        ka, kb = semver_key(a), semver_key(b)
        return (ka > kb) - (ka < kb)
    return (a > b) - (a < b)


def is_newer(
    remote: str,
    current: str | None,
    *,
    comparator: Comparator = "lexicographic",
) -> bool:
    """Decide if 'remote' is newer than 'current'.

    No current version means anything found is newer.
    """
    if current is None:
        return True
    return compare_versions(remote, current, comparator=comparator) > 0
