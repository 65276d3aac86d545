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

"""Update decision policy for lifter.

Determines whether a discovered hit should be downloaded, based on the
recorded version and whether the target file is already on disk.

Example:
    Check if a hit should be downloaded:

        from lifter.policy.updates import should_update
        from lifter.versioning import Hit

        decision = should_update(
            Hit("14.1.0", "https://example.com/rg.tar.gz"),
            recorded_version="13.0.0",
            target_exists=True,
        )

"""

from __future__ import annotations

from lifter.versioning import Comparator, Hit, is_newer


def should_update(
    hit: Hit,
    recorded_version: str | None,
    target_exists: bool,
    *,
    comparator: Comparator = "lexicographic",
) -> bool:
    """Decide whether to download the artifact behind `hit`.

    Args:
        hit: Version and URL found during discovery.
        recorded_version: Version last written to the store (None if none).
        target_exists: Whether the desired file is already on disk.
        comparator: Version ordering. The default plain string comparison
            misorders versions of differing digit width ("9" > "10").

    Returns:
        True if the target is missing, or if the found version is strictly
            newer than the recorded one.

    """
    # A missing target is always (re)fetched, whatever the versions say.
    if not target_exists:
        return True
    return is_newer(hit.version, recorded_version, comparator=comparator)
