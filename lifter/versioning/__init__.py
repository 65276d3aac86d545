"""
Version comparison utilities for lifter.

Public API
----------
Hit : dataclass
    A discovered (version, download_url) pair.
compare_versions : function
    Compare two version strings, returning -1, 0, or 1.
is_newer : function
    Check if a remote version is newer than the recorded version.
semver_key : function
    Generate a sortable key for a version-like string.

Examples
--------
    >>> from lifter.versioning import compare_versions
    >>> compare_versions("9.0.0", "10.0.0")  # lexicographic default
    1
    >>> compare_versions("9.0.0", "10.0.0", comparator="semver")
    -1
"""

from .keys import Comparator, Hit, compare_versions, is_newer, semver_key

__all__ = ["Comparator", "Hit", "compare_versions", "is_newer", "semver_key"]
