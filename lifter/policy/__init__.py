"""
Update policies for lifter.

Public API
----------
should_update : function
    Decide whether a discovered hit supersedes what is on disk.
"""

from .updates import should_update

__all__ = ["should_update"]
