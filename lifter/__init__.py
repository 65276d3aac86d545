"""
lifter - keep third-party binaries up to date.

lifter watches release pages (HTML) and release APIs (JSON) for newer
versions of tools you install by hand, downloads the matching artifact,
pulls the binary out of its archive and records the new version back into
its configuration store.

lifter provides:
  - An ini (or YAML) store of tracked sections with reusable templates
  - HTML scraping with CSS selectors and JSON-path API discovery
  - Download with linear retry backoff on transient failures
  - Extraction from tar.gz, tar.xz, zip, gzip and raw binaries
  - Concurrent checks with per-section failure isolation

Quick Start
-----------
Validate a store:

    $ lifter validate lifter.ini

Check every section and update what is outdated:

    $ lifter run lifter.ini

For full CLI documentation:

    $ lifter --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Per-section pipeline and concurrent fan-out.
config : package
    Store loading, template resolution, version write-back.
discovery : package
    Hit extractors for HTML pages and JSON APIs.
versioning : package
    Version comparison.
policy : package
    Update decision.
extract : package
    Archive and container extraction.
io : package
    Fetch, download and file permissions.

Public API
----------
    from lifter.core import run_all, run_section
    from lifter.validation import validate_store
    from lifter.config import load_store, resolve_entry

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.4.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Keep third-party binaries up to date from release pages"

from lifter.config import load_store, resolve_entry
from lifter.core import run_all, run_section
from lifter.validation import validate_store
from lifter.versioning import Hit, compare_versions, is_newer

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "Hit",
    "compare_versions",
    "is_newer",
    "load_store",
    "resolve_entry",
    "run_all",
    "run_section",
    "validate_store",
]
