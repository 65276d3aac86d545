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

"""Configuration loading and resolution for lifter.

This package reads the configuration store (ini or YAML), separates
`template:` sections from tracked sections, resolves each section into an
EntrySpec, and writes discovered versions back.

Public API:

- load_store: Load the store into sections and templates
- persist_version: Rewrite one section's version under the store lock
- resolve_entry: Resolve one section into an EntrySpec
- EntrySpec: Fully-resolved per-artifact configuration

Example:
    Basic usage:

        from pathlib import Path
        from lifter.config import load_store, resolve_entry

        store = load_store(Path("lifter.ini"))
        for name, fields in store.sections.items():
            entry = resolve_entry(name, fields, store.templates)

"""

from .resolver import EntrySpec, resolve_entry, substitute
from .store import TEMPLATE_PREFIX, ConfigStore, load_store, persist_version

__all__ = [
    "TEMPLATE_PREFIX",
    "ConfigStore",
    "EntrySpec",
    "load_store",
    "persist_version",
    "resolve_entry",
    "substitute",
]
