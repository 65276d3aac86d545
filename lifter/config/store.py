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
Configuration store loading and version write-back for lifter.

The configuration store is a single file of named sections. Each section is
a flat string-to-string map. It doubles as the version record: after a
section downloads a new artifact, its `version` field is rewritten in place.

Store Formats
-------------
The format is chosen by file suffix:
  - **ini** (any suffix other than .yaml/.yml), read with configparser.
    Interpolation is disabled so regex patterns with `%` survive, and key
    case is preserved.
  - **YAML** (.yaml/.yml), a top-level mapping of section name to a flat
    mapping, read with PyYAML.

Sections vs Templates
---------------------
Sections whose name starts with `template:` are templates, not tracked
artifacts. `[template:github]` defines the template named `github`, which
other sections reference with `template = github`.

    [template:github]
    page_url = https://github.com/{project}/releases

    [rg]
    template = github
    project = BurntSushi/ripgrep
    version = 13.0.0

Write-back
----------
persist_version() serializes the reload -> set one key -> write sequence
behind a module-level lock. The lock only covers this persistence step, not
the network or extraction work. Writers outside this process are not
coordinated.

Error Handling
--------------
- ConfigError: File missing, unparsable, or not shaped as sections of
  flat string maps
- All errors are chained with "from err" for better debugging
"""

from __future__ import annotations

import configparser
from dataclasses import dataclass, field
from pathlib import Path
import threading
from typing import Any

import yaml

from lifter.exceptions import ConfigError
from lifter.logging import Logger, get_global_logger

TEMPLATE_PREFIX = "template:"

_YAML_SUFFIXES = {".yaml", ".yml"}

# Guards the reload-mutate-persist sequence in persist_version().
_STORE_LOCK = threading.Lock()

# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class ConfigStore:
    """Parsed configuration store.

    Attributes:
        path: File the store was loaded from.
        sections: Tracked artifacts, section name -> raw field map.
        templates: Template name (prefix stripped) -> raw field map.
    """

    path: Path
    sections: dict[str, dict[str, str]] = field(default_factory=dict)
    templates: dict[str, dict[str, str]] = field(default_factory=dict)


# -------------------------------
# Format helpers
# -------------------------------


def _is_yaml(path: Path) -> bool:
    return path.suffix.lower() in _YAML_SUFFIXES


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None)
    # Keep field names as written (configparser lowercases by default)
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    return parser


def _read_ini(path: Path) -> configparser.ConfigParser:
    parser = _new_parser()
    try:
        with path.open("r", encoding="utf-8") as f:
            parser.read_file(f)
    except configparser.Error as err:
        raise ConfigError(f"Error parsing config file {path}: {err}") from err
    return parser


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML config {path}: {err}") from err
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping of sections: {path}")
    return data


def _flatten_section(path: Path, name: str, values: Any) -> dict[str, str]:
    """Coerce one YAML section to a flat string map."""
    if values is None:
        return {}
    if not isinstance(values, dict):
        raise ConfigError(f"Section {name!r} in {path} must be a mapping")
    flat: dict[str, str] = {}
    for key, value in values.items():
        if isinstance(value, (dict, list)):
            raise ConfigError(
                f"Field {key!r} in section {name!r} must be a plain value, "
                f"got {type(value).__name__}"
            )
        flat[str(key)] = "" if value is None else str(value)
    return flat


def read_raw_sections(path: Path) -> dict[str, dict[str, str]]:
    """Read every section of the store, templates included, as flat maps.

    Args:
        path: Path to the ini or YAML store.

    Returns:
        Section name -> field map, in file order.

    Raises:
        ConfigError: If the file is missing or cannot be parsed.
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    if _is_yaml(path):
        data = _read_yaml(path)
        return {str(name): _flatten_section(path, name, v) for name, v in data.items()}

    parser = _read_ini(path)
    return {name: dict(parser.items(name, raw=True)) for name in parser.sections()}


def split_sections(
    raw: dict[str, dict[str, str]],
) -> tuple[dict[str, dict[str, str]], dict[str, dict[str, str]]]:
    """Separate tracked sections from `template:` sections.

    Returns:
        A tuple (sections, templates). Template names have the prefix
            stripped and surrounding whitespace removed.
    """
    sections: dict[str, dict[str, str]] = {}
    templates: dict[str, dict[str, str]] = {}
    for name, values in raw.items():
        if name.startswith(TEMPLATE_PREFIX):
            templates[name[len(TEMPLATE_PREFIX) :].strip()] = values
        else:
            sections[name] = values
    return sections, templates


# -------------------------------
# Public API
# -------------------------------


def load_store(path: Path, *, logger: Logger | None = None) -> ConfigStore:
    """Load the configuration store.

    Args:
        path: Path to the ini or YAML store.
        logger: Optional logger; falls back to the global logger.

    Returns:
        The parsed store with sections and templates separated.

    Raises:
        ConfigError: If the file is missing or cannot be parsed. This is
            fatal for a run since no section can be processed.

    Example:
        Load a store and list its sections:
            ```python
            from pathlib import Path
            from lifter.config import load_store

            store = load_store(Path("lifter.ini"))
            print(sorted(store.sections))
            ```
    """
    if logger is None:
        logger = get_global_logger()

    path = Path(path)
    logger.verbose("CONFIG", f"Loading config: {path}")
    sections, templates = split_sections(read_raw_sections(path))
    logger.verbose(
        "CONFIG",
        f"Found {len(sections)} section(s) and {len(templates)} template(s)",
    )
    if templates:
        logger.debug("CONFIG", f"Templates: {', '.join(templates)}")

    return ConfigStore(path=path, sections=sections, templates=templates)


def persist_version(
    path: Path,
    section: str,
    version: str,
    *,
    logger: Logger | None = None,
) -> None:
    """Write a new version into one section of the store.

    The file is reloaded immediately before the write so that versions
    persisted by sibling sections since the run started are kept. Only the
    version field of `section` changes: `recorded_version` if the section
    already spells it that way, otherwise `version`.

    Args:
        path: Path to the store.
        section: Section whose version to update.
        version: New version string.
        logger: Optional logger; falls back to the global logger.

    Raises:
        ConfigError: If the store cannot be re-read or the section vanished.
        OSError: If the store file cannot be written.
    """
    if logger is None:
        logger = get_global_logger()

    path = Path(path)
    with _STORE_LOCK:
        if _is_yaml(path):
            data = _read_yaml(path)
            if section not in data:
                raise ConfigError(f"Section {section!r} no longer exists in {path}")
            values = data[section] if isinstance(data[section], dict) else {}
            key = "recorded_version" if "recorded_version" in values else "version"
            values[key] = version
            data[section] = values
            with path.open("w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        else:
            parser = _read_ini(path)
            if not parser.has_section(section):
                raise ConfigError(f"Section {section!r} no longer exists in {path}")
            key = (
                "recorded_version"
                if parser.has_option(section, "recorded_version")
                else "version"
            )
            parser.set(section, key, version)
            with path.open("w", encoding="utf-8") as f:
                parser.write(f)

    logger.debug(section, f"Updated config file {path}: version = {version}")
