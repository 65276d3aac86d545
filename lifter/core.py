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

"""Core orchestration for lifter.

Drives each tracked section through the update pipeline and fans sections
out over a thread pool.

Per-Section Pipeline:

    Resolving -> Fetching -> Extracting-Hit -> Gating -> Downloading
              -> Unpacking -> Finalizing -> Done

Early exits to Done (normal outcomes, not errors):

- Resolving: no `page_url` after template resolution ("skipped")
- Extracting-Hit: nothing on the page matched ("no_match")
- Gating: target exists and the version is not newer ("up_to_date")
- Downloading: the download URL has an unknown extension ("unsupported")
- Unpacking: no archive member matched ("no_match")

Anything else (bad template, network failure after retries, corrupt archive,
unwritable target) raises out of run_section(). run_all() catches it at the
worker boundary, logs it with a traceback and records the section as
"failed" without disturbing sibling sections.

Finalizing sets the POSIX executable bits (skipped for .exe payloads) and
writes the new version into the section's `version` field. The store write
happens under a lock and re-reads the file first, so concurrent sections
never lose each other's updates.

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from lifter.core import run_all

        results = run_all(Path("lifter.ini"), workers=8)
        failed = [r for r in results if not r.ok]
        ```
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
import queue
from urllib.parse import urlsplit

import requests

from lifter.config import ConfigStore, EntrySpec, load_store, persist_version, resolve_entry
from lifter.discovery import get_strategy
from lifter.events import (
    CheckEnded,
    CheckStarted,
    DownloadProgress,
    NeedsUpdate,
    NoMoreWork,
    Updated,
    UpToDate,
    emit,
)
from lifter.exceptions import ConfigError
from lifter.extract import detect_container, extract_payload
from lifter.io import download_bytes, ensure_executable, fetch_text, make_session
from lifter.logging import Logger, get_global_logger
from lifter.policy import should_update
from lifter.results import SectionResult

DEFAULT_WORKERS = 4


def target_path(entry: EntrySpec, output_dir: Path | None = None) -> Path:
    """Final on-disk path for a section's artifact.

    Relative desired filenames are placed under `output_dir` when given,
    otherwise under the current working directory.
    """
    path = Path(entry.desired_filename).expanduser()
    if output_dir is not None and not path.is_absolute():
        path = Path(output_dir) / path
    return path


def _is_windows_executable(download_url: str, path: Path) -> bool:
    return urlsplit(download_url).path.lower().endswith(".exe") or (
        path.suffix.lower() == ".exe"
    )


def _process(
    section: str,
    store: ConfigStore,
    *,
    session: requests.Session,
    output_dir: Path | None,
    events: queue.Queue | None,
    logger: Logger,
) -> SectionResult:
    # Resolving
    entry = resolve_entry(
        section, store.sections[section], store.templates, logger=logger
    )
    if entry is None:
        return SectionResult(section, "skipped")
    strategy = get_strategy(entry.fetch_method)

    # Fetching
    body = fetch_text(entry.page_url, session=session, logger=logger, prefix=section)

    # Extracting-Hit
    hit = strategy.find_hit(entry, body, logger=logger)
    if hit is None:
        return SectionResult(section, "no_match")

    # Gating
    target = target_path(entry, output_dir)
    if not should_update(
        hit, entry.recorded_version, target.exists(), comparator=entry.comparator
    ):
        logger.verbose(
            section, f"Found version is not newer: {hit.version}; Skipping."
        )
        emit(events, UpToDate(section, hit.version))
        return SectionResult(section, "up_to_date", version=hit.version, path=target)
    emit(events, NeedsUpdate(section, entry.recorded_version, hit.version))

    kind = detect_container(hit.download_url)
    if kind is None:
        logger.warning(
            section,
            f"Failed to match known file extensions of {hit.download_url}. Skipping.",
        )
        return SectionResult(section, "unsupported", version=hit.version)

    # Downloading
    logger.verbose(section, f"Downloading version {hit.version}")
    data = download_bytes(
        hit.download_url,
        session=session,
        on_progress=lambda fraction: emit(events, DownloadProgress(section, fraction)),
        logger=logger,
        prefix=section,
    )

    # Unpacking
    if not extract_payload(
        data,
        kind,
        entry.archive_member_pattern,
        target,
        logger=logger,
        prefix=section,
    ):
        return SectionResult(section, "no_match", version=hit.version)

    # Finalizing
    if not _is_windows_executable(hit.download_url, target):
        ensure_executable(target, logger=logger)
    persist_version(store.path, section, hit.version, logger=logger)

    logger.verbose(section, f"Updated to version {hit.version}")
    emit(events, Updated(section, hit.version))
    return SectionResult(section, "updated", version=hit.version, path=target)


def run_section(
    section: str,
    store: ConfigStore,
    *,
    output_dir: Path | None = None,
    events: queue.Queue | None = None,
    logger: Logger | None = None,
    session: requests.Session | None = None,
) -> SectionResult:
    """Check one section and update its artifact if a newer version exists.

    Args:
        section: Name of a tracked section in `store`.
        store: Loaded configuration store.
        output_dir: Base directory for relative desired filenames. Defaults
            to the current working directory.
        events: Optional queue receiving progress events.
        logger: Optional logger; falls back to the global logger.
        session: HTTP session to use. A fresh one is created (and closed)
            if omitted.

    Returns:
        The section's outcome. Normal negative outcomes ("skipped",
            "no_match", "up_to_date", "unsupported") are results, not errors.

    Raises:
        ConfigError: On template or field problems.
        FetchError: On network failure after retries.
        DiscoveryError: On structurally broken json_api expressions or bodies.
        ExtractionError: On a corrupt archive.
        PathPermissionError: If the artifact cannot be written or made
            executable.
    """
    if logger is None:
        logger = get_global_logger()

    emit(events, CheckStarted(section))
    try:
        if session is None:
            with make_session() as own:
                return _process(
                    section,
                    store,
                    session=own,
                    output_dir=output_dir,
                    events=events,
                    logger=logger,
                )
        return _process(
            section,
            store,
            session=session,
            output_dir=output_dir,
            events=events,
            logger=logger,
        )
    finally:
        emit(events, CheckEnded(section))


def run_all(
    config_path: Path,
    *,
    workers: int = DEFAULT_WORKERS,
    sections: list[str] | None = None,
    output_dir: Path | None = None,
    events: queue.Queue | None = None,
    logger: Logger | None = None,
) -> list[SectionResult]:
    """Run every tracked section of a store concurrently.

    Args:
        config_path: Path to the ini or YAML store.
        workers: Maximum number of sections processed at once.
        sections: Restrict the run to these section names.
        output_dir: Base directory for relative desired filenames.
        events: Optional queue receiving progress events. NoMoreWork is
            emitted once at the end.
        logger: Optional logger; falls back to the global logger.

    Returns:
        One SectionResult per section, in completion order. Sections that
            raised are recorded with status "failed".

    Raises:
        ConfigError: If the store cannot be loaded or `sections` names a
            section that does not exist. Nothing is run in that case.
    """
    if logger is None:
        logger = get_global_logger()

    logger.step(1, 2, "Loading configuration...")
    store = load_store(config_path, logger=logger)

    names = list(store.sections)
    if sections:
        unknown = [name for name in sections if name not in store.sections]
        if unknown:
            raise ConfigError(
                f"Unknown section(s): {', '.join(unknown)}. "
                f"Available: {', '.join(names) or '(none)'}"
            )
        names = [name for name in names if name in sections]

    logger.step(2, 2, f"Checking {len(names)} section(s)...")
    results: list[SectionResult] = []
    try:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {
                pool.submit(
                    run_section,
                    name,
                    store,
                    output_dir=output_dir,
                    events=events,
                    logger=logger,
                ): name
                for name in names
            }
            for future in as_completed(futures):
                name = futures[future]
                try:
                    results.append(future.result())
                except Exception as err:
                    logger.error(name, f"Error: {err}", exc_info=True)
                    results.append(SectionResult(name, "failed", detail=str(err)))
    finally:
        emit(events, NoMoreWork())

    return results
