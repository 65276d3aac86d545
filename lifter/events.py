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

"""Progress events emitted by the lifter orchestrator.

Workers push events onto an optional queue so a display surface can show
status without the workers ever waiting on it. Emission order within one
section follows the run:

    CheckStarted -> (UpToDate | NeedsUpdate -> DownloadProgress* -> Updated)
                 -> CheckEnded

run_all() emits a single NoMoreWork after every section has finished.

Example:
    Draining events after a run:
        ```python
        import queue
        from lifter.core import run_all
        from lifter.events import Updated

        sink = queue.Queue()
        run_all(Path("lifter.ini"), events=sink)
        while not sink.empty():
            event = sink.get_nowait()
            if isinstance(event, Updated):
                print(f"{event.name} -> {event.version}")
        ```
"""

from __future__ import annotations

from dataclasses import dataclass
import queue


@dataclass(frozen=True)
class CheckStarted:
    name: str


@dataclass(frozen=True)
class CheckEnded:
    name: str


@dataclass(frozen=True)
class UpToDate:
    name: str
    version: str


@dataclass(frozen=True)
class NeedsUpdate:
    name: str
    current: str | None
    latest: str


@dataclass(frozen=True)
class DownloadProgress:
    """Download fraction for one section, 0.0 to 1.0."""

    name: str
    progress: float


@dataclass(frozen=True)
class Updated:
    name: str
    version: str


@dataclass(frozen=True)
class NoMoreWork:
    pass


ProgressEvent = (
    CheckStarted
    | CheckEnded
    | UpToDate
    | NeedsUpdate
    | DownloadProgress
    | Updated
    | NoMoreWork
)


def emit(sink: queue.Queue | None, event: ProgressEvent) -> None:
    """Push an event onto the sink without blocking. No-op without a sink."""
    if sink is None:
        return
    sink.put_nowait(event)
