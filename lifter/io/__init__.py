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

"""Input/output operations for lifter.

Modules:

fetch : module
    Page fetch and artifact download with retry and linear backoff.
files : module
    Artifact writing and POSIX executable bits.

Example:
    Fetch a page:

        from lifter.io import fetch_text

        html = fetch_text("https://github.com/BurntSushi/ripgrep/releases")

"""

from .fetch import download_bytes, fetch_text, make_session
from .files import ensure_executable, write_artifact

__all__ = [
    "download_bytes",
    "ensure_executable",
    "fetch_text",
    "make_session",
    "write_artifact",
]
