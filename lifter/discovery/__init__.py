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

"""Hit extraction strategies for lifter.

This package provides a pluggable strategy pattern for finding the version
and download URL of a tracked artifact in a fetched page or API response.
The strategy is chosen by the section's `method` field.

Available Strategies:
    html_scrape : HtmlScrapeStrategy
        CSS selectors over an HTML release page. Anchor text must fully
        match the anchor_text regex. Soft "no match" on selector errors.
    json_api : JsonApiStrategy
        JSON-path over an API payload. Candidate URLs are searched (not
        anchored) with the anchor_text regex. Broken or empty JSON-path
        queries are errors.

Example:
    Look up a strategy and run it against a fetched body:

        from lifter.discovery import get_strategy

        strategy = get_strategy(entry.fetch_method)
        hit = strategy.find_hit(entry, body)
        if hit:
            print(hit.version, hit.download_url)

"""

# Import strategy modules to trigger self-registration
from . import (
    html_scrape,  # noqa: F401
    json_api,  # noqa: F401
)
from .base import HitExtractor, get_strategy, register_strategy

__all__ = ["HitExtractor", "get_strategy", "register_strategy"]
