"""
Tests for lifter.config module.

Tests configuration loading and resolution including:
- ini and YAML store loading
- Template lookup and placeholder substitution
- Field defaults and aliases
- Version write-back
"""

from __future__ import annotations

import configparser
from concurrent.futures import ThreadPoolExecutor
from typing import get_args

import pytest
import yaml

from lifter.config import load_store, persist_version, resolve_entry, substitute
from lifter.exceptions import ConfigError, TemplateNotFound
from lifter.versioning import Comparator

GITHUB_TEMPLATE = {
    "page_url": "https://github.com/{project}/releases",
    "anchor_tag": "details .Box a",
    "version_tag": ".release-header .f1 a",
}


class TestLoadStore:
    """Tests for load_store."""

    def test_splits_templates_from_sections(self, create_ini_file):
        """Test that template: sections are kept apart from tracked ones."""
        path = create_ini_file(
            "lifter.ini",
            {
                "template:github": GITHUB_TEMPLATE,
                "rg": {"template": "github", "project": "BurntSushi/ripgrep"},
            },
        )

        store = load_store(path)

        assert list(store.sections) == ["rg"]
        assert list(store.templates) == ["github"]
        assert store.templates["github"]["page_url"].endswith("{project}/releases")

    def test_preserves_key_case_and_percent(self, create_ini_file):
        """Test that field names keep their case and % is not interpolated."""
        path = create_ini_file(
            "lifter.ini", {"tool": {"Page_URL": "https://x/%20y", "anchor_text": "a%b"}}
        )

        store = load_store(path)

        assert store.sections["tool"] == {"Page_URL": "https://x/%20y", "anchor_text": "a%b"}

    def test_loads_yaml_store(self, create_yaml_file):
        """Test that .yaml stores are parsed as flat sections."""
        path = create_yaml_file(
            "lifter.yaml",
            {"rg": {"page_url": "https://example.com", "version": "13.0.0"}},
        )

        store = load_store(path)

        assert store.sections["rg"]["version"] == "13.0.0"

    def test_yaml_nested_value_raises(self, create_yaml_file):
        """Test that nested YAML values are rejected."""
        path = create_yaml_file("lifter.yaml", {"rg": {"page_url": ["a", "b"]}})

        with pytest.raises(ConfigError, match="plain value"):
            load_store(path)

    def test_missing_file_raises(self, tmp_test_dir):
        """Test that a missing store is a ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            load_store(tmp_test_dir / "missing.ini")

    def test_unparsable_ini_raises(self, tmp_test_dir):
        """Test that malformed ini content is a ConfigError."""
        path = tmp_test_dir / "broken.ini"
        path.write_text("page_url = no section header\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Error parsing"):
            load_store(path)


class TestSubstitute:
    """Tests for placeholder substitution."""

    def test_replaces_named_placeholder(self):
        assert (
            substitute("https://github.com/{project}/releases", {"project": "a/b"})
            == "https://github.com/a/b/releases"
        )

    def test_regex_quantifiers_untouched(self):
        """Test that {2} and {1,3} survive substitution."""
        assert substitute(r"v\d{2}\.\d{1,3}", {}) == r"v\d{2}\.\d{1,3}"

    def test_double_braces_escape(self):
        assert substitute("{{project}}", {"project": "x"}) == "{project}"

    def test_single_pass(self):
        """Test that substituted text is not expanded again."""
        assert substitute("{a}", {"a": "{b}", "b": "nope"}) == "{b}"

    def test_unknown_placeholder_raises(self):
        with pytest.raises(ConfigError, match="project"):
            substitute("https://github.com/{project}", {})


class TestResolveEntry:
    """Tests for resolve_entry."""

    def test_defaults_member_pattern_and_desired_filename(self):
        """Test that both names fall back to the section name."""
        entry = resolve_entry(
            "rg",
            {"page_url": "https://example.com", "anchor_tag": "a", "version_tag": "h1"},
            {},
        )

        assert entry.archive_member_pattern == "rg"
        assert entry.desired_filename == "rg"

    def test_desired_filename_defaults_to_member_pattern(self):
        entry = resolve_entry(
            "ripgrep",
            {
                "page_url": "https://example.com",
                "target_filename_to_extract_from_archive": "rg",
            },
            {},
        )

        assert entry.archive_member_pattern == "rg"
        assert entry.desired_filename == "rg"

    def test_template_substitution_uses_section_fields(self):
        """Test that template placeholders are filled from the section."""
        entry = resolve_entry(
            "rg",
            {"template": "github", "project": "BurntSushi/ripgrep", "version": "12.1.1"},
            {"github": GITHUB_TEMPLATE},
        )

        assert entry.page_url == "https://github.com/BurntSushi/ripgrep/releases"
        assert entry.anchor_selector == "details .Box a"
        assert entry.version_selector == ".release-header .f1 a"
        assert entry.recorded_version == "12.1.1"
        assert entry.template_name == "github"

    def test_section_fields_override_template(self):
        entry = resolve_entry(
            "rg",
            {
                "template": "github",
                "project": "BurntSushi/ripgrep",
                "anchor_tag": "a.asset",
            },
            {"github": GITHUB_TEMPLATE},
        )

        assert entry.anchor_selector == "a.asset"

    def test_section_field_sees_template_values(self):
        """Test that section fields may reference template-derived fields."""
        templates = {"gh": {"page_url": "https://github.com/{project}/releases", "arch": "x86_64"}}
        entry = resolve_entry(
            "fd",
            {"template": "gh", "project": "sharkdp/fd", "anchor_text": r"fd-.*-{arch}\.tar\.gz"},
            templates,
        )

        assert entry.anchor_text_pattern == r"fd-.*-x86_64\.tar\.gz"

    def test_missing_template_raises(self):
        with pytest.raises(TemplateNotFound) as exc_info:
            resolve_entry("rg", {"template": "gitlab"}, {"github": GITHUB_TEMPLATE})

        assert exc_info.value.template_name == "gitlab"
        assert exc_info.value.available == ["github"]

    def test_missing_page_url_returns_none(self):
        """Test that a section without page_url is skipped, not an error."""
        assert resolve_entry("rg", {"anchor_tag": "a"}, {}) is None

    def test_descriptive_name_wins_over_alias(self):
        entry = resolve_entry(
            "rg",
            {
                "page_url": "https://example.com",
                "anchor_tag": "old",
                "anchor_selector": "new",
            },
            {},
        )

        assert entry.anchor_selector == "new"

    def test_method_and_comparator(self):
        entry = resolve_entry(
            "rg",
            {"page_url": "https://api.example.com", "method": "json_api", "comparator": "semver"},
            {},
        )

        assert entry.fetch_method == "json_api"
        assert entry.comparator == "semver"

    def test_defaults_to_html_scrape_and_lexicographic(self):
        entry = resolve_entry("rg", {"page_url": "https://example.com"}, {})

        assert entry.fetch_method == "html_scrape"
        assert entry.comparator == "lexicographic"
        assert entry.recorded_version is None

    def test_unknown_method_raises(self):
        with pytest.raises(ConfigError, match="Unknown fetch method"):
            resolve_entry("rg", {"page_url": "https://example.com", "method": "ftp"}, {})

    def test_unknown_comparator_raises(self):
        with pytest.raises(ConfigError, match="Unknown comparator"):
            resolve_entry(
                "rg", {"page_url": "https://example.com", "comparator": "numeric"}, {}
            )

    @pytest.mark.parametrize("comparator", get_args(Comparator))
    def test_accepts_every_versioning_comparator(self, comparator):
        entry = resolve_entry(
            "rg", {"page_url": "https://example.com", "comparator": comparator}, {}
        )

        assert entry.comparator == comparator


class TestPersistVersion:
    """Tests for persist_version."""

    def test_updates_only_version_of_one_section(self, create_ini_file):
        path = create_ini_file(
            "lifter.ini",
            {
                "rg": {"page_url": "https://a", "version": "12.1.1"},
                "fd": {"page_url": "https://b", "version": "8.0.0"},
            },
        )

        persist_version(path, "rg", "13.0.0")

        parser = configparser.ConfigParser(interpolation=None)
        parser.read(path, encoding="utf-8")
        assert parser["rg"]["version"] == "13.0.0"
        assert parser["rg"]["page_url"] == "https://a"
        assert parser["fd"]["version"] == "8.0.0"

    def test_adds_version_when_absent(self, create_ini_file):
        path = create_ini_file("lifter.ini", {"rg": {"page_url": "https://a"}})

        persist_version(path, "rg", "1.0.0")

        assert load_store(path).sections["rg"]["version"] == "1.0.0"

    def test_keeps_recorded_version_spelling(self, create_ini_file):
        path = create_ini_file(
            "lifter.ini", {"rg": {"page_url": "https://a", "recorded_version": "1.0"}}
        )

        persist_version(path, "rg", "2.0")

        fields = load_store(path).sections["rg"]
        assert fields["recorded_version"] == "2.0"
        assert "version" not in fields

    def test_yaml_store(self, create_yaml_file):
        path = create_yaml_file(
            "lifter.yaml",
            {"rg": {"page_url": "https://a", "version": "12.1.1"}, "fd": {"page_url": "https://b"}},
        )

        persist_version(path, "rg", "13.0.0")

        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["rg"]["version"] == "13.0.0"
        assert "version" not in data["fd"]

    def test_vanished_section_raises(self, create_ini_file):
        path = create_ini_file("lifter.ini", {"rg": {"page_url": "https://a"}})

        with pytest.raises(ConfigError, match="no longer exists"):
            persist_version(path, "fd", "1.0")

    def test_concurrent_writers_keep_every_update(self, create_ini_file):
        """Test that parallel write-backs for different sections all land."""
        names = [f"tool{i}" for i in range(8)]
        path = create_ini_file(
            "lifter.ini", {name: {"page_url": "https://a"} for name in names}
        )

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda n: persist_version(path, n, f"{n}-v2"), names))

        sections = load_store(path).sections
        assert all(sections[n]["version"] == f"{n}-v2" for n in names)
