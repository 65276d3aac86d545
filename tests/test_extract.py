"""
Tests for lifter.extract module.

Tests archive extraction including:
- Container detection from download URLs
- Member matching on base names in tar and zip archives
- Single-file gzip and raw binaries
- Corrupt archives
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from conftest import make_gzip, make_tar, make_zip
from lifter.exceptions import ExtractionError
from lifter.extract import ContainerKind, detect_container, extract_payload

PAYLOAD = b"\x7fELF binary payload"
NOISE = {
    "ripgrep-13.0.0/README.md": b"readme",
    "ripgrep-13.0.0/doc/target.1": b"manpage",
    "ripgrep-13.0.0/complete/_target": b"zsh completion",
}


def _archives() -> dict[ContainerKind, bytes]:
    members = {**NOISE, "ripgrep-13.0.0/target": PAYLOAD}
    return {
        ContainerKind.TAR_GZ: make_tar(members, "w:gz"),
        ContainerKind.TAR_XZ: make_tar(members, "w:xz"),
        ContainerKind.ZIP: make_zip(members),
    }


class TestDetectContainer:
    """Tests for detect_container."""

    @pytest.mark.parametrize(
        ("url", "kind"),
        [
            ("https://x/rg-13.0.0.tar.gz", ContainerKind.TAR_GZ),
            ("https://x/rg-13.0.0.tgz", ContainerKind.TAR_GZ),
            ("https://x/rg-13.0.0.tar.xz", ContainerKind.TAR_XZ),
            ("https://x/rg-13.0.0.txz", ContainerKind.TAR_XZ),
            ("https://x/rg-13.0.0.zip", ContainerKind.ZIP),
            ("https://x/rg-13.0.0.gz", ContainerKind.GZIP),
            ("https://x/rg-13.0.0.exe", ContainerKind.RAW_BINARY),
            ("https://x/rg.com", ContainerKind.RAW_BINARY),
            ("https://x/nvim.appimage", ContainerKind.RAW_BINARY),
            ("https://x/nvim.AppImage", ContainerKind.RAW_BINARY),
            ("https://x/download/jq-linux64", ContainerKind.RAW_BINARY),
            ("https://x/rg.zip?raw=true", ContainerKind.ZIP),
        ],
    )
    def test_known_suffixes(self, url, kind):
        assert detect_container(url) is kind

    @pytest.mark.parametrize(
        "url", ["https://x/rg-13.0.0.deb", "https://x/tool.tar.bz2", "https://x/a.msi"]
    )
    def test_unknown_extension_returns_none(self, url):
        assert detect_container(url) is None


class TestExtractPayload:
    """Tests for extract_payload."""

    @pytest.mark.parametrize(
        "kind", [ContainerKind.TAR_GZ, ContainerKind.TAR_XZ, ContainerKind.ZIP]
    )
    def test_matching_member_extracted_by_base_name(self, tmp_test_dir, kind):
        """Test that only the exactly-named member lands at the target path."""
        out = tmp_test_dir / "rg"

        assert extract_payload(_archives()[kind], kind, "target", out)
        assert out.read_bytes() == PAYLOAD

    def test_all_archive_kinds_yield_identical_bytes(self, tmp_test_dir):
        outputs = []
        for kind, data in _archives().items():
            out = tmp_test_dir / f"out-{kind.name}"
            extract_payload(data, kind, "^target$", out)
            outputs.append(out.read_bytes())

        assert outputs == [PAYLOAD, PAYLOAD, PAYLOAD]

    def test_repeat_extraction_overwrites_identically(self, tmp_test_dir):
        out = tmp_test_dir / "rg"
        out.write_bytes(b"old version")
        data = _archives()[ContainerKind.TAR_GZ]

        extract_payload(data, ContainerKind.TAR_GZ, "target", out)
        first = out.read_bytes()
        extract_payload(data, ContainerKind.TAR_GZ, "target", out)

        assert first == out.read_bytes() == PAYLOAD

    def test_regex_member_pattern(self, tmp_test_dir):
        data = make_zip({"fd-v8.4.0/fd": b"fd", "fd-v8.4.0/fd.1": b"man"})
        out = tmp_test_dir / "fd"

        assert extract_payload(data, ContainerKind.ZIP, r"fd(\.exe)?", out)
        assert out.read_bytes() == b"fd"

    @pytest.mark.parametrize(
        "kind", [ContainerKind.TAR_GZ, ContainerKind.TAR_XZ, ContainerKind.ZIP]
    )
    def test_no_matching_member_returns_false(self, tmp_test_dir, kind):
        out = tmp_test_dir / "missing"

        assert not extract_payload(_archives()[kind], kind, "rg", out)
        assert not out.exists()

    def test_gzip_written_wholesale(self, tmp_test_dir):
        out = tmp_test_dir / "tool"

        assert extract_payload(make_gzip(PAYLOAD), ContainerKind.GZIP, "ignored", out)
        assert out.read_bytes() == PAYLOAD

    def test_raw_binary_written_as_is(self, tmp_test_dir):
        out = tmp_test_dir / "tool.exe"

        assert extract_payload(PAYLOAD, ContainerKind.RAW_BINARY, "ignored", out)
        assert out.read_bytes() == PAYLOAD

    @pytest.mark.parametrize("kind", list(ContainerKind)[:4])
    def test_corrupt_archive_raises(self, tmp_test_dir, kind):
        with pytest.raises(ExtractionError):
            extract_payload(b"not an archive at all", kind, "target", tmp_test_dir / "x")

    @pytest.mark.parametrize(
        "kind", [ContainerKind.TAR_GZ, ContainerKind.TAR_XZ, ContainerKind.ZIP]
    )
    def test_invalid_member_pattern_raises(self, tmp_test_dir, kind):
        with pytest.raises(ExtractionError, match="regex"):
            extract_payload(_archives()[kind], kind, "rg(", tmp_test_dir / "x")

    def test_invalid_pattern_ignored_for_raw_binary(self, tmp_test_dir):
        out = tmp_test_dir / "nix-tool"

        assert extract_payload(PAYLOAD, ContainerKind.RAW_BINARY, "*nix", out)
        assert out.read_bytes() == PAYLOAD

    def test_invalid_pattern_ignored_for_gzip(self, tmp_test_dir):
        out = tmp_test_dir / "nix-tool"

        assert extract_payload(make_gzip(PAYLOAD), ContainerKind.GZIP, "*nix", out)
        assert out.read_bytes() == PAYLOAD

    @pytest.mark.parametrize(
        "kind", [ContainerKind.TAR_GZ, ContainerKind.TAR_XZ, ContainerKind.ZIP]
    )
    def test_member_logs_use_section_prefix(self, tmp_test_dir, kind):
        logger = MagicMock()

        extract_payload(
            _archives()[kind], kind, "target", tmp_test_dir / "x", logger=logger, prefix="rg"
        )

        assert logger.debug.call_args_list
        assert {c.args[0] for c in logger.debug.call_args_list} == {"rg"}
