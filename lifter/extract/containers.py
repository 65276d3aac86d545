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

"""Archive and container extraction for lifter.

Pulls one payload file out of a downloaded artifact and writes it straight
to the section's desired filename.

Container Detection
-------------------
The container kind comes from the download URL's path suffix, checked in
this order:

    .tar.gz / .tgz                         -> TAR_GZ
    .tar.xz / .txz                         -> TAR_XZ
    .zip                                   -> ZIP
    .gz                                    -> GZIP (single file)
    .exe / .com / .appimage / .AppImage    -> RAW_BINARY
    no "." in the last 8 characters        -> RAW_BINARY (extensionless)
    anything else                          -> None (unsupported, skipped)

Member Matching
---------------
For tar and zip containers each regular-file entry's BASE name (not its
path inside the archive) is tested against the member pattern as a full
match. The first match is extracted and iteration stops. No match is a
warning, not an error.

GZIP and RAW_BINARY skip matching and never compile the pattern: the
decompressed stream, or the download itself, is the payload.

Error Handling
--------------
- ExtractionError: Corrupt container or invalid member pattern
- PathPermissionError: Output could not be written (from lifter.io.files)

Example:
    Extract ripgrep from a release tarball:
        ```python
        from pathlib import Path
        from lifter.extract import detect_container, extract_payload

        kind = detect_container(url)
        if kind is not None:
            extract_payload(data, kind, "rg", Path("rg"))
        ```
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
import gzip
import io
import lzma
from pathlib import Path, PurePosixPath
import re
import tarfile
from urllib.parse import urlsplit
import zipfile
import zlib

from lifter.exceptions import ExtractionError
from lifter.io.files import write_artifact
from lifter.logging import Logger, get_global_logger


class ContainerKind(Enum):
    """Artifact container formats lifter can unpack."""

    TAR_GZ = "tar.gz"
    TAR_XZ = "tar.xz"
    ZIP = "zip"
    GZIP = "gz"
    RAW_BINARY = "binary"


_SUFFIX_TABLE: tuple[tuple[tuple[str, ...], ContainerKind], ...] = (
    ((".tar.gz", ".tgz"), ContainerKind.TAR_GZ),
    ((".tar.xz", ".txz"), ContainerKind.TAR_XZ),
    ((".zip",), ContainerKind.ZIP),
    ((".gz",), ContainerKind.GZIP),
    ((".exe", ".com", ".appimage", ".AppImage"), ContainerKind.RAW_BINARY),
)

# Extensionless downloads are recognised by the absence of a "." here.
_EXTENSIONLESS_WINDOW = 8


def detect_container(url: str) -> ContainerKind | None:
    """Map a download URL to its container kind.

    Query strings and fragments are ignored.

    Returns:
        The container kind, or None if the extension is not recognised.
    """
    path = urlsplit(url).path or url
    for suffixes, kind in _SUFFIX_TABLE:
        if path.endswith(suffixes):
            return kind
    if "." not in path[-_EXTENSIONLESS_WINDOW:]:
        return ContainerKind.RAW_BINARY
    return None


def _compile_member_pattern(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as err:
        raise ExtractionError(
            f"Failed to construct a regex for the target filename {pattern!r}: {err}"
        ) from err


def _read_from_tar(
    data: bytes, mode: str, member_pattern: str, logger: Logger, prefix: str
) -> bytes | None:
    re_pat = _compile_member_pattern(member_pattern)
    with tarfile.open(fileobj=io.BytesIO(data), mode=mode) as archive:
        for member in archive:
            name = PurePosixPath(member.name).name
            logger.debug(prefix, f"{mode[2:]}, got filename: {name}")
            if not member.isfile() or not re_pat.fullmatch(name):
                continue
            logger.debug(prefix, f"{mode[2:]}, Got a match: {member.name}")
            payload = archive.extractfile(member)
            if payload is None:
                continue
            return payload.read()
    return None


def _read_tar_gz(
    data: bytes, member_pattern: str, logger: Logger, prefix: str
) -> bytes | None:
    return _read_from_tar(data, "r:gz", member_pattern, logger, prefix)


def _read_tar_xz(
    data: bytes, member_pattern: str, logger: Logger, prefix: str
) -> bytes | None:
    return _read_from_tar(data, "r:xz", member_pattern, logger, prefix)


def _read_zip(
    data: bytes, member_pattern: str, logger: Logger, prefix: str
) -> bytes | None:
    re_pat = _compile_member_pattern(member_pattern)
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            name = PurePosixPath(info.filename).name
            logger.debug(prefix, f"zip, got filename: {name}")
            if re_pat.fullmatch(name):
                logger.debug(prefix, f"zip, Got a match: {info.filename}")
                return archive.read(info)
    return None


def _read_gzip(
    data: bytes, member_pattern: str, logger: Logger, prefix: str
) -> bytes | None:
    # A bare .gz holds exactly one file, so there is nothing to match.
    logger.debug(prefix, "gz, decompressing single payload")
    return gzip.decompress(data)


def _read_raw(
    data: bytes, member_pattern: str, logger: Logger, prefix: str
) -> bytes | None:
    return data


_Reader = Callable[[bytes, str, Logger, str], bytes | None]

_READERS: dict[ContainerKind, _Reader] = {
    ContainerKind.TAR_GZ: _read_tar_gz,
    ContainerKind.TAR_XZ: _read_tar_xz,
    ContainerKind.ZIP: _read_zip,
    ContainerKind.GZIP: _read_gzip,
    ContainerKind.RAW_BINARY: _read_raw,
}

_CORRUPT_ERRORS = (
    tarfile.TarError,
    zipfile.BadZipFile,
    gzip.BadGzipFile,
    lzma.LZMAError,
    zlib.error,
    EOFError,
)


def extract_payload(
    data: bytes,
    kind: ContainerKind,
    member_pattern: str,
    output_path: Path,
    *,
    logger: Logger | None = None,
    prefix: str = "EXTRACT",
) -> bool:
    """Extract the payload of a downloaded artifact to `output_path`.

    Args:
        data: Downloaded artifact bytes.
        kind: Container kind, usually from detect_container().
        member_pattern: Regex (full match) for the archive member's base
            name. Ignored for GZIP and RAW_BINARY.
        output_path: Final path of the payload. Overwritten if present.
        logger: Optional logger; falls back to the global logger.
        prefix: Log prefix, usually the section name.

    Returns:
        True if the payload was written, False if no archive member matched.

    Raises:
        ExtractionError: On a corrupt container, or an invalid member
            pattern for a tar or zip container.
        PathPermissionError: If the output cannot be written.
    """
    if logger is None:
        logger = get_global_logger()

    reader = _READERS[kind]

    try:
        payload = reader(data, member_pattern, logger, prefix)
    except _CORRUPT_ERRORS as err:
        raise ExtractionError(
            f"Failed to read {kind.value} archive for {output_path}: {err}"
        ) from err

    if payload is None:
        logger.warning(
            prefix,
            f'Failed to find file "{member_pattern}" inside archive',
        )
        return False

    logger.verbose(prefix, f"Saving {len(payload)} bytes to {output_path}")
    write_artifact(output_path, payload)
    return True
