"""
Archive extraction for lifter.

Public API
----------
ContainerKind : enum
    TAR_GZ, TAR_XZ, ZIP, GZIP, RAW_BINARY.
detect_container : function
    Map a download URL's suffix to a container kind.
extract_payload : function
    Write the matching member (or whole stream) to the desired path.
"""

from .containers import ContainerKind, detect_container, extract_payload

__all__ = ["ContainerKind", "detect_container", "extract_payload"]
