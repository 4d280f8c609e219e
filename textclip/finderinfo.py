from __future__ import annotations

import os
import sys

from .constants import FINDER_INFO_SIZE, FINDER_INFO_XATTR, HFS_CREATOR_CODE, HFS_TYPE_CODE


def finder_info(type_code: bytes = HFS_TYPE_CODE, creator: bytes = HFS_CREATOR_CODE) -> bytes:
    """Build the 32-byte FinderInfo record carrying a classic type/creator pair."""
    if len(type_code) != 4 or len(creator) != 4:
        raise ValueError("type and creator codes must be exactly 4 bytes")
    return type_code + creator + b"\x00" * (FINDER_INFO_SIZE - 8)


def tag_clipping_file(path: str) -> bool:
    """Best-effort: mark ``path`` with the clipping file type. Never raises.

    Returns:
        True when the FinderInfo attribute was written.
    """
    setxattr = getattr(os, "setxattr", None)
    if setxattr is None:
        print(f"Warning: cannot tag {path}: extended attributes are not supported here", file=sys.stderr)
        return False
    try:
        setxattr(path, FINDER_INFO_XATTR, finder_info())
    except OSError as exc:
        print(f"Warning: failed to tag {path} as a clipping: {exc}", file=sys.stderr)
        return False
    return True
