"""Object key layout: ``{time-bucket}/{owner}/{logical-dir}/{file-name}``."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

# December 17, 2023 at 1:18pm -> 2023/12/17/13
TIME_BUCKET_FORMAT = "%Y/%m/%d/%H"


def time_bucket(now: datetime) -> str:
    """Return the ``YYYY/MM/DD/HH`` upload prefix for ``now``."""
    return now.strftime(TIME_BUCKET_FORMAT)


def object_key(bucket: str, owner: str, directory: str, name: str) -> str:
    """Join the key segments, skipping empty ones.

    A trailing ``/`` on ``bucket`` is ignored.
    """
    segments = (bucket.rstrip("/"), owner, directory, name)
    return "/".join(s for s in segments if s)


# widths of the YYYY/MM/DD/HH segments
_BUCKET_WIDTHS = (4, 2, 2, 2)


def _is_time_bucket(parts: list[str]) -> bool:
    return len(parts) == len(_BUCKET_WIDTHS) and all(
        p.isdigit() and len(p) == width for p, width in zip(parts, _BUCKET_WIDTHS)
    )


def split_bucket(directory: str) -> tuple[str, str]:
    """Split a ``{bucket}/{logical-dir}`` string into its two parts.

    A leading ``YYYY/MM/DD/HH`` prefix is taken as the bucket and everything
    after it as the logical directory, which may itself be nested. Without
    such a prefix the last segment is the logical directory and everything
    before it the bucket; with fewer than two segments the bucket is empty.

    Example: ``split_bucket("2024/01/17/12/gba/hacks")`` returns
    ``("2024/01/17/12", "gba/hacks")``.
    """
    parts = directory.split("/")
    n = len(_BUCKET_WIDTHS)
    if len(parts) >= n and _is_time_bucket(parts[:n]):
        return "/".join(parts[:n]), "/".join(parts[n:])
    if len(parts) < 2:
        return "", directory
    return "/".join(parts[:-1]), parts[-1]


def fallback_key(owner: str, directory: str, name: str) -> str:
    """Reconstruct an object key from a bucket-prefixed logical directory."""
    bucket, logical_dir = split_bucket(directory)
    return object_key(bucket, owner, logical_dir, name)
