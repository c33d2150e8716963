"""Profile image URL normalization rules.

X serves avatars in several sizes, selected by a filename suffix such as
``_normal`` (48x48). Dropping the suffix yields the original upload. The
rule is a plain callable so callers can swap it when the provider changes
its naming.
"""

from __future__ import annotations

import re
from typing import Callable

ImageUrlNormalizer = Callable[[str], str]

_SIZE_SUFFIX = re.compile(r"_normal(?=(\.[A-Za-z0-9]+)?(\?.*)?$)")


def strip_normal_suffix(url: str) -> str:
    """Remove the ``_normal`` size suffix from an avatar filename.

    >>> strip_normal_suffix("https://pbs.twimg.com/profile_images/1/abc_normal.jpg")
    'https://pbs.twimg.com/profile_images/1/abc.jpg'
    """
    return _SIZE_SUFFIX.sub("", url, count=1)


def keep_url(url: str) -> str:
    """Identity rule: leave the provider URL untouched."""
    return url
