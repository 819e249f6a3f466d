# cath/utils/range_utils.py

import re
from typing import List, Tuple, Optional

from cath.exceptions import ParseError

# start-end with optional negative residue numbers, e.g. "-3-45" or "12-80"
_BOUNDS_RE = re.compile(r'^(-?\d+)-(-?\d+)$')
_SEPARATOR_RE = re.compile(r'[\s,]+')


def split_range_tokens(range_str: str) -> List[str]:
    """Split a range descriptor on whitespace and commas"""
    return [token for token in _SEPARATOR_RE.split(range_str.strip()) if token]


def parse_segment(token: str) -> Tuple[int, int, Optional[str]]:
    """Parse one "start-end[:tag]" token into (start, end, tag)

    Raises:
        ParseError: If the bounds are not integers or start > end
    """
    bounds, _, tag = token.partition(':')
    match = _BOUNDS_RE.match(bounds)
    if not match:
        raise ParseError(f"Malformed range token: {token!r}", {'token': token})

    start, end = int(match.group(1)), int(match.group(2))
    if start > end:
        raise ParseError(f"Range start exceeds end in token: {token!r}", {'token': token})

    return start, end, tag or None
