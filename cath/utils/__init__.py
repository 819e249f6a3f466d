#!/usr/bin/env python3
"""
CATH Domain Splitter Utilities Module
"""
from .file import safe_open, atomic_write, ensure_dir
from .range_utils import parse_segment, split_range_tokens

__all__ = [
    'safe_open', 'atomic_write', 'ensure_dir',
    'parse_segment', 'split_range_tokens',
]
