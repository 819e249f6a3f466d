"""
CATH domain boundary loading and indexing
"""
from .index import (
    BoundaryIndex, load, resolve_source, fetch_source, decode_source,
    parse_boundary_line, CATH_RELEASES
)

__all__ = [
    'BoundaryIndex', 'load', 'resolve_source', 'fetch_source', 'decode_source',
    'parse_boundary_line', 'CATH_RELEASES',
]
