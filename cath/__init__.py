#!/usr/bin/env python3
"""
CATH domain splitter

Splits macromolecular structures held as columnar StructureViews into
independent sub-structures, one per CATH domain.
"""

__version__ = '0.1.0'
__license__ = 'MIT'

from .exceptions import CATHError, FetchError, ParseError, ValidationError
from .boundaries import BoundaryIndex, load
from .structure import extract, DomainExtractor, SubstructureBuilder, BuilderCounts

__all__ = [
    'CATHError', 'FetchError', 'ParseError', 'ValidationError',
    'BoundaryIndex', 'load',
    'extract', 'DomainExtractor', 'SubstructureBuilder', 'BuilderCounts',
]
