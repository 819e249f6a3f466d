"""
Sub-structure building and domain extraction
"""
from .builder import SubstructureBuilder, BuilderCounts
from .extractor import (
    extract, extract_chain, build_domain, DomainExtractor,
    ChainLayout, ChainSpan, domain_key, membership_mask
)

__all__ = [
    'SubstructureBuilder', 'BuilderCounts',
    'extract', 'extract_chain', 'build_domain', 'DomainExtractor',
    'ChainLayout', 'ChainSpan', 'domain_key', 'membership_mask',
]
