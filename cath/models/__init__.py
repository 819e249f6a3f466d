#!/usr/bin/env python3
"""
CATH Domain Splitter Models Module

Structure models are columnar NumPy views; domain models describe residue
ranges read from CATH boundary files.
"""
from .structure import GroupType, Entity, StructureHeader, StructureView
from .domain import DomainSegment, DomainDefinition

__all__ = [
    'GroupType', 'Entity', 'StructureHeader', 'StructureView',
    'DomainSegment', 'DomainDefinition',
]
