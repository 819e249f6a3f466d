#!/usr/bin/env python3
"""
Domain boundary models for the CATH domain splitter
Defines segments and (possibly discontinuous) domain definitions
"""
from dataclasses import dataclass
from typing import Optional, List, Tuple, Iterator

from cath.exceptions import ParseError
from cath.utils.range_utils import parse_segment, split_range_tokens


@dataclass(frozen=True)
class DomainSegment:
    """Inclusive residue-id range belonging to a domain"""
    start: int
    end: int
    tag: Optional[str] = None

    def contains(self, residue_id: int) -> bool:
        return self.start <= residue_id <= self.end

    def __len__(self) -> int:
        return self.end - self.start + 1

    def __str__(self) -> str:
        return f"{self.start}-{self.end}:{self.tag}" if self.tag else f"{self.start}-{self.end}"


@dataclass(frozen=True)
class DomainDefinition:
    """Ordered list of segments; a residue belongs if any segment contains it"""
    segments: Tuple[DomainSegment, ...]

    def __post_init__(self):
        object.__setattr__(self, 'segments', tuple(self.segments))

    @classmethod
    def from_descriptor(cls, descriptor: str) -> 'DomainDefinition':
        """Parse a range descriptor such as "1-50:A,60-100:A"

        Raises:
            ParseError: If the descriptor is empty or any token is malformed
        """
        tokens = split_range_tokens(descriptor)
        if not tokens:
            raise ParseError("Empty domain range descriptor", {'descriptor': descriptor})
        return cls(tuple(DomainSegment(*parse_segment(token)) for token in tokens))

    @classmethod
    def from_bounds(cls, bounds: List[Tuple[int, int]]) -> 'DomainDefinition':
        return cls(tuple(DomainSegment(start, end) for start, end in bounds))

    def contains(self, residue_id: int) -> bool:
        return any(segment.contains(residue_id) for segment in self.segments)

    @property
    def span(self) -> Tuple[int, int]:
        """Lowest start and highest end over all segments"""
        return (min(s.start for s in self.segments), max(s.end for s in self.segments))

    @property
    def is_discontinuous(self) -> bool:
        return len(self.segments) > 1

    def __iter__(self) -> Iterator[DomainSegment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        return ",".join(str(segment) for segment in self.segments)
