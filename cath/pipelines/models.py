#!/usr/bin/env python3
"""
Result models for batch domain splitting
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Any, Optional, Tuple

from cath.models.structure import StructureView


@dataclass
class SplitResult:
    """Outcome of splitting one structure: domains on success, an error otherwise"""
    structure_id: str
    success: bool = True
    error: Optional[str] = None
    error_type: Optional[str] = None
    domains: List[Tuple[str, StructureView]] = field(default_factory=list)
    processing_time: float = 0.0

    @classmethod
    def failed(cls, structure_id: str, error: Exception) -> 'SplitResult':
        return cls(structure_id=structure_id, success=False,
                   error=str(error), error_type=error.__class__.__name__)

    @property
    def domain_count(self) -> int:
        return len(self.domains)

    @property
    def domain_keys(self) -> List[str]:
        return [key for key, _ in self.domains]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'structure_id': self.structure_id,
            'success': self.success,
            'error': self.error,
            'error_type': self.error_type,
            'domains': self.domain_keys,
            'processing_time': self.processing_time,
        }


@dataclass
class BatchSplitResults:
    """Aggregated results of a batch split"""
    total: int = 0
    success_count: int = 0
    failure_count: int = 0
    structures_with_domains: int = 0
    total_domains_found: int = 0

    results: List[SplitResult] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)  # (structure_id, error)

    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    def add_result(self, result: SplitResult) -> None:
        """Add a split result"""
        self.results.append(result)
        self.total += 1

        if result.success:
            self.success_count += 1
            if result.domains:
                self.structures_with_domains += 1
                self.total_domains_found += result.domain_count
        else:
            self.failure_count += 1
            self.failures.append((result.structure_id, result.error or "Unknown error"))

    def finalize(self) -> None:
        self.end_time = datetime.now()

    @property
    def success_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.success_count / self.total) * 100.0

    @property
    def processing_time(self) -> float:
        """Get total processing time in seconds"""
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds()

    def iter_domains(self):
        """All emitted (key, sub-structure) pairs of successful results"""
        for result in self.results:
            if result.success:
                yield from result.domains

    def get_summary(self) -> Dict[str, Any]:
        return {
            'total_structures': self.total,
            'successful': self.success_count,
            'failed': self.failure_count,
            'success_rate': self.success_rate,
            'structures_with_domains': self.structures_with_domains,
            'total_domains': self.total_domains_found,
            'processing_time': self.processing_time,
            'failures': [{'structure_id': sid, 'error': error} for sid, error in self.failures],
        }
