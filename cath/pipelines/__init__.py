"""
Batch splitting pipeline
"""
from .models import SplitResult, BatchSplitResults
from .split_service import DomainSplitService
from .writer import write_domains, domain_path

__all__ = ['SplitResult', 'BatchSplitResults', 'DomainSplitService', 'write_domains', 'domain_path']
