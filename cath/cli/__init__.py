"""Command line interface for the CATH domain splitter"""
from .main import main

__all__ = ['main']
