#!/usr/bin/env python3
"""
Default configuration values for the CATH domain splitter
"""

DEFAULT_CONFIG = {
    'boundaries': {
        'source': None,
        'release': 'all',
        'timeout': 60,
    },
    'extraction': {
        'emit_empty_domains': True,
    },
    'paths': {
        'output_dir': './output',
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    },
    'pipeline': {
        'use_threads': False,
        'max_workers': 4,
    }
}
