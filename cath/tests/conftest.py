#!/usr/bin/env python3
"""
Shared fixtures for the CATH domain splitter tests
"""
import gzip
import os

import pytest

from cath.boundaries.index import BoundaryIndex
from cath.tests.factories import ChainSpec, make_structure


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep CATH_ variables from the calling shell out of the tests"""
    for key in list(os.environ):
        if key.startswith("CATH_"):
            monkeypatch.delenv(key)


BOUNDARY_TEXT = """\
1abcA01 v4_2_0 1.10.490.10 1-50:A,60-100:A
1abcA02 v4_2_0 3.40.50.300 101-120:A
2xyzB01 putative 2.60.40.10 5-30:B
"""


@pytest.fixture
def boundary_text():
    return BOUNDARY_TEXT


@pytest.fixture
def boundary_index():
    return BoundaryIndex.loads(BOUNDARY_TEXT, source="test")


@pytest.fixture
def boundary_file(tmp_path):
    path = tmp_path / "cath-b-test.txt"
    path.write_text(BOUNDARY_TEXT)
    return path


@pytest.fixture
def boundary_gz_file(tmp_path):
    path = tmp_path / "cath-b-test.gz"
    path.write_bytes(gzip.compress(BOUNDARY_TEXT.encode('ascii')))
    return path


@pytest.fixture
def two_chain_structure():
    """1ABC: chain A residues 1-120, chain B residues 1-40"""
    return make_structure('1ABC', [
        ChainSpec('A', list(range(1, 121))),
        ChainSpec('B', list(range(1, 41)), residue_names=['GLY'] * 40),
    ])


@pytest.fixture
def unannotated_structure():
    return make_structure('9ZZZ', [
        ChainSpec('A', list(range(1, 11))),
        ChainSpec('B', list(range(1, 6)), residue_names=['HOH'] * 5, entity_type='water'),
    ])
