#!/usr/bin/env python3
"""
Tests for boundary line parsing, index construction and loading
"""
import gzip
from unittest.mock import Mock, patch

import pytest
import requests

from cath.boundaries.index import (
    BoundaryIndex, load, parse_boundary_line, resolve_source,
    decode_source, CATH_RELEASES
)
from cath.exceptions import FetchError, ParseError, ConfigurationError
from cath.models.domain import DomainDefinition, DomainSegment


class TestParseBoundaryLine:
    """Test parse_boundary_line"""

    def test_key_and_descriptor(self):
        key, descriptor = parse_boundary_line("1abcA01 v4_2_0 1.10.490.10 1-50:A,60-100:A")
        assert key == "1ABCA"
        assert descriptor == "1-50:A,60-100:A"

    def test_whitespace_separated_segments(self):
        key, descriptor = parse_boundary_line("1abcA01 v4_2_0 1.10.490.10 1-50:A 60-100:A")
        assert descriptor == "1-50:A 60-100:A"

    def test_short_line(self):
        with pytest.raises(ParseError):
            parse_boundary_line("1ab")

    def test_missing_descriptor(self):
        with pytest.raises(ParseError) as exc_info:
            parse_boundary_line("1abcA01 v4_2_0", line_number=7)
        assert exc_info.value.details['line_number'] == 7


class TestBoundaryIndex:
    """Test BoundaryIndex construction and lookup"""

    def test_domains_in_file_order(self, boundary_index):
        domains = boundary_index.lookup("1abc", "A")

        assert len(domains) == 2
        assert domains[0] == DomainDefinition((DomainSegment(1, 50, 'A'), DomainSegment(60, 100, 'A')))
        assert domains[1] == DomainDefinition((DomainSegment(101, 120, 'A'),))

    def test_lookup_is_case_normalized(self, boundary_index):
        assert boundary_index.lookup("1ABC", "A") == boundary_index.lookup("1abc", "a")
        assert boundary_index.lookup_key("2xyzb") == boundary_index["2XYZB"]
        assert "1abcA" in boundary_index

    def test_lookup_miss_is_empty(self, boundary_index):
        assert boundary_index.lookup("1ABC", "B") == ()
        assert boundary_index.lookup_key("ZZZZZ") == ()
        assert "ZZZZZ" not in boundary_index
        with pytest.raises(KeyError):
            boundary_index["ZZZZZ"]

    def test_counts(self, boundary_index):
        assert len(boundary_index) == 2
        assert boundary_index.num_domains == 3
        assert sorted(boundary_index.keys()) == ["1ABCA", "2XYZB"]

    def test_domains_append_not_overwrite(self):
        index = BoundaryIndex.loads(
            "1abcA01 v4_2_0 1.10.8.10 1-10:A\n"
            "2xyzB01 v4_2_0 1.10.8.10 1-10:B\n"
            "1abcA02 v4_2_0 1.10.8.10 11-20:A\n"
        )
        assert [str(d) for d in index.lookup_key("1ABCA")] == ["1-10:A", "11-20:A"]

    def test_blank_and_comment_lines_skipped(self):
        index = BoundaryIndex.loads("# header\n\n1abcA01 v4_2_0 1.10.8.10 1-10:A\n   \n")
        assert index.num_domains == 1

    def test_index_is_immutable(self, boundary_index):
        with pytest.raises(TypeError):
            boundary_index._domains["NEWKY"] = ()
        domains = boundary_index.lookup_key("1ABCA")
        assert isinstance(domains, tuple)

    def test_malformed_range_rejected(self):
        text = "1abcA01 v4_2_0 1.10.8.10 1-10:A\n1abcA02 v4_2_0 1.10.8.10 abc-12:A\n"
        with pytest.raises(ParseError) as exc_info:
            BoundaryIndex.loads(text)

        assert exc_info.value.details['line_number'] == 2
        assert exc_info.value.details['key'] == "1ABCA"

    def test_merge_keys_differing_in_case(self):
        index = BoundaryIndex({
            '1abcA': [DomainDefinition.from_descriptor("1-5")],
            '1ABCA': [DomainDefinition.from_descriptor("6-9")],
        })
        assert len(index) == 1
        assert len(index.lookup_key("1ABCA")) == 2


class TestLoad:
    """Test loading boundary sources"""

    def test_load_plain_file(self, boundary_file):
        index = load(str(boundary_file))
        assert index.num_domains == 3
        assert index.source == str(boundary_file)

    def test_load_gzip_file(self, boundary_gz_file):
        index = load(str(boundary_gz_file))
        assert index.num_domains == 3

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FetchError):
            load(str(tmp_path / "missing.gz"))

    def test_load_corrupt_gzip(self, tmp_path):
        path = tmp_path / "broken.gz"
        path.write_bytes(b'\x1f\x8b' + b'not really gzip')
        with pytest.raises(FetchError):
            load(str(path))

    def test_decode_binary_content(self):
        with pytest.raises(ParseError):
            decode_source(b'\xff\xfe\x00binary')

    def test_load_url(self, boundary_text):
        response = Mock()
        response.content = gzip.compress(boundary_text.encode('ascii'))
        response.raise_for_status.return_value = None

        with patch('cath.boundaries.index.requests.get', return_value=response) as mock_get:
            index = load("https://example.org/cath-b-newest-all.gz", timeout=5)

        mock_get.assert_called_once_with("https://example.org/cath-b-newest-all.gz", timeout=5)
        assert index.num_domains == 3

    def test_load_url_unreachable(self):
        with patch('cath.boundaries.index.requests.get',
                   side_effect=requests.ConnectionError("no route to host")):
            with pytest.raises(FetchError) as exc_info:
                load("https://example.org/cath-b-newest-all.gz")

        assert exc_info.value.details['source'] == "https://example.org/cath-b-newest-all.gz"

    def test_load_url_http_error(self):
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")

        with patch('cath.boundaries.index.requests.get', return_value=response):
            with pytest.raises(FetchError):
                load("https://example.org/missing.gz")

    def test_unsupported_scheme(self):
        with pytest.raises(FetchError):
            load("ftp://orengoftp.biochem.ucl.ac.uk/cath/cath-b-newest-all.gz")


class TestResolveSource:
    """Test resolve_source"""

    def test_explicit_source_wins(self):
        assert resolve_source("/data/cath-b.gz", "all") == "/data/cath-b.gz"

    def test_named_release(self):
        assert resolve_source(None, "s35") == CATH_RELEASES['s35']
        assert resolve_source(None, "all").endswith("cath-b-newest-all.gz")

    def test_unknown_release(self):
        with pytest.raises(ConfigurationError):
            resolve_source(None, "nightly")
