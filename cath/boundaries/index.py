#!/usr/bin/env python3
"""
Boundary index for CATH domain annotations

Reads the CATH-B domain boundary format, one domain per line:

    1abcA01 v4_2_0 1.10.490.10 1-50:A,60-100:A

The first five characters are the structure id plus chain name, the domain
number follows, and the range descriptor starts at the third field after the
domain id. Domains for the same chain are kept in file order.
"""
import gzip
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, List, Tuple, Iterable, Iterator, Optional

import requests

from cath.exceptions import FetchError, ParseError, ConfigurationError, FileOperationError
from cath.models.domain import DomainDefinition
from cath.utils.file import safe_open

logger = logging.getLogger("cath.boundaries")

CATH_URL = "http://download.cathdb.info/cath/releases/daily-release/newest/"

# Named CATH-B daily releases
CATH_RELEASES = {
    # latest domain boundaries and superfamily annotations for all CATH domains
    'all': CATH_URL + "cath-b-newest-all.gz",
    # domains in the most recent release of CATH-Plus
    'latest': CATH_URL + "cath-b-newest-latest-release.gz",
    # domains released since the most recent release of CATH-Plus
    'putative': CATH_URL + "cath-b-newest-putative.gz",
    # sequence family annotations for non-redundant s35 representatives
    's35': CATH_URL + "cath-b-s35-newest.gz",
}

KEY_LENGTH = 5
DOMAIN_ID_LENGTH = 7
GZIP_MAGIC = b'\x1f\x8b'


def normalize_key(key: str) -> str:
    return key.upper()


def parse_boundary_line(line: str, line_number: Optional[int] = None) -> Tuple[str, str]:
    """Split one boundary line into (key, range descriptor)

    Raises:
        ParseError: If the line is too short or has no range field
    """
    details = {'line': line, 'line_number': line_number}
    if len(line) < KEY_LENGTH:
        raise ParseError(f"Boundary line too short for a chain key: {line!r}", details)

    key = normalize_key(line[:KEY_LENGTH])
    fields = line[DOMAIN_ID_LENGTH:].split()
    if len(fields) < 3:
        raise ParseError(f"Boundary line has no range descriptor: {line!r}", details)

    return key, " ".join(fields[2:])


class BoundaryIndex(Mapping):
    """Immutable mapping from chain key to its ordered domain definitions"""

    def __init__(self, domains: Optional[Dict[str, Iterable[DomainDefinition]]] = None,
                 source: Optional[str] = None):
        merged: Dict[str, List[DomainDefinition]] = {}
        for key, definitions in (domains or {}).items():
            merged.setdefault(normalize_key(key), []).extend(definitions)

        self._domains = MappingProxyType({key: tuple(defs) for key, defs in merged.items()})
        self.source = source

    @classmethod
    def from_lines(cls, lines: Iterable[str], source: Optional[str] = None) -> 'BoundaryIndex':
        """Build an index from boundary lines

        Raises:
            ParseError: On the first malformed line, with its line number
        """
        domains: Dict[str, List[DomainDefinition]] = {}
        for line_number, raw_line in enumerate(lines, 1):
            line = raw_line.rstrip('\r\n')
            if not line.strip() or line.lstrip().startswith('#'):
                continue

            key, descriptor = parse_boundary_line(line, line_number)
            try:
                definition = DomainDefinition.from_descriptor(descriptor)
            except ParseError as e:
                raise ParseError(f"Line {line_number}: {e.message}",
                                 {**e.details, 'line_number': line_number, 'key': key}) from e

            domains.setdefault(key, []).append(definition)

        index = cls(domains, source=source)
        logger.info(f"Indexed {index.num_domains} domains for {len(index)} chains"
                    + (f" from {source}" if source else ""))
        return index

    @classmethod
    def loads(cls, text: str, source: Optional[str] = None) -> 'BoundaryIndex':
        return cls.from_lines(text.splitlines(), source=source)

    def lookup_key(self, key: str) -> Tuple[DomainDefinition, ...]:
        """Domain definitions for a chain key, empty if none are known"""
        return self._domains.get(normalize_key(key), ())

    def lookup(self, structure_id: str, chain_name: str) -> Tuple[DomainDefinition, ...]:
        return self.lookup_key(structure_id + chain_name)

    @property
    def num_domains(self) -> int:
        return sum(len(defs) for defs in self._domains.values())

    def __getitem__(self, key: str) -> Tuple[DomainDefinition, ...]:
        return self._domains[normalize_key(key)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize_key(key) in self._domains

    def __iter__(self) -> Iterator[str]:
        return iter(self._domains)

    def __len__(self) -> int:
        return len(self._domains)

    def __repr__(self) -> str:
        return f"BoundaryIndex(chains={len(self)}, domains={self.num_domains})"


def resolve_source(source: Optional[str] = None, release: Optional[str] = None) -> str:
    """Pick the boundary source: an explicit path/URL wins over a release name

    Raises:
        ConfigurationError: If neither is usable
    """
    if source:
        return source
    if release in CATH_RELEASES:
        return CATH_RELEASES[release]
    raise ConfigurationError(f"Unknown CATH release: {release!r}",
                             {'known_releases': sorted(CATH_RELEASES)})


def fetch_source(source: str, timeout: float = 60) -> bytes:
    """Read the raw bytes of a boundary source (URL or local path)

    Raises:
        FetchError: If the source cannot be retrieved
    """
    if "://" in source:
        if not source.startswith(("http://", "https://")):
            raise FetchError(f"Unsupported URL scheme for boundary source: {source}", {'source': source})
        try:
            logger.info(f"Downloading domain boundaries from {source}")
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Unable to download boundary source {source}: {str(e)}",
                             {'source': source}) from e
        return response.content

    try:
        with safe_open(source, 'rb') as f:
            return f.read()
    except FileOperationError as e:
        raise FetchError(f"Unable to read boundary source {source}", {'source': source}) from e


def decode_source(raw: bytes, source: str = "") -> str:
    """Gunzip (when compressed) and decode boundary file content

    Raises:
        FetchError: If gzip content is corrupt
        ParseError: If the content is not text
    """
    if raw[:2] == GZIP_MAGIC:
        try:
            raw = gzip.decompress(raw)
        except (OSError, EOFError) as e:
            raise FetchError(f"Corrupt gzip boundary source {source}: {str(e)}", {'source': source}) from e

    try:
        return raw.decode('ascii')
    except UnicodeDecodeError as e:
        raise ParseError(f"Boundary source {source} is not ASCII text", {'source': source}) from e


def load(source: str, timeout: float = 60) -> BoundaryIndex:
    """Load and index a CATH boundary file

    Args:
        source: http(s) URL or local path, plain or gzip-compressed
        timeout: Network timeout in seconds

    Returns:
        Immutable BoundaryIndex

    Raises:
        FetchError: If the source is unreachable
        ParseError: If any line is malformed
    """
    text = decode_source(fetch_source(source, timeout), source)
    return BoundaryIndex.loads(text, source=source)
