#!/usr/bin/env python3
"""
Write split domains to disk, one compressed NPZ file per domain
"""
import logging
import os
from typing import Iterable, Tuple, List

from cath.exceptions import FileOperationError
from cath.models.structure import StructureView
from cath.utils.file import atomic_write, ensure_dir

logger = logging.getLogger("cath.writer")


def domain_path(output_dir: str, key: str) -> str:
    return os.path.join(output_dir, f"{key}.npz")


def write_domains(domains: Iterable[Tuple[str, StructureView]], output_dir: str) -> List[str]:
    """Write each (key, sub-structure) pair to <output_dir>/<key>.npz

    Keys are not unique when two chains share a chain name. A repeated key is
    written under the sub-structure's own id instead,
    <structure_id>.<domain number>.npz, so no domain overwrites another.

    Returns:
        Paths written, in input order

    Raises:
        FileOperationError: If the directory or a file cannot be written, or
            a domain has no unused file name
    """
    ensure_dir(output_dir)

    paths = []
    written = set()
    for key, structure in domains:
        path = domain_path(output_dir, key)
        if path in written:
            domain_number = key.rsplit('.', 1)[-1]
            fallback = domain_path(output_dir, f"{structure.structure_id}.{domain_number}")
            if fallback in written:
                raise FileOperationError(f"Domain {key} of {structure.structure_id} would overwrite {fallback}",
                                         {'path': fallback, 'key': key})
            logger.warning(f"Duplicate domain key {key}; writing {structure.structure_id} to {fallback}")
            path = fallback

        with atomic_write(path, 'wb') as f:
            structure.dump(f)
        written.add(path)
        paths.append(path)

    logger.info(f"Wrote {len(paths)} domains to {output_dir}")
    return paths
