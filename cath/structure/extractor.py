#!/usr/bin/env python3
"""
Split structures into CATH domains

Groups and atoms are indexed globally across the whole structure, so every
chain's position in those sequences is computed up front (ChainLayout) as
prefix sums over all chains, matched or not. Each domain of a chain is cut
from the same chain span; chains without boundary information produce no
output but still occupy their span.
"""
import logging
from dataclasses import dataclass
from typing import List, Tuple, Dict, Sequence, Iterable, Iterator

import numpy as np

from cath.boundaries.index import BoundaryIndex
from cath.exceptions import ValidationError
from cath.models.domain import DomainDefinition
from cath.models.structure import StructureView
from cath.structure.builder import SubstructureBuilder, BuilderCounts

logger = logging.getLogger("cath.extractor")


@dataclass(frozen=True)
class ChainSpan:
    """Position of one chain in the structure's global group and atom order"""
    chain_index: int
    chain_id: str
    chain_name: str
    entity_index: int
    group_start: int
    group_count: int
    atom_start: int
    atom_count: int
    bond_count: int

    @property
    def group_stop(self) -> int:
        return self.group_start + self.group_count

    @property
    def atom_stop(self) -> int:
        return self.atom_start + self.atom_count


def advance_counters(group_counter: int, atom_counter: int, span: ChainSpan) -> Tuple[int, int]:
    """Move the global counters past one chain"""
    return group_counter + span.group_count, atom_counter + span.atom_count


@dataclass(frozen=True)
class ChainLayout:
    """Per-chain spans for every chain of every model"""
    spans: Tuple[ChainSpan, ...]
    chains_per_model: Tuple[int, ...]
    groups_traversed: int
    atoms_traversed: int

    @classmethod
    def from_structure(cls, structure: StructureView) -> 'ChainLayout':
        """Single pass over chains computing group/atom/bond prefix sums

        Raises:
            ValidationError: If the traversal does not cover every group and atom
        """
        chain_to_entity = structure.chain_to_entity_index()
        atom_counts = structure.group_atom_counts()
        bond_counts = structure.group_bond_counts()

        spans = []
        group_counter, atom_counter = 0, 0
        for chain_index in range(structure.num_chains):
            group_count = int(structure.groups_per_chain[chain_index])
            group_slice = slice(group_counter, group_counter + group_count)
            span = ChainSpan(
                chain_index=chain_index,
                chain_id=str(structure.chain_ids[chain_index]),
                chain_name=str(structure.chain_names[chain_index]),
                entity_index=int(chain_to_entity[chain_index]),
                group_start=group_counter,
                group_count=group_count,
                atom_start=atom_counter,
                atom_count=int(atom_counts[group_slice].sum()),
                bond_count=int(bond_counts[group_slice].sum()),
            )
            spans.append(span)
            group_counter, atom_counter = advance_counters(group_counter, atom_counter, span)

        if group_counter != structure.num_groups or atom_counter != structure.num_atoms:
            raise ValidationError(
                f"{structure.structure_id}: chain traversal covered {group_counter}/{structure.num_groups} "
                f"groups and {atom_counter}/{structure.num_atoms} atoms"
            )

        return cls(tuple(spans), tuple(int(n) for n in structure.chains_per_model),
                   group_counter, atom_counter)

    def model_spans(self, model_index: int = 0) -> Tuple[ChainSpan, ...]:
        if model_index >= len(self.chains_per_model):
            return ()
        start = sum(self.chains_per_model[:model_index])
        return self.spans[start:start + self.chains_per_model[model_index]]


def domain_key(structure_id: str, chain_name: str, domain_index: int) -> str:
    return f"{structure_id}.{chain_name}.{domain_index}"


def substructure_id(structure_id: str, span: ChainSpan) -> str:
    """Sub-structure id keeping chain id and entity number: 1ABC.A.A.1"""
    return f"{structure_id}.{span.chain_name}.{span.chain_id}.{span.entity_index + 1}"


def membership_mask(group_ids: np.ndarray, definition: DomainDefinition) -> np.ndarray:
    """True for every group whose residue id falls in any segment"""
    mask = np.zeros(len(group_ids), dtype=bool)
    for segment in definition.segments:
        mask |= (group_ids >= segment.start) & (group_ids <= segment.end)
    return mask


def _chain_inter_group_bonds(structure: StructureView, span: ChainSpan) -> Tuple[np.ndarray, np.ndarray]:
    """Inter-group bonds with both endpoints inside the chain's atom span"""
    bonds = structure.inter_group_bond_indices
    inside = ((bonds >= span.atom_start) & (bonds < span.atom_stop)).all(axis=1)
    return bonds[inside], structure.inter_group_bond_orders[inside]


def build_domain(structure: StructureView, span: ChainSpan, included: np.ndarray,
                 chain_bonds: Tuple[np.ndarray, np.ndarray]) -> StructureView:
    """Cut the included groups of one chain into a sealed sub-structure

    Args:
        structure: Source structure
        span: The chain's global group/atom span
        included: Boolean mask over the chain's groups
        chain_bonds: Inter-group bonds and orders within the chain's atom span

    Returns:
        Sealed StructureView holding one model, one chain and one entity
    """
    group_indices = np.arange(span.group_start, span.group_stop)
    atom_counts = structure.group_atom_counts()[span.group_start:span.group_stop]
    bond_counts = structure.group_bond_counts()[span.group_start:span.group_stop]

    # Global atom index -> local atom index for included atoms only
    atom_map: Dict[int, int] = {}
    atom_counter = span.atom_start
    for group_index, atom_count, keep in zip(group_indices, atom_counts, included):
        if keep:
            for atom_index in range(atom_counter, atom_counter + int(atom_count)):
                atom_map[atom_index] = len(atom_map)
        atom_counter += int(atom_count)

    kept_bonds = [(atom_map[int(a)], atom_map[int(b)], int(order))
                  for (a, b), order in zip(*chain_bonds)
                  if int(a) in atom_map and int(b) in atom_map]

    builder = SubstructureBuilder(substructure_id(structure.structure_id, span), structure.header)
    builder.declare(BuilderCounts(
        bonds=int(bond_counts[included].sum()),
        atoms=len(atom_map),
        groups=int(included.sum()),
        models=1,
        chains=1,
        entities=1,
        inter_group_bonds=len(kept_bonds),
    ))
    builder.set_model_info(chain_count=1)

    if span.entity_index >= 0:
        entity = structure.entities[span.entity_index]
        builder.set_entity_info((0,), entity.sequence, entity.description, entity.type)
    else:
        builder.set_entity_info((0,), "", "", "")

    builder.set_chain_info(span.chain_id, span.chain_name, int(included.sum()))

    atom_counter = span.atom_start
    for group_index, keep in zip(group_indices, included):
        group_type = structure.group_type(group_index)
        if keep:
            builder.set_group_info(
                group_type.name,
                int(structure.group_ids[group_index]),
                str(structure.ins_codes[group_index]),
                group_type.chem_comp_type,
                group_type.num_atoms,
                group_type.num_bonds,
                group_type.single_letter_code,
                int(structure.sequence_indices[group_index]),
                int(structure.sec_struct[group_index]),
            )
            for k in range(group_type.num_atoms):
                atom_index = atom_counter + k
                builder.set_atom_info(
                    group_type.atom_names[k],
                    group_type.element_names[k],
                    group_type.atom_charges[k],
                    int(structure.atom_ids[atom_index]),
                    str(structure.alt_loc_ids[atom_index]),
                    float(structure.x_coords[atom_index]),
                    float(structure.y_coords[atom_index]),
                    float(structure.z_coords[atom_index]),
                    float(structure.occupancies[atom_index]),
                    float(structure.b_factors[atom_index]),
                )
            for atom_1, atom_2, order in group_type.bonds():
                builder.set_group_bond(atom_1, atom_2, order)
        atom_counter += group_type.num_atoms

    if atom_counter != span.atom_stop:
        raise ValidationError(f"{structure.structure_id}: chain {span.chain_name} atom walk ended at "
                              f"{atom_counter}, expected {span.atom_stop}")

    for atom_1, atom_2, order in kept_bonds:
        builder.set_inter_group_bond(atom_1, atom_2, order)

    return builder.seal()


def extract_chain(structure: StructureView, span: ChainSpan,
                  definitions: Sequence[DomainDefinition],
                  emit_empty: bool = True) -> List[Tuple[str, StructureView]]:
    """All domains of one chain, in definition order"""
    group_ids = structure.group_ids[span.group_start:span.group_stop]
    chain_bonds = _chain_inter_group_bonds(structure, span)

    domains = []
    for domain_index, definition in enumerate(definitions):
        key = domain_key(structure.structure_id, span.chain_name, domain_index)
        included = membership_mask(group_ids, definition)
        if not included.any():
            if not emit_empty:
                logger.debug(f"{key}: no groups within {definition}, skipped")
                continue
            logger.debug(f"{key}: no groups within {definition}, emitting empty domain")

        domains.append((key, build_domain(structure, span, included, chain_bonds)))
    return domains


def extract(structure: StructureView, index: BoundaryIndex,
            emit_empty: bool = True) -> List[Tuple[str, StructureView]]:
    """Split a structure into its CATH domains

    Only the first model is split. Output order follows the structure's chain
    order and, within a chain, the boundary file's domain order.

    Args:
        structure: Source structure
        index: Boundary index shared read-only between calls
        emit_empty: Whether domains matching no group yield empty sub-structures

    Returns:
        List of (domain key, sub-structure) pairs; empty if no chain is annotated

    Raises:
        ValidationError: On internal bookkeeping inconsistencies
    """
    layout = ChainLayout.from_structure(structure)

    domains = []
    for span in layout.model_spans(0):
        definitions = index.lookup(structure.structure_id, span.chain_name)
        if not definitions:
            continue
        domains.extend(extract_chain(structure, span, definitions, emit_empty))

    logger.debug(f"{structure.structure_id}: {len(domains)} domains from "
                 f"{layout.groups_traversed} groups, {layout.atoms_traversed} atoms")
    return domains


class DomainExtractor:
    """Callable splitter bound to one boundary index"""

    def __init__(self, index: BoundaryIndex, emit_empty: bool = True):
        self.index = index
        self.emit_empty = emit_empty

    def __call__(self, structure: StructureView) -> List[Tuple[str, StructureView]]:
        return extract(structure, self.index, self.emit_empty)

    def flat_map(self, records: Iterable[Tuple[str, StructureView]]) -> Iterator[Tuple[str, StructureView]]:
        """Domains of every (id, structure) record, one record at a time"""
        for _, structure in records:
            yield from self(structure)
