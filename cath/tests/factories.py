#!/usr/bin/env python3
"""
Synthetic structure builders shared by the test suite
"""
from dataclasses import dataclass
from typing import Optional, List, Sequence, Tuple, Dict

import numpy as np

from cath.models.structure import GroupType, Entity, StructureHeader, StructureView


ALA = GroupType(
    name='ALA', chem_comp_type='L-PEPTIDE LINKING', single_letter_code='A',
    atom_names=('N', 'CA', 'C', 'O', 'CB'),
    element_names=('N', 'C', 'C', 'O', 'C'),
    atom_charges=(0, 0, 0, 0, 0),
    bond_atom_list=(0, 1, 1, 2, 2, 3, 1, 4),
    bond_order_list=(1, 1, 2, 1),
)

GLY = GroupType(
    name='GLY', chem_comp_type='PEPTIDE LINKING', single_letter_code='G',
    atom_names=('N', 'CA', 'C', 'O'),
    element_names=('N', 'C', 'C', 'O'),
    atom_charges=(0, 0, 0, 0),
    bond_atom_list=(0, 1, 1, 2, 2, 3),
    bond_order_list=(1, 1, 2),
)

HOH = GroupType(
    name='HOH', chem_comp_type='NON-POLYMER', single_letter_code='?',
    atom_names=('O',), element_names=('O',), atom_charges=(0,),
)

TEMPLATES = {'ALA': ALA, 'GLY': GLY, 'HOH': HOH}

HEADER = StructureHeader(
    title='SYNTHETIC TEST STRUCTURE',
    resolution=1.8,
    r_free=0.22,
    r_work=0.19,
    experimental_methods=('X-RAY DIFFRACTION',),
    deposition_date='2001-01-01',
    release_date='2001-06-01',
    unit_cell=(50.0, 60.0, 70.0, 90.0, 90.0, 90.0),
    space_group='P 21 21 21',
)


@dataclass
class ChainSpec:
    """One chain of a synthetic structure"""
    name: str
    residue_ids: Sequence[int]
    residue_names: Optional[Sequence[str]] = None
    chain_id: Optional[str] = None
    entity_type: str = 'polymer'

    def names(self) -> List[str]:
        if self.residue_names is None:
            return ['ALA'] * len(self.residue_ids)
        return list(self.residue_names)


def make_structure(structure_id: str,
                   chains: Sequence[ChainSpec],
                   models: int = 1,
                   peptide_bonds: bool = True,
                   extra_bonds: Sequence[Tuple[int, int, int]] = (),
                   header: StructureHeader = HEADER) -> StructureView:
    """Build a structure; every model repeats the same chains

    Consecutive polymer residues in a chain are linked C -> N by inter-group
    bonds when peptide_bonds is set. extra_bonds are global atom index triples.
    """
    group_types: List[GroupType] = []
    type_lookup: Dict[str, int] = {}

    chain_ids, chain_names, groups_per_chain = [], [], []
    group_columns = {'group_type_indices': [], 'group_ids': [], 'ins_codes': [],
                     'sequence_indices': [], 'sec_struct': []}
    entity_chains: Dict[str, List[int]] = {}
    entity_info: Dict[str, ChainSpec] = {}
    bonds: List[Tuple[int, int]] = []
    orders: List[int] = []

    atom_counter = 0
    chain_index = 0
    for _ in range(models):
        for spec in chains:
            chain_ids.append(spec.chain_id or spec.name)
            chain_names.append(spec.name)
            groups_per_chain.append(len(spec.residue_ids))
            entity_chains.setdefault(spec.name, []).append(chain_index)
            entity_info.setdefault(spec.name, spec)

            previous_c = None
            for position, (residue_id, residue_name) in enumerate(zip(spec.residue_ids, spec.names())):
                template = TEMPLATES[residue_name]
                if residue_name not in type_lookup:
                    type_lookup[residue_name] = len(group_types)
                    group_types.append(template)
                group_columns['group_type_indices'].append(type_lookup[residue_name])
                group_columns['group_ids'].append(residue_id)
                group_columns['ins_codes'].append('')
                group_columns['sequence_indices'].append(position)
                group_columns['sec_struct'].append(-1)

                if template is not HOH:
                    if peptide_bonds and previous_c is not None:
                        bonds.append((previous_c, atom_counter))
                        orders.append(1)
                    previous_c = atom_counter + 2
                atom_counter += template.num_atoms
            chain_index += 1

    for atom_1, atom_2, order in extra_bonds:
        bonds.append((atom_1, atom_2))
        orders.append(order)

    atom_index = np.arange(atom_counter)
    entities = tuple(
        Entity(tuple(indices), sequence=''.join(TEMPLATES[n].single_letter_code
                                                 for n in entity_info[name].names()),
               description=f'Chain {name} protein', type=entity_info[name].entity_type)
        for name, indices in entity_chains.items()
    )

    return StructureView(
        structure_id=structure_id,
        chains_per_model=[len(chains)] * models,
        chain_ids=chain_ids,
        chain_names=chain_names,
        groups_per_chain=groups_per_chain,
        group_types=tuple(group_types),
        atom_ids=atom_index + 1,
        alt_loc_ids=[''] * atom_counter,
        x_coords=atom_index * 1.0,
        y_coords=atom_index * 2.0,
        z_coords=atom_index * 3.0,
        occupancies=np.ones(atom_counter),
        b_factors=10.0 + (atom_index % 7),
        inter_group_bond_indices=bonds,
        inter_group_bond_orders=orders,
        entities=entities,
        header=header,
        **group_columns
    )


def atom_index_of(structure: StructureView, group_index: int, atom_name: str) -> int:
    """Global atom index of a named atom in a group instance"""
    offset = int(structure.group_atom_counts()[:group_index].sum())
    return offset + structure.group_type(group_index).atom_names.index(atom_name)


def group_index_of(structure: StructureView, chain_index: int, residue_id: int) -> int:
    """Global group index of a residue id within a chain"""
    start = int(structure.groups_per_chain[:chain_index].sum())
    stop = start + int(structure.groups_per_chain[chain_index])
    matches = np.nonzero(structure.group_ids[start:stop] == residue_id)[0]
    return start + int(matches[0])
