#!/usr/bin/env python3
"""
Columnar structure models for the CATH domain splitter

A StructureView holds a macromolecular structure as flat, read-only NumPy
columns in the usual model -> chain -> group -> atom hierarchy:

- chains_per_model partitions the chain columns into models
- groups_per_chain partitions the group columns into chains
- each group's template (GroupType) declares how many atom rows it owns

Atom-level names, elements and charges live on the template and are shared by
every instance of that group type. Bonds internal to a group are also template
data; bonds between groups are a single global list of atom index pairs.
"""
import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, List, Dict, Any, Tuple, Union, BinaryIO

import numpy as np

from cath.exceptions import ValidationError


@dataclass(frozen=True)
class GroupType:
    """Residue template shared by every instance of the same component"""
    name: str
    chem_comp_type: str
    single_letter_code: str
    atom_names: Tuple[str, ...]
    element_names: Tuple[str, ...]
    atom_charges: Tuple[int, ...]
    bond_atom_list: Tuple[int, ...] = ()
    bond_order_list: Tuple[int, ...] = ()

    def __post_init__(self):
        for name in ('atom_names', 'element_names', 'atom_charges',
                     'bond_atom_list', 'bond_order_list'):
            object.__setattr__(self, name, tuple(getattr(self, name)))

        n_atoms = len(self.atom_names)
        if len(self.element_names) != n_atoms or len(self.atom_charges) != n_atoms:
            raise ValidationError(f"Group type {self.name}: atom name/element/charge lengths differ")
        if len(self.bond_atom_list) != 2 * len(self.bond_order_list):
            raise ValidationError(f"Group type {self.name}: bond atom list must hold two indices per bond")
        if any(i < 0 or i >= n_atoms for i in self.bond_atom_list):
            raise ValidationError(f"Group type {self.name}: bond index outside template atoms")

    @property
    def num_atoms(self) -> int:
        return len(self.atom_names)

    @property
    def num_bonds(self) -> int:
        return len(self.bond_order_list)

    def bonds(self) -> List[Tuple[int, int, int]]:
        """Template bonds as (atom_1, atom_2, order) triples"""
        return [(self.bond_atom_list[2 * i], self.bond_atom_list[2 * i + 1], order)
                for i, order in enumerate(self.bond_order_list)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'chem_comp_type': self.chem_comp_type,
            'single_letter_code': self.single_letter_code,
            'atom_names': list(self.atom_names),
            'element_names': list(self.element_names),
            'atom_charges': list(self.atom_charges),
            'bond_atom_list': list(self.bond_atom_list),
            'bond_order_list': list(self.bond_order_list),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GroupType':
        return cls(**data)


@dataclass(frozen=True)
class Entity:
    """A set of chains sharing sequence, description and type"""
    chain_indices: Tuple[int, ...]
    sequence: str = ""
    description: str = ""
    type: str = ""

    def __post_init__(self):
        object.__setattr__(self, 'chain_indices', tuple(int(i) for i in self.chain_indices))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'chain_indices': list(self.chain_indices),
            'sequence': self.sequence,
            'description': self.description,
            'type': self.type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Entity':
        return cls(**data)


@dataclass(frozen=True)
class StructureHeader:
    """Header and crystallographic metadata carried along with a structure"""
    title: Optional[str] = None
    resolution: Optional[float] = None
    r_free: Optional[float] = None
    r_work: Optional[float] = None
    experimental_methods: Tuple[str, ...] = ()
    deposition_date: Optional[str] = None
    release_date: Optional[str] = None
    unit_cell: Optional[Tuple[float, ...]] = None
    space_group: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'experimental_methods', tuple(self.experimental_methods))
        if self.unit_cell is not None:
            if len(self.unit_cell) != 6:
                raise ValidationError("Unit cell must have six parameters (a, b, c, alpha, beta, gamma)")
            object.__setattr__(self, 'unit_cell', tuple(float(v) for v in self.unit_cell))

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data['experimental_methods'] = list(self.experimental_methods)
        data['unit_cell'] = list(self.unit_cell) if self.unit_cell is not None else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StructureHeader':
        return cls(**data)


# Column name -> dtype for every per-chain, per-group and per-atom array
CHAIN_COLUMNS = {
    'chain_ids': np.dtype('<U4'),
    'chain_names': np.dtype('<U4'),
    'groups_per_chain': np.dtype('i4'),
}

GROUP_COLUMNS = {
    'group_type_indices': np.dtype('i4'),
    'group_ids': np.dtype('i4'),
    'ins_codes': np.dtype('<U1'),
    'sequence_indices': np.dtype('i4'),
    'sec_struct': np.dtype('i1'),
}

ATOM_COLUMNS = {
    'atom_ids': np.dtype('i4'),
    'alt_loc_ids': np.dtype('<U1'),
    'x_coords': np.dtype('f4'),
    'y_coords': np.dtype('f4'),
    'z_coords': np.dtype('f4'),
    'occupancies': np.dtype('f4'),
    'b_factors': np.dtype('f4'),
}

ARRAY_COLUMNS = {
    'chains_per_model': np.dtype('i4'),
    **CHAIN_COLUMNS,
    **GROUP_COLUMNS,
    **ATOM_COLUMNS,
    'inter_group_bond_indices': np.dtype('i4'),
    'inter_group_bond_orders': np.dtype('i1'),
}


def _frozen_array(values, dtype: np.dtype) -> np.ndarray:
    array = np.array(values, dtype=dtype)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class StructureView:
    """Immutable, columnar view of a macromolecular structure

    All array columns are copied into read-only NumPy arrays on construction,
    so a StructureView can be shared freely between threads.
    """
    structure_id: str
    chains_per_model: np.ndarray
    chain_ids: np.ndarray
    chain_names: np.ndarray
    groups_per_chain: np.ndarray
    group_types: Tuple[GroupType, ...]
    group_type_indices: np.ndarray
    group_ids: np.ndarray
    ins_codes: np.ndarray
    sequence_indices: np.ndarray
    sec_struct: np.ndarray
    atom_ids: np.ndarray
    alt_loc_ids: np.ndarray
    x_coords: np.ndarray
    y_coords: np.ndarray
    z_coords: np.ndarray
    occupancies: np.ndarray
    b_factors: np.ndarray
    inter_group_bond_indices: np.ndarray = field(default_factory=lambda: np.zeros((0, 2), dtype='i4'))
    inter_group_bond_orders: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype='i1'))
    entities: Tuple[Entity, ...] = ()
    header: StructureHeader = field(default_factory=StructureHeader)

    def __post_init__(self):
        for name, dtype in ARRAY_COLUMNS.items():
            object.__setattr__(self, name, _frozen_array(getattr(self, name), dtype))
        object.__setattr__(self, 'group_types', tuple(self.group_types))
        object.__setattr__(self, 'entities', tuple(self.entities))
        if self.inter_group_bond_indices.size == 0:
            object.__setattr__(self, 'inter_group_bond_indices',
                               _frozen_array(np.zeros((0, 2)), ARRAY_COLUMNS['inter_group_bond_indices']))
        self._validate()

    def _validate(self) -> None:
        """Check that every column agrees with the hierarchy counts

        Raises:
            ValidationError: If any column length or index is inconsistent
        """
        num_chains = int(self.chains_per_model.sum())
        for name in CHAIN_COLUMNS:
            if len(getattr(self, name)) != num_chains:
                raise ValidationError(f"{self.structure_id}: {name} has {len(getattr(self, name))} "
                                      f"entries, expected {num_chains} chains")

        num_groups = int(self.groups_per_chain.sum())
        for name in GROUP_COLUMNS:
            if len(getattr(self, name)) != num_groups:
                raise ValidationError(f"{self.structure_id}: {name} has {len(getattr(self, name))} "
                                      f"entries, expected {num_groups} groups")

        if num_groups and (self.group_type_indices.min() < 0
                           or self.group_type_indices.max() >= len(self.group_types)):
            raise ValidationError(f"{self.structure_id}: group type index out of range")

        num_atoms = self.num_atoms
        for name in ATOM_COLUMNS:
            if len(getattr(self, name)) != num_atoms:
                raise ValidationError(f"{self.structure_id}: {name} has {len(getattr(self, name))} "
                                      f"entries, expected {num_atoms} atoms")

        bonds = self.inter_group_bond_indices
        if bonds.ndim != 2 or bonds.shape[1] != 2:
            raise ValidationError(f"{self.structure_id}: inter-group bond indices must be (N, 2)")
        if len(bonds) != len(self.inter_group_bond_orders):
            raise ValidationError(f"{self.structure_id}: inter-group bond index/order lengths differ")
        if len(bonds) and (bonds.min() < 0 or bonds.max() >= num_atoms):
            raise ValidationError(f"{self.structure_id}: inter-group bond atom index out of range")

        for entity in self.entities:
            if any(i < 0 or i >= num_chains for i in entity.chain_indices):
                raise ValidationError(f"{self.structure_id}: entity chain index out of range")

    # ------------------------------------------------------------------
    # Counts
    # ------------------------------------------------------------------

    @property
    def num_models(self) -> int:
        return len(self.chains_per_model)

    @property
    def num_chains(self) -> int:
        return len(self.chain_ids)

    @property
    def num_groups(self) -> int:
        return len(self.group_type_indices)

    @property
    def num_atoms(self) -> int:
        return int(self.group_atom_counts().sum())

    @property
    def num_entities(self) -> int:
        return len(self.entities)

    @property
    def num_inter_group_bonds(self) -> int:
        return len(self.inter_group_bond_orders)

    @property
    def num_bonds(self) -> int:
        """Total bonds: every instance's template bonds plus inter-group bonds"""
        return int(self.group_bond_counts().sum()) + self.num_inter_group_bonds

    def group_atom_counts(self) -> np.ndarray:
        """Number of atoms in each group instance"""
        per_type = np.array([gt.num_atoms for gt in self.group_types], dtype='i4')
        return per_type[self.group_type_indices] if len(per_type) else np.zeros(0, dtype='i4')

    def group_bond_counts(self) -> np.ndarray:
        """Number of template bonds in each group instance"""
        per_type = np.array([gt.num_bonds for gt in self.group_types], dtype='i4')
        return per_type[self.group_type_indices] if len(per_type) else np.zeros(0, dtype='i4')

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def group_type(self, group_index: int) -> GroupType:
        """Template of the group instance at a global group index"""
        return self.group_types[int(self.group_type_indices[group_index])]

    def chain_to_entity_index(self) -> np.ndarray:
        """Map each chain index to its owning entity index (-1 if none)"""
        mapping = np.full(self.num_chains, -1, dtype='i4')
        for entity_index, entity in enumerate(self.entities):
            for chain_index in entity.chain_indices:
                mapping[chain_index] = entity_index
        return mapping

    def _expand_template(self, attribute: str) -> List[Any]:
        values = []
        for type_index in self.group_type_indices:
            values.extend(getattr(self.group_types[type_index], attribute))
        return values

    def atom_names(self) -> List[str]:
        return self._expand_template('atom_names')

    def element_names(self) -> List[str]:
        return self._expand_template('element_names')

    def atom_charges(self) -> np.ndarray:
        return np.array(self._expand_template('atom_charges'), dtype='i4')

    def coordinates(self) -> np.ndarray:
        """Atom coordinates as an (N, 3) array"""
        return np.stack([self.x_coords, self.y_coords, self.z_coords], axis=-1)

    # ------------------------------------------------------------------
    # Comparison and serialization
    # ------------------------------------------------------------------

    def _metadata(self) -> Dict[str, Any]:
        return {
            'structure_id': self.structure_id,
            'group_types': [gt.to_dict() for gt in self.group_types],
            'entities': [entity.to_dict() for entity in self.entities],
            'header': self.header.to_dict(),
        }

    def equals(self, other: 'StructureView') -> bool:
        """Exact column-wise comparison with another structure"""
        if not isinstance(other, StructureView):
            return False
        if self._metadata() != other._metadata():
            return False
        return all(
            getattr(self, name).shape == getattr(other, name).shape
            and getattr(self, name).tobytes() == getattr(other, name).tobytes()
            for name in ARRAY_COLUMNS
        )

    def dump(self, target: Union[str, Path, BinaryIO]) -> None:
        """Dump the structure to a compressed NPZ file

        Args:
            target: Destination path or open binary file
        """
        arrays = {name: getattr(self, name) for name in ARRAY_COLUMNS}
        metadata = np.array(json.dumps(self._metadata()))
        if hasattr(target, 'write'):
            np.savez_compressed(target, metadata=metadata, **arrays)
        else:
            with open(target, 'wb') as f:
                np.savez_compressed(f, metadata=metadata, **arrays)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'StructureView':
        """Load a structure from an NPZ file written by dump()

        Args:
            path: Source path

        Returns:
            The loaded structure
        """
        with np.load(path, allow_pickle=False) as data:
            metadata = json.loads(str(data['metadata']))
            arrays = {name: data[name] for name in ARRAY_COLUMNS}

        return cls(
            structure_id=metadata['structure_id'],
            group_types=tuple(GroupType.from_dict(gt) for gt in metadata['group_types']),
            entities=tuple(Entity.from_dict(e) for e in metadata['entities']),
            header=StructureHeader.from_dict(metadata['header']),
            **arrays
        )

    def __repr__(self) -> str:
        return (f"StructureView({self.structure_id!r}, models={self.num_models}, "
                f"chains={self.num_chains}, groups={self.num_groups}, atoms={self.num_atoms})")
