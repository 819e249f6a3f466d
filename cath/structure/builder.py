#!/usr/bin/env python3
"""
Capacity-declared, append-only builder for sub-structures

Usage follows a fixed protocol:

    builder = SubstructureBuilder("1ABC.A.A.1", header)
    builder.declare(BuilderCounts(bonds=..., atoms=..., groups=...))
    builder.set_model_info(chain_count=1)
    builder.set_entity_info(...)
    builder.set_chain_info(...)
    for each group:
        builder.set_group_info(...)      # declares the group's atom/bond counts
        builder.set_atom_info(...)       # exactly atom_count times
        builder.set_group_bond(...)      # exactly bond_count times
    builder.set_inter_group_bond(...)    # local atom indices
    view = builder.seal()

Every append is checked against the declared capacities as it happens;
seal() checks that every capacity was met exactly.
"""
import logging
from dataclasses import dataclass, fields
from typing import Optional, List, Dict, Any, Tuple, Sequence

from cath.exceptions import ValidationError
from cath.models.structure import GroupType, Entity, StructureHeader, StructureView

logger = logging.getLogger("cath.builder")


@dataclass(frozen=True)
class BuilderCounts:
    """Declared capacities of a structure under construction

    ``bonds`` counts intra-group (template) bonds appended with
    set_group_bond; inter-group bonds are counted separately.
    """
    bonds: int
    atoms: int
    groups: int
    models: int = 1
    chains: int = 1
    entities: int = 1
    inter_group_bonds: int = 0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 0:
                raise ValidationError(f"Declared {f.name} count cannot be negative: {value}")

    def to_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class _PendingGroup:
    """Template data collected for the group currently being appended"""
    name: str
    chem_comp_type: str
    single_letter_code: str
    atom_count: int
    bond_count: int
    atom_names: List[str]
    element_names: List[str]
    atom_charges: List[int]
    bond_atom_list: List[int]
    bond_order_list: List[int]

    @property
    def atoms_complete(self) -> bool:
        return len(self.atom_names) == self.atom_count

    @property
    def complete(self) -> bool:
        return self.atoms_complete and len(self.bond_order_list) == self.bond_count

    def to_group_type(self) -> GroupType:
        return GroupType(
            name=self.name,
            chem_comp_type=self.chem_comp_type,
            single_letter_code=self.single_letter_code,
            atom_names=tuple(self.atom_names),
            element_names=tuple(self.element_names),
            atom_charges=tuple(self.atom_charges),
            bond_atom_list=tuple(self.bond_atom_list),
            bond_order_list=tuple(self.bond_order_list),
        )


class SubstructureBuilder:
    """Assembles a sealed StructureView from declared counts and appended records"""

    def __init__(self, structure_id: str, header: Optional[StructureHeader] = None):
        self.structure_id = structure_id
        self.header = header or StructureHeader()

        self._counts: Optional[BuilderCounts] = None
        self._sealed = False

        self._chains_per_model: List[int] = []
        self._entities: List[Entity] = []

        self._chain_ids: List[str] = []
        self._chain_names: List[str] = []
        self._groups_per_chain: List[int] = []
        self._groups_in_current_chain = 0

        self._group_types: List[GroupType] = []
        self._group_type_lookup: Dict[GroupType, int] = {}
        self._group_type_indices: List[int] = []
        self._group_ids: List[int] = []
        self._ins_codes: List[str] = []
        self._sequence_indices: List[int] = []
        self._sec_struct: List[int] = []
        self._pending: Optional[_PendingGroup] = None

        self._atom_columns: Dict[str, List[Any]] = {
            'atom_ids': [], 'alt_loc_ids': [],
            'x_coords': [], 'y_coords': [], 'z_coords': [],
            'occupancies': [], 'b_factors': [],
        }
        self._num_group_bonds = 0
        self._inter_group_bonds: List[Tuple[int, int]] = []
        self._inter_group_orders: List[int] = []

    # ------------------------------------------------------------------
    # Protocol checks
    # ------------------------------------------------------------------

    @property
    def counts(self) -> Optional[BuilderCounts]:
        return self._counts

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def num_atoms(self) -> int:
        return len(self._atom_columns['atom_ids'])

    def _check_open(self, operation: str) -> BuilderCounts:
        if self._sealed:
            raise ValidationError(f"{self.structure_id}: {operation} after seal()")
        if self._counts is None:
            raise ValidationError(f"{self.structure_id}: {operation} before declare()")
        return self._counts

    def _check_capacity(self, what: str, current: int, declared: int) -> None:
        if current >= declared:
            raise ValidationError(
                f"{self.structure_id}: {what} capacity exceeded (declared {declared})",
                {'structure_id': self.structure_id, 'what': what, 'declared': declared}
            )

    def _finish_group(self) -> None:
        """Intern the pending group's template once all its records are in"""
        if self._pending is None:
            return
        if not self._pending.complete:
            raise ValidationError(
                f"{self.structure_id}: group {self._pending.name} incomplete "
                f"({len(self._pending.atom_names)}/{self._pending.atom_count} atoms, "
                f"{len(self._pending.bond_order_list)}/{self._pending.bond_count} bonds)"
            )

        group_type = self._pending.to_group_type()
        type_index = self._group_type_lookup.get(group_type)
        if type_index is None:
            type_index = len(self._group_types)
            self._group_types.append(group_type)
            self._group_type_lookup[group_type] = type_index
        self._group_type_indices.append(type_index)
        self._pending = None

    # ------------------------------------------------------------------
    # Appends
    # ------------------------------------------------------------------

    def declare(self, counts: BuilderCounts) -> None:
        """Declare the exact capacities; must precede every append"""
        if self._sealed:
            raise ValidationError(f"{self.structure_id}: declare() after seal()")
        if self._counts is not None:
            raise ValidationError(f"{self.structure_id}: capacities already declared")
        self._counts = counts
        logger.debug(f"{self.structure_id}: declared {counts.to_dict()}")

    def set_model_info(self, chain_count: int) -> None:
        counts = self._check_open("set_model_info")
        self._check_capacity("model", len(self._chains_per_model), counts.models)
        self._chains_per_model.append(chain_count)

    def set_entity_info(self, chain_indices: Sequence[int], sequence: str,
                        description: str, entity_type: str) -> None:
        counts = self._check_open("set_entity_info")
        self._check_capacity("entity", len(self._entities), counts.entities)
        self._entities.append(Entity(tuple(chain_indices), sequence, description, entity_type))

    def set_chain_info(self, chain_id: str, chain_name: str, group_count: int) -> None:
        counts = self._check_open("set_chain_info")
        self._check_capacity("chain", len(self._chain_ids), counts.chains)
        if not self._chains_per_model:
            raise ValidationError(f"{self.structure_id}: set_chain_info before set_model_info")
        if not self._entities:
            raise ValidationError(f"{self.structure_id}: set_chain_info before set_entity_info")
        if self._groups_per_chain and self._groups_in_current_chain != self._groups_per_chain[-1]:
            raise ValidationError(
                f"{self.structure_id}: chain {self._chain_names[-1]} has "
                f"{self._groups_in_current_chain} of {self._groups_per_chain[-1]} groups"
            )
        self._finish_group()

        self._chain_ids.append(chain_id)
        self._chain_names.append(chain_name)
        self._groups_per_chain.append(group_count)
        self._groups_in_current_chain = 0

    def set_group_info(self, group_name: str, group_id: int, ins_code: str,
                       chem_comp_type: str, atom_count: int, bond_count: int,
                       single_letter_code: str, sequence_index: int,
                       sec_struct: int) -> None:
        counts = self._check_open("set_group_info")
        if not self._groups_per_chain:
            raise ValidationError(f"{self.structure_id}: set_group_info before set_chain_info")
        self._check_capacity("group", len(self._group_ids), counts.groups)
        if self._groups_in_current_chain >= self._groups_per_chain[-1]:
            raise ValidationError(
                f"{self.structure_id}: chain {self._chain_names[-1]} already has "
                f"{self._groups_per_chain[-1]} groups"
            )
        self._finish_group()

        self._pending = _PendingGroup(
            name=group_name, chem_comp_type=chem_comp_type,
            single_letter_code=single_letter_code,
            atom_count=atom_count, bond_count=bond_count,
            atom_names=[], element_names=[], atom_charges=[],
            bond_atom_list=[], bond_order_list=[],
        )
        self._group_ids.append(group_id)
        self._ins_codes.append(ins_code)
        self._sequence_indices.append(sequence_index)
        self._sec_struct.append(sec_struct)
        self._groups_in_current_chain += 1

    def set_atom_info(self, atom_name: str, element: str, charge: int,
                      atom_id: int, alt_loc_id: str,
                      x: float, y: float, z: float,
                      occupancy: float, b_factor: float) -> int:
        """Append an atom to the current group

        Returns:
            The atom's local (zero-based) index in the structure being built
        """
        counts = self._check_open("set_atom_info")
        self._check_capacity("atom", self.num_atoms, counts.atoms)
        pending = self._pending
        if pending is None or pending.atoms_complete:
            raise ValidationError(f"{self.structure_id}: set_atom_info outside a group's declared atoms")

        pending.atom_names.append(atom_name)
        pending.element_names.append(element)
        pending.atom_charges.append(charge)

        local_index = self.num_atoms
        for name, value in (('atom_ids', atom_id), ('alt_loc_ids', alt_loc_id),
                            ('x_coords', x), ('y_coords', y), ('z_coords', z),
                            ('occupancies', occupancy), ('b_factors', b_factor)):
            self._atom_columns[name].append(value)
        return local_index

    def set_group_bond(self, atom_index_1: int, atom_index_2: int, bond_order: int) -> None:
        """Append an intra-group bond; indices are local to the group template"""
        counts = self._check_open("set_group_bond")
        self._check_capacity("bond", self._num_group_bonds, counts.bonds)
        pending = self._pending
        if pending is None or not pending.atoms_complete:
            raise ValidationError(f"{self.structure_id}: set_group_bond before the group's atoms")
        if len(pending.bond_order_list) >= pending.bond_count:
            raise ValidationError(f"{self.structure_id}: group {pending.name} declared "
                                  f"{pending.bond_count} bonds")

        pending.bond_atom_list.extend((atom_index_1, atom_index_2))
        pending.bond_order_list.append(bond_order)
        self._num_group_bonds += 1

    def set_inter_group_bond(self, atom_index_1: int, atom_index_2: int, bond_order: int) -> None:
        """Append a bond between two local atom indices of this structure"""
        counts = self._check_open("set_inter_group_bond")
        self._check_capacity("inter-group bond", len(self._inter_group_orders), counts.inter_group_bonds)
        for atom_index in (atom_index_1, atom_index_2):
            if atom_index < 0 or atom_index >= counts.atoms:
                raise ValidationError(f"{self.structure_id}: inter-group bond atom {atom_index} "
                                      f"outside declared {counts.atoms} atoms")

        self._inter_group_bonds.append((atom_index_1, atom_index_2))
        self._inter_group_orders.append(bond_order)

    # ------------------------------------------------------------------
    # Seal
    # ------------------------------------------------------------------

    def seal(self) -> StructureView:
        """Check every declared count and freeze the structure

        Raises:
            ValidationError: If any declared count was not met exactly
        """
        counts = self._check_open("seal")
        self._finish_group()

        actual = {
            'bonds': self._num_group_bonds,
            'atoms': self.num_atoms,
            'groups': len(self._group_ids),
            'models': len(self._chains_per_model),
            'chains': len(self._chain_ids),
            'entities': len(self._entities),
            'inter_group_bonds': len(self._inter_group_orders),
        }
        mismatches = {name: (declared, actual[name])
                      for name, declared in counts.to_dict().items()
                      if actual[name] != declared}
        if mismatches:
            raise ValidationError(
                f"{self.structure_id}: declared counts not met: "
                + ", ".join(f"{name} {got}/{want}" for name, (want, got) in mismatches.items()),
                {'structure_id': self.structure_id, 'mismatches': mismatches}
            )

        if self._groups_per_chain and self._groups_in_current_chain != self._groups_per_chain[-1]:
            raise ValidationError(
                f"{self.structure_id}: chain {self._chain_names[-1]} has "
                f"{self._groups_in_current_chain} of {self._groups_per_chain[-1]} groups"
            )
        if sum(self._chains_per_model) != len(self._chain_ids):
            raise ValidationError(
                f"{self.structure_id}: models declare {sum(self._chains_per_model)} chains, "
                f"{len(self._chain_ids)} appended"
            )

        view = StructureView(
            structure_id=self.structure_id,
            chains_per_model=self._chains_per_model,
            chain_ids=self._chain_ids,
            chain_names=self._chain_names,
            groups_per_chain=self._groups_per_chain,
            group_types=tuple(self._group_types),
            group_type_indices=self._group_type_indices,
            group_ids=self._group_ids,
            ins_codes=self._ins_codes,
            sequence_indices=self._sequence_indices,
            sec_struct=self._sec_struct,
            inter_group_bond_indices=self._inter_group_bonds,
            inter_group_bond_orders=self._inter_group_orders,
            entities=tuple(self._entities),
            header=self.header,
            **self._atom_columns
        )
        self._sealed = True
        logger.debug(f"Sealed {view!r}")
        return view
