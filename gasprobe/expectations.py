# Copyright 2026 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Ground truth for gas pricing under both models, independent of how it is measured.

The table is built once from the constants below and never mutated, so repeated runs against the same node compare
against the same numbers.
"""

from dataclasses import dataclass
from enum import Enum, unique
from typing import Iterable, Iterator, Optional, Union

from gasprobe.exception import UnknownProbe
from gasprobe.gas_model import GasModel

# Intrinsic cost of every transaction, subtracted from estimates to isolate the probed operation.
BASE_TX_COST: int = 21_000

COLD_STORAGE_COST: dict[GasModel, int] = {
    GasModel.REFERENCE: 2_100,
    GasModel.MODIFIED: 8_100,
}

COLD_ACCOUNT_COST: dict[GasModel, int] = {
    GasModel.REFERENCE: 2_600,
    GasModel.MODIFIED: 10_100,
}

WARM_ACCESS_COST: dict[GasModel, int] = {
    GasModel.REFERENCE: 100,
    GasModel.MODIFIED: 100,
}

# SSTORE of a non-zero value into a zero slot.
STORAGE_SET_SURCHARGE: int = 20_000

# Calibration margins between the two pricing tiers, measured on raw estimates (base cost included).
SLOAD_THRESHOLD: int = 26_000
SSTORE_THRESHOLD: int = 48_000
ACCOUNT_ACCESS_THRESHOLD: int = 28_000

# Fixed inputs of the variable-cost precompiles.
PAIRING_TEST_POINTS: int = 1
BLAKE2F_TEST_ROUNDS: int = 12


@unique
class ProbeCategory(str, Enum):
    STORAGE = 'storage'
    ACCOUNT = 'account'
    PRECOMPILE = 'precompile'


def _argument_types(signature: str) -> tuple[str, ...]:
    """Return the ABI types of a function signature, e.g. `f(uint256,address)` -> ('uint256', 'address')."""
    start = signature.index('(')
    inner = signature[start + 1:signature.rindex(')')]
    return tuple(t.strip() for t in inner.split(',') if t.strip())


@dataclass(frozen=True)
class OpcodeProbe:
    """
    An opcode class under test.

    Attributes:
        name: opcode mnemonic, also the lookup key.
        signature: fixture contract function that executes the opcode on its arguments.
        category: whether the opcode touches a storage slot or an account.
        reference_cost: cold access cost under the reference model.
        modified_cost: cold access cost under the modified model.
        threshold: raw estimate above which the node is considered to charge modified-model prices.
        surcharge: cost the probe pays on top of the access itself, whatever the model.
    """
    name: str
    signature: str
    category: ProbeCategory
    reference_cost: int
    modified_cost: int
    threshold: int
    surcharge: int = 0

    @property
    def argument_types(self) -> tuple[str, ...]:
        return _argument_types(self.signature)

    def cost(self, model: GasModel) -> int:
        """Cold access cost under `model`."""
        return self.modified_cost if model is GasModel.MODIFIED else self.reference_cost

    def expected_total_gas(self, model: GasModel) -> int:
        """Raw estimate a node following `model` should report for this probe."""
        return BASE_TX_COST + self.cost(model) + self.surcharge


@dataclass(frozen=True)
class PrecompileProbe:
    """
    A precompiled contract under test.

    Attributes:
        name: precompile name, also the lookup key.
        signature: fixture contract function that calls the precompile with a fixed input.
        address: precompile address.
        reference_base_cost: flat part of the reference cost.
        reference_unit_cost: reference cost per unit of input (point, round), zero for fixed-cost precompiles.
        multiplier: modified cost over reference cost.
        unit_name: what the variable part is keyed on, if anything.
        test_units: number of units in the fixture's fixed input.
    """
    name: str
    signature: str
    address: int
    reference_base_cost: int
    multiplier: int
    reference_unit_cost: int = 0
    unit_name: Optional[str] = None
    test_units: int = 0

    @property
    def address_hex(self) -> str:
        return '0x' + self.address.to_bytes(20, 'big').hex()

    @property
    def argument_types(self) -> tuple[str, ...]:
        return _argument_types(self.signature)

    def reference_cost(self, units: Optional[int] = None) -> int:
        if units is None:
            units = self.test_units
        return self.reference_base_cost + self.reference_unit_cost * units

    def modified_cost(self, units: Optional[int] = None) -> int:
        return self.reference_cost(units) * self.multiplier

    def cost(self, model: GasModel, units: Optional[int] = None) -> int:
        if model is GasModel.MODIFIED:
            return self.modified_cost(units)
        return self.reference_cost(units)

    def describe_formula(self, model: GasModel) -> str:
        """Human readable cost formula, e.g. `225000 + 170000/point`."""
        factor = self.multiplier if model is GasModel.MODIFIED else 1
        base = self.reference_base_cost * factor
        per_unit = self.reference_unit_cost * factor
        if self.unit_name is None:
            return str(base)
        if base == 0:
            return f'{self.unit_name}s x {per_unit}'
        return f'{base} + {per_unit}/{self.unit_name}'


Probe = Union[OpcodeProbe, PrecompileProbe]


class ExpectationTable:
    """Read-only registry of opcode and precompile probes, kept in declared order."""

    def __init__(self, opcodes: Iterable[OpcodeProbe], precompiles: Iterable[PrecompileProbe]) -> None:
        self._opcodes: tuple[OpcodeProbe, ...] = tuple(opcodes)
        self._precompiles: tuple[PrecompileProbe, ...] = tuple(precompiles)
        self._opcode_index = {probe.name: probe for probe in self._opcodes}
        self._precompile_index = {probe.name: probe for probe in self._precompiles}

        if len(self._opcode_index) != len(self._opcodes):
            raise ValueError('duplicate opcode probe names')
        if len(self._precompile_index) != len(self._precompiles):
            raise ValueError('duplicate precompile probe names')

        for opcode in self._opcodes:
            self._validate_opcode(opcode)
        for precompile in self._precompiles:
            self._validate_precompile(precompile)

    @staticmethod
    def _validate_opcode(probe: OpcodeProbe) -> None:
        """The threshold must separate a reference-priced estimate from a modified-priced one."""
        low = probe.expected_total_gas(GasModel.REFERENCE)
        high = probe.expected_total_gas(GasModel.MODIFIED)
        if not low < probe.threshold < high:
            raise ValueError(f'{probe.name}: threshold {probe.threshold} is not strictly between {low} and {high}')

    @staticmethod
    def _validate_precompile(probe: PrecompileProbe) -> None:
        if probe.multiplier < 1:
            raise ValueError(f'{probe.name}: multiplier must be at least 1, got {probe.multiplier}')
        if (probe.unit_name is None) != (probe.reference_unit_cost == 0):
            raise ValueError(f'{probe.name}: unit_name and reference_unit_cost must be set together')

    def lookup_opcode(self, name: str) -> OpcodeProbe:
        try:
            return self._opcode_index[name]
        except KeyError:
            raise UnknownProbe(f'unknown opcode probe: {name}') from None

    def lookup_precompile(self, name: str) -> PrecompileProbe:
        try:
            return self._precompile_index[name]
        except KeyError:
            raise UnknownProbe(f'unknown precompile probe: {name}') from None

    def opcode_probes(self) -> tuple[OpcodeProbe, ...]:
        """Storage opcodes first, then account-access opcodes."""
        return self._opcodes

    def precompile_probes(self) -> tuple[PrecompileProbe, ...]:
        return self._precompiles

    def __iter__(self) -> Iterator[Probe]:
        yield from self._opcodes
        yield from self._precompiles

    def __len__(self) -> int:
        return len(self._opcodes) + len(self._precompiles)

    @classmethod
    def default(cls) -> 'ExpectationTable':
        return cls(_default_opcodes(), _default_precompiles())


def _storage_probe(name: str, signature: str, threshold: int, surcharge: int = 0) -> OpcodeProbe:
    return OpcodeProbe(
        name=name,
        signature=signature,
        category=ProbeCategory.STORAGE,
        reference_cost=COLD_STORAGE_COST[GasModel.REFERENCE],
        modified_cost=COLD_STORAGE_COST[GasModel.MODIFIED],
        threshold=threshold,
        surcharge=surcharge,
    )


def _account_probe(name: str) -> OpcodeProbe:
    return OpcodeProbe(
        name=name,
        signature=f'test{name}(address)',
        category=ProbeCategory.ACCOUNT,
        reference_cost=COLD_ACCOUNT_COST[GasModel.REFERENCE],
        modified_cost=COLD_ACCOUNT_COST[GasModel.MODIFIED],
        threshold=ACCOUNT_ACCESS_THRESHOLD,
    )


def _default_opcodes() -> list[OpcodeProbe]:
    return [
        _storage_probe('SLOAD', 'testSLOAD(uint256)', SLOAD_THRESHOLD),
        _storage_probe('SSTORE', 'testSSTORE(uint256,uint256)', SSTORE_THRESHOLD, surcharge=STORAGE_SET_SURCHARGE),
        _account_probe('BALANCE'),
        _account_probe('EXTCODESIZE'),
        _account_probe('EXTCODECOPY'),
        _account_probe('EXTCODEHASH'),
        _account_probe('CALL'),
        _account_probe('CALLCODE'),
        _account_probe('DELEGATECALL'),
        _account_probe('STATICCALL'),
    ]


def _default_precompiles() -> list[PrecompileProbe]:
    return [
        PrecompileProbe(name='ecRecover', signature='testEcRecover()', address=0x01,
                        reference_base_cost=3_000, multiplier=2),
        PrecompileProbe(name='ecAdd', signature='testEcAdd()', address=0x06,
                        reference_base_cost=150, multiplier=2),
        PrecompileProbe(name='ecMul', signature='testEcMul()', address=0x07,
                        reference_base_cost=6_000, multiplier=5),
        PrecompileProbe(name='ecPairing', signature='testEcPairing()', address=0x08,
                        reference_base_cost=45_000, reference_unit_cost=34_000, multiplier=5,
                        unit_name='point', test_units=PAIRING_TEST_POINTS),
        PrecompileProbe(name='blake2f', signature='testBlake2f()', address=0x09,
                        reference_base_cost=0, reference_unit_cost=1, multiplier=2,
                        unit_name='round', test_units=BLAKE2F_TEST_ROUNDS),
    ]


DEFAULT_EXPECTATIONS = ExpectationTable.default()
