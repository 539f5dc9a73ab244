import pytest

from gasprobe.exception import UnknownProbe
from gasprobe.expectations import (
    BASE_TX_COST,
    DEFAULT_EXPECTATIONS,
    ExpectationTable,
    OpcodeProbe,
    PrecompileProbe,
    ProbeCategory,
)
from gasprobe.gas_model import GasModel

ACCOUNT_OPCODES = ['BALANCE', 'EXTCODESIZE', 'EXTCODECOPY', 'EXTCODEHASH', 'CALL', 'CALLCODE', 'DELEGATECALL',
                   'STATICCALL']


def test_declared_order():
    names = [probe.name for probe in DEFAULT_EXPECTATIONS]
    assert names == ['SLOAD', 'SSTORE'] + ACCOUNT_OPCODES + ['ecRecover', 'ecAdd', 'ecMul', 'ecPairing', 'blake2f']
    assert len(DEFAULT_EXPECTATIONS) == 15


@pytest.mark.parametrize(['name', 'reference', 'modified', 'threshold'], [
    ('SLOAD', 2_100, 8_100, 26_000),
    ('SSTORE', 2_100, 8_100, 48_000),
] + [(name, 2_600, 10_100, 28_000) for name in ACCOUNT_OPCODES])
def test_opcode_costs(name, reference, modified, threshold):
    probe = DEFAULT_EXPECTATIONS.lookup_opcode(name)
    assert probe.cost(GasModel.REFERENCE) == reference
    assert probe.cost(GasModel.MODIFIED) == modified
    assert probe.threshold == threshold


def test_opcode_signatures():
    assert DEFAULT_EXPECTATIONS.lookup_opcode('SLOAD').argument_types == ('uint256',)
    assert DEFAULT_EXPECTATIONS.lookup_opcode('SSTORE').argument_types == ('uint256', 'uint256')
    for name in ACCOUNT_OPCODES:
        probe = DEFAULT_EXPECTATIONS.lookup_opcode(name)
        assert probe.signature == f'test{name}(address)'
        assert probe.category is ProbeCategory.ACCOUNT


@pytest.mark.parametrize(['name', 'address', 'reference', 'modified'], [
    ('ecRecover', 0x01, 3_000, 6_000),
    ('ecAdd', 0x06, 150, 300),
    ('ecMul', 0x07, 6_000, 30_000),
    ('ecPairing', 0x08, 79_000, 395_000),
    ('blake2f', 0x09, 12, 24),
])
def test_precompile_costs(name, address, reference, modified):
    probe = DEFAULT_EXPECTATIONS.lookup_precompile(name)
    assert probe.address == address
    assert probe.reference_cost() == reference
    assert probe.modified_cost() == modified
    assert probe.argument_types == ()


def test_variable_cost_formulas():
    pairing = DEFAULT_EXPECTATIONS.lookup_precompile('ecPairing')
    assert pairing.reference_cost(units=2) == 45_000 + 2 * 34_000
    assert pairing.modified_cost(units=2) == 225_000 + 2 * 170_000
    assert pairing.describe_formula(GasModel.REFERENCE) == '45000 + 34000/point'
    assert pairing.describe_formula(GasModel.MODIFIED) == '225000 + 170000/point'

    blake2f = DEFAULT_EXPECTATIONS.lookup_precompile('blake2f')
    assert blake2f.test_units == 12
    assert blake2f.modified_cost(units=100) == 200
    assert blake2f.describe_formula(GasModel.MODIFIED) == 'rounds x 2'

    assert DEFAULT_EXPECTATIONS.lookup_precompile('ecMul').describe_formula(GasModel.MODIFIED) == '30000'


def test_precompile_address_hex():
    assert DEFAULT_EXPECTATIONS.lookup_precompile('ecPairing').address_hex == '0x' + '00' * 19 + '08'


def test_expected_totals_include_base_cost():
    sload = DEFAULT_EXPECTATIONS.lookup_opcode('SLOAD')
    assert sload.expected_total_gas(GasModel.MODIFIED) == 29_100
    assert sload.expected_total_gas(GasModel.REFERENCE) == 23_100

    sstore = DEFAULT_EXPECTATIONS.lookup_opcode('SSTORE')
    assert sstore.expected_total_gas(GasModel.MODIFIED) == BASE_TX_COST + 8_100 + 20_000


def test_thresholds_separate_the_models():
    for probe in DEFAULT_EXPECTATIONS.opcode_probes():
        assert probe.expected_total_gas(GasModel.REFERENCE) < probe.threshold
        assert probe.threshold < probe.expected_total_gas(GasModel.MODIFIED)


def test_lookup_wrong_kind():
    with pytest.raises(UnknownProbe):
        DEFAULT_EXPECTATIONS.lookup_precompile('SLOAD')
    with pytest.raises(UnknownProbe):
        DEFAULT_EXPECTATIONS.lookup_opcode('ecRecover')


def test_lookup_unknown():
    with pytest.raises(UnknownProbe) as e:
        DEFAULT_EXPECTATIONS.lookup_opcode('SELFDESTRUCT')
    assert 'SELFDESTRUCT' in str(e.value)

    with pytest.raises(UnknownProbe):
        DEFAULT_EXPECTATIONS.lookup_precompile('modexp')


def test_probes_are_read_only():
    probe = DEFAULT_EXPECTATIONS.lookup_opcode('SLOAD')
    with pytest.raises(AttributeError):
        probe.threshold = 1  # type: ignore[misc]


def test_threshold_outside_tiers_is_rejected():
    bad = OpcodeProbe(name='SLOAD', signature='testSLOAD(uint256)', category=ProbeCategory.STORAGE,
                      reference_cost=2_100, modified_cost=8_100, threshold=30_000)
    with pytest.raises(ValueError, match='not strictly between'):
        ExpectationTable([bad], [])


def test_duplicate_names_are_rejected():
    probe = DEFAULT_EXPECTATIONS.lookup_opcode('BALANCE')
    with pytest.raises(ValueError, match='duplicate'):
        ExpectationTable([probe, probe], [])


def test_unit_cost_without_unit_name_is_rejected():
    bad = PrecompileProbe(name='x', signature='x()', address=0x0a, reference_base_cost=10, multiplier=2,
                          reference_unit_cost=5)
    with pytest.raises(ValueError, match='unit_name'):
        ExpectationTable([], [bad])
