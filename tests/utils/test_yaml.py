from pathlib import Path

import pytest

from gasprobe.utils.yaml import dict_from_extended_yaml, dict_from_yaml, merge_into

FIXTURES = Path(__file__).parent / 'fixtures'


def test_dict_from_yaml_invalid_filepath():
    with pytest.raises(ValueError) as e:
        dict_from_yaml(filepath='fake_file.yml')
    assert str(e.value) == "'fake_file.yml' is not a file"


def test_dict_from_yaml_empty():
    assert dict_from_yaml(filepath=FIXTURES / 'empty.yml') == {}


def test_dict_from_yaml_not_a_mapping():
    filepath = FIXTURES / 'number.yml'
    with pytest.raises(ValueError) as e:
        dict_from_yaml(filepath=filepath)
    assert str(e.value) == f"'{filepath}' cannot be parsed as a dictionary"


def test_dict_from_yaml_keeps_extends_key():
    contents = dict_from_yaml(filepath=FIXTURES / 'local.yml')
    assert contents == {'extends': 'base.yml', 'RPC_URL': 'http://127.0.0.1:9545'}


def test_dict_from_extended_yaml_without_extends():
    contents = dict_from_extended_yaml(filepath=FIXTURES / 'base.yml')
    assert contents == {'RPC_URL': 'http://127.0.0.1:8545', 'RPC_TIMEOUT': 30.0, 'GAS_MODEL': 'modified'}


def test_dict_from_extended_yaml():
    contents = dict_from_extended_yaml(filepath=FIXTURES / 'local.yml')
    assert contents == {'RPC_URL': 'http://127.0.0.1:9545', 'RPC_TIMEOUT': 30.0, 'GAS_MODEL': 'modified'}


def test_dict_from_extended_yaml_chain():
    contents = dict_from_extended_yaml(filepath=FIXTURES / 'reference.yml')
    assert contents == {'RPC_URL': 'http://127.0.0.1:9545', 'RPC_TIMEOUT': 30.0, 'GAS_MODEL': 'reference'}


def test_dict_from_extended_yaml_self_extension():
    with pytest.raises(ValueError, match='cannot extend itself'):
        dict_from_extended_yaml(filepath=FIXTURES / 'self_extend.yml')


def test_dict_from_extended_yaml_missing_base():
    with pytest.raises(ValueError, match='is not a file'):
        dict_from_extended_yaml(filepath=FIXTURES / 'missing_base.yml')


def test_merge_into_nested():
    base = {'a': 1, 'b': {'c': 2, 'd': 3}, 'e': [1, 2]}
    merge_into(base, {'b': {'d': 4}, 'e': [3], 'f': None})
    assert base == {'a': 1, 'b': {'c': 2, 'd': 4}, 'e': [3], 'f': None}


def test_dict_from_extended_yaml_cycle():
    with pytest.raises(ValueError, match='has recursive extensions'):
        dict_from_extended_yaml(filepath=FIXTURES / 'cycle_a.yml')
