import pytest

from gasprobe.rpc.abi import encode_call


def test_selector_of_known_function():
    calldata = encode_call('transfer(address,uint256)', ['address', 'uint256'],
                           ['0x70997970C51812dc3A010C7d01b50e0d17dc79C8', 1])
    assert calldata.startswith('0xa9059cbb')
    assert len(calldata) == 2 + 8 + 2 * 64
    assert calldata.endswith('0' * 63 + '1')


def test_no_arguments():
    assert len(encode_call('testEcAdd()', [], [])) == 10


def test_argument_count_mismatch():
    with pytest.raises(ValueError, match='takes 1 arguments, got 2'):
        encode_call('testSLOAD(uint256)', ['uint256'], [1, 2])
