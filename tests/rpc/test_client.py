import unittest
from unittest.mock import Mock

import requests

from gasprobe.exception import CannotConnect, RpcCallFailed
from gasprobe.rpc.client import EthRpcClient, check_connection, from_quantity, to_quantity


def _response(payload=None, status_code=200, text=''):
    response = Mock()
    response.status_code = status_code
    response.text = text
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


class EthRpcClientTest(unittest.TestCase):
    def setUp(self):
        self.session = Mock()
        self.session.headers = {}
        self.client = EthRpcClient('http://node:8545', timeout=3.0, session=self.session)

    def test_chain_id(self):
        self.session.post.return_value = _response({'jsonrpc': '2.0', 'id': 1, 'result': '0x7a69'})

        self.assertEqual(self.client.chain_id(), 31337)
        self.session.post.assert_called_once_with(
            'http://node:8545',
            json={'jsonrpc': '2.0', 'id': 1, 'method': 'eth_chainId', 'params': []},
            timeout=3.0,
        )

    def test_request_ids_increase(self):
        self.session.post.return_value = _response({'result': '0x1'})
        self.client.chain_id()
        self.client.chain_id()
        ids = [c.kwargs['json']['id'] for c in self.session.post.call_args_list]
        self.assertEqual(ids, [1, 2])

    def test_estimate_gas(self):
        self.session.post.return_value = _response({'result': '0x71ac'})

        gas = self.client.estimate_gas('0xabc', '0x1234')

        self.assertEqual(gas, 29_100)
        payload = self.session.post.call_args.kwargs['json']
        self.assertEqual(payload['method'], 'eth_estimateGas')
        self.assertEqual(payload['params'], [{'to': '0xabc', 'data': '0x1234'}])

    def test_get_balance(self):
        self.session.post.return_value = _response({'result': '0xde0b6b3a7640000'})
        self.assertEqual(self.client.get_balance('0xabc'), 10 ** 18)
        payload = self.session.post.call_args.kwargs['json']
        self.assertEqual(payload['params'], ['0xabc', 'latest'])

    def test_get_transaction_count(self):
        self.session.post.return_value = _response({'result': '0x2a'})
        self.assertEqual(self.client.get_transaction_count('0xabc'), 42)
        payload = self.session.post.call_args.kwargs['json']
        self.assertEqual(payload['method'], 'eth_getTransactionCount')
        self.assertEqual(payload['params'], ['0xabc', 'pending'])

    def test_send_raw_transaction(self):
        self.session.post.return_value = _response({'result': '0x' + 'ab' * 32})
        self.assertEqual(self.client.send_raw_transaction('0xf86c'), '0x' + 'ab' * 32)
        payload = self.session.post.call_args.kwargs['json']
        self.assertEqual(payload['method'], 'eth_sendRawTransaction')

    def test_error_response(self):
        self.session.post.return_value = _response(
            {'error': {'code': 3, 'message': 'execution reverted'}}
        )
        with self.assertRaises(RpcCallFailed) as cm:
            self.client.estimate_gas('0xabc', '0x')
        self.assertEqual(cm.exception.code, 3)
        self.assertEqual(cm.exception.method, 'eth_estimateGas')
        self.assertIn('execution reverted', str(cm.exception))

    def test_timeout(self):
        self.session.post.side_effect = requests.Timeout()
        with self.assertRaises(RpcCallFailed) as cm:
            self.client.chain_id()
        self.assertIn('timed out', cm.exception.message)

    def test_connection_error(self):
        self.session.post.side_effect = requests.ConnectionError('refused')
        with self.assertRaises(RpcCallFailed) as cm:
            self.client.chain_id()
        self.assertIn('refused', cm.exception.message)

    def test_http_error(self):
        self.session.post.return_value = _response(status_code=502, text='bad gateway')
        with self.assertRaises(RpcCallFailed) as cm:
            self.client.chain_id()
        self.assertIn('HTTP 502', cm.exception.message)

    def test_invalid_json(self):
        self.session.post.return_value = _response(ValueError('no json'), text='<html>')
        with self.assertRaises(RpcCallFailed):
            self.client.chain_id()

    def test_invalid_quantity(self):
        self.session.post.return_value = _response({'result': 'not-a-number'})
        with self.assertRaises(RpcCallFailed):
            self.client.estimate_gas('0xabc', '0x')

    def test_missing_result(self):
        self.session.post.return_value = _response({'jsonrpc': '2.0', 'id': 1})
        with self.assertRaises(RpcCallFailed):
            self.client.chain_id()

    def test_wait_for_receipt(self):
        receipt = {'status': '0x1', 'gasUsed': '0x5208'}
        self.session.post.side_effect = [
            _response({'result': None}),
            _response({'result': None}),
            _response({'result': receipt}),
        ]
        sleeps = []
        result = self.client.wait_for_receipt('0xaa', timeout=10, poll_interval=0.5,
                                              clock=lambda: 0.0, sleep=sleeps.append)
        self.assertEqual(result, receipt)
        self.assertEqual(sleeps, [0.5, 0.5])

    def test_wait_for_receipt_deadline(self):
        self.session.post.return_value = _response({'result': None})
        now = iter([0.0, 0.4, 0.8, 1.2])
        with self.assertRaises(RpcCallFailed) as cm:
            self.client.wait_for_receipt('0xaa', timeout=1.0, poll_interval=0.4,
                                         clock=lambda: next(now), sleep=lambda _: None)
        self.assertIn('no receipt', cm.exception.message)


class CheckConnectionTest(unittest.TestCase):
    def test_unreachable(self):
        session = Mock()
        session.headers = {}
        session.post.side_effect = requests.ConnectionError('refused')
        client = EthRpcClient('http://node:8545', session=session)

        with self.assertRaises(CannotConnect) as cm:
            check_connection(client)
        self.assertIn('http://node:8545', str(cm.exception))

    def test_reachable(self):
        session = Mock()
        session.headers = {}
        session.post.return_value = _response({'result': '0x1'})
        self.assertEqual(check_connection(EthRpcClient('http://node:8545', session=session)), 1)


class QuantityTest(unittest.TestCase):
    def test_round_trip_values(self):
        self.assertEqual(to_quantity(0), '0x0')
        self.assertEqual(to_quantity(100_000), '0x186a0')
        self.assertEqual(from_quantity('0x186a0'), 100_000)
        self.assertEqual(from_quantity(7), 7)
        with self.assertRaises(ValueError):
            from_quantity('186a0')
