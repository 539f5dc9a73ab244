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

import itertools
import time
from typing import Any, Callable, Optional

import requests
from structlog import get_logger

from gasprobe.exception import CannotConnect, RpcCallFailed

logger = get_logger()

DEFAULT_TIMEOUT: float = 30.0


def to_quantity(value: int) -> str:
    """Encode an integer as a JSON-RPC quantity."""
    return hex(value)


def from_quantity(value: Any) -> int:
    """Decode a JSON-RPC quantity (0x-prefixed hex string)."""
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.startswith(('0x', '0X')):
        return int(value, 16)
    raise ValueError(f'invalid quantity: {value!r}')


class EthRpcClient:
    """Used to talk JSON-RPC to an execution node over HTTP.

    Every call is a single attempt bounded by `timeout`; any transport error, timeout or error response is raised as
    RpcCallFailed.
    """

    USER_AGENT = 'gasprobe'

    def __init__(self, url: str, *, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.log = logger.new(url=url)
        self.url = url
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({'User-Agent': self.USER_AGENT})
        self._ids = itertools.count(1)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> 'EthRpcClient':
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def call(self, method: str, params: Optional[list[Any]] = None) -> Any:
        """Issue one JSON-RPC request and return its `result`."""
        payload = {
            'jsonrpc': '2.0',
            'id': next(self._ids),
            'method': method,
            'params': params or [],
        }
        self.log.debug('rpc request', method=method, params=payload['params'])
        try:
            response = self._session.post(self.url, json=payload, timeout=self.timeout)
        except requests.Timeout:
            raise RpcCallFailed(method, f'timed out after {self.timeout}s') from None
        except requests.RequestException as e:
            raise RpcCallFailed(method, f'transport error: {e}') from e

        if response.status_code >= 400:
            raise RpcCallFailed(method, f'HTTP {response.status_code}: {response.text[:200]}')

        try:
            data = response.json()
        except ValueError:
            raise RpcCallFailed(method, f'cannot decode response: {response.text[:200]}') from None

        if not isinstance(data, dict):
            raise RpcCallFailed(method, f'unexpected response: {data!r}')

        error = data.get('error')
        if error is not None:
            if isinstance(error, dict):
                raise RpcCallFailed(method, str(error.get('message', error)), code=error.get('code'))
            raise RpcCallFailed(method, str(error))

        if 'result' not in data:
            raise RpcCallFailed(method, f'response without result: {data!r}')

        self.log.debug('rpc response', method=method, result=data['result'])
        return data['result']

    def _quantity(self, method: str, params: list[Any]) -> int:
        result = self.call(method, params)
        try:
            return from_quantity(result)
        except ValueError as e:
            raise RpcCallFailed(method, str(e)) from None

    def chain_id(self) -> int:
        return self._quantity('eth_chainId', [])

    def estimate_gas(self, to: str, data: str, sender: Optional[str] = None) -> int:
        """Return the node's gas estimate for calling `to` with calldata `data`."""
        tx: dict[str, Any] = {'to': to, 'data': data}
        if sender is not None:
            tx['from'] = sender
        return self._quantity('eth_estimateGas', [tx])

    def get_balance(self, address: str, block: str = 'latest') -> int:
        return self._quantity('eth_getBalance', [address, block])

    def get_transaction_count(self, address: str, block: str = 'pending') -> int:
        """Return the next nonce of `address`."""
        return self._quantity('eth_getTransactionCount', [address, block])

    def send_raw_transaction(self, raw: str) -> str:
        """Submit a signed transaction, return its hash."""
        return str(self.call('eth_sendRawTransaction', [raw]))

    def get_transaction_receipt(self, tx_hash: str) -> Optional[dict[str, Any]]:
        return self.call('eth_getTransactionReceipt', [tx_hash])

    def wait_for_receipt(self, tx_hash: str, *, timeout: float, poll_interval: float,
                         clock: Callable[[], float] = time.monotonic,
                         sleep: Callable[[float], None] = time.sleep) -> dict[str, Any]:
        """Poll for the receipt of `tx_hash` until it shows up or `timeout` seconds have passed."""
        deadline = clock() + timeout
        while True:
            receipt = self.get_transaction_receipt(tx_hash)
            if receipt is not None:
                return receipt
            if clock() >= deadline:
                raise RpcCallFailed('eth_getTransactionReceipt', f'no receipt for {tx_hash} after {timeout}s')
            sleep(poll_interval)


def check_connection(client: EthRpcClient) -> int:
    """Return the chain id, or raise CannotConnect. Runs before any probe."""
    try:
        chain_id = client.chain_id()
    except RpcCallFailed as e:
        raise CannotConnect(f'cannot connect to {client.url}: {e.message}') from e
    logger.info('connected', url=client.url, chain_id=chain_id)
    return chain_id
