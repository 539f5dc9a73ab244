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


from typing import Any

from eth_account import Account
from eth_utils import to_checksum_address
from structlog import get_logger

from gasprobe.exception import RpcCallFailed
from gasprobe.gas_model import GasModel
from gasprobe.measurement import Measurement, MeasurementKind, ProbeStatus, Report
from gasprobe.rpc.client import EthRpcClient, check_connection, from_quantity
from gasprobe.verdict import transfer_passes

logger = get_logger()

MEASUREMENT_NAME = 'TRANSFER_CHARGE'


def _receipt_field(receipt: dict[str, Any], field: str) -> int:
    try:
        return from_quantity(receipt[field])
    except (KeyError, ValueError) as e:
        raise RpcCallFailed('eth_getTransactionReceipt', f'malformed receipt, bad {field}: {e}') from e


class GasChargingScenario:
    """Sends a plain value transfer with a generous gas limit and derives what was charged from the sender's
    balance. A node without refunds keeps the whole limit, one with refunds only what was used.

    The transfer is a legacy transaction signed locally with `signer_key` and submitted raw, so the node does not
    need to manage the sender account.
    """

    def __init__(
        self,
        rpc_client: EthRpcClient,
        *,
        signer_key: str,
        recipient: str,
        gas_limit: int,
        gas_price: int,
        value: int,
        model: GasModel = GasModel.MODIFIED,
        receipt_timeout: float = 30.0,
        poll_interval: float = 0.5,
    ) -> None:
        self.log = logger.new(scenario='gas_charging', model=model.value)
        self.rpc_client = rpc_client
        self.account = Account.from_key(signer_key)
        self.recipient = to_checksum_address(recipient)
        self.gas_limit = gas_limit
        self.gas_price = gas_price
        self.value = value
        self.model = model
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval

    @property
    def sender(self) -> str:
        return self.account.address

    def _sign_transfer(self, nonce: int, chain_id: int) -> str:
        signed = self.account.sign_transaction({
            'nonce': nonce,
            'to': self.recipient,
            'value': self.value,
            'gas': self.gas_limit,
            'gasPrice': self.gas_price,
            'data': b'',
            'chainId': chain_id,
        })
        return '0x' + bytes(signed.raw_transaction).hex()

    def _transfer(self, chain_id: int) -> tuple[int, int]:
        """Send the transfer, return (gas charged, gas used according to the receipt)."""
        client = self.rpc_client
        balance_before = client.get_balance(self.sender)
        nonce = client.get_transaction_count(self.sender)
        tx_hash = client.send_raw_transaction(self._sign_transfer(nonce, chain_id))
        self.log.debug('transfer sent', tx_hash=tx_hash, sender=self.sender, nonce=nonce)
        receipt = client.wait_for_receipt(tx_hash, timeout=self.receipt_timeout, poll_interval=self.poll_interval)
        if _receipt_field(receipt, 'status') != 1:
            raise RpcCallFailed('eth_sendRawTransaction', f'transfer {tx_hash} reverted')
        gas_used = _receipt_field(receipt, 'gasUsed')
        balance_after = client.get_balance(self.sender)

        gas_cost = balance_before - balance_after - self.value
        return gas_cost // self.gas_price, gas_used

    def run(self, report: Report) -> Report:
        chain_id = check_connection(self.rpc_client)
        pending = Measurement(name=MEASUREMENT_NAME, kind=MeasurementKind.TRANSFER)
        try:
            gas_charged, gas_used = self._transfer(chain_id)
        except RpcCallFailed as e:
            self.log.warning('transfer failed, skipping', error=str(e))
            report.add(pending.skipped(f'transfer failed: {e}'))
            return report

        self.log.info('gas charged', gas_limit=self.gas_limit, gas_charged=gas_charged, gas_used=gas_used)
        passed = transfer_passes(gas_charged, self.gas_limit, self.model)
        expected = gas_used if self.model.refunds_unused_gas() else self.gas_limit
        if gas_charged < self.gas_limit:
            behavior = 'refunds unused gas'
        elif gas_charged == self.gas_limit:
            behavior = 'charges the full limit'
        else:
            behavior = 'charges above the limit'
        report.add(Measurement(
            name=MEASUREMENT_NAME,
            kind=MeasurementKind.TRANSFER,
            status=ProbeStatus.PASSED if passed else ProbeStatus.FAILED,
            raw_total_gas=gas_charged,
            expected=expected,
            detail=f'gas limit {self.gas_limit}, node {behavior}',
        ))
        return report
