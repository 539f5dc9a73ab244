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

import random
from typing import Any, Optional, Sequence

from eth_utils import to_checksum_address
from structlog import get_logger

from gasprobe.exception import RpcCallFailed
from gasprobe.expectations import OpcodeProbe, PrecompileProbe, Probe
from gasprobe.measurement import Measurement, MeasurementKind
from gasprobe.rpc.abi import encode_call
from gasprobe.rpc.client import EthRpcClient

logger = get_logger()

# Keys and addresses are drawn above these bounds so they never hit the fixture's own low slots or a precompile.
_MIN_STORAGE_KEY = 1 << 64
_MIN_ADDRESS = 1 << 32


class FreshArguments:
    """Source of probe arguments that were never handed out before by this instance.

    A cold-access probe is only meaningful if the slot or account it touches was not touched before, so every key and
    address is remembered and never repeated.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.SystemRandom()
        self._issued: set[tuple[str, int]] = set()

    def _draw(self, kind: str, low: int, high: int) -> int:
        while True:
            value = self._rng.randrange(low, high)
            if (kind, value) not in self._issued:
                self._issued.add((kind, value))
                return value

    def storage_key(self) -> int:
        return self._draw('slot', _MIN_STORAGE_KEY, 1 << 256)

    def address(self) -> str:
        return to_checksum_address('0x' + self._draw('address', _MIN_ADDRESS, 1 << 160).to_bytes(20, 'big').hex())

    def value(self) -> int:
        """A non-zero word, so a store always pays for a zero-to-non-zero write."""
        return self._draw('value', 1, 1 << 64)

    def arguments_for(self, argument_types: Sequence[str]) -> list[Any]:
        """Build fresh arguments: addresses for `address`, a slot key for the first `uint256`, values after that."""
        args: list[Any] = []
        have_key = False
        for arg_type in argument_types:
            if arg_type == 'address':
                args.append(self.address())
            elif arg_type == 'uint256' and not have_key:
                args.append(self.storage_key())
                have_key = True
            elif arg_type == 'uint256':
                args.append(self.value())
            else:
                raise ValueError(f'unsupported probe argument type: {arg_type}')
        return args


_default_fresh = FreshArguments()


def _estimate(probe: Probe, kind: MeasurementKind, args: list[Any], contract_address: str,
              rpc_client: EthRpcClient) -> Measurement:
    log = logger.new(probe=probe.name)
    pending = Measurement(name=probe.name, kind=kind)
    calldata = encode_call(probe.signature, probe.argument_types, args)
    log.debug('estimating gas', signature=probe.signature, arguments=args)
    try:
        gas = rpc_client.estimate_gas(contract_address, calldata)
    except RpcCallFailed as e:
        log.warning('estimate failed, skipping probe', error=str(e))
        return pending.skipped(f'estimate failed: {e}')
    log.debug('gas estimated', raw_total_gas=gas)
    return Measurement(name=probe.name, kind=kind, raw_total_gas=gas)


def run_opcode_probe(probe: OpcodeProbe, contract_address: str, rpc_client: EthRpcClient,
                     fresh: Optional[FreshArguments] = None) -> Measurement:
    """Measure one opcode probe with never-before-used arguments.

    Returns a pending measurement, or a skipped one if the estimate could not be obtained.
    """
    args = (fresh or _default_fresh).arguments_for(probe.argument_types)
    return _estimate(probe, MeasurementKind.OPCODE, args, contract_address, rpc_client)


def run_precompile_probe(probe: PrecompileProbe, contract_address: str, rpc_client: EthRpcClient,
                         fresh: Optional[FreshArguments] = None) -> Measurement:
    """Measure one precompile probe. The fixture calls the precompile with its fixed test input."""
    args = (fresh or _default_fresh).arguments_for(probe.argument_types)
    return _estimate(probe, MeasurementKind.PRECOMPILE, args, contract_address, rpc_client)


def run_probe(probe: Probe, contract_address: str, rpc_client: EthRpcClient,
              fresh: Optional[FreshArguments] = None) -> Measurement:
    if isinstance(probe, OpcodeProbe):
        return run_opcode_probe(probe, contract_address, rpc_client, fresh)
    return run_precompile_probe(probe, contract_address, rpc_client, fresh)
