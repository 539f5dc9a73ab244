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

from pathlib import Path
from typing import Union

from pydantic import Field, PositiveFloat, PositiveInt, field_validator

from gasprobe.gas_model import GasModel
from gasprobe.utils.pydantic import BaseModel
from gasprobe.utils.yaml import dict_from_extended_yaml


class GasProbeSettings(BaseModel):
    # JSON-RPC endpoint of the node under test
    RPC_URL: str = 'http://127.0.0.1:8545'

    # Seconds before a single RPC call is given up and its probe skipped
    RPC_TIMEOUT: PositiveFloat = 30.0

    # Pricing schedule the node is expected to follow
    GAS_MODEL: GasModel = GasModel.MODIFIED

    # Key that deploys fixtures and signs the value transfer. The default is the first well-known dev account of anvil.
    PRIVATE_KEY: str = '0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80'

    # Account receiving the value transfer. The transfer is paid and signed by PRIVATE_KEY.
    RECIPIENT_ADDRESS: str = '0x70997970C51812dc3A010C7d01b50e0d17dc79C8'

    # Foundry toolchain
    FORGE_BIN: str = 'forge'
    FOUNDRY_PROJECT_DIR: str = '.'
    TOOL_TIMEOUT: PositiveFloat = 300.0

    # Fixture contracts, as `path:Name` relative to FOUNDRY_PROJECT_DIR
    PRICING_CONTRACT: str = 'src/OpcodesAndPrecompilesGasPricing.sol:OpcodesAndPrecompilesGasPricing'
    LARGE_CONTRACT: str = 'src/LargeContract.sol:OversizedContract'

    # Value transfer used to observe gas charging
    TRANSFER_GAS_LIMIT: PositiveInt = 100_000
    TRANSFER_GAS_PRICE: PositiveInt = 1_000_000_000  # 1 gwei
    TRANSFER_VALUE: PositiveInt = 10 ** 15  # 0.001 ether

    # Waiting for the transfer receipt
    RECEIPT_TIMEOUT: PositiveFloat = 30.0
    RECEIPT_POLL_INTERVAL: float = Field(default=0.5, gt=0)

    @field_validator('PRIVATE_KEY')
    @classmethod
    def _validate_private_key(cls, value: str) -> str:
        digits = value[2:] if value.startswith('0x') else value
        if len(digits) != 64:
            raise ValueError('PRIVATE_KEY must be 32 bytes of hex')
        int(digits, 16)
        return value

    @field_validator('PRICING_CONTRACT', 'LARGE_CONTRACT')
    @classmethod
    def _validate_contract(cls, value: str) -> str:
        if ':' not in value:
            raise ValueError(f'contract must be given as path:Name, got {value!r}')
        return value

    @classmethod
    def from_yaml(cls, *, filepath: Union[Path, str]) -> 'GasProbeSettings':
        """Takes a filepath to a yaml file and returns a validated GasProbeSettings instance."""
        settings_dict = dict_from_extended_yaml(filepath=filepath)
        return cls.model_validate(settings_dict)
