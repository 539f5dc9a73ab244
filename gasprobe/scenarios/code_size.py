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

import re

from structlog import get_logger

from gasprobe.deployer import Deployer
from gasprobe.exception import DeployFailed
from gasprobe.gas_model import GasModel
from gasprobe.measurement import Measurement, MeasurementKind, ProbeStatus, Report
from gasprobe.rpc.client import EthRpcClient, check_connection
from gasprobe.verdict import deployment_passes

logger = get_logger()

MEASUREMENT_NAME = 'CODE_SIZE_LIMIT'

# How geth, anvil and revm based nodes word a rejected oversized deployment.
_CODE_SIZE_ERROR_RE = re.compile(r'max code size exceeded|code size limit|CreateContractSizeLimit', re.IGNORECASE)


def is_code_size_rejection(error: str) -> bool:
    return _CODE_SIZE_ERROR_RE.search(error) is not None


class CodeSizeScenario:
    """Deploys an oversized contract and checks the node accepts or rejects it according to its model's limit.

    A size-limit rejection is an observation here, not an error. A deployment failing for any other reason leaves the
    check skipped.
    """

    def __init__(self, rpc_client: EthRpcClient, deployer: Deployer, *, contract: str, signer_key: str,
                 model: GasModel = GasModel.MODIFIED) -> None:
        self.log = logger.new(scenario='code_size', model=model.value)
        self.rpc_client = rpc_client
        self.deployer = deployer
        self.contract = contract
        self.signer_key = signer_key
        self.model = model

    def run(self, report: Report) -> Report:
        check_connection(self.rpc_client)
        artifact = self.deployer.build(self.contract)
        size = artifact.bytecode_size
        limit = self.model.max_code_size()
        self.log.info('bytecode size', contract=artifact.contract, size=size, limit=limit)

        try:
            address = self.deployer.deploy(artifact, self.signer_key, self.rpc_client.url)
        except DeployFailed as e:
            if not is_code_size_rejection(str(e)):
                self.log.warning('deployment failed for another reason, skipping', error=str(e))
                report.add(Measurement(name=MEASUREMENT_NAME, kind=MeasurementKind.DEPLOYMENT)
                           .skipped(f'deployment failed: {e}'))
                return report
            self.log.info('deployment rejected', error=str(e))
            deployed = False
            outcome = 'rejected'
        else:
            deployed = True
            outcome = f'deployed at {address}'

        expectation = 'accept' if size <= limit else 'reject'
        status = ProbeStatus.PASSED if deployment_passes(deployed, size, self.model) else ProbeStatus.FAILED
        report.add(Measurement(
            name=MEASUREMENT_NAME,
            kind=MeasurementKind.DEPLOYMENT,
            status=status,
            expected=limit,
            detail=f'{size} bytes, limit {limit}: {outcome}, expected {expectation}',
        ))
        self.log.info('scenario finished', status=status.value)
        return report
