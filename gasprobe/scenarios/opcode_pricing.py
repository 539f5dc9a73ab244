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

from typing import Callable, Optional

from structlog import get_logger

from gasprobe.deployer import Deployer
from gasprobe.expectations import DEFAULT_EXPECTATIONS, ExpectationTable, OpcodeProbe
from gasprobe.gas_model import GasModel
from gasprobe.measurement import Measurement, MeasurementKind, Report
from gasprobe.probe_runner import FreshArguments, run_probe
from gasprobe.rpc.client import EthRpcClient, check_connection
from gasprobe.verdict import VerdictEngine

logger = get_logger()


def _never_stop() -> bool:
    return False


class OpcodePricingScenario:
    """Deploys the pricing fixture and runs every opcode and precompile probe of the table, in table order."""

    def __init__(
        self,
        rpc_client: EthRpcClient,
        deployer: Deployer,
        *,
        contract: str,
        signer_key: str,
        model: GasModel = GasModel.MODIFIED,
        table: ExpectationTable = DEFAULT_EXPECTATIONS,
        fresh: Optional[FreshArguments] = None,
        should_stop: Callable[[], bool] = _never_stop,
    ) -> None:
        self.log = logger.new(scenario='opcode_pricing', model=model.value)
        self.rpc_client = rpc_client
        self.deployer = deployer
        self.contract = contract
        self.signer_key = signer_key
        self.model = model
        self.table = table
        self.fresh = fresh or FreshArguments()
        self.should_stop = should_stop

    def run(self, report: Report) -> Report:
        """Fill `report` with one measurement per probe.

        CannotConnect, BuildFailed and DeployFailed propagate before any probe runs, leaving `report` empty.
        """
        check_connection(self.rpc_client)
        artifact = self.deployer.build(self.contract)
        address = self.deployer.deploy(artifact, self.signer_key, self.rpc_client.url)

        engine = VerdictEngine(self.model, self.table)
        for probe in self.table:
            if self.should_stop():
                kind = MeasurementKind.OPCODE if isinstance(probe, OpcodeProbe) else MeasurementKind.PRECOMPILE
                engine.record(report, Measurement(name=probe.name, kind=kind).skipped('interrupted'))
                continue
            engine.record(report, run_probe(probe, address, self.rpc_client, self.fresh))

        self.log.info('scenario finished', passed=report.passed, failed=report.failed, skipped=report.skipped)
        return report
