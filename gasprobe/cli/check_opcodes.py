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

import signal
from argparse import ArgumentParser, Namespace
from types import FrameType
from typing import Optional

from structlog import get_logger

logger = get_logger()


def create_parser() -> ArgumentParser:
    from gasprobe.cli.util import add_node_options, create_parser
    parser = create_parser()
    add_node_options(parser)
    return parser


class StopRequest:
    """SIGINT handler: the first interrupt lets the running probe finish and skips the rest, a second one aborts."""

    def __init__(self) -> None:
        self.requested = False

    def __call__(self) -> bool:
        return self.requested

    def handle(self, signum: int, frame: Optional[FrameType]) -> None:
        if self.requested:
            raise KeyboardInterrupt
        self.requested = True
        logger.warning('stop requested, finishing current probe (interrupt again to abort)')


def execute(args: Namespace) -> int:
    from gasprobe.cli.util import resolve_model, run_and_report
    from gasprobe.conf.get_settings import get_global_settings
    from gasprobe.deployer import ForgeDeployer
    from gasprobe.measurement import Report
    from gasprobe.rpc.client import EthRpcClient
    from gasprobe.scenarios.opcode_pricing import OpcodePricingScenario

    settings = get_global_settings()
    model = resolve_model(args, settings.GAS_MODEL)
    rpc_url = args.rpc_url or settings.RPC_URL

    stop = StopRequest()
    previous_handler = signal.signal(signal.SIGINT, stop.handle)
    try:
        with EthRpcClient(rpc_url, timeout=settings.RPC_TIMEOUT) as client:
            deployer = ForgeDeployer(settings.FOUNDRY_PROJECT_DIR, forge_bin=settings.FORGE_BIN,
                                     timeout=settings.TOOL_TIMEOUT)
            scenario = OpcodePricingScenario(
                client,
                deployer,
                contract=settings.PRICING_CONTRACT,
                signer_key=settings.PRIVATE_KEY,
                model=model,
                should_stop=stop,
            )
            report = Report(title=f'Opcode & precompile gas pricing ({model.value} model)')
            return run_and_report(report, scenario.run)
    finally:
        signal.signal(signal.SIGINT, previous_handler)


def main() -> int:
    parser = create_parser()
    args = parser.parse_args()
    return execute(args)
