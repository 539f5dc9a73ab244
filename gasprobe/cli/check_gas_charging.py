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

from argparse import ArgumentParser, Namespace


def create_parser() -> ArgumentParser:
    from gasprobe.cli.util import add_node_options, create_parser
    parser = create_parser()
    add_node_options(parser)
    return parser


def execute(args: Namespace) -> int:
    from gasprobe.cli.util import resolve_model, run_and_report
    from gasprobe.conf.get_settings import get_global_settings
    from gasprobe.measurement import Report
    from gasprobe.rpc.client import EthRpcClient
    from gasprobe.scenarios.gas_charging import GasChargingScenario

    settings = get_global_settings()
    model = resolve_model(args, settings.GAS_MODEL)
    rpc_url = args.rpc_url or settings.RPC_URL

    with EthRpcClient(rpc_url, timeout=settings.RPC_TIMEOUT) as client:
        scenario = GasChargingScenario(
            client,
            signer_key=settings.PRIVATE_KEY,
            recipient=settings.RECIPIENT_ADDRESS,
            gas_limit=settings.TRANSFER_GAS_LIMIT,
            gas_price=settings.TRANSFER_GAS_PRICE,
            value=settings.TRANSFER_VALUE,
            model=model,
            receipt_timeout=settings.RECEIPT_TIMEOUT,
            poll_interval=settings.RECEIPT_POLL_INTERVAL,
        )
        report = Report(title=f'Gas charging ({model.value} model)')
        return run_and_report(report, scenario.run)


def main() -> int:
    parser = create_parser()
    args = parser.parse_args()
    return execute(args)
