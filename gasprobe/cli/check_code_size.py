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
    from gasprobe.deployer import ForgeDeployer
    from gasprobe.gas_model import MODIFIED_MAX_CODE_SIZE, REFERENCE_MAX_CODE_SIZE
    from gasprobe.measurement import Report
    from gasprobe.rpc.client import EthRpcClient
    from gasprobe.scenarios.code_size import CodeSizeScenario

    settings = get_global_settings()
    model = resolve_model(args, settings.GAS_MODEL)
    rpc_url = args.rpc_url or settings.RPC_URL

    print(f'Reference limit (EIP-170): {REFERENCE_MAX_CODE_SIZE:,} bytes ({REFERENCE_MAX_CODE_SIZE // 1024} KB)')
    print(f'Modified limit:            {MODIFIED_MAX_CODE_SIZE:,} bytes ({MODIFIED_MAX_CODE_SIZE // 1024} KB)')

    with EthRpcClient(rpc_url, timeout=settings.RPC_TIMEOUT) as client:
        deployer = ForgeDeployer(settings.FOUNDRY_PROJECT_DIR, forge_bin=settings.FORGE_BIN,
                                 timeout=settings.TOOL_TIMEOUT)
        scenario = CodeSizeScenario(client, deployer, contract=settings.LARGE_CONTRACT,
                                    signer_key=settings.PRIVATE_KEY, model=model)
        report = Report(title=f'Bytecode size limit ({model.value} model)')
        return run_and_report(report, scenario.run)


def main() -> int:
    parser = create_parser()
    args = parser.parse_args()
    return execute(args)
