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
    from gasprobe.cli.util import create_parser
    return create_parser()


def execute(args: Namespace) -> int:
    from gasprobe.expectations import (
        BASE_TX_COST,
        COLD_ACCOUNT_COST,
        COLD_STORAGE_COST,
        DEFAULT_EXPECTATIONS,
        WARM_ACCESS_COST,
    )
    from gasprobe.gas_model import GasModel

    ref, mod = GasModel.REFERENCE, GasModel.MODIFIED

    print('Access costs')
    print(f'  {"class":<16} {"reference":>10} {"modified":>10}')
    print(f'  {"cold storage":<16} {COLD_STORAGE_COST[ref]:>10} {COLD_STORAGE_COST[mod]:>10}')
    print(f'  {"cold account":<16} {COLD_ACCOUNT_COST[ref]:>10} {COLD_ACCOUNT_COST[mod]:>10}')
    print(f'  {"warm access":<16} {WARM_ACCESS_COST[ref]:>10} {WARM_ACCESS_COST[mod]:>10}')
    print()

    print(f'Opcode probes (raw estimate, base transaction cost {BASE_TX_COST} included)')
    print(f'  {"opcode":<13} {"reference":>10} {"modified":>10} {"threshold":>10}')
    for probe in DEFAULT_EXPECTATIONS.opcode_probes():
        print(f'  {probe.name:<13} {probe.expected_total_gas(ref):>10} {probe.expected_total_gas(mod):>10} '
              f'{probe.threshold:>10}')
    print()

    print('Precompile probes')
    print(f'  {"precompile":<11} {"address":<42} {"reference":<22} {"modified":<24} {"test input"}')
    for pc in DEFAULT_EXPECTATIONS.precompile_probes():
        test_input = f'{pc.test_units} {pc.unit_name}(s) -> {pc.cost(mod)}' if pc.unit_name else '-'
        print(f'  {pc.name:<11} {pc.address_hex:<42} {pc.describe_formula(ref):<22} '
              f'{pc.describe_formula(mod) + f" ({pc.multiplier}x)":<24} {test_input}')
    print()

    print('Code size limits')
    print(f'  reference: {ref.max_code_size()} bytes')
    print(f'  modified:  {mod.max_code_size()} bytes')
    return 0


def main() -> int:
    parser = create_parser()
    args = parser.parse_args()
    return execute(args)
