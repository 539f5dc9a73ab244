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

from typing import Optional

from structlog import get_logger

from gasprobe.expectations import DEFAULT_EXPECTATIONS, ExpectationTable, OpcodeProbe, PrecompileProbe
from gasprobe.gas_model import GasModel
from gasprobe.measurement import Measurement, MeasurementKind, ProbeStatus, Report

logger = get_logger()


def opcode_passes(probe: OpcodeProbe, raw_total_gas: int, model: GasModel = GasModel.MODIFIED) -> bool:
    """Threshold rule on the raw estimate. A modified-priced node lands above the threshold, a reference-priced one
    at or below it."""
    if model is GasModel.MODIFIED:
        return raw_total_gas > probe.threshold
    return raw_total_gas <= probe.threshold


def precompile_passes(probe: PrecompileProbe, execution_gas: int, model: GasModel = GasModel.MODIFIED) -> bool:
    """Lower-bound rule: the call around the precompile costs something too, so only a floor can be asserted."""
    return execution_gas >= probe.cost(model)


def classify_opcode(probe: OpcodeProbe, measurement: Measurement, model: GasModel = GasModel.MODIFIED
                    ) -> Measurement:
    if measurement.status is ProbeStatus.SKIPPED:
        return measurement
    assert measurement.raw_total_gas is not None
    status = ProbeStatus.PASSED if opcode_passes(probe, measurement.raw_total_gas, model) else ProbeStatus.FAILED
    side = '>' if model is GasModel.MODIFIED else '<='
    return measurement.with_status(
        status,
        expected=probe.expected_total_gas(model),
        detail=f'threshold {side} {probe.threshold}',
    )


def classify_precompile(probe: PrecompileProbe, measurement: Measurement, model: GasModel = GasModel.MODIFIED
                        ) -> Measurement:
    if measurement.status is ProbeStatus.SKIPPED:
        return measurement
    execution_gas = measurement.execution_gas
    assert execution_gas is not None
    status = ProbeStatus.PASSED if precompile_passes(probe, execution_gas, model) else ProbeStatus.FAILED
    detail: Optional[str] = None
    if model is GasModel.MODIFIED:
        detail = f'{probe.reference_cost()} x {probe.multiplier}'
    return measurement.with_status(status, expected=probe.cost(model), detail=detail)


class VerdictEngine:
    """Classifies measurements against an expectation table and accumulates them into a report."""

    def __init__(self, model: GasModel = GasModel.MODIFIED, table: ExpectationTable = DEFAULT_EXPECTATIONS) -> None:
        self.log = logger.new(model=model.value)
        self.model = model
        self.table = table

    def classify(self, measurement: Measurement) -> Measurement:
        match measurement.kind:
            case MeasurementKind.OPCODE:
                return classify_opcode(self.table.lookup_opcode(measurement.name), measurement, self.model)
            case MeasurementKind.PRECOMPILE:
                return classify_precompile(self.table.lookup_precompile(measurement.name), measurement, self.model)
            case _:
                raise ValueError(f'no table rule for {measurement.kind.value} measurement {measurement.name}')

    def record(self, report: Report, measurement: Measurement) -> Measurement:
        """Classify `measurement` if still pending, add it to `report` and return the classified value."""
        if measurement.status is ProbeStatus.PENDING:
            measurement = self.classify(measurement)
        report.add(measurement)
        self.log.info(
            'probe finished',
            probe=measurement.name,
            status=measurement.status.value,
            raw_total_gas=measurement.raw_total_gas,
            expected=measurement.expected,
        )
        return measurement


def deployment_passes(deployed: bool, bytecode_size: int, model: GasModel = GasModel.MODIFIED) -> bool:
    """A node must accept exactly the contracts that fit its model's code size limit."""
    return deployed == (bytecode_size <= model.max_code_size())


def transfer_passes(gas_charged: int, gas_limit: int, model: GasModel = GasModel.MODIFIED) -> bool:
    """Without refunds the whole gas limit is charged, with refunds strictly less. Charging above the limit is never
    right."""
    if gas_charged > gas_limit:
        return False
    if model.refunds_unused_gas():
        return gas_charged < gas_limit
    return gas_charged == gas_limit
