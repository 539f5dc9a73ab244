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

from dataclasses import dataclass, field, replace
from enum import Enum, unique
from typing import Iterator, Optional

from gasprobe.expectations import BASE_TX_COST


@unique
class ProbeStatus(str, Enum):
    """
    Outcome of a single probe. A probe moves from PENDING to one of the final states in a single step.

    Attributes:
        PENDING: measured but not yet classified.
        PASSED: the node priced the operation as expected.
        FAILED: the node priced the operation differently.
        SKIPPED: the measurement could not be taken.
    """

    PENDING = 'Pending'
    PASSED = 'Passed'
    FAILED = 'Failed'
    SKIPPED = 'Skipped'

    def is_final(self) -> bool:
        return self is not ProbeStatus.PENDING


@unique
class MeasurementKind(str, Enum):
    OPCODE = 'opcode'
    PRECOMPILE = 'precompile'
    DEPLOYMENT = 'deployment'
    TRANSFER = 'transfer'


@dataclass(frozen=True)
class Measurement:
    """Result of one probe execution."""
    name: str
    kind: MeasurementKind
    status: ProbeStatus = ProbeStatus.PENDING
    raw_total_gas: Optional[int] = None
    expected: Optional[int] = None
    detail: str = ''

    @property
    def execution_gas(self) -> Optional[int]:
        """Gas attributable to the probed operation, without the intrinsic transaction cost."""
        if self.raw_total_gas is None:
            return None
        return self.raw_total_gas - BASE_TX_COST

    def with_status(self, status: ProbeStatus, *, expected: Optional[int] = None, detail: Optional[str] = None
                    ) -> 'Measurement':
        """Return a classified copy. Only a pending measurement can be classified."""
        if self.status.is_final():
            raise ValueError(f'{self.name} is already {self.status.value}')
        return replace(
            self,
            status=status,
            expected=self.expected if expected is None else expected,
            detail=self.detail if detail is None else detail,
        )

    def skipped(self, reason: str) -> 'Measurement':
        return self.with_status(ProbeStatus.SKIPPED, detail=reason)


@dataclass
class Report:
    """Ordered measurements of a run with running totals."""
    title: str = ''
    measurements: list[Measurement] = field(default_factory=list)
    passed: int = 0
    failed: int = 0
    skipped: int = 0

    def add(self, measurement: Measurement) -> None:
        match measurement.status:
            case ProbeStatus.PASSED:
                self.passed += 1
            case ProbeStatus.FAILED:
                self.failed += 1
            case ProbeStatus.SKIPPED:
                self.skipped += 1
            case _:
                raise ValueError(f'cannot report unclassified measurement {measurement.name}')
        self.measurements.append(measurement)

    def __iter__(self) -> Iterator[Measurement]:
        return iter(self.measurements)

    def __len__(self) -> int:
        return len(self.measurements)

    @property
    def exit_code(self) -> int:
        """Skipped probes alone never fail a run."""
        return 1 if self.failed > 0 else 0

    def format_lines(self) -> list[str]:
        lines: list[str] = []
        if self.title:
            lines.append(self.title)
            lines.append('=' * len(self.title))
        width = max((len(m.name) for m in self.measurements), default=0)
        for m in self.measurements:
            line = f'  {m.name.ljust(width)}  {m.status.value:<7}'
            if m.status is ProbeStatus.FAILED:
                line += f'  expected={_fmt(m.expected)} observed={_fmt(_observed(m))}'
            elif m.raw_total_gas is not None:
                line += f'  observed={_fmt(_observed(m))}'
            if m.detail:
                line += f'  ({m.detail})'
            lines.append(line)
        lines.append('')
        lines.append(f'  Tests passed:  {self.passed}')
        lines.append(f'  Tests failed:  {self.failed}')
        lines.append(f'  Tests skipped: {self.skipped}')
        return lines


def _observed(measurement: Measurement) -> Optional[int]:
    # precompile expectations are stated on execution gas, everything else on the raw figure
    if measurement.kind is MeasurementKind.PRECOMPILE:
        return measurement.execution_gas
    return measurement.raw_total_gas


def _fmt(value: Optional[int]) -> str:
    return '-' if value is None else str(value)
