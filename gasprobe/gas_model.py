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

from enum import Enum, unique

# EIP-170 runtime bytecode limit.
REFERENCE_MAX_CODE_SIZE: int = 24_576

MODIFIED_MAX_CODE_SIZE: int = 131_072


@unique
class GasModel(str, Enum):
    """
    Cost schedule a chain endpoint is expected to follow during a run.

    Attributes:
        REFERENCE: the baseline schedule (cheaper cold access and precompiles, refunds unused gas).
        MODIFIED: the schedule under test (costlier cold access and precompiles, no refunds, larger code limit).
    """

    REFERENCE = 'reference'
    MODIFIED = 'modified'

    def max_code_size(self) -> int:
        """Return the largest runtime bytecode, in bytes, a node following this model accepts."""
        if self is GasModel.MODIFIED:
            return MODIFIED_MAX_CODE_SIZE
        return REFERENCE_MAX_CODE_SIZE

    def refunds_unused_gas(self) -> bool:
        return self is GasModel.REFERENCE
