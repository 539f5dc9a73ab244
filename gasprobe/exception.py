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


class GasProbeError(Exception):
    """Base class for exceptions in gasprobe."""
    pass


class CannotConnect(GasProbeError):
    """The RPC endpoint could not be reached during the connectivity check."""
    pass


class BuildFailed(GasProbeError):
    """The fixture contract could not be compiled."""
    pass


class DeployFailed(GasProbeError):
    """The fixture contract could not be deployed.

    For the bytecode-size scenario this is an observed outcome, not a harness error.
    """
    pass


class UnknownProbe(GasProbeError):
    """A probe name is not registered in the expectation table."""
    pass


class RpcCallFailed(GasProbeError):
    """A single JSON-RPC call failed: transport error, timeout or error response."""

    def __init__(self, method: str, message: str, code: Optional[int] = None) -> None:
        super().__init__(f'{method}: {message}')
        self.method = method
        self.message = message
        self.code = code
