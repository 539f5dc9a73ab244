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
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Union

from structlog import get_logger

from gasprobe.exception import BuildFailed, DeployFailed

logger = get_logger()

_DEPLOYED_TO_RE = re.compile(r'Deployed to:\s*(0x[0-9a-fA-F]{40})')
_HEX_RE = re.compile(r'0x[0-9a-fA-F]*')


@dataclass(frozen=True)
class ContractArtifact:
    """A compiled fixture contract.

    Attributes:
        contract: contract identifier in `path:Name` form.
        runtime_bytecode: deployed (runtime) bytecode, 0x-prefixed.
    """
    contract: str
    runtime_bytecode: str

    @property
    def name(self) -> str:
        return self.contract.rsplit(':', 1)[-1]

    @property
    def bytecode_size(self) -> int:
        return (len(self.runtime_bytecode) - 2) // 2


class Deployer(Protocol):
    def build(self, contract: str) -> ContractArtifact:
        ...

    def deploy(self, artifact: ContractArtifact, signer_key: str, rpc_endpoint: str) -> str:
        ...


def _tail(text: str, lines: int = 5) -> str:
    return '\n'.join(text.strip().splitlines()[-lines:])


class ForgeDeployer:
    """Builds and deploys fixture contracts by shelling out to Foundry's `forge` inside a Foundry project."""

    def __init__(self, project_dir: Union[Path, str], *, forge_bin: str = 'forge', timeout: float = 300.0) -> None:
        self.log = logger.new(project_dir=str(project_dir))
        self.project_dir = Path(project_dir)
        self.forge_bin = forge_bin
        self.timeout = timeout

    def _run(self, argv: list[str]) -> subprocess.CompletedProcess:
        return subprocess.run(
            [self.forge_bin] + argv,
            cwd=str(self.project_dir),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            timeout=self.timeout,
        )

    def build(self, contract: str) -> ContractArtifact:
        """Compile the project and return the artifact of `contract` (`path:Name`)."""
        name = contract.rsplit(':', 1)[-1]
        self.log.info('building contract', contract=contract)
        try:
            # --force so oversized contracts still produce an artifact
            p = self._run(['build', '--force'])
            if p.returncode != 0:
                raise BuildFailed(f'forge build failed for {contract}:\n{_tail(p.stderr or p.stdout)}')
            p = self._run(['inspect', name, 'deployedBytecode'])
        except subprocess.TimeoutExpired:
            raise BuildFailed(f'forge timed out after {self.timeout}s building {contract}') from None
        except OSError as e:
            raise BuildFailed(f'cannot run {self.forge_bin}: {e}') from e

        if p.returncode != 0:
            raise BuildFailed(f'forge inspect failed for {contract}:\n{_tail(p.stderr or p.stdout)}')
        match = _HEX_RE.search(p.stdout)
        if match is None:
            raise BuildFailed(f'forge inspect returned no bytecode for {contract}')

        artifact = ContractArtifact(contract=contract, runtime_bytecode=match.group(0))
        self.log.info('contract built', contract=contract, bytecode_size=artifact.bytecode_size)
        return artifact

    def deploy(self, artifact: ContractArtifact, signer_key: str, rpc_endpoint: str) -> str:
        """Deploy `artifact` and return its address."""
        self.log.info('deploying contract', contract=artifact.contract, rpc_endpoint=rpc_endpoint)
        argv = [
            'create', artifact.contract,
            '--private-key', signer_key,
            '--rpc-url', rpc_endpoint,
            '--broadcast',
        ]
        try:
            p = self._run(argv)
        except subprocess.TimeoutExpired:
            raise DeployFailed(f'forge timed out after {self.timeout}s deploying {artifact.contract}') from None
        except OSError as e:
            raise DeployFailed(f'cannot run {self.forge_bin}: {e}') from e

        output = p.stdout + '\n' + p.stderr
        match: Optional[re.Match] = _DEPLOYED_TO_RE.search(output)
        if p.returncode != 0 or match is None:
            raise DeployFailed(f'deployment of {artifact.contract} failed:\n{_tail(output)}')

        address = match.group(1)
        self.log.info('contract deployed', contract=artifact.contract, address=address)
        return address
