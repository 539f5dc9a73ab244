import subprocess
import unittest
from unittest.mock import patch

from gasprobe.deployer import ContractArtifact, ForgeDeployer
from gasprobe.exception import BuildFailed, DeployFailed

CONTRACT = 'src/LargeContract.sol:OversizedContract'
DEPLOY_OUTPUT = """Deployer: 0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266
Deployed to: 0x5FbDB2315678afecb367f032d93F642f64180aa3
Transaction hash: 0x7c1f6d2c5e0c4a3f0d1b8f0f3c0b5d1e2f3a4b5c6d7e8f9a0b1c2d3e4f5a6b7c
"""


def _completed(returncode=0, stdout='', stderr=''):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class ForgeDeployerTest(unittest.TestCase):
    def setUp(self):
        self.deployer = ForgeDeployer('/tmp/project', forge_bin='forge', timeout=10)

    @patch('gasprobe.deployer.subprocess.run')
    def test_build(self, run):
        run.side_effect = [_completed(), _completed(stdout='0x' + 'ab' * 40_000 + '\n')]

        artifact = self.deployer.build(CONTRACT)

        self.assertEqual(artifact.contract, CONTRACT)
        self.assertEqual(artifact.name, 'OversizedContract')
        self.assertEqual(artifact.bytecode_size, 40_000)
        build_call, inspect_call = run.call_args_list
        self.assertEqual(build_call.args[0], ['forge', 'build', '--force'])
        self.assertEqual(inspect_call.args[0], ['forge', 'inspect', 'OversizedContract', 'deployedBytecode'])
        self.assertEqual(build_call.kwargs['cwd'], '/tmp/project')
        self.assertEqual(build_call.kwargs['timeout'], 10)

    @patch('gasprobe.deployer.subprocess.run')
    def test_build_compile_error(self, run):
        run.return_value = _completed(returncode=1, stderr='Error: Compiler run failed')
        with self.assertRaises(BuildFailed) as cm:
            self.deployer.build(CONTRACT)
        self.assertIn('Compiler run failed', str(cm.exception))

    @patch('gasprobe.deployer.subprocess.run')
    def test_build_timeout(self, run):
        run.side_effect = subprocess.TimeoutExpired(cmd='forge', timeout=10)
        with self.assertRaises(BuildFailed):
            self.deployer.build(CONTRACT)

    @patch('gasprobe.deployer.subprocess.run')
    def test_forge_missing(self, run):
        run.side_effect = FileNotFoundError('forge')
        with self.assertRaises(BuildFailed):
            self.deployer.build(CONTRACT)

    @patch('gasprobe.deployer.subprocess.run')
    def test_build_without_bytecode(self, run):
        run.side_effect = [_completed(), _completed(stdout='nothing here')]
        with self.assertRaises(BuildFailed):
            self.deployer.build(CONTRACT)

    @patch('gasprobe.deployer.subprocess.run')
    def test_deploy(self, run):
        run.return_value = _completed(stdout=DEPLOY_OUTPUT)
        artifact = ContractArtifact(contract=CONTRACT, runtime_bytecode='0x00')

        address = self.deployer.deploy(artifact, '0x' + '11' * 32, 'http://127.0.0.1:8545')

        self.assertEqual(address, '0x5FbDB2315678afecb367f032d93F642f64180aa3')
        self.assertEqual(run.call_args.args[0], [
            'forge', 'create', CONTRACT,
            '--private-key', '0x' + '11' * 32,
            '--rpc-url', 'http://127.0.0.1:8545',
            '--broadcast',
        ])

    @patch('gasprobe.deployer.subprocess.run')
    def test_deploy_rejected(self, run):
        run.return_value = _completed(returncode=1, stderr='Error: server returned an error response: '
                                                          'max code size exceeded')
        artifact = ContractArtifact(contract=CONTRACT, runtime_bytecode='0x00')
        with self.assertRaises(DeployFailed) as cm:
            self.deployer.deploy(artifact, '0x' + '11' * 32, 'http://127.0.0.1:8545')
        self.assertIn('max code size exceeded', str(cm.exception))

    @patch('gasprobe.deployer.subprocess.run')
    def test_deploy_without_address(self, run):
        run.return_value = _completed(stdout='Compiling...\nNo files changed')
        artifact = ContractArtifact(contract=CONTRACT, runtime_bytecode='0x00')
        with self.assertRaises(DeployFailed):
            self.deployer.deploy(artifact, '0x' + '11' * 32, 'http://127.0.0.1:8545')
