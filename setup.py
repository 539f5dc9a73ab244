#!/usr/bin/env python
"""
Copyright 2026 Hathor Labs

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

   http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

from setuptools import find_packages, setup

from gasprobe import __version__

install_requires = [
    'colorama',
    'ConfigArgParse',
    'eth-abi>=4',
    'eth-account>=0.13',
    'eth-utils>=2',
    'pydantic>=2',
    'PyYAML',
    'requests',
    'structlog>=22',
    'typing_extensions',
]

setup(
    name='gasprobe',
    version=__version__,
    description='Gas pricing and bytecode size conformance checks for EVM execution nodes',
    author='Hathor Team',
    author_email='contact@hathor.network',
    url='https://hathor.network/',
    license='Apache License 2.0',
    entry_points={
        'console_scripts': ['gasprobe-cli=gasprobe.cli.main:main'],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
        'License :: OSI Approved :: Apache Software License',
    ],
    python_requires='>=3.10',
    packages=find_packages(exclude=('tests', 'tests.*')),
    package_data={'gasprobe.conf': ['*.yml']},
    install_requires=install_requires,
    extras_require={
        'test': ['pytest', 'rlp'],
    },
)
