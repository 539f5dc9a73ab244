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

from typing import Any, Sequence

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector


def encode_call(signature: str, arg_types: Sequence[str], args: Sequence[Any]) -> str:
    """ABI-encode a call to `signature` as 0x-prefixed calldata."""
    if len(arg_types) != len(args):
        raise ValueError(f'{signature} takes {len(arg_types)} arguments, got {len(args)}')
    selector = function_signature_to_4byte_selector(signature)
    return '0x' + (selector + encode(list(arg_types), list(args))).hex()
