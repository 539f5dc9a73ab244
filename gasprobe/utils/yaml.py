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

from pathlib import Path
from typing import Any, Union

import yaml

_EXTENDS_KEY = 'extends'


def merge_into(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Recursively copy `override` into `base`, in place. Nested mappings are merged, anything else replaced.

    >>> base = dict(a=1, rpc=dict(url='x', timeout=5))
    >>> merge_into(base, dict(rpc=dict(timeout=10)))
    >>> base == dict(a=1, rpc=dict(url='x', timeout=10))
    True
    """
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merge_into(current, value)
        else:
            base[key] = value


def dict_from_yaml(*, filepath: Union[Path, str]) -> dict[str, Any]:
    """Read a yaml file that must contain a mapping. An empty file yields an empty dict."""
    path = Path(filepath)
    if not path.is_file():
        raise ValueError(f"'{filepath}' is not a file")

    with path.open('r', encoding='utf-8') as fp:
        contents = yaml.safe_load(fp)

    if contents is None:
        return {}
    if not isinstance(contents, dict):
        raise ValueError(f"'{filepath}' cannot be parsed as a dictionary")
    return contents


def dict_from_extended_yaml(*, filepath: Union[Path, str]) -> dict[str, Any]:
    """Like dict_from_yaml(), but a top-level 'extends' key names a base file (relative to this one) whose
    contents are loaded first and then overridden. Chains of extensions are followed.
    """
    path = Path(filepath)
    contents = dict_from_yaml(filepath=path)
    base_name = contents.pop(_EXTENDS_KEY, None)
    if not base_name:
        return contents

    base_path = path.parent / str(base_name)
    if base_path.resolve() == path.resolve():
        raise ValueError(f"'{filepath}' cannot extend itself")

    try:
        merged = dict_from_extended_yaml(filepath=base_path)
    except RecursionError as e:
        raise ValueError(f"'{filepath}' has recursive extensions") from e
    merge_into(merged, contents)
    return merged
