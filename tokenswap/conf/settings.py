# Copyright 2024 Hathor Labs
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
from typing import Any, Literal, Union

import yaml
from pydantic import field_validator

from tokenswap.utils import pydantic

_EXTENDS_KEY = 'extends'


class TokenSwapSettings(pydantic.BaseModel):
    # Name of the network: "tokenswap-local", "unittests", ...
    NETWORK_NAME: str

    # Version byte of the address in P2PKH
    P2PKH_VERSION_BYTE: bytes = b'\x28'

    # Maximum depth of nested calls between contracts.
    MAX_RECURSION_DEPTH: int = 100

    # Maximum number of calls (including nested ones) in a single execution.
    MAX_CALL_COUNTER: int = 250

    # Maximum size in bytes of the data of a single event.
    MAX_EVENT_SIZE: int = 1024

    # Decimals of the fungible tokens created by the deploy command.
    TOKEN_DECIMALS: int = 18

    HT_TOKEN_NAME: str = 'HigherToken'
    HT_TOKEN_SYMBOL: str = 'MHT'
    LT_TOKEN_NAME: str = 'LowerToken'
    LT_TOKEN_SYMBOL: str = 'MLT'

    # Supply minted to the deployer of each token.
    DEFAULT_INITIAL_SUPPLY: int = 1_000_000 * 10**18

    # Which contract execution logs are kept, see `NCLogConfig`.
    NC_LOG_CONFIG: Literal['none', 'all', 'failed', 'failed_unhandled'] = 'failed'

    # Blueprints available in the catalog, as blueprint id -> blueprint name.
    BLUEPRINTS: dict[bytes, str] = {}

    @field_validator('P2PKH_VERSION_BYTE', mode='before')
    @classmethod
    def parse_version_byte(cls, version_byte: Any) -> Any:
        return pydantic.parse_hex_str(version_byte)

    @field_validator('BLUEPRINTS', mode='before')
    @classmethod
    def parse_blueprints(cls, blueprints: dict[Any, str]) -> dict[bytes, str]:
        if not isinstance(blueprints, dict):
            raise TypeError(f'expected \'dict[str, str]\', got {blueprints}')

        return {pydantic.parse_hex_str(blueprint_id): name for blueprint_id, name in blueprints.items()}

    @field_validator('P2PKH_VERSION_BYTE')
    @classmethod
    def validate_version_byte(cls, version_byte: bytes) -> bytes:
        if len(version_byte) != 1:
            raise ValueError(f'version byte must have exactly 1 byte, got {len(version_byte)}')
        return version_byte

    @classmethod
    def from_yaml(cls, *, filepath: Union[Path, str]) -> 'TokenSwapSettings':
        """Takes a filepath to a yaml file and returns a validated settings instance.

        A file may extend another one through the `extends` key, with a path relative to itself. Keys of the
        extending file take precedence.
        """
        settings_dict = _dict_from_yaml(filepath)
        base_file = settings_dict.pop(_EXTENDS_KEY, None)

        if base_file:
            base_filepath = Path(filepath).parent / str(base_file)
            assert base_filepath.resolve() != Path(filepath).resolve(), 'cannot extend self'
            base_dict = _dict_from_yaml(base_filepath)
            base_dict.update(settings_dict)
            settings_dict = base_dict

        return cls.model_validate(settings_dict)


def _dict_from_yaml(filepath: Union[Path, str]) -> dict[str, Any]:
    path = Path(filepath)
    if not path.is_file():
        raise ValueError(f"'{filepath}' is not a file")

    with path.open('r') as file:
        contents = yaml.safe_load(file)

    if contents is None:
        return {}

    if not isinstance(contents, dict):
        raise ValueError(f"'{filepath}' cannot be parsed as a dictionary")

    return contents
