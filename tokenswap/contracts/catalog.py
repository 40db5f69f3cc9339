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

from typing import TYPE_CHECKING, Type

from tokenswap.contracts.exception import BlueprintDoesNotExist
from tokenswap.contracts.types import BlueprintId, blueprint_id_from_bytes

if TYPE_CHECKING:
    from tokenswap.conf.settings import TokenSwapSettings
    from tokenswap.contracts.blueprint import Blueprint


class NCBlueprintCatalog:
    """Catalog of blueprints available."""

    def __init__(self, blueprints: dict[bytes, Type['Blueprint']]) -> None:
        self.blueprints = blueprints

    def get_blueprint_class(self, blueprint_id: bytes) -> Type['Blueprint']:
        """Return the blueprint class related to the given blueprint id."""
        blueprint_class = self.blueprints.get(blueprint_id, None)
        if blueprint_class is None:
            raise BlueprintDoesNotExist(blueprint_id.hex())
        return blueprint_class

    def get_blueprint_id(self, blueprint_class: Type['Blueprint']) -> BlueprintId:
        """Return the id under which a blueprint class is registered."""
        for blueprint_id, registered_class in self.blueprints.items():
            if registered_class is blueprint_class:
                return blueprint_id_from_bytes(blueprint_id)
        raise BlueprintDoesNotExist(blueprint_class.__name__)

    def register(self, blueprint_id: bytes, blueprint_class: Type['Blueprint']) -> None:
        """Register a blueprint class. The id must not be in use."""
        assert blueprint_id not in self.blueprints, f'blueprint id already registered: {blueprint_id.hex()}'
        self.blueprints[blueprint_id] = blueprint_class


def generate_catalog_from_settings(settings: 'TokenSwapSettings') -> NCBlueprintCatalog:
    """Generate a catalog of blueprints based on the provided settings."""
    from tokenswap.contracts.blueprints import _blueprints_mapper
    blueprints: dict[bytes, Type['Blueprint']] = {}
    for _id, _name in settings.BLUEPRINTS.items():
        blueprints[_id] = _blueprints_mapper[_name]
    return NCBlueprintCatalog(blueprints)
