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

from enum import Enum
from typing import Final, final


@final
class DeletedKeyType:
    """Marks a key deleted in a change tracker, so it shadows the value of the storage below."""
    __slots__ = ()

    def __repr__(self) -> str:
        return 'DeletedKey'


DeletedKey: Final[DeletedKeyType] = DeletedKeyType()


class _NotProvided(Enum):
    NOT_PROVIDED = 'not-provided'


_NOT_PROVIDED: Final = _NotProvided.NOT_PROVIDED
