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

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum, auto, unique
from typing import TYPE_CHECKING, Any

from tokenswap.contracts.context import Context
from tokenswap.contracts.exception import NCNumberOfCallsExceeded, NCRecursionError
from tokenswap.contracts.storage import NCChangesTracker, NCContractStorage
from tokenswap.contracts.types import BlueprintId, ContractId

if TYPE_CHECKING:
    from tokenswap.contracts.nc_exec_logs import NCCallBeginEntry, NCCallEndEntry, NCEvent, NCLogEntry, NCLogger


@unique
class CallType(StrEnum):
    PUBLIC = auto()
    VIEW = auto()


@dataclass(slots=True, frozen=True, kw_only=True)
class CallRecord:
    """This object keeps information about a single call between contracts."""

    # The type of the method being called (public or view).
    type: CallType

    # The depth in the call stack.
    depth: int

    # The contract being invoked.
    contract_id: ContractId

    # The blueprint of the contract being invoked.
    blueprint_id: BlueprintId

    # The method being invoked.
    method_name: str

    # The context passed in this call. None for view calls.
    ctx: Context | None

    # The args provided to the method, after validation.
    args: tuple[Any, ...]

    # Keep track of all changes made by this call.
    changes_tracker: NCChangesTracker


@dataclass(slots=True, kw_only=True)
class CallInfo:
    """This object keeps information about a top-level call and the calls it makes to other contracts."""
    MAX_RECURSION_DEPTH: int
    MAX_CALL_COUNTER: int

    # The execution stack. It changes as the execution progresses.
    stack: list[CallRecord] = field(default_factory=list)

    # Change trackers grouped by contract. A contract that is re-entered has more than one tracker, and the last one
    # belongs to the innermost call.
    change_trackers: dict[ContractId, list[NCChangesTracker]] = field(default_factory=dict)

    # A trace of all the calls that happened, in order.
    calls: list[CallRecord] = field(default_factory=list)

    # Counter of the number of calls performed so far.
    call_counter: int = 0

    # The logger to keep track of log entries and events during this call.
    nc_logger: NCLogger

    @property
    def depth(self) -> int:
        """Get the depth of the call stack."""
        return len(self.stack)

    def is_on_stack(self, contract_id: ContractId) -> bool:
        """Return True if the contract is executing a call that has not finished yet."""
        return any(call_record.contract_id == contract_id for call_record in self.stack)

    def pre_call(self, call_record: CallRecord) -> None:
        """Called before a new call is executed."""
        if self.depth >= self.MAX_RECURSION_DEPTH:
            raise NCRecursionError

        if self.call_counter >= self.MAX_CALL_COUNTER:
            raise NCNumberOfCallsExceeded

        self.calls.append(call_record)

        if call_record.contract_id not in self.change_trackers:
            self.change_trackers[call_record.contract_id] = [call_record.changes_tracker]
        else:
            self.change_trackers[call_record.contract_id].append(call_record.changes_tracker)

        self.call_counter += 1
        self.stack.append(call_record)
        self.nc_logger.__log_call_begin__(call_record)

    def post_call(self, call_record: CallRecord) -> None:
        """Called after a call is finished."""
        assert call_record == self.stack.pop()
        assert call_record.changes_tracker == self.change_trackers[call_record.contract_id][-1]

        change_trackers = self.change_trackers[call_record.contract_id]
        if len(change_trackers) > 1:
            assert call_record.changes_tracker.storage == change_trackers[-2]
            assert call_record.changes_tracker == change_trackers.pop()
        else:
            assert type(call_record.changes_tracker.storage) is NCContractStorage
        self.nc_logger.__log_call_end__()

    def get_events(self) -> list[NCEvent]:
        return list(self.nc_logger.__events__)

    def get_log_entries(self) -> list[NCCallBeginEntry | NCLogEntry | NCCallEndEntry]:
        return self.nc_logger.__entries__

    def get_formatted_logs(self) -> str:
        """Render the log entries as indented text, one line per entry."""
        from tokenswap.contracts.nc_exec_logs import NCCallBeginEntry, NCCallEndEntry, NCLogEntry

        lines = []
        depth = -1
        for entry in self.get_log_entries():
            match entry:
                case NCLogEntry():
                    message = entry.message
                    key_values: dict[str, Any] | str = entry.key_values

                case NCCallBeginEntry():
                    message = f'--- CALL BEGIN: {entry.call_type} --- {entry.method_name}{entry.str_args}'
                    key_values = {'nc_id': entry.nc_id.hex(), 'caller_id': entry.caller_id}
                    depth += 1

                case NCCallEndEntry():
                    message = '--- CALL END ---'
                    key_values = ''

                case _:
                    raise AssertionError('unknown log entry type')

            assert depth >= 0
            prefix = '    ' * depth
            when = datetime.fromtimestamp(entry.timestamp)
            lines.append(f'{when} [{entry.level.name}] {prefix}{message} {key_values}')

            if isinstance(entry, NCCallEndEntry):
                depth -= 1

        return '\n'.join(lines)
