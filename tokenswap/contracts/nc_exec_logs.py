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

import os.path
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum, auto, unique
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any, Literal, assert_never

from pydantic import Field, field_serializer, field_validator

from tokenswap.contracts.error_handling import __NCTransactionFail__
from tokenswap.contracts.exception import NCFail
from tokenswap.contracts.types import ContractId
from tokenswap.reactor import ReactorProtocol
from tokenswap.util import json_dumps, json_loadb
from tokenswap.utils.pydantic import BaseModel

if TYPE_CHECKING:
    from tokenswap.contracts.runner.call_info import CallInfo, CallRecord

MAX_EVENT_SIZE: int = 1024  # 1KiB


@unique
class NCLogConfig(StrEnum):
    # Don't save any contract logs.
    NONE = auto()

    # Save logs for all calls.
    ALL = auto()

    # Only save logs for calls that failed.
    FAILED = auto()

    # Only save logs for calls that failed with an unhandled exception (that is, not NCFail).
    FAILED_UNHANDLED = auto()


@unique
class NCLogLevel(IntEnum):
    """The log level of contract execution logs."""
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3

    @staticmethod
    def from_str(value: str) -> NCLogLevel | None:
        """Create a NCLogLevel from a string, or return None if it's invalid."""
        try:
            return NCLogLevel[value]
        except KeyError:
            return None


class _BaseNCEntry(BaseModel):
    type: str
    level: NCLogLevel
    timestamp: float

    @field_serializer('level')
    def serialize_level(self, level: NCLogLevel) -> str:
        return level.name

    @field_validator('level', mode='before')
    @classmethod
    def parse_level(cls, level: NCLogLevel | int | str) -> NCLogLevel:
        if isinstance(level, NCLogLevel):
            return level
        if isinstance(level, int):
            return NCLogLevel(level)
        if isinstance(level, str):
            return NCLogLevel[level]
        raise TypeError(f'invalid level type: {type(level)}')


class NCLogEntry(_BaseNCEntry):
    """An entry representing a single log in a contract execution."""
    type: Literal['LOG'] = 'LOG'
    message: str
    key_values: dict[str, str] = Field(default_factory=dict)


class NCCallBeginEntry(_BaseNCEntry):
    """An entry representing a single method call beginning in a contract execution."""
    type: Literal['CALL_BEGIN'] = 'CALL_BEGIN'
    level: NCLogLevel = NCLogLevel.DEBUG
    nc_id: bytes
    call_type: str
    method_name: str
    str_args: str = '()'
    caller_id: str | None = None

    @staticmethod
    def from_call_record(call_record: CallRecord, *, timestamp: float) -> NCCallBeginEntry:
        """Create a NCCallBeginEntry from a CallRecord."""
        caller_id = None
        if call_record.ctx is not None:
            caller_id = call_record.ctx.caller_id.hex()

        return NCCallBeginEntry(
            nc_id=call_record.contract_id,
            call_type=str(call_record.type),
            method_name=call_record.method_name,
            str_args=str(call_record.args),
            timestamp=timestamp,
            caller_id=caller_id,
        )

    @field_serializer('nc_id')
    def serialize_nc_id(self, nc_id: bytes) -> str:
        return nc_id.hex()

    @field_validator('nc_id', mode='before')
    @classmethod
    def parse_nc_id(cls, nc_id: bytes | str) -> bytes:
        if isinstance(nc_id, bytes):
            return nc_id
        if isinstance(nc_id, str):
            return bytes.fromhex(nc_id)
        raise TypeError(f'invalid nc_id type: {type(nc_id)}')


class NCCallEndEntry(_BaseNCEntry):
    """An entry representing a single method call ending in a contract execution."""
    type: Literal['CALL_END'] = 'CALL_END'
    level: NCLogLevel = NCLogLevel.DEBUG


NCEntry = Annotated[NCCallBeginEntry | NCLogEntry | NCCallEndEntry, Field(discriminator='type')]


class NCExecEntry(BaseModel):
    """
    An entry representing the whole execution of a top-level call.
    It may contain several calls across different contracts, with logs in order.
    """
    logs: list[NCEntry]
    error_traceback: str | None = None

    @staticmethod
    def from_call_info(call_info: CallInfo, error_tb: str | None) -> NCExecEntry:
        """Create a NCExecEntry from a CallInfo and an optional traceback."""
        return NCExecEntry(
            logs=call_info.nc_logger.__entries__,
            error_traceback=error_tb,
        )

    def filter(self, log_level: NCLogLevel) -> NCExecEntry:
        """Create a new NCExecEntry while keeping logs with the provided log level or higher."""
        return self.model_copy(
            update=dict(
                logs=[log for log in self.logs if log.level >= log_level],
            ),
        )


@dataclass(slots=True, frozen=True, kw_only=True)
class NCEvent:
    nc_id: ContractId
    data: bytes


@dataclass(slots=True)
class NCLogger:
    """
    Saves log entries in memory and collects the events emitted during a call.
    To be used inside Blueprints through `self.log`.
    """
    __reactor__: ReactorProtocol
    __nc_id__: ContractId
    __max_event_size__: int = MAX_EVENT_SIZE
    __entries__: list[NCCallBeginEntry | NCLogEntry | NCCallEndEntry] = field(default_factory=list)
    __events__: list[NCEvent] = field(default_factory=list)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Create a new DEBUG log entry."""
        self.__log__(NCLogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Create a new INFO log entry."""
        self.__log__(NCLogLevel.INFO, message, **kwargs)

    def warn(self, message: str, **kwargs: Any) -> None:
        """Create a new WARN log entry."""
        self.__log__(NCLogLevel.WARN, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Create a new ERROR log entry."""
        self.__log__(NCLogLevel.ERROR, message, **kwargs)

    def __emit_event__(self, nc_id: ContractId, data: bytes) -> None:
        """Record an event emitted by the contract `nc_id`."""
        if not isinstance(data, bytes):
            raise NCFail(f'event data must be of type `bytes`, found `{type(data).__name__}`')
        if len(data) > self.__max_event_size__:
            raise NCFail(f'event data cannot be larger than {self.__max_event_size__} bytes, is {len(data)}')
        self.__events__.append(NCEvent(nc_id=nc_id, data=data))

    def __log__(self, level: NCLogLevel, message: str, **kwargs: Any) -> None:
        """Create a new log entry."""
        key_values = {k: v.hex() if isinstance(v, bytes) else str(v) for k, v in kwargs.items()}
        entry = NCLogEntry(level=level, message=message, key_values=key_values, timestamp=self.__reactor__.seconds())
        self.__entries__.append(entry)

    def __log_call_begin__(self, call_record: CallRecord) -> None:
        """Log the beginning of a call."""
        self.__entries__.append(NCCallBeginEntry.from_call_record(call_record, timestamp=self.__reactor__.seconds()))

    def __log_call_end__(self) -> None:
        """Log the end of a call."""
        self.__entries__.append(NCCallEndEntry(timestamp=self.__reactor__.seconds()))


NC_EXEC_LOGS_DIR = 'nc_exec_logs'


class NCLogStorage:
    """
    A storage to persist contract execution logs in the file system, one jsonl file per contract.
    """
    __slots__ = ('_path', '_config')

    def __init__(self, *, path: str, config: NCLogConfig) -> None:
        self._path = Path(path).joinpath(NC_EXEC_LOGS_DIR)
        self._config = config

    def save_logs(
        self,
        call_info: CallInfo,
        exception_and_tb: tuple[__NCTransactionFail__, str] | None,
    ) -> None:
        """Persist the logs of a finished top-level call."""
        exception, tb = exception_and_tb if exception_and_tb is not None else (None, None)

        match self._config:
            case NCLogConfig.NONE:
                # don't save any logs
                return
            case NCLogConfig.ALL:
                # save all logs
                pass
            case NCLogConfig.FAILED:
                if exception is None:
                    # don't save when there's no exception
                    return
            case NCLogConfig.FAILED_UNHANDLED:
                if exception is None:
                    # don't save when there's no exception
                    return
                handled = not exception.__cause__ or isinstance(exception.__cause__, NCFail)
                if isinstance(exception, NCFail) and handled:
                    # don't save when it's a simple NCFail or caused by a NCFail
                    return
            case _:
                assert_never(self._config)

        new_entry = NCExecEntry.from_call_info(call_info, tb)
        path = self._get_file_path(call_info.nc_logger.__nc_id__)

        with path.open(mode='a') as f:
            f.write(json_dumps(new_entry.model_dump(mode='json')) + '\n')

    def _get_file_path(self, contract_id: bytes) -> Path:
        dir_path = self._path.joinpath(contract_id[0:1].hex())
        os.makedirs(dir_path, exist_ok=True)
        return dir_path.joinpath(f'{contract_id.hex()}.jsonl')

    def get_logs(self, contract_id: bytes, *, log_level: NCLogLevel = NCLogLevel.DEBUG) -> list[NCExecEntry] | None:
        """
        Return the execution logs of top-level calls into the provided contract.

        Args:
            contract_id: the id of the contract that received the calls.
            log_level: the minimum log level of desired logs.

        Returns:
            A list of NCExecEntry in execution order, or None when nothing was saved.
        """
        path = self._get_file_path(contract_id)
        if not os.path.isfile(path):
            return None

        entries = []
        with path.open(mode='rb') as f:
            for line in f:
                if not line.strip():
                    continue
                entries.append(NCExecEntry.model_validate(json_loadb(line)).filter(log_level))
        return entries

    def get_json_logs(self, contract_id: bytes, *, log_level: NCLogLevel = NCLogLevel.DEBUG) -> list[dict] | None:
        """Return the execution logs of the provided contract as json."""
        logs = self.get_logs(contract_id, log_level=log_level)
        return None if logs is None else [entry.model_dump(mode='json') for entry in logs]
