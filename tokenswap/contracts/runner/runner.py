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

import functools
import traceback
from typing import TYPE_CHECKING, Any, Callable, Concatenate, ParamSpec, TypeVar

from structlog import get_logger

from tokenswap.contracts.blueprint import Blueprint
from tokenswap.contracts.blueprint_env import BlueprintEnvironment
from tokenswap.contracts.catalog import NCBlueprintCatalog
from tokenswap.contracts.context import Context
from tokenswap.contracts.error_handling import __NCTransactionFail__
from tokenswap.contracts.exception import (
    NCAlreadyInitializedContractError,
    NCFail,
    NCInvalidContractId,
    NCInvalidMethodCall,
    NCInvalidPublicMethodCallFromView,
    NCMethodNotFound,
    NCReentrancyError,
    NCUninitializedContractError,
    NCViewMethodError,
)
from tokenswap.contracts.method import Method
from tokenswap.contracts.nc_exec_logs import NCEvent, NCLogger, NCLogStorage
from tokenswap.contracts.runner.call_info import CallInfo, CallRecord, CallType
from tokenswap.contracts.storage import NCChangesTracker, NCContractStorage, NCStateStorage
from tokenswap.contracts.types import NC_INITIALIZE_METHOD, BlueprintId, ContractId
from tokenswap.contracts.utils import allows_reentrancy, is_nc_public_method, is_nc_view_method
from tokenswap.reactor import ReactorProtocol

if TYPE_CHECKING:
    from tokenswap.conf.settings import TokenSwapSettings

P = ParamSpec('P')
T = TypeVar('T')

logger = get_logger()

_get_method = functools.cache(Method.from_callable)


def _forbid_syscall_from_view(
    display_name: str,
) -> Callable[[Callable[Concatenate['Runner', P], T]], Callable[Concatenate['Runner', P], T]]:
    """Mark a syscall method as forbidden to be called from @view methods."""
    def decorator(fn: Callable[Concatenate['Runner', P], T]) -> Callable[Concatenate['Runner', P], T]:
        def wrapper(self: Runner, /, *args: P.args, **kwargs: P.kwargs) -> T:
            current_call_record = self.get_current_call_record()
            if current_call_record.type is CallType.VIEW:
                raise NCViewMethodError(f'@view method cannot call `syscall.{display_name}`')
            return fn(self, *args, **kwargs)
        return wrapper
    return decorator


def _call_blueprint_method(method: Callable[..., T], *args: Any) -> T:
    """Run blueprint code, converting any unexpected exception into NCFail."""
    try:
        return method(*args)
    except NCFail:
        raise
    except Exception as e:
        raise NCFail(f'{type(e).__name__}: {e}') from e


class Runner:
    """Runner with support for calls between contracts.

    Every top-level call runs as a single transaction: the changes of all contracts involved are committed to the
    state storage when the call succeeds, and discarded when it fails.
    """

    def __init__(
        self,
        *,
        reactor: ReactorProtocol,
        settings: TokenSwapSettings,
        state_storage: NCStateStorage,
        catalog: NCBlueprintCatalog,
        log_storage: NCLogStorage | None = None,
    ) -> None:
        self.log = logger.new()
        self.reactor = reactor
        self.state_storage = state_storage
        self.catalog = catalog
        self._settings = settings
        self._log_storage = log_storage

        self._storages: dict[ContractId, NCContractStorage] = {}

        # Contracts created by the current call, saved to the state storage only on commit.
        self._created_contracts: list[ContractId] = []

        # Events of all committed calls, in order.
        self._events: list[NCEvent] = []

        # Information about the last call.
        self._last_call_info: CallInfo | None = None

        # Information about the current call.
        self._call_info: CallInfo | None = None

    def get_last_call_info(self) -> CallInfo:
        """Get last call information."""
        assert self._last_call_info is not None
        return self._last_call_info

    def get_events(self) -> list[NCEvent]:
        """Return the events emitted by all committed calls."""
        return list(self._events)

    def has_contract_been_initialized(self, contract_id: ContractId) -> bool:
        """Check whether a contract has been initialized or not."""
        if contract_id in self._storages:
            return True
        return self.state_storage.has_contract(contract_id)

    def get_storage(self, contract_id: ContractId) -> NCContractStorage:
        """Return the storage for a contract."""
        storage = self._storages.get(contract_id)
        if storage is None:
            storage = self.state_storage.get_contract_storage(contract_id)
            self._storages[contract_id] = storage
        return storage

    def _create_changes_tracker(self, contract_id: ContractId) -> NCChangesTracker:
        """Create a change tracker on top of the latest one for the contract."""
        nc_storage = self.get_current_changes_tracker_or_storage(contract_id)
        return NCChangesTracker(contract_id, nc_storage)

    def get_blueprint_id(self, contract_id: ContractId) -> BlueprintId:
        """Return the blueprint id of a contract."""
        nc_storage = self.get_current_changes_tracker_or_storage(contract_id)
        return nc_storage.get_blueprint_id()

    def _build_call_info(self, contract_id: ContractId) -> CallInfo:
        return CallInfo(
            MAX_RECURSION_DEPTH=self._settings.MAX_RECURSION_DEPTH,
            MAX_CALL_COUNTER=self._settings.MAX_CALL_COUNTER,
            nc_logger=NCLogger(
                __reactor__=self.reactor,
                __nc_id__=contract_id,
                __max_event_size__=self._settings.MAX_EVENT_SIZE,
            ),
        )

    def _run_transaction(self, contract_id: ContractId, method_name: str, call: Callable[[], T]) -> T:
        """Run a top-level public call, then block what was not committed and save the execution logs."""
        assert self._call_info is None, 'another call is in progress'
        self._call_info = self._build_call_info(contract_id)
        exception_and_tb: tuple[__NCTransactionFail__, str] | None = None
        self.log.debug('call public method', contract_id=contract_id.hex(), method=method_name)
        try:
            return call()
        except __NCTransactionFail__ as e:
            exception_and_tb = e, traceback.format_exc()
            self.log.debug('call failed', contract_id=contract_id.hex(), method=method_name, error=repr(e))
            raise
        finally:
            self._reset_all_change_trackers()
            if self._log_storage is not None:
                self._log_storage.save_logs(self.get_last_call_info(), exception_and_tb)

    def create_contract(
        self,
        contract_id: ContractId,
        blueprint_id: BlueprintId,
        ctx: Context,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Create a contract and call its initialize() method."""
        if self.has_contract_been_initialized(contract_id):
            raise NCAlreadyInitializedContractError(contract_id.hex())

        def call() -> Any:
            self._internal_create_contract(contract_id, blueprint_id)
            return self._unsafe_call_public_method(contract_id, NC_INITIALIZE_METHOD, ctx, args, kwargs)

        return self._run_transaction(contract_id, NC_INITIALIZE_METHOD, call)

    def _internal_create_contract(self, contract_id: ContractId, blueprint_id: BlueprintId) -> None:
        """Create the storage of a new contract without calling the initialize() method."""
        assert not self.has_contract_been_initialized(contract_id)
        # Fail early if the blueprint does not exist.
        self.catalog.get_blueprint_class(blueprint_id)
        nc_storage = self.state_storage.create_contract_storage(contract_id, blueprint_id)
        self._storages[contract_id] = nc_storage
        self._created_contracts.append(contract_id)

    def call_public_method(
        self,
        contract_id: ContractId,
        method_name: str,
        ctx: Context,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Call a contract public method."""
        if method_name == NC_INITIALIZE_METHOD:
            raise NCInvalidMethodCall('cannot call initialize from call_public_method(); use create_contract() instead')

        return self._run_transaction(
            contract_id,
            method_name,
            lambda: self._unsafe_call_public_method(contract_id, method_name, ctx, args, kwargs),
        )

    def _unsafe_call_public_method(
        self,
        contract_id: ContractId,
        method_name: str,
        ctx: Context,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        """Invoke a public method and commit its changes, without resetting the call state."""
        if not self.has_contract_been_initialized(contract_id):
            raise NCUninitializedContractError('cannot call methods from uninitialized contracts')

        blueprint_id = self.get_blueprint_id(contract_id)
        ret = self._execute_public_method_call(
            contract_id=contract_id,
            blueprint_id=blueprint_id,
            method_name=method_name,
            ctx=ctx,
            args=args,
            kwargs=kwargs,
        )

        self._commit_all_changes_to_storage()
        return ret

    def syscall_call_another_contract_public_method(
        self,
        contract_id: ContractId,
        method_name: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        """Call another contract's public method. This method must be called by a blueprint during an execution."""
        assert self._call_info is not None
        if method_name == NC_INITIALIZE_METHOD:
            raise NCInvalidMethodCall('cannot call initialize from another contract')

        last_call_record = self.get_current_call_record()
        if last_call_record.type is CallType.VIEW:
            raise NCInvalidPublicMethodCallFromView('cannot call a public method from a view method')

        if last_call_record.contract_id == contract_id:
            raise NCInvalidContractId('a contract cannot call itself')

        if not self.has_contract_been_initialized(contract_id):
            raise NCUninitializedContractError('cannot call a method from an uninitialized contract')

        first_ctx = self._call_info.stack[0].ctx
        assert first_ctx is not None

        ctx = Context(caller_id=last_call_record.contract_id, timestamp=first_ctx.timestamp)
        return self._execute_public_method_call(
            contract_id=contract_id,
            blueprint_id=self.get_blueprint_id(contract_id),
            method_name=method_name,
            ctx=ctx,
            args=args,
            kwargs=kwargs,
        )

    def _reset_all_change_trackers(self) -> None:
        """Block every change that was not committed and prepare for the next call."""
        assert self._call_info is not None
        for change_trackers in self._call_info.change_trackers.values():
            for change_tracker in change_trackers:
                if not change_tracker.has_been_commited and not change_tracker.has_been_blocked:
                    change_tracker.block()
        # Contracts whose creation was not committed never existed.
        for contract_id in self._created_contracts:
            self._storages.pop(contract_id, None)
        self._created_contracts = []
        self._last_call_info = self._call_info
        self._call_info = None

    def _commit_all_changes_to_storage(self) -> None:
        """Commit all change trackers, save new contracts and publish the events."""
        assert self._call_info is not None
        for nc_id, change_trackers in self._call_info.change_trackers.items():
            assert len(change_trackers) == 1
            change_tracker = change_trackers[0]
            nc_storage = self._storages[nc_id]
            assert change_tracker.storage == nc_storage
            nc_storage.unlock()
            try:
                change_tracker.commit()
            finally:
                nc_storage.lock()

        for contract_id in self._created_contracts:
            self.state_storage.save_contract_storage(self._storages[contract_id])
        self._created_contracts = []

        events = self._call_info.get_events()
        self._events.extend(events)
        self.log.debug(
            'changes committed',
            contracts=[nc_id.hex() for nc_id in self._call_info.change_trackers],
            events=len(events),
        )

    def _execute_public_method_call(
        self,
        *,
        contract_id: ContractId,
        blueprint_id: BlueprintId,
        method_name: str,
        ctx: Context,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        """An internal method that actually executes the public method call.

        It is also used when a contract calls another contract.
        """
        assert self._call_info is not None

        blueprint_class = self.catalog.get_blueprint_class(blueprint_id)
        method = getattr(blueprint_class, method_name, None)
        if method is None:
            raise NCMethodNotFound(f'method `{method_name}` not found')
        if not is_nc_public_method(method):
            raise NCInvalidMethodCall(f'method `{method_name}` is not a public method')
        if self._call_info.is_on_stack(contract_id) and not allows_reentrancy(method):
            raise NCReentrancyError(f'contract {contract_id.hex()} is already executing, cannot call `{method_name}`')

        checked_args = _get_method(method).bind_args(args, kwargs)

        changes_tracker = self._create_changes_tracker(contract_id)
        blueprint = self._create_blueprint_instance(blueprint_class, changes_tracker)

        call_record = CallRecord(
            type=CallType.PUBLIC,
            depth=self._call_info.depth,
            contract_id=contract_id,
            blueprint_id=blueprint_id,
            method_name=method_name,
            ctx=ctx,
            args=checked_args,
            changes_tracker=changes_tracker,
        )
        self._call_info.pre_call(call_record)

        # The blueprint gets a copy, so the runner's context cannot be altered.
        ret = _call_blueprint_method(getattr(blueprint, method_name), ctx.copy(), *checked_args)

        if len(self._call_info.change_trackers[contract_id]) > 1:
            call_record.changes_tracker.commit()

        self._call_info.post_call(call_record)
        return ret

    def call_view_method(self, contract_id: ContractId, method_name: str, *args: Any, **kwargs: Any) -> Any:
        """Call a contract view method."""
        assert self._call_info is None, 'another call is in progress'
        self._call_info = self._build_call_info(contract_id)
        try:
            return self._unsafe_call_view_method(contract_id, method_name, args, kwargs)
        finally:
            self._reset_all_change_trackers()

    def syscall_call_another_contract_view_method(
        self,
        contract_id: ContractId,
        method_name: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        """Call the view method of another contract."""
        assert self._call_info is not None
        if self.get_current_contract_id() == contract_id:
            raise NCInvalidContractId('a contract cannot call itself')
        return self._unsafe_call_view_method(contract_id, method_name, args, kwargs)

    def _unsafe_call_view_method(
        self,
        contract_id: ContractId,
        method_name: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        """Call a contract view method without handling resets."""
        assert self._call_info is not None
        if not self.has_contract_been_initialized(contract_id):
            raise NCUninitializedContractError('cannot call methods from uninitialized contracts')

        blueprint_id = self.get_blueprint_id(contract_id)
        blueprint_class = self.catalog.get_blueprint_class(blueprint_id)
        method = getattr(blueprint_class, method_name, None)
        if method is None:
            raise NCMethodNotFound(method_name)
        if not is_nc_view_method(method):
            raise NCInvalidMethodCall('not a view method')

        checked_args = _get_method(method).bind_args(args, kwargs)

        changes_tracker = self._create_changes_tracker(contract_id)
        blueprint = self._create_blueprint_instance(blueprint_class, changes_tracker)

        call_record = CallRecord(
            type=CallType.VIEW,
            depth=self._call_info.depth,
            contract_id=contract_id,
            blueprint_id=blueprint_id,
            method_name=method_name,
            ctx=None,
            args=checked_args,
            changes_tracker=changes_tracker,
        )
        self._call_info.pre_call(call_record)

        ret = _call_blueprint_method(getattr(blueprint, method_name), *checked_args)

        if not changes_tracker.is_empty():
            raise NCViewMethodError('view methods cannot change the state')

        self._call_info.post_call(call_record)
        return ret

    def get_current_call_record(self) -> CallRecord:
        """Return the call record for the current method being executed."""
        assert self._call_info is not None
        return self._call_info.stack[-1]

    def get_current_contract_id(self) -> ContractId:
        """Return the contract id for the current method being executed."""
        call_record = self.get_current_call_record()
        return call_record.contract_id

    def get_current_changes_tracker_or_storage(self, contract_id: ContractId) -> NCContractStorage:
        """Return the current NCChangesTracker if it exists or NCContractStorage otherwise."""
        if self._call_info is not None and contract_id in self._call_info.change_trackers:
            change_trackers = self._call_info.change_trackers[contract_id]
            assert len(change_trackers) > 0
            return change_trackers[-1]
        else:
            return self.get_storage(contract_id)

    def _create_blueprint_instance(
        self,
        blueprint_class: type[Blueprint],
        changes_tracker: NCChangesTracker,
    ) -> Blueprint:
        """Create a new blueprint instance."""
        assert self._call_info is not None
        env = BlueprintEnvironment(self, self._call_info.nc_logger, changes_tracker)
        return blueprint_class(env)

    @_forbid_syscall_from_view('emit_event')
    def syscall_emit_event(self, data: bytes) -> None:
        """Emit a custom event from a contract."""
        assert self._call_info is not None
        self._call_info.nc_logger.__emit_event__(self.get_current_contract_id(), data)


class RunnerFactory:
    __slots__ = ('reactor', 'settings', 'catalog', 'log_storage')

    def __init__(
        self,
        *,
        reactor: ReactorProtocol,
        settings: TokenSwapSettings,
        catalog: NCBlueprintCatalog,
        log_storage: NCLogStorage | None = None,
    ) -> None:
        self.reactor = reactor
        self.settings = settings
        self.catalog = catalog
        self.log_storage = log_storage

    def create(self, *, state_storage: NCStateStorage | None = None) -> Runner:
        return Runner(
            reactor=self.reactor,
            settings=self.settings,
            state_storage=state_storage if state_storage is not None else NCStateStorage(),
            catalog=self.catalog,
            log_storage=self.log_storage,
        )
