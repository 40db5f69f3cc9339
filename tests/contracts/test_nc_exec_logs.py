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

from tokenswap.contracts.blueprint import Blueprint
from tokenswap.contracts.context import Context
from tokenswap.contracts.exception import NCFail
from tokenswap.contracts.nc_exec_logs import (
    NCCallBeginEntry,
    NCCallEndEntry,
    NCLogConfig,
    NCLogEntry,
    NCLogLevel,
    NCLogStorage,
)
from tokenswap.contracts.types import public
from tests.contracts.blueprints.unittest import BlueprintTestCase


class MyBlueprint(Blueprint):
    @public
    def initialize(self, ctx: Context) -> None:
        self.log.info('initialize() called')

    @public
    def log_levels(self, ctx: Context) -> None:
        msg = 'log_levels() called'
        self.log.debug(msg, test1=1)
        self.log.info(msg, test2=b'\x02')
        self.log.warn(msg, test3=3)
        self.log.error(msg, test4=4)

    @public
    def fail(self, ctx: Context) -> None:
        self.log.warn('fail() called')
        raise NCFail('some fail')

    @public
    def value_error(self, ctx: Context) -> None:
        self.log.warn('value_error() called')
        raise ValueError('some value error')


class NCExecLogsTestCase(BlueprintTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.blueprint_id = self._register_blueprint_class(MyBlueprint)
        self.contract_id = self.gen_random_contract_id()
        self.caller = self.gen_random_address()

    def _prepare(self, config: NCLogConfig) -> NCLogStorage:
        log_storage = NCLogStorage(path=self.mkdtemp(), config=config)
        self.runner = self.build_runner(log_storage=log_storage)
        self.runner.create_contract(self.contract_id, self.blueprint_id, self.create_context(self.caller))
        return log_storage

    def _call(self, method_name: str) -> None:
        self.runner.call_public_method(self.contract_id, method_name, self.create_context(self.caller))

    def test_log_all(self) -> None:
        log_storage = self._prepare(NCLogConfig.ALL)
        self._call('log_levels')

        entries = log_storage.get_logs(self.contract_id)
        assert entries is not None
        self.assertEqual(len(entries), 2)

        now = self.clock.seconds()
        msg = 'log_levels() called'
        self.assertIsNone(entries[1].error_traceback)
        self.assertEqual(entries[1].logs, [
            NCCallBeginEntry(
                timestamp=now,
                nc_id=self.contract_id,
                call_type='public',
                method_name='log_levels',
                caller_id=self.caller.hex(),
            ),
            NCLogEntry(level=NCLogLevel.DEBUG, message=msg, key_values={'test1': '1'}, timestamp=now),
            NCLogEntry(level=NCLogLevel.INFO, message=msg, key_values={'test2': '02'}, timestamp=now),
            NCLogEntry(level=NCLogLevel.WARN, message=msg, key_values={'test3': '3'}, timestamp=now),
            NCLogEntry(level=NCLogLevel.ERROR, message=msg, key_values={'test4': '4'}, timestamp=now),
            NCCallEndEntry(timestamp=now),
        ])

    def test_filter_by_level(self) -> None:
        log_storage = self._prepare(NCLogConfig.ALL)
        self._call('log_levels')

        entries = log_storage.get_logs(self.contract_id, log_level=NCLogLevel.WARN)
        assert entries is not None
        self.assertEqual([log.level for log in entries[1].logs], [NCLogLevel.WARN, NCLogLevel.ERROR])

    def test_json_logs(self) -> None:
        log_storage = self._prepare(NCLogConfig.ALL)

        json_logs = log_storage.get_json_logs(self.contract_id)
        assert json_logs is not None
        begin, log, end = json_logs[0]['logs']
        self.assertEqual(begin['type'], 'CALL_BEGIN')
        self.assertEqual(begin['level'], 'DEBUG')
        self.assertEqual(begin['nc_id'], self.contract_id.hex())
        self.assertEqual(begin['method_name'], 'initialize')
        self.assertEqual(log['message'], 'initialize() called')
        self.assertEqual(log['level'], 'INFO')
        self.assertEqual(end['type'], 'CALL_END')

    def test_log_failed(self) -> None:
        log_storage = self._prepare(NCLogConfig.FAILED)
        self._call('log_levels')
        self.assertIsNone(log_storage.get_logs(self.contract_id))

        with self.assertRaises(NCFail):
            self._call('fail')

        entries = log_storage.get_logs(self.contract_id)
        assert entries is not None
        self.assertEqual(len(entries), 1)
        error_traceback = entries[0].error_traceback
        assert error_traceback is not None
        self.assertIn('some fail', error_traceback)
        self.assertEqual(entries[0].logs[1].message, 'fail() called')

    def test_log_failed_unhandled(self) -> None:
        log_storage = self._prepare(NCLogConfig.FAILED_UNHANDLED)

        with self.assertRaises(NCFail):
            self._call('fail')
        self.assertIsNone(log_storage.get_logs(self.contract_id))

        with self.assertRaises(NCFail):
            self._call('value_error')

        entries = log_storage.get_logs(self.contract_id)
        assert entries is not None
        self.assertEqual(len(entries), 1)
        error_traceback = entries[0].error_traceback
        assert error_traceback is not None
        self.assertIn('ValueError: some value error', error_traceback)

    def test_log_none(self) -> None:
        log_storage = self._prepare(NCLogConfig.NONE)
        self._call('log_levels')
        with self.assertRaises(NCFail):
            self._call('fail')
        self.assertIsNone(log_storage.get_logs(self.contract_id))

    def test_log_level_from_str(self) -> None:
        self.assertEqual(NCLogLevel.from_str('WARN'), NCLogLevel.WARN)
        self.assertIsNone(NCLogLevel.from_str('UNKNOWN'))
