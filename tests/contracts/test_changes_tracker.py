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

from tokenswap.contracts.exception import NCAlreadyInitializedContractError, NCUninitializedContractError
from tokenswap.contracts.storage import NCChangesTracker, NCContractStorage, NCStateStorage
from tests import unittest


class NCChangesTrackerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.nc_id = self.rng.randbytes(32)
        self.blueprint_id = self.rng.randbytes(32)
        self.storage = NCContractStorage(nc_id=self.nc_id, blueprint_id=self.blueprint_id)
        self.storage.unlock()
        self.storage.put(b'a', 1)
        self.storage.put(b'b', 2)
        self.storage.lock()

    def test_storage_starts_locked(self) -> None:
        storage = NCContractStorage(nc_id=self.nc_id, blueprint_id=self.blueprint_id)
        self.assertTrue(storage.is_empty())
        with self.assertRaises(RuntimeError):
            storage.put(b'a', 1)
        with self.assertRaises(KeyError):
            storage.get(b'a')
        self.assertEqual(storage.get(b'a', default=None), None)

    def test_changes_are_staged(self) -> None:
        tracker = NCChangesTracker(self.nc_id, self.storage)
        self.assertTrue(tracker.is_empty())
        self.assertEqual(tracker.get_blueprint_id(), self.blueprint_id)

        tracker.put(b'a', 10)
        tracker.put(b'c', 30)
        tracker.delete(b'b')

        self.assertEqual(tracker.get(b'a'), 10)
        self.assertEqual(tracker.get(b'c'), 30)
        self.assertFalse(tracker.has(b'b'))
        with self.assertRaises(KeyError):
            tracker.get(b'b')
        self.assertEqual(tracker.get(b'b', default=0), 0)

        # Nothing reached the storage yet.
        self.assertEqual(self.storage.get(b'a'), 1)
        self.assertEqual(self.storage.get(b'b'), 2)
        self.assertFalse(self.storage.has(b'c'))

    def test_commit(self) -> None:
        tracker = NCChangesTracker(self.nc_id, self.storage)
        tracker.put(b'a', 10)
        tracker.delete(b'b')

        with self.assertRaises(RuntimeError):
            tracker.commit()

        self.storage.unlock()
        tracker.commit()
        self.storage.lock()

        self.assertEqual(self.storage.get(b'a'), 10)
        self.assertFalse(self.storage.has(b'b'))
        with self.assertRaises(RuntimeError):
            tracker.put(b'a', 11)

    def test_block(self) -> None:
        tracker = NCChangesTracker(self.nc_id, self.storage)
        tracker.put(b'a', 10)
        tracker.block()

        with self.assertRaises(RuntimeError):
            tracker.put(b'a', 11)
        with self.assertRaises(RuntimeError):
            tracker.commit()
        self.assertEqual(self.storage.get(b'a'), 1)

    def test_nested_trackers(self) -> None:
        outer = NCChangesTracker(self.nc_id, self.storage)
        outer.put(b'a', 10)
        inner = NCChangesTracker(self.nc_id, outer)
        self.assertEqual(inner.get(b'a'), 10)

        inner.put(b'a', 100)
        inner.delete(b'b')
        inner.commit()

        self.assertEqual(outer.get(b'a'), 100)
        self.assertFalse(outer.has(b'b'))
        self.assertEqual(self.storage.get(b'a'), 1)

    def test_trackers_cannot_be_locked(self) -> None:
        tracker = NCChangesTracker(self.nc_id, self.storage)
        with self.assertRaises(NotImplementedError):
            tracker.lock()
        with self.assertRaises(NotImplementedError):
            tracker.unlock()


class NCStateStorageTestCase(unittest.TestCase):
    def test_create_and_save(self) -> None:
        state = NCStateStorage()
        nc_id = self.rng.randbytes(32)
        blueprint_id = self.rng.randbytes(32)

        storage = state.create_contract_storage(nc_id, blueprint_id)
        self.assertFalse(state.has_contract(nc_id))
        with self.assertRaises(NCUninitializedContractError):
            state.get_contract_storage(nc_id)

        state.save_contract_storage(storage)
        self.assertTrue(state.has_contract(nc_id))
        self.assertIs(state.get_contract_storage(nc_id), storage)
        self.assertEqual(storage.get_blueprint_id(), blueprint_id)

        with self.assertRaises(NCAlreadyInitializedContractError):
            state.create_contract_storage(nc_id, blueprint_id)
