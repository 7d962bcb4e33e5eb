"""Tests for gatekeeper/state_file.py and store persistence."""

import json

import pytest

from gatekeeper.blocklist_store import BlocklistStore
from gatekeeper.errors import IntegrityError, StorageError
from gatekeeper.state_file import StateFile


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "state" / "blocklist.json"


@pytest.fixture
def state_file(state_path, logger):
    return StateFile(str(state_path), logger)


def test_missing_file_loads_none(state_file):
    assert state_file.load() is None


def test_save_then_load(state_file, state_path):
    state_file.save({'fixed': {'exe': True}, 'custom': []})

    assert state_path.exists()
    assert not state_path.with_name(state_path.name + '.tmp').exists()
    assert state_file.load() == {'fixed': {'exe': True}, 'custom': []}


def test_corrupt_file_raises_storage_error(state_file, state_path):
    state_path.parent.mkdir(parents=True)
    state_path.write_text("{not json")

    with pytest.raises(StorageError):
        state_file.load()


def test_non_object_file_raises_storage_error(state_file, state_path):
    state_path.parent.mkdir(parents=True)
    state_path.write_text("[]")

    with pytest.raises(StorageError):
        state_file.load()


class TestStorePersistence:

    def test_state_survives_restart(self, blocklist_config, logger, state_file):
        store = BlocklistStore(blocklist_config, logger, state_file=state_file)
        store.set_fixed_blocked('exe', True)
        store.add_custom("py, sh, rb")
        original = store.list_custom()

        restored = BlocklistStore(blocklist_config, logger, state_file=state_file)

        assert restored.list_custom() == original
        assert restored.snapshot() == frozenset({'exe', 'py', 'sh', 'rb'})

    def test_reset_is_persisted(self, blocklist_config, logger, state_file):
        store = BlocklistStore(blocklist_config, logger, state_file=state_file)
        store.bulk_set_fixed(True)
        store.add_custom("py")
        store.reset()

        restored = BlocklistStore(blocklist_config, logger, state_file=state_file)

        assert restored.snapshot() == frozenset()

    def test_failed_save_leaves_memory_untouched(self, blocklist_config, logger, state_file, monkeypatch):
        store = BlocklistStore(blocklist_config, logger, state_file=state_file)
        store.add_custom("py")

        def fail(data):
            raise StorageError("disk full")

        monkeypatch.setattr(state_file, 'save', fail)

        with pytest.raises(StorageError):
            store.reset()
        with pytest.raises(StorageError):
            store.add_custom("sh")

        assert [e.extension for e in store.list_custom()] == ['py']

    def test_duplicate_ids_raise_integrity_error(self, blocklist_config, logger, state_file, state_path):
        record = {'id': 'abc', 'extension': 'py', 'created_at': '2024-01-01T00:00:00+00:00'}
        other = dict(record, extension='sh')
        state_path.parent.mkdir(parents=True)
        state_path.write_text(json.dumps({'fixed': {}, 'custom': [record, other]}))

        with pytest.raises(IntegrityError):
            BlocklistStore(blocklist_config, logger, state_file=state_file)

    def test_duplicate_extensions_raise_integrity_error(self, blocklist_config, logger, state_file, state_path):
        records = [
            {'id': 'a', 'extension': 'py', 'created_at': '2024-01-01T00:00:00+00:00'},
            {'id': 'b', 'extension': 'py', 'created_at': '2024-01-02T00:00:00+00:00'},
        ]
        state_path.parent.mkdir(parents=True)
        state_path.write_text(json.dumps({'fixed': {}, 'custom': records}))

        with pytest.raises(IntegrityError):
            BlocklistStore(blocklist_config, logger, state_file=state_file)

    def test_unknown_fixed_names_are_ignored(self, blocklist_config, logger, state_file, state_path):
        state_path.parent.mkdir(parents=True)
        state_path.write_text(json.dumps({'fixed': {'exe': True, 'dll': True}, 'custom': []}))

        store = BlocklistStore(blocklist_config, logger, state_file=state_file)

        assert len(store.list_fixed()) == 7
        assert store.snapshot() == frozenset({'exe'})

    @pytest.mark.parametrize("payload", [
        {'fixed': ['exe'], 'custom': []},
        {'fixed': {}, 'custom': {'id': 'a'}},
        {'fixed': {}, 'custom': [42]},
    ])
    def test_malformed_sections_raise_integrity_error(self, blocklist_config, logger, state_file, state_path,
                                                      payload):
        state_path.parent.mkdir(parents=True)
        state_path.write_text(json.dumps(payload))

        with pytest.raises(IntegrityError):
            BlocklistStore(blocklist_config, logger, state_file=state_file)
