"""Unit tests for SyncCoordinator.

The metadata store is mocked; the synchronization predicate marks
every path below "synced/" as synchronized.
"""

from unittest.mock import MagicMock, patch

import pytest
from dbafs.core.store import JsonMetadataStore
from dbafs.models.record import RecordType, create_record
from dbafs.sync import SyncAction, SyncCoordinator


@pytest.fixture
def mock_store() -> MagicMock:
    """Metadata store mock synchronizing paths below synced/."""
    store = MagicMock(spec=JsonMetadataStore)
    store.should_be_synchronized.side_effect = lambda path: path.startswith("synced/")
    store.add_resource.side_effect = lambda path: create_record(path, RecordType.FOLDER)
    store.move_resource.side_effect = lambda old, new: create_record(new, RecordType.FOLDER)
    store.copy_resource.side_effect = lambda old, new: create_record(new, RecordType.FOLDER)
    store.delete_resource.return_value = None
    return store


@pytest.fixture
def coordinator(mock_store: MagicMock) -> SyncCoordinator:
    return SyncCoordinator(mock_store)


class TestSinglePathDispatch:
    """Tests for add, delete, refresh_hash and find."""

    def test_add_synced(self, coordinator: SyncCoordinator, mock_store: MagicMock) -> None:
        record = coordinator.add("synced/a")

        assert record is not None
        mock_store.add_resource.assert_called_once_with("synced/a")

    def test_add_not_synced(self, coordinator: SyncCoordinator, mock_store: MagicMock) -> None:
        assert coordinator.add("plain/a") is None
        mock_store.add_resource.assert_not_called()

    def test_delete(self, coordinator: SyncCoordinator, mock_store: MagicMock) -> None:
        coordinator.delete("synced/a")
        coordinator.delete("plain/a")

        mock_store.delete_resource.assert_called_once_with("synced/a")

    def test_refresh_hash(self, coordinator: SyncCoordinator, mock_store: MagicMock) -> None:
        coordinator.refresh_hash("synced/a")
        coordinator.refresh_hash("plain/a")

        mock_store.update_folder_hashes.assert_called_once_with("synced/a")

    def test_find_skips_lookup_when_not_synced(
        self, coordinator: SyncCoordinator, mock_store: MagicMock
    ) -> None:
        assert coordinator.find("plain/a") is None
        mock_store.find_by_path.assert_not_called()

    def test_move_and_copy_require_both_paths(
        self, coordinator: SyncCoordinator, mock_store: MagicMock
    ) -> None:
        assert coordinator.move("synced/a", "plain/b") is None
        assert coordinator.copy("plain/a", "synced/b") is None
        assert coordinator.move("synced/a", "synced/b") is not None
        assert coordinator.copy("synced/a", "synced/b") is not None

        mock_store.move_resource.assert_called_once_with("synced/a", "synced/b")
        mock_store.copy_resource.assert_called_once_with("synced/a", "synced/b")


class TestPurgeDescendants:
    """Tests for purge_descendants."""

    def test_deletes_descendants_in_one_batch(
        self, coordinator: SyncCoordinator, mock_store: MagicMock
    ) -> None:
        children = [
            create_record("synced/a/one.txt", RecordType.FILE),
            create_record("synced/a/two", RecordType.FOLDER),
        ]
        mock_store.find_multiple_by_basepath.return_value = children

        assert coordinator.purge_descendants("synced/a") == 2

        mock_store.find_multiple_by_basepath.assert_called_once_with("synced/a/")
        mock_store.delete_records.assert_called_once_with(children)
        mock_store.update_folder_hashes.assert_called_once_with("synced/a")

    def test_no_descendants(self, coordinator: SyncCoordinator, mock_store: MagicMock) -> None:
        mock_store.find_multiple_by_basepath.return_value = None

        assert coordinator.purge_descendants("synced/a") == 0

        mock_store.delete_records.assert_not_called()
        mock_store.update_folder_hashes.assert_called_once_with("synced/a")

    def test_not_synced(self, coordinator: SyncCoordinator, mock_store: MagicMock) -> None:
        assert coordinator.purge_descendants("plain/a") == 0

        mock_store.find_multiple_by_basepath.assert_not_called()
        mock_store.update_folder_hashes.assert_not_called()


class TestSyncRename:
    """Tests for the rename decision table."""

    def test_both_synced_moves(self, coordinator: SyncCoordinator, mock_store: MagicMock) -> None:
        result = coordinator.sync_rename("synced/x", "synced/y")

        assert result.action == SyncAction.MOVE
        assert result.record is not None
        assert result.record.path == "synced/y"
        mock_store.move_resource.assert_called_once_with("synced/x", "synced/y")

    def test_source_only_deletes(
        self, coordinator: SyncCoordinator, mock_store: MagicMock
    ) -> None:
        result = coordinator.sync_rename("synced/x", "plain/y")

        assert result.action == SyncAction.DELETE
        assert result.record is None
        mock_store.delete_resource.assert_called_once_with("synced/x")
        mock_store.add_resource.assert_not_called()

    def test_target_only_adds(self, coordinator: SyncCoordinator, mock_store: MagicMock) -> None:
        result = coordinator.sync_rename("plain/x", "synced/y")

        assert result.action == SyncAction.ADD
        mock_store.add_resource.assert_called_once_with("synced/y")

    def test_neither_synced(self, coordinator: SyncCoordinator, mock_store: MagicMock) -> None:
        result = coordinator.sync_rename("plain/x", "plain/y")

        assert result.action == SyncAction.NONE
        assert result.record is None
        mock_store.move_resource.assert_not_called()
        mock_store.delete_resource.assert_not_called()
        mock_store.add_resource.assert_not_called()


class TestSyncCopy:
    """Tests for the copy decision table."""

    def test_both_synced_copies(self, coordinator: SyncCoordinator, mock_store: MagicMock) -> None:
        result = coordinator.sync_copy("synced/x", "synced/y")

        assert result.action == SyncAction.COPY
        mock_store.copy_resource.assert_called_once_with("synced/x", "synced/y")

    def test_source_only_does_nothing(
        self, coordinator: SyncCoordinator, mock_store: MagicMock
    ) -> None:
        result = coordinator.sync_copy("synced/x", "plain/y")

        assert result.action == SyncAction.NONE
        mock_store.copy_resource.assert_not_called()
        mock_store.delete_resource.assert_not_called()

    def test_target_only_adds(self, coordinator: SyncCoordinator, mock_store: MagicMock) -> None:
        result = coordinator.sync_copy("plain/x", "synced/y")

        assert result.action == SyncAction.ADD
        mock_store.add_resource.assert_called_once_with("synced/y")

    def test_neither_synced(self, coordinator: SyncCoordinator, mock_store: MagicMock) -> None:
        assert coordinator.sync_copy("plain/x", "plain/y").action == SyncAction.NONE
        mock_store.add_resource.assert_not_called()


class TestDecisionHelpersDelegate:
    """sync_rename, sync_copy and purge_descendants go through the single-path helpers."""

    def test_rename_uses_helpers(self, coordinator: SyncCoordinator) -> None:
        with (
            patch.object(coordinator, "move") as mock_move,
            patch.object(coordinator, "delete") as mock_delete,
            patch.object(coordinator, "add") as mock_add,
        ):
            coordinator.sync_rename("synced/x", "synced/y")
            coordinator.sync_rename("synced/x", "plain/y")
            coordinator.sync_rename("plain/x", "synced/y")

        mock_move.assert_called_once_with("synced/x", "synced/y")
        mock_delete.assert_called_once_with("synced/x")
        mock_add.assert_called_once_with("synced/y")

    def test_copy_uses_helpers(self, coordinator: SyncCoordinator) -> None:
        with (
            patch.object(coordinator, "copy") as mock_copy,
            patch.object(coordinator, "add") as mock_add,
        ):
            coordinator.sync_copy("synced/x", "synced/y")
            coordinator.sync_copy("plain/x", "synced/y")

        mock_copy.assert_called_once_with("synced/x", "synced/y")
        mock_add.assert_called_once_with("synced/y")

    def test_purge_refreshes_through_refresh_hash(
        self, coordinator: SyncCoordinator, mock_store: MagicMock
    ) -> None:
        mock_store.find_multiple_by_basepath.return_value = None

        with patch.object(coordinator, "refresh_hash") as mock_refresh:
            coordinator.purge_descendants("synced/a")

        mock_refresh.assert_called_once_with("synced/a")
