# drive_service/services/storage.py
"""In-memory storage engine: users, folders and files with quota bookkeeping
and cascading soft delete.

Lookups return ``None`` and deletes return ``bool`` when the record is
missing; mutating calls raise ``NotFoundError``. Callers branch on both.
"""
import logging
from typing import Dict, List, Optional, Set

from ..errors import NotFoundError
from ..models.records import File, Folder, User, utcnow

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_LIMIT = 104857600  # 100MB

FILE_UPDATABLE_FIELDS = {"name", "type", "size", "path", "folder_id", "is_starred"}
FOLDER_UPDATABLE_FIELDS = {"name", "parent_id"}


def _check_fields(updates: dict, allowed: Set[str]) -> None:
    unknown = set(updates) - allowed
    if unknown:
        raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")


class StorageEngine:
    """Owns the users, folders and files tables plus the file content map.

    Ids are per-table counters starting at 1 and are never reused. Every
    method runs to completion without awaiting, so a single event loop never
    observes a half-applied quota or cascade update.
    """

    def __init__(self, default_storage_limit: int = DEFAULT_STORAGE_LIMIT):
        self.default_storage_limit = default_storage_limit
        self._users: Dict[int, User] = {}
        self._folders: Dict[int, Folder] = {}
        self._files: Dict[int, File] = {}
        self._contents: Dict[int, str] = {}
        self._user_id_counter = 1
        self._folder_id_counter = 1
        self._file_id_counter = 1

    # User operations

    def get_user(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return next(
            (user for user in self._users.values() if user.username == username),
            None,
        )

    def create_user(self, username: str, password: str) -> User:
        """Create a user with the default quota.

        Usernames are not checked for collisions; callers wanting uniqueness
        look up ``get_user_by_username`` first.
        """
        user = User(
            id=self._user_id_counter,
            username=username,
            password=password,
            storage_limit=self.default_storage_limit,
            storage_used=0,
        )
        self._user_id_counter += 1
        self._users[user.id] = user
        logger.info("Created user %s (ID: %d)", username, user.id)
        return user

    def update_user_storage_used(self, user_id: int, bytes_delta: int) -> User:
        """Apply a signed delta to the user's usage counter, clamped at zero."""
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)

        new_usage = user.storage_used + bytes_delta
        if new_usage < 0:
            logger.warning(
                "Storage usage for user %d would go negative (%d), clamping to 0",
                user_id,
                new_usage,
            )
            new_usage = 0
        user.storage_used = new_usage
        logger.debug("Storage used for user %d changed by %d (now %d)", user_id, bytes_delta, new_usage)
        return user

    # File operations

    def get_files(self, user_id: int, folder_id: Optional[int] = None) -> List[File]:
        """Active files directly inside ``folder_id`` (``None`` is the root)."""
        return [
            f for f in self._files.values()
            if f.user_id == user_id and f.folder_id == folder_id and not f.is_deleted
        ]

    def get_recent_files(self, user_id: int, limit: int) -> List[File]:
        active = [f for f in self._files.values() if f.user_id == user_id and not f.is_deleted]
        # sorted() is stable, ties keep insertion order
        active = sorted(active, key=lambda f: f.updated_at, reverse=True)
        return active[:max(0, limit)]

    def get_file_by_id(self, file_id: int, user_id: Optional[int] = None) -> Optional[File]:
        """Look up a file, deleted or not. With ``user_id`` set, files owned by
        someone else are reported as missing."""
        file = self._files.get(file_id)
        if file is None or (user_id is not None and file.user_id != user_id):
            return None
        return file

    def create_file(
        self,
        name: str,
        type: str,
        size: int,
        user_id: int,
        folder_id: Optional[int] = None,
        path: Optional[str] = None,
    ) -> File:
        """Record a new file and charge its size to the owner.

        The file is stored before the owner's usage is updated; if the owner
        does not exist the file stays recorded and NotFoundError propagates.
        """
        now = utcnow()
        file = File(
            id=self._file_id_counter,
            name=name,
            type=type,
            size=size,
            path=path,
            user_id=user_id,
            folder_id=folder_id,
            created_at=now,
            updated_at=now,
        )
        self._file_id_counter += 1
        self._files[file.id] = file

        self.update_user_storage_used(user_id, size)
        logger.info("Created file %s (ID: %d, %d bytes) for user %d", name, file.id, size, user_id)
        return file

    def update_file(self, file_id: int, **updates) -> File:
        """Merge ``updates`` into the file and refresh ``updated_at``.

        A changed ``size`` moves the owner's usage by the difference. Folder
        references are not validated here.
        """
        file = self._files.get(file_id)
        if file is None:
            raise NotFoundError("File", file_id)
        _check_fields(updates, FILE_UPDATABLE_FIELDS)

        old_size = file.size
        updated = file.model_copy(update={**updates, "updated_at": utcnow()})
        self._files[file_id] = updated

        new_size = updates.get("size")
        if new_size is not None and new_size != old_size:
            self.update_user_storage_used(file.user_id, new_size - old_size)
        return updated

    def delete_file(self, file_id: int) -> bool:
        """Soft delete a file and release its bytes from the owner's quota.

        Deleting an already deleted file is a no-op that still returns True.
        """
        file = self._files.get(file_id)
        if file is None:
            return False
        if file.is_deleted:
            logger.debug("File %d already deleted", file_id)
            return True

        self._files[file_id] = file.model_copy(update={"is_deleted": True, "updated_at": utcnow()})
        self.update_user_storage_used(file.user_id, -file.size)
        logger.info("File moved to trash: %s (ID: %d)", file.name, file_id)
        return True

    def get_file_content(self, file_id: int) -> Optional[str]:
        return self._contents.get(file_id)

    def set_file_content(self, file_id: int, content: str) -> bool:
        if file_id not in self._files:
            return False
        self._contents[file_id] = content
        return True

    # Folder operations

    def get_folders(self, user_id: int, parent_id: Optional[int] = None) -> List[Folder]:
        return [
            f for f in self._folders.values()
            if f.user_id == user_id and f.parent_id == parent_id and not f.is_deleted
        ]

    def get_folder_by_id(self, folder_id: int, user_id: Optional[int] = None) -> Optional[Folder]:
        folder = self._folders.get(folder_id)
        if folder is None or (user_id is not None and folder.user_id != user_id):
            return None
        return folder

    def create_folder(self, name: str, user_id: int, parent_id: Optional[int] = None) -> Folder:
        """Create a folder under ``parent_id`` (``None`` for the root).

        The parent must be an active folder owned by the same user.
        """
        if parent_id is not None:
            parent = self.get_folder_by_id(parent_id, user_id=user_id)
            if parent is None or parent.is_deleted:
                raise NotFoundError("Folder", parent_id)

        now = utcnow()
        folder = Folder(
            id=self._folder_id_counter,
            name=name,
            user_id=user_id,
            parent_id=parent_id,
            created_at=now,
            updated_at=now,
        )
        self._folder_id_counter += 1
        self._folders[folder.id] = folder
        logger.info("Created folder %s (ID: %d) for user %d", name, folder.id, user_id)
        return folder

    def update_folder(self, folder_id: int, **updates) -> Folder:
        folder = self._folders.get(folder_id)
        if folder is None:
            raise NotFoundError("Folder", folder_id)
        _check_fields(updates, FOLDER_UPDATABLE_FIELDS)

        updated = folder.model_copy(update={**updates, "updated_at": utcnow()})
        self._folders[folder_id] = updated
        return updated

    def is_descendant(self, folder_id: int, ancestor_id: int) -> bool:
        """True when ``folder_id`` is ``ancestor_id`` or lies somewhere below it."""
        seen: Set[int] = set()
        current = self._folders.get(folder_id)
        while current is not None and current.id not in seen:
            if current.id == ancestor_id:
                return True
            seen.add(current.id)
            current = self._folders.get(current.parent_id) if current.parent_id is not None else None
        return False

    def collect_subtree(self, folder_id: int) -> Set[int]:
        """Ids of ``folder_id`` and every active folder below it."""
        subtree = {folder_id}
        stack = [folder_id]
        while stack:
            current = stack.pop()
            for folder in self._folders.values():
                if folder.parent_id == current and not folder.is_deleted and folder.id not in subtree:
                    subtree.add(folder.id)
                    stack.append(folder.id)
        return subtree

    def files_in_folders(self, folder_ids: Set[int]) -> List[int]:
        return [
            f.id for f in self._files.values()
            if f.folder_id in folder_ids and not f.is_deleted
        ]

    def delete_folder(self, folder_id: int) -> bool:
        """Soft delete a folder together with every active file and folder below it.

        All affected ids are collected first and the marks are applied after,
        so a transactional backend can wrap the second phase in one unit.
        """
        folder = self._folders.get(folder_id)
        if folder is None:
            return False

        folder_ids = self.collect_subtree(folder_id)
        file_ids = self.files_in_folders(folder_ids)

        now = utcnow()
        for fid in folder_ids:
            self._folders[fid] = self._folders[fid].model_copy(update={"is_deleted": True, "updated_at": now})
        for file_id in file_ids:
            self.delete_file(file_id)

        logger.info(
            "Folder %s (ID: %d) deleted with %d subfolders and %d files",
            folder.name,
            folder_id,
            len(folder_ids) - 1,
            len(file_ids),
        )
        return True

    # Aggregates

    def count_files(self, user_id: int) -> int:
        return sum(1 for f in self._files.values() if f.user_id == user_id and not f.is_deleted)
