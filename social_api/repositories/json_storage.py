"""
JSON file persistence for users and posts.

Every operation loads the whole document from disk, mutates it in memory and
writes it back in full. There is no cache and no index, so cost grows with
the size of the file on every call. One re-entrant lock per JsonStorage
serializes the read-modify-write cycles issued through that instance.
Writers in other processes are not coordinated.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from social_api.domain.records import (
    Document,
    Post,
    User,
    document_from_dict,
    document_to_dict,
    utcnow,
)

logger = logging.getLogger(__name__)

FILE_MODE = 0o600


class StorageError(Exception):
    """Base exception for the JSON store."""


class StorageIOError(StorageError):
    """Raised when the backing file cannot be read, written or decoded."""


class NotFoundError(StorageError):
    """Raised when an operation requires a record that does not exist."""


class JsonStorage:
    """CRUD over the users/posts document kept in a single JSON file."""

    def __init__(self, path: str | os.PathLike, *, enforce_post_owner: bool = False) -> None:
        self.path = Path(path)
        self.enforce_post_owner = enforce_post_owner
        self._lock = threading.RLock()

    # -------------------------- file --------------------------
    def ensure_db(self) -> None:
        """Create the file with an empty document unless it already exists."""
        with self._lock:
            if self.path.exists():
                return
            logger.info("DB file %s not found, creating an empty one", self.path)
            self._write(Document())

    def _read(self) -> Document:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except OSError as exc:
            raise StorageIOError(f"cannot read {self.path}: {exc}") from exc
        except ValueError as exc:
            raise StorageIOError(f"cannot decode {self.path}: {exc}") from exc
        try:
            return document_from_dict(raw)
        except (TypeError, ValueError) as exc:
            raise StorageIOError(f"malformed document in {self.path}: {exc}") from exc

    def _write(self, doc: Document) -> None:
        data = json.dumps(document_to_dict(doc), ensure_ascii=False)
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
        except OSError as exc:
            raise StorageIOError(f"cannot write {self.path}: {exc}") from exc
        logger.debug("Wrote %d users / %d posts to %s", len(doc.users), len(doc.posts), self.path)

    @contextmanager
    def _document(self) -> Iterator[Document]:
        """Hold the lock for one read-modify-write cycle and yield the loaded document."""
        with self._lock:
            self.ensure_db()
            yield self._read()

    # -------------------------- users --------------------------
    def create_user(self, email: str, password: str, name: str, age: int) -> User:
        """
        Insert a user unless the email is already taken.

        The returned User is the one built from the arguments, even when an
        existing record kept its place; re-read with get_user to see what was
        persisted. The document is rewritten in both cases.
        """
        user = User(created_at=utcnow(), email=email, password=password, name=name, age=age)
        with self._document() as doc:
            if email not in doc.users:
                doc.users[email] = user
                logger.info("Creating user %s", email)
            else:
                logger.info("User %s already exists, keeping stored record", email)
            self._write(doc)
        return user

    def update_user(self, email: str, password: str, name: str, age: int) -> User:
        """Replace the whole record; created_at is not carried over."""
        with self._document() as doc:
            if email not in doc.users:
                raise NotFoundError("user doesn't exist")
            user = User(email=email, password=password, name=name, age=age)
            doc.users[email] = user
            self._write(doc)
        logger.info("Updated user %s", email)
        return user

    def get_user(self, email: str) -> User:
        """Return the stored user, or the zero-value User() when absent."""
        with self._document() as doc:
            return doc.users.get(email, User())

    def delete_user(self, email: str) -> None:
        with self._document() as doc:
            if email in doc.users:
                del doc.users[email]
                self._write(doc)
                logger.info("Deleted user %s", email)

    # -------------------------- posts --------------------------
    def create_post(self, user_email: str, text: str) -> Post:
        with self._document() as doc:
            post_id = str(uuid.uuid4())
            while post_id in doc.posts:
                post_id = str(uuid.uuid4())
            owner = self.get_user(user_email)
            if self.enforce_post_owner and owner.is_zero():
                raise NotFoundError("user doesn't exist")
            post = Post(id=post_id, created_at=utcnow(), user_email=user_email, text=text)
            doc.posts[post_id] = post
            self._write(doc)
        logger.info("Created post %s for %s", post_id, user_email)
        return post

    def get_posts(self, user_email: str) -> list[Post]:
        with self._document() as doc:
            return [post for post in doc.posts.values() if post.user_email == user_email]

    def delete_post(self, post_id: str) -> None:
        with self._document() as doc:
            if post_id in doc.posts:
                del doc.posts[post_id]
                self._write(doc)
                logger.info("Deleted post %s", post_id)
