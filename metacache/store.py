"""
Durable storage of file records

The metadata cache sits in front of a RecordStore. SqliteRecordStore is the implementation used by the application,
it keeps the records in an SQLite database through peewee. Records are never removed, deleting a record marks it
inactive (is_deleted) and inactive records are not returned by find_all_active and find_by_owner.
"""

import json
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Mapping, Optional, Protocol, Sequence

from peewee import (
    BigIntegerField,
    BooleanField,
    CharField,
    DateTimeField,
    Model,
    PeeweeException,
    SqliteDatabase,
    TextField,
)

from metacache.errors import PersistenceError


class Record(Protocol):
    id: str
    owner_id: Optional[str]
    original_name: str
    filename: str
    mime_type: Optional[str]
    size: int
    path: str
    url: Optional[str]
    checksum: Optional[str]
    metadata: Optional[dict[str, Any]]
    created_at: datetime
    updated_at: datetime
    is_deleted: bool


class RecordStore(Protocol):
    def create(self, fields: Mapping[str, Any]) -> Record: ...

    def find_by_path(self, path: str) -> Optional[Record]: ...

    def find_by_id(self, record_id: str) -> Optional[Record]: ...

    def find_all_active(self) -> Sequence[Record]: ...

    def find_by_owner(self, owner_id: str) -> Sequence[Record]: ...

    def mark_inactive(self, record_id: str) -> bool: ...


class JSONField(TextField):
    def db_value(self, value):
        return None if value is None else json.dumps(value)

    def python_value(self, value):
        return None if value is None else json.loads(value)


def _new_id() -> str:
    return str(uuid.uuid4())


class FileRecord(Model):
    id = CharField(primary_key=True, default=_new_id)
    owner_id = CharField(null=True, index=True)
    filename = CharField(max_length=500)
    original_name = CharField(max_length=500)
    mime_type = CharField(max_length=200, null=True)
    size = BigIntegerField(default=0)
    path = TextField(index=True)
    url = TextField(null=True)
    checksum = CharField(max_length=200, null=True)
    metadata = JSONField(null=True)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)
    is_deleted = BooleanField(default=False)

    class Meta:
        table_name = "files"


@contextmanager
def _persisting(action: str) -> Iterator[None]:
    try:
        yield
    except PeeweeException as e:
        logging.error(f"Record store could not {action}: {e}")
        raise PersistenceError(f"Could not {action}: {e}") from e


class SqliteRecordStore:
    def __init__(self, db_name: str):
        self.db = SqliteDatabase(db_name, pragmas={"foreign_keys": 1})
        # Every store gets its own model class bound to its own database
        meta = type("Meta", (), {"database": self.db, "table_name": FileRecord._meta.table_name})
        self.model: type[FileRecord] = type("FileRecord", (FileRecord,), {"__module__": __name__, "Meta": meta})
        with _persisting("create tables"):
            self.db.create_tables([self.model])

    def close(self) -> None:
        if not self.db.is_closed():
            self.db.close()

    def create(self, fields: Mapping[str, Any]) -> FileRecord:
        """
        Insert a new active record. The id and the timestamps are assigned by the store.
        """
        fields = {k: v for k, v in fields.items() if k not in {"id", "created_at", "updated_at", "is_deleted"}}
        with _persisting(f"create record for {fields.get('path')!r}"):
            return self.model.create(**fields)

    def find_by_path(self, path: str) -> Optional[FileRecord]:
        with _persisting(f"read record {path!r}"):
            return self.model.get_or_none(self.model.path == path)

    def find_by_id(self, record_id: str) -> Optional[FileRecord]:
        with _persisting(f"read record {record_id!r}"):
            return self.model.get_or_none(self.model.id == record_id)

    def find_all_active(self) -> list[FileRecord]:
        with _persisting("list active records"):
            return list(self.model.select().where(self.model.is_deleted == False))  # noqa: E712

    def find_by_owner(self, owner_id: str) -> list[FileRecord]:
        model = self.model
        with _persisting(f"list records of {owner_id!r}"):
            query = model.select().where((model.owner_id == owner_id) & (model.is_deleted == False))  # noqa: E712
            return list(query)

    def mark_inactive(self, record_id: str) -> bool:
        """Mark the record as deleted, returning whether a record was updated"""
        model = self.model
        with _persisting(f"deactivate record {record_id!r}"):
            query = model.update(is_deleted=True, updated_at=datetime.now()).where(model.id == record_id)
            return query.execute() > 0
