"""
Placing uploaded files in storage

Uploaded bytes are written below the uploads directory, optionally in a (nested) folder,
under a generated storage name. The metadata of the placed file is then registered in the metadata cache.
The cache key of a file is its path relative to the parent of the uploads directory, e.g. uploads/docs/123-456.pdf
"""

import hashlib
import logging
import random
import time
from pathlib import Path, PurePosixPath
from typing import Any, Iterable, Optional, Sequence

from metacache.cache import MetadataCache
from metacache.config import get_settings
from metacache.models import FileMetadata, NewFile


def storage_name(original_name: str) -> str:
    """Generate a unique-enough storage name that keeps the extension of the original name"""
    unique = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return unique + PurePosixPath(original_name).suffix


def folder_parts(folder: Optional[str]) -> tuple[str, ...]:
    """
    Split a folder hint such as "documents/contracts/2024" into its parts.
    Hints cannot point outside of the uploads directory.
    """
    if not folder:
        return ()
    path = PurePosixPath(folder.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts:
        raise ValueError(f"Invalid folder {folder!r}, should be a relative path within the uploads directory")
    return tuple(p for p in path.parts if p not in {"", "."})


def save_upload(
    cache: MetadataCache,
    data: bytes,
    original_name: str,
    mime_type: Optional[str] = None,
    folder: Optional[str] = None,
    owner_id: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
    uploads_dir: Optional[Path] = None,
) -> FileMetadata:
    if uploads_dir is None:
        uploads_dir = get_settings().uploads_dir
    uploads_dir = Path(uploads_dir).absolute()
    target_dir = uploads_dir.joinpath(*folder_parts(folder))
    target_dir.mkdir(parents=True, exist_ok=True)

    filename = storage_name(original_name)
    target = target_dir / filename
    target.write_bytes(data)
    key = target.relative_to(uploads_dir.parent).as_posix()

    new_file = NewFile(
        original_name=original_name,
        filename=filename,
        mime_type=mime_type,
        size=len(data),
        path=key,
        owner_id=owner_id,
        checksum=hashlib.sha256(data).hexdigest(),
        metadata=metadata,
    )
    try:
        return cache.register_write(new_file)
    except Exception:
        logging.warning(f"Could not register {key!r}, removing the stored file")
        target.unlink(missing_ok=True)
        raise


def save_uploads(
    cache: MetadataCache,
    files: Iterable[tuple[str, bytes, Optional[str]]],
    folders: Optional[Sequence[Optional[str]]] = None,
    owner_id: Optional[str] = None,
    uploads_dir: Optional[Path] = None,
) -> list[FileMetadata]:
    """
    Save several uploads at once. files is a sequence of (original_name, data, mime_type),
    folders gives the folder for the file at the same position (missing or None means the uploads directory itself)
    """
    folders = folders or []
    results = []
    for i, (original_name, data, mime_type) in enumerate(files):
        folder = folders[i] if i < len(folders) else None
        results.append(
            save_upload(
                cache, data, original_name, mime_type, folder=folder, owner_id=owner_id, uploads_dir=uploads_dir
            )
        )
    return results
