"""Directory listing, text-file access and uploads inside the sandbox root.

Every function here takes absolute paths that have already been confined
to the root by ``restfiles.utils.paths.resolve_path`` plus the read-only
``RootContext`` settings it needs. Nothing is cached between calls; each
entry is built from a single ``stat`` so metadata never outlives the call.
"""

from __future__ import annotations

import errno
import logging
import mimetypes
import os
import shutil
import stat
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterator, Sequence

from restfiles.config import RootContext
from restfiles.exceptions import (
    ConflictError,
    FileServiceError,
    InvalidPathError,
    NotFoundError,
    StorageError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from restfiles.utils.paths import check_segment

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 64 * 1024  # 64 KB


@dataclass(frozen=True)
class PathStatus:
    exists: bool
    is_directory: bool
    stat_result: os.stat_result | None = None


@dataclass(frozen=True)
class FolderEntry:
    name: str
    modified_at: datetime
    file_count: int


@dataclass(frozen=True)
class FileEntry:
    name: str
    extension: str
    size_bytes: int
    modified_at: datetime
    is_text: bool
    contents: str | None = None


@dataclass
class Listing:
    """Folders and files of one directory, in enumeration order."""
    folders: list[FolderEntry] = field(default_factory=list)
    files: list[FileEntry] = field(default_factory=list)


@dataclass(frozen=True)
class DownloadTarget:
    path: Path
    filename: str
    media_type: str
    size_bytes: int


@dataclass(frozen=True)
class UploadedFile:
    """An already-parsed upload: target file name plus a binary stream."""
    filename: str
    stream: BinaryIO


@contextmanager
def _fs_errors(path: Path) -> Iterator[None]:
    """Translate OSError into the typed error taxonomy."""
    try:
        yield
    except FileServiceError:
        raise
    except FileNotFoundError as e:
        raise NotFoundError(f"Could not find: {path.name}", str(path)) from e
    except OSError as e:
        raise _os_error(path, e) from e


def _os_error(path: Path, e: OSError) -> FileServiceError:
    if e.errno == errno.ENAMETOOLONG:
        return InvalidPathError(f"File name too long: {path.name[:64]}...", str(path))
    logger.error("Filesystem error on %s: %s", path, e)
    return StorageError(f"Filesystem error: {e.strerror or e}", str(path))


def _utc(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


# --- Classification ---------------------------------------------------------


def is_text_extension(extension: str, allow_list: frozenset[str] | set[str]) -> bool:
    """Case-sensitive lookup; ``extension`` includes the leading dot."""
    return bool(extension) and extension in allow_list


def _file_entry(path: Path, st: os.stat_result, ctx: RootContext) -> FileEntry:
    extension = path.suffix
    return FileEntry(
        name=path.name,
        extension=extension,
        size_bytes=st.st_size,
        modified_at=_utc(st.st_mtime),
        is_text=is_text_extension(extension, ctx.text_file_extensions),
    )


# --- Existence --------------------------------------------------------------


def check_existence(path: Path) -> PathStatus:
    try:
        st = path.stat()
    except (FileNotFoundError, NotADirectoryError):
        return PathStatus(exists=False, is_directory=False)
    except OSError as e:
        # No entry can carry an over-long name
        if e.errno == errno.ENAMETOOLONG:
            return PathStatus(exists=False, is_directory=False)
        raise _os_error(path, e) from e
    return PathStatus(exists=True, is_directory=stat.S_ISDIR(st.st_mode), stat_result=st)


def _require_file(path: Path) -> os.stat_result:
    status = check_existence(path)
    if not status.exists or status.is_directory:
        raise NotFoundError(f"Could not find: {path.name}", str(path))
    return status.stat_result


# --- Listing ----------------------------------------------------------------


def _count_files(directory: str) -> int:
    count = 0
    with os.scandir(directory) as it:
        for entry in it:
            if entry.is_file():
                count += 1
    return count


def list_directory(path: Path, ctx: RootContext) -> Listing:
    """Enumerate immediate sub-directories and files of ``path``.

    Excluded directory names are skipped; files are never excluded.
    """
    if not check_existence(path).is_directory:
        raise NotFoundError(f"Could not find: {path.name}", str(path))

    listing = Listing()
    with _fs_errors(path):
        with os.scandir(path) as it:
            entries = list(it)

        for entry in entries:
            if not entry.is_dir():
                continue
            if entry.name in ctx.excluded_directories:
                continue
            listing.folders.append(
                FolderEntry(
                    name=entry.name,
                    modified_at=_utc(entry.stat().st_mtime),
                    file_count=_count_files(entry.path),
                )
            )

        for entry in entries:
            if not entry.is_file():
                continue
            listing.files.append(_file_entry(Path(entry.path), entry.stat(), ctx))

    logger.debug(
        "Listed %s: %d folders, %d files", path, len(listing.folders), len(listing.files)
    )
    return listing


# --- File access ------------------------------------------------------------


def read_file(path: Path, ctx: RootContext) -> FileEntry:
    """Metadata for one file; text files also carry their contents."""
    st = _require_file(path)
    entry = _file_entry(path, st, ctx)
    if not entry.is_text:
        return entry

    with _fs_errors(path):
        with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
            contents = f.read()
    logger.debug("Read %s (%d bytes)", path, entry.size_bytes)
    return FileEntry(
        name=entry.name,
        extension=entry.extension,
        size_bytes=entry.size_bytes,
        modified_at=entry.modified_at,
        is_text=True,
        contents=contents,
    )


def read_for_download(path: Path) -> DownloadTarget:
    """Raw attachment transfer, regardless of text/binary classification."""
    st = _require_file(path)
    media_type, _ = mimetypes.guess_type(path.name)
    return DownloadTarget(
        path=path,
        filename=path.name,
        media_type=media_type or "application/octet-stream",
        size_bytes=st.st_size,
    )


def write_file(path: Path, text_contents: str | None, ctx: RootContext) -> None:
    """Replace the full contents of an existing text file."""
    _require_file(path)

    if not is_text_extension(path.suffix, ctx.text_file_extensions):
        raise UnsupportedMediaTypeError(path.suffix, str(path))

    if text_contents is None:
        raise ValidationError("text_contents is required", str(path))

    with _fs_errors(path):
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text_contents)
    logger.info("Updated %s (%d chars)", path, len(text_contents))


def delete_file(path: Path) -> None:
    """Remove a single file. Directories are never removed."""
    _require_file(path)
    with _fs_errors(path):
        path.unlink()
    logger.info("Deleted %s", path)


# --- Upload -----------------------------------------------------------------


def create_upload(target_dir: Path, uploads: Sequence[UploadedFile]) -> list[Path]:
    """Write uploaded streams into ``target_dir``, creating it if missing.

    Same-named files inside the directory are overwritten. Only a target
    that is itself an existing file is rejected.
    """
    status = check_existence(target_dir)
    if status.exists and not status.is_directory:
        raise ConflictError(
            "POST only supports uploading new files. "
            "Use PUT to replace contents of an existing file",
            str(target_dir),
        )

    names = [check_segment(upload.filename) for upload in uploads]
    for name in names:
        if check_existence(target_dir / name).is_directory:
            raise ConflictError(f"A directory named {name!r} already exists", str(target_dir / name))

    if not status.exists:
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except (FileExistsError, NotADirectoryError) as e:
            raise ConflictError(
                f"Cannot create directory, a file is in the way: {target_dir.name}",
                str(target_dir),
            ) from e
        except OSError as e:
            raise _os_error(target_dir, e) from e
        logger.info("Created directory %s", target_dir)

    written: list[Path] = []
    with _fs_errors(target_dir):
        for name, upload in zip(names, uploads):
            destination = target_dir / name
            with open(destination, "wb") as out:
                shutil.copyfileobj(upload.stream, out, COPY_CHUNK_SIZE)
            written.append(destination)

    logger.info("Uploaded %d file(s) to %s", len(written), target_dir)
    return written
