"""File repository schemas — wire shapes for listings, files and uploads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from restfiles.services import FileEntry, Listing


class Folder(BaseModel):
    """Sub-directory summary inside a listing."""
    model_config = ConfigDict(from_attributes=True)

    name: str
    modified_at: datetime
    file_count: int


class File(BaseModel):
    """File metadata for listing."""
    model_config = ConfigDict(from_attributes=True)

    name: str
    extension: str
    size_bytes: int
    modified_at: datetime
    is_text: bool


class FileResult(File):
    """Single file — ``contents`` only set for text files."""
    contents: str | None = None


class FolderResult(BaseModel):
    folders: list[Folder] = []
    files: list[File] = []

    @classmethod
    def from_listing(cls, listing: Listing) -> "FolderResult":
        return cls(
            folders=[Folder.model_validate(f) for f in listing.folders],
            files=[File.model_validate(f) for f in listing.files],
        )


class FilesResponse(BaseModel):
    """GET response: exactly one of ``directory`` / ``file`` is set."""
    directory: FolderResult | None = None
    file: FileResult | None = None


class UpdateFileRequest(BaseModel):
    text_contents: str | None = None


class UploadResult(BaseModel):
    path: str
    files: list[str]


class ErrorResponse(BaseModel):
    detail: str
    error: str


def file_result(entry: FileEntry) -> FileResult:
    return FileResult.model_validate(entry)
