"""File repository core — stateless operations over a sandbox root."""

from restfiles.services.file_service import (
    DownloadTarget,
    FileEntry,
    FolderEntry,
    Listing,
    PathStatus,
    UploadedFile,
    check_existence,
    create_upload,
    delete_file,
    is_text_extension,
    list_directory,
    read_file,
    read_for_download,
    write_file,
)

__all__ = [
    "DownloadTarget",
    "FileEntry",
    "FolderEntry",
    "Listing",
    "PathStatus",
    "UploadedFile",
    "check_existence",
    "create_upload",
    "delete_file",
    "is_text_extension",
    "list_directory",
    "read_file",
    "read_for_download",
    "write_file",
]
