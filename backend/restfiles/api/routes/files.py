"""File repository routes — browse, download, edit, upload and delete."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, File, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, Response

from restfiles.api.deps import get_root_context
from restfiles.config import RootContext
from restfiles.exceptions import NotFoundError
from restfiles.schemas.files import (
    ErrorResponse,
    FilesResponse,
    FolderResult,
    UpdateFileRequest,
    UploadResult,
    file_result,
)
from restfiles.services import (
    UploadedFile,
    check_existence,
    create_upload,
    delete_file,
    list_directory,
    read_file,
    read_for_download,
    write_file,
)
from restfiles.utils.paths import resolve_path

logger = logging.getLogger(__name__)
router = APIRouter(
    responses={
        code: {"model": ErrorResponse}
        for code in (400, 404, 409, 415, 500)
    },
)


def _existing(ctx: RootContext, path: str):
    """Resolve ``path`` and fail NotFound unless a file or directory is there."""
    target = resolve_path(ctx.root_directory, path)
    found = check_existence(target)
    if not found.exists:
        raise NotFoundError(f"Could not find: {path}", path)
    return target, found


@router.get("", response_model=FilesResponse)
@router.get("/{path:path}", response_model=FilesResponse)
async def get_files(
    path: str = "",
    download: bool = False,
    ctx: RootContext = Depends(get_root_context),
):
    """List a directory, return a file (with text contents), or download it."""
    target, found = _existing(ctx, path)

    if found.is_directory:
        listing = await run_in_threadpool(list_directory, target, ctx)
        return FilesResponse(directory=FolderResult.from_listing(listing))

    if download:
        attachment = await run_in_threadpool(read_for_download, target)
        return FileResponse(
            attachment.path,
            media_type=attachment.media_type,
            filename=attachment.filename,
        )

    entry = await run_in_threadpool(read_file, target, ctx)
    return FilesResponse(file=file_result(entry))


@router.post("", response_model=UploadResult, status_code=status.HTTP_201_CREATED)
@router.post("/{path:path}", response_model=UploadResult, status_code=status.HTTP_201_CREATED)
async def upload_files(
    path: str = "",
    files: list[UploadFile] = File(default=[]),
    ctx: RootContext = Depends(get_root_context),
):
    """Upload new files into a directory, creating it when missing."""
    target = resolve_path(ctx.root_directory, path)
    uploads = [UploadedFile(filename=f.filename or "", stream=f.file) for f in files]
    written = await run_in_threadpool(create_upload, target, uploads)
    return UploadResult(path=path, files=[p.name for p in written])


@router.put("/{path:path}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def update_file(
    path: str,
    body: UpdateFileRequest | None = Body(default=None),
    ctx: RootContext = Depends(get_root_context),
):
    """Replace the contents of an existing text file."""
    target, _ = _existing(ctx, path)
    text_contents = body.text_contents if body else None
    await run_in_threadpool(write_file, target, text_contents, ctx)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{path:path}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def remove_file(
    path: str,
    ctx: RootContext = Depends(get_root_context),
):
    """Delete a single file."""
    target, _ = _existing(ctx, path)
    await run_in_threadpool(delete_file, target)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
