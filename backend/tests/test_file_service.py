"""Tests for the file repository core — listing, text policy, uploads."""

import io
from datetime import timezone

import pytest

from restfiles.exceptions import (
    ConflictError,
    InvalidPathError,
    NotFoundError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from restfiles.services import (
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


class TestClassifier:
    def test_known_extension(self):
        assert is_text_extension(".txt", {".txt"}) is True

    def test_case_sensitive(self):
        assert is_text_extension(".TXT", {".txt"}) is False

    def test_requires_leading_dot(self):
        assert is_text_extension("txt", {".txt"}) is False

    def test_empty_extension(self):
        assert is_text_extension("", {".txt"}) is False


class TestExistence:
    def test_file(self, root_dir):
        found = check_existence(root_dir / "notes.txt")
        assert found.exists is True
        assert found.is_directory is False

    def test_directory(self, root_dir):
        found = check_existence(root_dir / "docs")
        assert found.exists is True
        assert found.is_directory is True

    def test_missing(self, root_dir):
        found = check_existence(root_dir / "missing.txt")
        assert found.exists is False

    def test_below_a_file(self, root_dir):
        assert check_existence(root_dir / "notes.txt" / "x").exists is False

    def test_overlong_name(self, root_dir):
        found = check_existence(root_dir / ("n" * 300))
        assert found.exists is False
        assert found.stat_result is None

    def test_carries_stat(self, root_dir):
        found = check_existence(root_dir / "notes.txt")
        assert found.stat_result is not None
        assert found.stat_result.st_size == 5


class TestListing:
    def test_folders_and_files(self, root_dir, ctx):
        listing = list_directory(root_dir, ctx)
        assert sorted(f.name for f in listing.folders) == ["docs"]
        assert sorted(f.name for f in listing.files) == ["image.png", "notes.txt"]

    def test_excluded_directory_hidden(self, root_dir, ctx):
        listing = list_directory(root_dir, ctx)
        assert ".git" not in [f.name for f in listing.folders]

    def test_excluded_directory_files_still_accessible(self, root_dir, ctx):
        entry = read_file(root_dir / ".git" / "HEAD", ctx)
        assert entry.name == "HEAD"

    def test_file_count_is_non_recursive(self, root_dir, ctx):
        (root_dir / "docs" / "nested" / "deep.txt").write_text("x")
        listing = list_directory(root_dir, ctx)
        docs = next(f for f in listing.folders if f.name == "docs")
        assert docs.file_count == 2

    def test_file_entries(self, root_dir, ctx):
        listing = list_directory(root_dir, ctx)
        by_name = {f.name: f for f in listing.files}
        notes = by_name["notes.txt"]
        assert notes.extension == ".txt"
        assert notes.size_bytes == 5
        assert notes.is_text is True
        assert notes.contents is None
        assert notes.modified_at.tzinfo == timezone.utc
        assert by_name["image.png"].is_text is False

    def test_files_never_excluded(self, root_dir, ctx):
        (root_dir / ".git.txt").write_text("x")
        (root_dir / "_svn").write_text("x")
        listing = list_directory(root_dir, ctx)
        names = [f.name for f in listing.files]
        assert ".git.txt" in names
        assert "_svn" in names

    def test_missing_directory(self, root_dir, ctx):
        with pytest.raises(NotFoundError):
            list_directory(root_dir / "nope", ctx)

    def test_file_is_not_a_directory(self, root_dir, ctx):
        with pytest.raises(NotFoundError):
            list_directory(root_dir / "notes.txt", ctx)


class TestRead:
    def test_text_has_contents(self, root_dir, ctx):
        entry = read_file(root_dir / "notes.txt", ctx)
        assert entry.is_text is True
        assert entry.contents == "hello"

    def test_binary_has_no_contents(self, root_dir, ctx):
        entry = read_file(root_dir / "image.png", ctx)
        assert entry.is_text is False
        assert entry.contents is None
        assert entry.size_bytes == 10

    def test_missing(self, root_dir, ctx):
        with pytest.raises(NotFoundError):
            read_file(root_dir / "missing.txt", ctx)

    def test_download_binary(self, root_dir):
        target = read_for_download(root_dir / "image.png")
        assert target.filename == "image.png"
        assert target.media_type == "image/png"
        assert target.size_bytes == 10

    def test_download_unknown_type(self, root_dir):
        (root_dir / "blob.zzqq").write_bytes(b"\x00\x01")
        assert read_for_download(root_dir / "blob.zzqq").media_type == "application/octet-stream"


class TestWrite:
    def test_round_trip(self, root_dir, ctx):
        write_file(root_dir / "notes.txt", "world", ctx)
        assert read_file(root_dir / "notes.txt", ctx).contents == "world"

    def test_preserves_line_endings(self, root_dir, ctx):
        text = "line one\r\nline two\nüñí\n"
        write_file(root_dir / "notes.txt", text, ctx)
        assert read_file(root_dir / "notes.txt", ctx).contents == text

    def test_overwrites_fully(self, root_dir, ctx):
        write_file(root_dir / "notes.txt", "a", ctx)
        assert (root_dir / "notes.txt").read_text(encoding="utf-8") == "a"

    def test_empty_string_is_valid(self, root_dir, ctx):
        write_file(root_dir / "notes.txt", "", ctx)
        assert (root_dir / "notes.txt").read_bytes() == b""

    @pytest.mark.parametrize("contents", ["text", "", None])
    def test_binary_rejected(self, root_dir, ctx, contents):
        with pytest.raises(UnsupportedMediaTypeError):
            write_file(root_dir / "image.png", contents, ctx)
        assert (root_dir / "image.png").read_bytes().startswith(b"\x89PNG")

    def test_missing_contents(self, root_dir, ctx):
        with pytest.raises(ValidationError):
            write_file(root_dir / "notes.txt", None, ctx)
        assert (root_dir / "notes.txt").read_text() == "hello"

    def test_missing_file(self, root_dir, ctx):
        with pytest.raises(NotFoundError):
            write_file(root_dir / "new.txt", "x", ctx)
        assert not (root_dir / "new.txt").exists()

    def test_directory_is_not_writable(self, root_dir, ctx):
        with pytest.raises(NotFoundError):
            write_file(root_dir / "docs", "x", ctx)


class TestDelete:
    def test_delete(self, root_dir):
        delete_file(root_dir / "notes.txt")
        assert check_existence(root_dir / "notes.txt").exists is False

    def test_delete_missing(self, root_dir):
        with pytest.raises(NotFoundError):
            delete_file(root_dir / "missing.txt")

    def test_directory_not_deleted(self, root_dir):
        with pytest.raises(NotFoundError):
            delete_file(root_dir / "docs")
        assert (root_dir / "docs").is_dir()


def _upload(name: str, data: bytes) -> UploadedFile:
    return UploadedFile(filename=name, stream=io.BytesIO(data))


class TestUpload:
    def test_creates_directory(self, root_dir, ctx):
        written = create_upload(root_dir / "uploads", [_upload("a.txt", b"abc")])
        assert written == [root_dir / "uploads" / "a.txt"]
        assert (root_dir / "uploads" / "a.txt").read_bytes() == b"abc"
        listing = list_directory(root_dir / "uploads", ctx)
        assert [f.name for f in listing.files] == ["a.txt"]

    def test_creates_intermediate_directories(self, root_dir):
        create_upload(root_dir / "x" / "y" / "z", [_upload("b.bin", b"\x00")])
        assert (root_dir / "x" / "y" / "z" / "b.bin").exists()

    def test_into_existing_directory(self, root_dir):
        create_upload(root_dir / "docs", [_upload("new.md", b"new")])
        assert (root_dir / "docs" / "new.md").read_bytes() == b"new"

    def test_same_name_overwritten(self, root_dir):
        create_upload(root_dir / "docs", [_upload("readme.md", b"replaced")])
        assert (root_dir / "docs" / "readme.md").read_bytes() == b"replaced"

    def test_multiple_files(self, root_dir):
        create_upload(root_dir, [_upload("one.txt", b"1"), _upload("two.png", b"2")])
        assert (root_dir / "one.txt").read_bytes() == b"1"
        assert (root_dir / "two.png").read_bytes() == b"2"

    def test_no_files_still_creates_directory(self, root_dir):
        assert create_upload(root_dir / "empty", []) == []
        assert (root_dir / "empty").is_dir()

    def test_target_is_file(self, root_dir):
        with pytest.raises(ConflictError):
            create_upload(root_dir / "notes.txt", [_upload("a.txt", b"x")])
        assert (root_dir / "notes.txt").read_text() == "hello"

    def test_file_in_the_way(self, root_dir):
        with pytest.raises(ConflictError):
            create_upload(root_dir / "notes.txt" / "sub", [_upload("a.txt", b"x")])

    def test_name_collides_with_directory(self, root_dir):
        with pytest.raises(ConflictError):
            create_upload(root_dir, [_upload("docs", b"x")])
        assert (root_dir / "docs").is_dir()

    def test_overlong_file_name(self, root_dir):
        with pytest.raises(InvalidPathError):
            create_upload(root_dir / "docs", [_upload("f" * 300 + ".txt", b"x")])

    def test_overlong_directory_name(self, root_dir):
        with pytest.raises(InvalidPathError):
            create_upload(root_dir / ("d" * 300), [_upload("a.txt", b"x")])

    @pytest.mark.parametrize("name", ["../escape.txt", "a/b.txt", "..", ""])
    def test_unsafe_name_writes_nothing(self, root_dir, name):
        with pytest.raises(InvalidPathError):
            create_upload(root_dir / "up", [_upload("ok.txt", b"x"), _upload(name, b"x")])
        assert not (root_dir / "up").exists()
        assert not (root_dir.parent / "escape.txt").exists()
