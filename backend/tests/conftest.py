"""Test fixtures — temporary sandbox root and FastAPI test client."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from restfiles.api.deps import get_root_context
from restfiles.config import RootContext
from restfiles.main import create_app

TEXT_EXTENSIONS = frozenset({".txt", ".md", ".py"})
EXCLUDED = frozenset({".git", "_svn"})


@pytest.fixture
def root_dir(tmp_path):
    """Sandbox root with a small tree of folders and files."""
    root = tmp_path / "files"
    root.mkdir()
    (root / "notes.txt").write_text("hello", encoding="utf-8")
    (root / "image.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00")
    docs = root / "docs"
    docs.mkdir()
    (docs / "readme.md").write_text("# Docs\n", encoding="utf-8")
    (docs / "guide.md").write_text("guide", encoding="utf-8")
    (docs / "nested").mkdir()
    git = root / ".git"
    git.mkdir()
    (git / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
    return root


@pytest.fixture
def ctx(root_dir):
    return RootContext(
        root_directory=root_dir,
        excluded_directories=EXCLUDED,
        text_file_extensions=TEXT_EXTENSIONS,
    )


@pytest_asyncio.fixture
async def client(ctx):
    """Async test client bound to the temporary sandbox root."""
    app = create_app()
    app.dependency_overrides[get_root_context] = lambda: ctx

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
