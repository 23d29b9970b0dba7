# tests/utils/test_files.py
import io
import shutil

import pytest
from fastapi import UploadFile

from projectdocs.utils.files import delete_file, get_relative_path, safe_filename, save_upload_file


@pytest.fixture
def mock_upload_file():
    def _create_upload_file(filename: str, content: bytes):
        return UploadFile(filename=filename, file=io.BytesIO(content))
    return _create_upload_file


@pytest.mark.asyncio
async def test_save_upload_file(mock_upload_file, temp_storage_dir):
    """Test saving an uploaded file"""
    upload_file = mock_upload_file("test.txt", b"test file content")

    saved_path = await save_upload_file(upload_file, temp_storage_dir)

    assert saved_path.exists()
    assert saved_path.read_bytes() == b"test file content"
    assert saved_path.suffix == ".txt"


@pytest.mark.asyncio
async def test_save_upload_file_creates_directory(mock_upload_file, temp_storage_dir):
    """Test saving file creates directory if it doesn't exist"""
    new_dir = temp_storage_dir / "new_directory"
    if new_dir.exists():
        shutil.rmtree(new_dir)

    saved_path = await save_upload_file(mock_upload_file("test.txt", b"content"), new_dir)

    assert new_dir.exists()
    assert saved_path.read_bytes() == b"content"


@pytest.mark.asyncio
async def test_delete_file(temp_storage_dir):
    path = temp_storage_dir / "to_delete.txt"
    path.write_bytes(b"x")

    assert await delete_file(path) is True
    assert not path.exists()
    assert await delete_file(path) is False


def test_get_relative_path(temp_storage_dir):
    path = temp_storage_dir / "attachments" / "a.txt"
    assert get_relative_path(path, temp_storage_dir) == "attachments/a.txt"


@pytest.mark.parametrize("raw,expected", [
    ("report.pdf", "report.pdf"),
    ("../../etc/passwd", "passwd"),
    ("C:\\Users\\bob\\plan.dwg", "plan.dwg"),
    ("", "unnamed"),
    (None, "unnamed"),
])
def test_safe_filename(raw, expected):
    assert safe_filename(raw) == expected
