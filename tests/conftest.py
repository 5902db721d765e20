"""
Shared fixtures for dupscan tests.
Creates isolated temporary directories with controlled test files.
"""
import pytest
import tempfile
from pathlib import Path
from typing import Dict


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for duplicate scenarios:
    - 3 identical 1KB files of 'A' (two at top level, one in subdir/)
    - 2 identical 2KB files of 'B'
    - 2 unique files (different sizes)
    - 1 empty file
    - 1 .tmp file with the same size as the 'A' files but different content
    """
    files = {}

    # Duplicate group #1 (1KB of 'A')
    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    # Duplicate pair #2 (2KB of 'B')
    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.txt"
    files["dup2_b"] = temp_dir / "dup2_b.txt"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    # Unique files
    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)
    files["unique2"] = temp_dir / "unique2.txt"
    files["unique2"].write_bytes(b"D" * 2500)

    # Empty file (unique size 0)
    files["empty"] = temp_dir / "empty.txt"
    files["empty"].write_bytes(b"")

    # Same size as group #1, different content: pruned by the partial hash
    files["decoy"] = temp_dir / "ignore.tmp"
    files["decoy"].write_bytes(b"E" * 1024)

    # Subdirectory with duplicates
    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)  # Same as dup1_a/b

    return files


@pytest.fixture
def scenario_a(temp_dir) -> Path:
    """a.txt and b.txt share content, c.txt has the same size, d.bin is unique."""
    (temp_dir / "a.txt").write_bytes(b"hello")
    (temp_dir / "b.txt").write_bytes(b"hello")
    (temp_dir / "c.txt").write_bytes(b"world")
    (temp_dir / "d.bin").write_bytes(b"0123456789")
    return temp_dir


@pytest.fixture
def require_symlinks(tmp_path):
    """Skip the test where symlinks are unavailable (e.g., Windows without developer mode)."""
    link = tmp_path / ".symlink_check"
    try:
        link.symlink_to(tmp_path)
    except (OSError, NotImplementedError):
        pytest.skip("Symbolic links not supported on this platform")
    link.unlink()
