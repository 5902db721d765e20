"""
Unit tests for HasherImpl.
Verifies the 16 KiB prefix fingerprint, streamed full hashing, caching and
read-failure reporting.
"""
import pytest
import xxhash
from dupscan.core.hasher import (
    HasherImpl, XXHashAlgorithmImpl, XXH128AlgorithmImpl, HashComputationError)
from dupscan.core.models import FileRecord, ScanConfig


def _record(path, content: bytes) -> FileRecord:
    path.write_bytes(content)
    return FileRecord(path=str(path), size=len(content))


class TestPartialHash:
    def test_partial_hash_covers_only_prefix(self, tmp_path):
        """Files sharing the first 16384 bytes get the same partial hash."""
        prefix = bytes(range(256)) * 64  # 16384 bytes
        assert len(prefix) == ScanConfig.PARTIAL_HASH_SIZE
        file1 = _record(tmp_path / "one.bin", prefix + b"tail-1")
        file2 = _record(tmp_path / "two.bin", prefix + b"tail-2")

        hasher = HasherImpl()
        assert hasher.compute_partial_hash(file1) == hasher.compute_partial_hash(file2)
        assert hasher.compute_partial_hash(file1) == xxhash.xxh64(prefix).digest()

    def test_partial_hash_of_small_file_covers_whole_file(self, tmp_path):
        record = _record(tmp_path / "small.txt", b"hello")
        assert HasherImpl().compute_partial_hash(record) == xxhash.xxh64(b"hello").digest()

    def test_different_prefix_produces_different_partial_hash(self, tmp_path):
        file1 = _record(tmp_path / "one.bin", b"A" + b"x" * 20000)
        file2 = _record(tmp_path / "two.bin", b"B" + b"x" * 20000)
        hasher = HasherImpl()
        assert hasher.compute_partial_hash(file1) != hasher.compute_partial_hash(file2)

    def test_partial_hash_cached(self, tmp_path):
        record = _record(tmp_path / "cached.txt", b"content")
        hasher = HasherImpl()
        first = hasher.compute_partial_hash(record)
        assert record.hashes.partial == first

        # Removing the file proves the second call does no I/O
        (tmp_path / "cached.txt").unlink()
        assert hasher.compute_partial_hash(record) == first


class TestFullHash:
    def test_same_content_produces_same_full_hash(self, tmp_path):
        content = b"test content " * 1000
        file1 = _record(tmp_path / "a.bin", content)
        file2 = _record(tmp_path / "b.bin", content)

        hasher = HasherImpl()
        hash1 = hasher.compute_full_hash(file1)
        hash2 = hasher.compute_full_hash(file2)

        assert hash1 == hash2
        assert len(hash1) == 16  # XXH3-128 = 16 bytes
        assert file1.full_hash == hash1

    def test_streamed_hash_matches_one_shot_hash(self, tmp_path):
        """Chunked reading must not change the digest."""
        content = bytes(range(256)) * 100
        record = _record(tmp_path / "stream.bin", content)
        hasher = HasherImpl(chunk_size=7)
        assert hasher.compute_full_hash(record) == xxhash.xxh3_128(content).digest()

    def test_different_content_produces_different_hashes(self, tmp_path):
        file1 = _record(tmp_path / "a.bin", b"A" * 1024)
        file2 = _record(tmp_path / "b.bin", b"B" * 1024)
        hasher = HasherImpl()
        assert hasher.compute_full_hash(file1) != hasher.compute_full_hash(file2)

    def test_empty_file_hashes(self, tmp_path):
        record = _record(tmp_path / "empty", b"")
        assert HasherImpl().compute_full_hash(record) == xxhash.xxh3_128(b"").digest()


class TestAlgorithms:
    def test_algorithms_return_fresh_states(self):
        for algorithm in (XXHashAlgorithmImpl(), XXH128AlgorithmImpl()):
            state1 = algorithm.new()
            state1.update(b"data")
            state2 = algorithm.new()
            assert state1.digest() != state2.digest()

    def test_custom_algorithm_is_used(self, tmp_path):
        import hashlib

        class Sha256Algorithm:
            def new(self):
                return hashlib.sha256()

        record = _record(tmp_path / "x.bin", b"payload")
        hasher = HasherImpl(full_algorithm=Sha256Algorithm())
        assert hasher.compute_full_hash(record) == hashlib.sha256(b"payload").digest()


class TestReadFailures:
    def test_missing_file_raises_hash_computation_error(self, tmp_path):
        """A file deleted after walking must surface as HashComputationError, not OSError."""
        record = _record(tmp_path / "gone.txt", b"content")
        (tmp_path / "gone.txt").unlink()

        hasher = HasherImpl()
        with pytest.raises(HashComputationError) as excinfo:
            hasher.compute_partial_hash(record)
        assert excinfo.value.path == record.path

        with pytest.raises(HashComputationError):
            hasher.compute_full_hash(record)
        assert record.hashes.full is None

    def test_directory_instead_of_file(self, tmp_path):
        record = FileRecord(path=str(tmp_path), size=0)
        with pytest.raises(HashComputationError):
            HasherImpl().compute_full_hash(record)
