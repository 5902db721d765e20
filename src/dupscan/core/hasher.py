"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hasher.py
Implements file hashing using FileRecord objects and pluggable hash algorithms.

HasherImpl computes a prefix fingerprint and a streamed full-content hash,
caching results in the record's FileHashes container. Read failures raise
HashComputationError so stages can log the file and move on.
"""

import xxhash
from dupscan.core.models import FileRecord, ScanConfig
from dupscan.core.interfaces import Hasher, HashAlgorithm


class HashComputationError(RuntimeError):
    """A file could not be read while computing one of its hashes."""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


# Use the same way to implement and use any other hashing algorithm
class XXHashAlgorithmImpl(HashAlgorithm):
    """64-bit xxHash. Fast enough for throwaway prefix fingerprints."""
    def new(self):
        return xxhash.xxh64()


class XXH128AlgorithmImpl(HashAlgorithm):
    """128-bit XXH3. Used for the authoritative full-content hash."""
    def new(self):
        return xxhash.xxh3_128()


class HasherImpl(Hasher):
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    The partial and full hashes may use different algorithms.
    """

    def __init__(
        self,
        partial_algorithm: HashAlgorithm = None,
        full_algorithm: HashAlgorithm = None,
        partial_size: int = ScanConfig.PARTIAL_HASH_SIZE,
        chunk_size: int = ScanConfig.READ_CHUNK_SIZE,
    ):
        self.partial_algorithm = partial_algorithm or XXHashAlgorithmImpl()
        self.full_algorithm = full_algorithm or XXH128AlgorithmImpl()
        self.partial_size = partial_size
        self.chunk_size = chunk_size

    def compute_partial_hash(self, file: FileRecord) -> bytes:
        """Computes and caches hash of the first `partial_size` bytes (whole file if smaller)."""
        if file.hashes.partial is not None:
            return file.hashes.partial
        state = self.partial_algorithm.new()
        try:
            with open(file.path, 'rb') as f:
                state.update(f.read(self.partial_size))
        except OSError as e:
            raise HashComputationError(file.path, f"partial read failed: {e}") from e
        result = state.digest()
        file.hashes.partial = result
        return result

    def compute_full_hash(self, file: FileRecord) -> bytes:
        """Computes and caches the hash of the entire file, streamed in chunks."""
        if file.hashes.full is not None:
            return file.hashes.full
        state = self.full_algorithm.new()
        try:
            with open(file.path, 'rb') as f:
                while True:
                    chunk = f.read(self.chunk_size)
                    if not chunk:
                        break
                    state.update(chunk)
        except OSError as e:
            raise HashComputationError(file.path, f"full read failed: {e}") from e
        result = state.digest()
        file.hashes.full = result
        return result
