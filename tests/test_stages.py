"""
Unit tests for pipeline stages: size grouping, partial/full hashing and
byte verification.
"""
import filecmp
import os
import pytest
from dupscan.core.stages import SizeStageImpl, PartialHashStage, FullHashStage, VerifyStage
from dupscan.core.grouper import FileGrouperImpl
from dupscan.core.models import FileRecord, CandidateGroup, DuplicateSet, SkipReason, Stage


def _write(path, content: bytes) -> FileRecord:
    path.write_bytes(content)
    return FileRecord(path=str(path), size=len(content))


class TestSizeStage:
    def test_keeps_only_shared_sizes(self):
        files = [
            FileRecord(path="/a", size=5),
            FileRecord(path="/b", size=5),
            FileRecord(path="/c", size=10),
        ]
        groups = SizeStageImpl(FileGrouperImpl()).process(files)

        assert len(groups) == 1
        assert groups[0].size == 5
        assert [f.path for f in groups[0].files] == ["/a", "/b"]

    def test_empty_input_still_reports_progress(self):
        calls = []
        stage = SizeStageImpl(FileGrouperImpl(), observers=[lambda *args: calls.append(args)])
        assert stage.process([]) == []
        assert calls == [(Stage.SIZE.value, 0, 0, 0.0)]


class TestPartialHashStage:
    def test_prunes_same_size_different_prefix(self, tmp_path):
        group = CandidateGroup(size=5, files=[
            _write(tmp_path / "a.txt", b"hello"),
            _write(tmp_path / "b.txt", b"hello"),
            _write(tmp_path / "c.txt", b"world"),
        ])
        groups, skips = PartialHashStage(FileGrouperImpl()).process([group])

        assert skips == []
        assert len(groups) == 1
        assert [f.name for f in groups[0].files] == ["a.txt", "b.txt"]

    def test_missing_file_becomes_hash_failure(self, tmp_path):
        a = _write(tmp_path / "a.txt", b"hello")
        b = _write(tmp_path / "b.txt", b"hello")
        gone = _write(tmp_path / "gone.txt", b"hello")
        (tmp_path / "gone.txt").unlink()

        groups, skips = PartialHashStage(FileGrouperImpl()).process([CandidateGroup(5, [a, b, gone])])

        assert [f.path for f in groups[0].files] == [a.path, b.path]
        assert [(s.path, s.reason) for s in skips] == [(gone.path, SkipReason.HASH_FAILURE)]

    def test_reports_progress_per_file(self, tmp_path):
        files = [_write(tmp_path / f"{i}.bin", b"x" * 10) for i in range(4)]
        calls = []
        stage = PartialHashStage(FileGrouperImpl(), observers=[lambda *a: calls.append(a)],
                                 progress_interval=2)
        stage.process([CandidateGroup(10, files)])

        assert [(c[0], c[1], c[2]) for c in calls] == [
            (Stage.PARTIAL.value, 2, 4),
            (Stage.PARTIAL.value, 4, 4),
        ]


class TestFullHashStage:
    def test_confirms_duplicates_after_shared_prefix(self, tmp_path):
        """Files sharing their first 16 KiB are only separated by the full hash."""
        prefix = b"P" * 16384
        same1 = _write(tmp_path / "same1.bin", prefix + b"tail")
        same2 = _write(tmp_path / "same2.bin", prefix + b"tail")
        other = _write(tmp_path / "other.bin", prefix + b"TAIL")

        candidates, _ = PartialHashStage(FileGrouperImpl()).process(
            [CandidateGroup(same1.size, [same1, same2, other])])
        assert len(candidates[0].files) == 3

        sets, skips = FullHashStage(FileGrouperImpl()).process(candidates)

        assert skips == []
        assert len(sets) == 1
        assert isinstance(sets[0], DuplicateSet)
        assert sets[0].sorted_paths() == [same1.path, same2.path]
        assert sets[0].content_hash == same1.full_hash.hex()
        assert len(sets[0].content_hash) == 32

    def test_empty_input(self):
        assert FullHashStage(FileGrouperImpl()).process([]) == ([], [])


class TestVerifyStage:
    def test_identical_set_passes_unchanged(self, tmp_path):
        files = [_write(tmp_path / n, b"same bytes") for n in ("a", "b", "c")]
        dup_set = DuplicateSet(content_hash="ff", size=10, files=files)

        sets, skips = VerifyStage(FileGrouperImpl()).process([dup_set])

        assert skips == []
        assert len(sets) == 1
        assert sets[0].sorted_paths() == [f.path for f in files]

    def test_splits_hash_collision(self, tmp_path):
        """Members that only share a hash but differ in content are separated."""
        a1 = _write(tmp_path / "a1", b"AAAA")
        a2 = _write(tmp_path / "a2", b"AAAA")
        b1 = _write(tmp_path / "b1", b"BBBB")
        b2 = _write(tmp_path / "b2", b"BBBB")
        lone = _write(tmp_path / "c1", b"CCCC")
        dup_set = DuplicateSet(content_hash="collision", size=4, files=[a1, b1, lone, a2, b2])

        sets, skips = VerifyStage(FileGrouperImpl()).process([dup_set])

        assert skips == []
        assert sorted(s.sorted_paths() for s in sets) == [[a1.path, a2.path], [b1.path, b2.path]]
        assert all(s.content_hash == "collision" for s in sets)

    def test_set_dissolves_when_nothing_matches(self, tmp_path):
        x = _write(tmp_path / "x", b"1111")
        y = _write(tmp_path / "y", b"2222")
        sets, _ = VerifyStage(FileGrouperImpl()).process([DuplicateSet("h", 4, [x, y])])
        assert sets == []

    def test_unreadable_member_logged(self, tmp_path):
        a = _write(tmp_path / "a", b"data")
        b = _write(tmp_path / "b", b"data")
        gone = _write(tmp_path / "gone", b"data")
        (tmp_path / "gone").unlink()

        sets, skips = VerifyStage(FileGrouperImpl()).process([DuplicateSet("h", 4, [a, gone, b])])

        assert sets[0].sorted_paths() == [a.path, b.path]
        assert len(skips) == 1
        assert skips[0].path == gone.path
        assert skips[0].reason == SkipReason.HASH_FAILURE
        assert skips[0].detail.startswith("byte comparison failed")

    def test_head_removed_mid_comparison_is_blamed(self, tmp_path, monkeypatch):
        """When the first member of a bucket vanishes, it is skipped instead of the file compared to it."""
        a = _write(tmp_path / "a", b"data")
        b = _write(tmp_path / "b", b"data")
        c = _write(tmp_path / "c", b"data")
        original_cmp = filecmp.cmp
        calls = []

        def cmp_removing_head(f1, f2, shallow=True):
            if not calls:
                os.remove(f1)
            calls.append((f1, f2))
            return original_cmp(f1, f2, shallow=shallow)

        monkeypatch.setattr(filecmp, "cmp", cmp_removing_head)
        sets, skips = VerifyStage(FileGrouperImpl()).process([DuplicateSet("h", 4, [a, b, c])])

        assert [s.sorted_paths() for s in sets] == [[b.path, c.path]]
        assert [s.path for s in skips] == [a.path]
        assert skips[0].reason == SkipReason.HASH_FAILURE


@pytest.mark.parametrize("stage_cls, expected", [
    (SizeStageImpl, "Size grouping"),
    (PartialHashStage, "Partial Hash"),
    (FullHashStage, "Full Hash"),
    (VerifyStage, "Byte Verify"),
])
def test_stage_names(stage_cls, expected):
    assert stage_cls(FileGrouperImpl()).get_stage_name() == expected
