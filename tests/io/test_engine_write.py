"""Tests for spew/append/touch and the whole-file helpers."""

import os
import stat
import sys
import time

import pytest

from tinypath import EncodingError, InvalidArgument, IoError, KindError, NotFound, WriteOptions, path
from tinypath.io import engine
from tinypath.io.locking import lock_path_for

posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX semantics")


def _leftover_temps(directory):
    return [n for n in os.listdir(directory) if n.endswith(".tmp")]


class TestSpew:
    def test_creates_file(self, tmp_path):
        p = path(str(tmp_path), "new.txt")
        assert p.spew("hello") is True
        assert (tmp_path / "new.txt").read_text() == "hello"

    def test_replaces_content(self, tmp_path):
        (tmp_path / "f.txt").write_text("old old old")
        p = path(str(tmp_path), "f.txt")
        p.spew("new")
        assert p.slurp() == "new"

    def test_list_payload(self, tmp_path):
        p = path(str(tmp_path), "l.txt")
        p.spew(["a\n", "b\n"])
        assert p.lines(chomp=True) == ["a", "b"]

    def test_raw_and_utf8(self, tmp_path):
        p = path(str(tmp_path), "r.bin")
        p.spew_raw(b"\x00\x01")
        assert (tmp_path / "r.bin").read_bytes() == b"\x00\x01"
        q = path(str(tmp_path), "u.txt")
        q.spew_utf8("ünï\r\n")
        assert (tmp_path / "u.txt").read_bytes() == "ünï\r\n".encode("utf-8")

    def test_payload_type_must_match_binmode(self, tmp_path):
        p = path(str(tmp_path), "x")
        with pytest.raises(InvalidArgument):
            p.spew_raw("text")
        with pytest.raises(InvalidArgument):
            p.spew(b"bytes")
        with pytest.raises(InvalidArgument):
            p.spew(42)
        assert not p.exists()

    def test_unencodable_text_is_encoding_error(self, tmp_path):
        p = path(str(tmp_path), "bad.txt")
        with pytest.raises(EncodingError):
            p.spew_utf8("lone surrogate \udc80")
        assert not p.exists()
        assert _leftover_temps(tmp_path) == []

    def test_no_temp_files_left(self, tmp_path):
        p = path(str(tmp_path), "clean.txt")
        for i in range(3):
            p.spew(f"v{i}")
        assert _leftover_temps(tmp_path) == []
        assert p.slurp() == "v2"

    def test_directory_target_fails_fast(self, tmp_path):
        with pytest.raises(KindError):
            path(str(tmp_path)).spew("x")

    def test_missing_parent_is_not_found(self, tmp_path):
        with pytest.raises(NotFound):
            path(str(tmp_path), "no", "such", "f.txt").spew("x")

    def test_options_model_and_fsync_toggle(self, tmp_path, monkeypatch):
        synced = []
        real_fsync = os.fsync
        monkeypatch.setattr(os, "fsync", lambda fd: synced.append(fd) or real_fsync(fd))
        p = path(str(tmp_path), "s.txt")
        p.spew("a", WriteOptions(fsync=False))
        assert synced == []
        p.spew("b", fsync=True)
        assert len(synced) == 1

    @posix_only
    def test_preserves_mode(self, tmp_path):
        f = tmp_path / "m.txt"
        f.write_text("x")
        os.chmod(f, 0o640)
        path(str(f)).spew("y")
        assert stat.S_IMODE(os.stat(f).st_mode) == 0o640

    @posix_only
    def test_writes_through_symlink(self, tmp_path):
        target = tmp_path / "target.txt"
        target.write_text("old")
        link = tmp_path / "link.txt"
        link.symlink_to(target)
        path(str(link)).spew("new")
        assert link.is_symlink()
        assert target.read_text() == "new"


class TestSpewAtomicity:
    """A failure before the rename leaves the target untouched."""

    def _fail_replace(self, monkeypatch):
        def boom(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(os, "replace", boom)

    def test_existing_target_unchanged(self, tmp_path, monkeypatch):
        f = tmp_path / "keep.txt"
        f.write_text("original content")
        self._fail_replace(monkeypatch)
        with pytest.raises(IoError) as ei:
            path(str(f)).spew("replacement")
        assert ei.value.op == "spew"
        assert ei.value.errno == 28
        assert f.read_text() == "original content"
        assert _leftover_temps(tmp_path) == []

    def test_absent_target_stays_absent(self, tmp_path, monkeypatch):
        self._fail_replace(monkeypatch)
        with pytest.raises(IoError):
            path(str(tmp_path), "ghost.txt").spew("data")
        assert not (tmp_path / "ghost.txt").exists()
        assert _leftover_temps(tmp_path) == []

    def test_failure_during_write(self, tmp_path, monkeypatch):
        f = tmp_path / "w.txt"
        f.write_text("before")

        def broken_fsync(fd):
            raise OSError(5, "Input/output error")

        monkeypatch.setattr(os, "fsync", broken_fsync)
        with pytest.raises(IoError):
            path(str(f)).spew("after", fsync=True)
        assert f.read_text() == "before"
        assert _leftover_temps(tmp_path) == []

    def test_spew_holds_sidecar_lock_while_writing(self, tmp_path, monkeypatch):
        p = path(str(tmp_path), "locked.txt")
        lock = lock_path_for(p)
        seen = []
        real_replace = os.replace

        def watch(src, dst):
            seen.append(lock.exists())
            return real_replace(src, dst)

        monkeypatch.setattr(os, "replace", watch)
        p.spew("x")
        assert seen == [True]

    def test_spew_leaves_only_the_target(self, tmp_path):
        d = path(str(tmp_path))
        d.child("out.txt").spew("hello")
        d.child("out.txt").spew("again")
        assert [c.basename() for c in d.children()] == ["out.txt"]


class TestAppend:
    def test_appends(self, tmp_path):
        p = path(str(tmp_path), "log.txt")
        p.append("one\n")
        p.append(["two\n", "three\n"])
        assert p.lines(chomp=True) == ["one", "two", "three"]

    def test_append_raw_and_utf8(self, tmp_path):
        p = path(str(tmp_path), "a.bin")
        p.append_raw(b"\x01")
        p.append_raw(b"\x02")
        assert p.slurp_raw() == b"\x01\x02"
        q = path(str(tmp_path), "a.txt")
        q.append_utf8("é")
        q.append_utf8("è")
        assert q.slurp_utf8() == "éè"

    def test_takes_exclusive_lock(self, tmp_path, monkeypatch):
        calls = []
        real = engine.lock_fd

        def spy(fd, *, exclusive, op, path):
            calls.append((exclusive, op))
            return real(fd, exclusive=exclusive, op=op, path=path)

        monkeypatch.setattr(engine, "lock_fd", spy)
        path(str(tmp_path), "x.txt").append("x")
        assert calls == [(True, "append")]

    def test_directory_fails_fast(self, tmp_path):
        with pytest.raises(KindError):
            path(str(tmp_path)).append("x")


class TestTouch:
    def test_creates_empty_file(self, tmp_path):
        p = path(str(tmp_path), "t")
        assert p.touch() is p
        assert p.is_file() and p.size() == 0

    def test_sets_explicit_epoch(self, tmp_path):
        p = path(str(tmp_path), "t").touch()
        p.touch(1_000_000)
        assert int(p.stat().st_mtime) == 1_000_000
        assert int(p.stat().st_atime) == 1_000_000

    def test_updates_to_now(self, tmp_path):
        p = path(str(tmp_path), "t").touch(1_000_000)
        before = time.time()
        p.touch()
        assert p.stat().st_mtime >= before - 5

    def test_keeps_content(self, tmp_path):
        p = path(str(tmp_path), "t")
        p.spew("data")
        p.touch()
        assert p.slurp() == "data"

    def test_touchpath_creates_parents(self, tmp_path):
        p = path(str(tmp_path), "a", "b", "c.txt").touchpath()
        assert p.is_file()
        assert p.parent().is_dir()


class TestEdit:
    def test_edit(self, tmp_path):
        p = path(str(tmp_path), "e.txt")
        p.spew("hello world")
        p.edit(lambda s: s.replace("world", "there"))
        assert p.slurp() == "hello there"

    def test_edit_lines(self, tmp_path):
        p = path(str(tmp_path), "e.txt")
        p.spew("a\nb\nc\n")
        p.edit_lines(lambda line: line.upper())
        assert p.slurp() == "A\nB\nC\n"

    def test_edit_lines_can_drop_lines(self, tmp_path):
        p = path(str(tmp_path), "e.txt")
        p.spew_utf8("keep\ndrop\nkeep\n")
        p.edit_lines(lambda line: "" if line.startswith("drop") else line, binmode="utf8")
        assert p.slurp_utf8() == "keep\nkeep\n"


class TestWholeFile:
    def test_copy_to_file(self, tmp_path):
        src = path(str(tmp_path), "src.txt")
        src.spew("payload")
        dest = src.copy(path(str(tmp_path), "dest.txt"))
        assert dest.slurp() == "payload"
        assert src.has_same_bytes(dest)

    def test_copy_into_directory(self, tmp_path):
        src = path(str(tmp_path), "src.txt")
        src.spew("payload")
        d = path(str(tmp_path), "d")
        d.mkpath()
        dest = src.copy(d)
        assert dest == d.child("src.txt")
        assert dest.slurp() == "payload"

    def test_copy_onto_itself_keeps_content(self, tmp_path):
        src = path(str(tmp_path), "same.txt")
        src.spew("payload")
        with pytest.raises(InvalidArgument):
            src.copy(src)
        with pytest.raises(InvalidArgument):
            src.copy(str(tmp_path))
        assert src.slurp() == "payload"

    @posix_only
    def test_copy_onto_hardlink_keeps_content(self, tmp_path):
        src = path(str(tmp_path), "a.txt")
        src.spew("payload")
        os.link(src, tmp_path / "b.txt")
        with pytest.raises(InvalidArgument):
            src.copy(str(tmp_path / "b.txt"))
        assert src.slurp() == "payload"

    def test_move(self, tmp_path):
        src = path(str(tmp_path), "a.txt")
        src.spew("m")
        dest = src.move(str(tmp_path / "b.txt"))
        assert not src.exists()
        assert dest.slurp() == "m"

    def test_move_missing_is_not_found(self, tmp_path):
        with pytest.raises(NotFound):
            path(str(tmp_path), "none").move(str(tmp_path / "x"))

    def test_remove(self, tmp_path):
        p = path(str(tmp_path), "r.txt")
        p.spew("x")
        assert p.remove() is True
        assert p.remove() is False
        assert not p.exists()

    def test_remove_directory_fails_fast(self, tmp_path):
        with pytest.raises(KindError):
            path(str(tmp_path)).remove()

    def test_digest(self, tmp_path):
        p = path(str(tmp_path), "d.txt")
        p.spew_raw(b"abc")
        assert p.digest() == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        assert p.digest("md5") == "900150983cd24fb0d6963f7d28e17f72"
        with pytest.raises(InvalidArgument):
            p.digest("not-a-hash")

    def test_digest_reads_in_chunks(self, tmp_path, monkeypatch):
        from tinypath.config import defaults

        monkeypatch.setattr(defaults, "IO", defaults.IODefaults(chunk_size=2))
        p = path(str(tmp_path), "d.txt")
        p.spew_raw(b"abcde")
        assert p.digest("md5") == "ab56b4d92b40713acc5af89985d4b786"

    def test_has_same_bytes(self, tmp_path):
        a = path(str(tmp_path), "a")
        b = path(str(tmp_path), "b")
        c = path(str(tmp_path), "c")
        a.spew_raw(b"same")
        b.spew_raw(b"same")
        c.spew_raw(b"diff")
        assert a.has_same_bytes(b)
        assert a.has_same_bytes(a)
        assert not a.has_same_bytes(c)
        c.spew_raw(b"longer")
        assert not a.has_same_bytes(c)
        with pytest.raises(NotFound):
            a.has_same_bytes(path(str(tmp_path), "zzz"))


class TestOpenLocked:
    def test_write_then_read(self, tmp_path):
        p = path(str(tmp_path), "h.txt")
        with p.open_locked("w") as fh:
            fh.write("abc")
        with p.open_locked("r") as fh:
            assert fh.read() == "abc"

    def test_write_truncates_after_lock(self, tmp_path):
        p = path(str(tmp_path), "h.txt")
        p.spew("long old content")
        with p.open_locked("w") as fh:
            fh.write("new")
        assert p.slurp() == "new"

    def test_append_and_raw(self, tmp_path):
        p = path(str(tmp_path), "h.bin")
        with p.open_locked("a", binmode="raw") as fh:
            fh.write(b"1")
        with p.open_locked("a", binmode="raw") as fh:
            fh.write(b"2")
        assert p.slurp_raw() == b"12"

    def test_bad_mode(self, tmp_path):
        with pytest.raises(InvalidArgument):
            with path(str(tmp_path), "h").open_locked("rw"):
                pass
