from __future__ import annotations

import errno

import pytest

from tinypath import (
    EncodingError,
    InvalidArgument,
    IoError,
    KindError,
    NotFound,
    ResourceReleased,
    TinyPathError,
    TreeError,
)


def test_hierarchy():
    for cls in (InvalidArgument, IoError, NotFound, EncodingError, KindError, TreeError, ResourceReleased):
        assert issubclass(cls, TinyPathError)
    for cls in (NotFound, EncodingError, KindError, TreeError):
        assert issubclass(cls, IoError)
    assert issubclass(IoError, OSError)
    assert issubclass(InvalidArgument, ValueError)
    assert issubclass(ResourceReleased, RuntimeError)


def test_io_error_message_and_fields():
    cause = PermissionError(errno.EACCES, "Permission denied")
    err = IoError("spew", "/tmp/x", cause)
    assert str(err) == "Error spew on '/tmp/x': Permission denied"
    assert err.op == "spew"
    assert err.path == "/tmp/x"
    assert err.err is cause
    assert err.errno == errno.EACCES


def test_explicit_message():
    err = KindError("remove", "/d", message="is a directory")
    assert str(err) == "Error remove on '/d': is a directory"
    assert err.errno is None


@pytest.mark.parametrize(
    "exc,expected",
    [
        (FileNotFoundError(errno.ENOENT, "No such file or directory"), NotFound),
        (OSError(errno.ENOENT, "No such file or directory"), NotFound),
        (IsADirectoryError(errno.EISDIR, "Is a directory"), KindError),
        (NotADirectoryError(errno.ENOTDIR, "Not a directory"), KindError),
        (PermissionError(errno.EACCES, "Permission denied"), IoError),
    ],
)
def test_from_os_error(exc, expected):
    err = IoError.from_os_error("stat", "p", exc)
    assert type(err) is expected
    assert err.err is exc


def test_encoding_error_from_unicode_error():
    try:
        b"\xff".decode("utf-8")
    except UnicodeDecodeError as e:
        err = EncodingError.from_unicode_error("slurp", "f.txt", e)
    assert "can't decode" in str(err)
    assert err.op == "slurp"


def test_tree_error_summary():
    failures = [("a", PermissionError(errno.EACCES, "Permission denied"))]
    one = TreeError("remove_tree", "root", failures, done=3)
    assert str(one) == "Error remove_tree on 'root': 1 entry failed"
    assert one.done == 3
    assert one.errno == errno.EACCES
    two = TreeError("mkpath", "root", failures * 2)
    assert "2 entries failed" in str(two)
