import os

import pytest

from netlab.fileio import descriptor_numbers, main, open_created, read_message, write_message


def test_descriptor_numbers_are_standard():
    assert descriptor_numbers() == (0, 1, 2)


def test_open_created_creates_and_closes(tmp_path):
    target = tmp_path / "a.txt"
    assert not target.exists()
    with open_created(target) as fd:
        assert fd >= 0
        assert os.fstat(fd).st_size == 0
    assert target.exists()
    with pytest.raises(OSError):
        os.fstat(fd)


def test_write_then_read_round_trip(tmp_path):
    target = tmp_path / "hello.txt"
    written = write_message(target, "Hello socket\n")
    assert written == len("Hello socket\n".encode()) + 1
    assert read_message(target, 20) == "Hello socket\n"


def test_default_message_round_trip(tmp_path):
    target = tmp_path / "hello.txt"
    write_message(target)
    assert read_message(target) == "Hello socket\n"


def test_read_is_limited_by_size(tmp_path):
    target = tmp_path / "hello.txt"
    write_message(target, "Hello socket\n")
    assert read_message(target, 5) == "Hello"


def test_write_does_not_truncate(tmp_path):
    target = tmp_path / "data.txt"
    write_message(target, "abcdef")
    write_message(target, "xy")
    assert target.read_bytes() == b"xy\x00def\x00"
    assert read_message(target) == "xy"


def test_read_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_message(tmp_path / "missing.txt")


def test_main_prints_greeting(capsys):
    assert main([]) == 0
    assert capsys.readouterr().out == "Hello, Socket\n"