import argparse
import sys

import pytest

from critscore.outfile import NamedWriter, Opener, OutputError, define_flags, open_output


def make_opener():
    parser = argparse.ArgumentParser(exit_on_error=False)
    opener = Opener(parser, "out", "force", "append", "FILE")
    return parser, opener


def test_force_flag_defined():
    parser, _ = make_opener()
    assert parser.parse_args(["-force"]).force is True


def test_append_flag_defined():
    parser, _ = make_opener()
    assert parser.parse_args(["-append"]).append is True


def test_open_stdout():
    parser, opener = make_opener()
    assert opener.open(parser.parse_args([])) is sys.stdout


def test_open_bucket_url():
    parser, opener = make_opener()
    ns = parser.parse_args(["-force", "-out=mem://bucket/prefix"])
    with opener.open(ns) as out:
        assert isinstance(out, NamedWriter)
        assert out.name == "mem://bucket/prefix"
        assert out.write("data") == 4
    assert out.closed


def test_open_bucket_url_no_force_flag():
    parser, opener = make_opener()
    ns = parser.parse_args(["-out=mem://bucket/prefix"])
    with pytest.raises(OutputError):
        opener.open(ns)


def test_open_bucket_url_with_append_flag():
    parser, opener = make_opener()
    ns = parser.parse_args(["-force", "-append", "-out=mem://bucket/prefix"])
    with pytest.raises(OutputError):
        opener.open(ns)


def test_open_bucket_unsupported_scheme():
    parser, opener = make_opener()
    ns = parser.parse_args(["-force", "-out=nosuch://bucket/prefix"])
    with pytest.raises(OutputError):
        opener.open(ns)


def test_open_file_url_writes_content(tmp_path):
    target = tmp_path / "sub" / "out.txt"
    parser, opener = make_opener()
    ns = parser.parse_args(["-force", f"-out={target.as_uri()}"])
    with opener.open(ns) as out:
        out.write("hello")
    assert target.read_text(encoding="utf-8") == "hello"


@pytest.mark.parametrize(
    "args,expected",
    [
        ([], "new"),
        (["-append"], "oldnew"),
        (["-force"], "new"),
        (["-force", "-append"], "oldnew"),
    ],
)
def test_open_modes_with_existing_file(tmp_path, monkeypatch, args, expected):
    monkeypatch.chdir(tmp_path)
    parser, opener = make_opener()
    if args:
        (tmp_path / "testfile").write_text("old", encoding="utf-8")
    ns = parser.parse_args(args + ["-out=testfile"])
    with opener.open(ns) as out:
        assert out.name == "testfile"
        out.write("new")
    assert (tmp_path / "testfile").read_text(encoding="utf-8") == expected


def test_open_without_flags_refuses_existing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "testfile").write_text("old", encoding="utf-8")
    parser, opener = make_opener()
    with pytest.raises(FileExistsError):
        opener.open(parser.parse_args(["-out=testfile"]))
    assert (tmp_path / "testfile").read_text(encoding="utf-8") == "old"


@pytest.mark.parametrize("args", [[], ["-append"], ["-force"], ["-force", "-append"]])
def test_open_error(tmp_path, args):
    parser, opener = make_opener()
    missing = tmp_path / "missing-dir" / "testfile"
    ns = parser.parse_args(args + [f"-out={missing}"])
    with pytest.raises(FileNotFoundError):
        opener.open(ns)


def test_filename_transform(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    parser, opener = make_opener()
    opener.filename_transform = lambda name: f"prefix-{name}-suffix"
    with opener.open(parser.parse_args(["-out=testfile"])) as out:
        assert out.name == "prefix-testfile-suffix"
        out.write("x")
    assert (tmp_path / "prefix-testfile-suffix").read_text(encoding="utf-8") == "x"


def test_define_flags_and_open_output(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    parser = argparse.ArgumentParser(exit_on_error=False)
    define_flags(parser, "out", "force", "append", "FILE")
    with open_output(parser.parse_args(["-out=result.txt"])) as out:
        assert out.name == "result.txt"
        out.write("value")
    assert (tmp_path / "result.txt").read_text(encoding="utf-8") == "value"