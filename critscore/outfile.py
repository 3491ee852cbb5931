"""Opening of output destinations chosen by command-line flags.

An output is standard output, a local file, or an object in a blob store
addressed by a URL such as ``mem://bucket/key`` or ``file:///path/to/key``.
"""

from __future__ import annotations

import argparse
import io
import os
import sys
from pathlib import Path
from typing import IO, Callable, Optional, Union
from urllib.parse import unquote, urlsplit, urlunsplit

FilenameTransform = Callable[[str], str]

_MEMORY_BUCKETS: dict[str, dict[str, bytes]] = {}


class OutputError(Exception):
    """Raised when an output destination cannot be opened."""


class _BlobStream(io.StringIO):
    """Buffers text and hands the encoded bytes to a commit function on close."""

    def __init__(self, commit: Callable[[bytes], None]) -> None:
        super().__init__()
        self._commit = commit

    def close(self) -> None:
        if self.closed:
            return
        data = self.getvalue().encode("utf-8")
        super().close()
        self._commit(data)


class NamedWriter:
    """A writable text stream that carries a name identifying it."""

    def __init__(self, stream: IO[str], name: str) -> None:
        self._stream = stream
        self.name = name

    def write(self, data: str) -> int:
        """Write data to the underlying stream."""
        return self._stream.write(data)

    def flush(self) -> None:
        self._stream.flush()

    def close(self) -> None:
        """Close the underlying stream, committing any buffered data."""
        self._stream.close()

    @property
    def closed(self) -> bool:
        return self._stream.closed

    def __enter__(self) -> NamedWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _is_url(filename: str) -> bool:
    try:
        scheme = urlsplit(filename).scheme
    except ValueError:
        return False
    # A single letter is a drive letter, not a URL scheme.
    return len(scheme) > 1


def _bucket_committer(scheme: str, bucket: str, netloc: str, key: str) -> Callable[[bytes], None]:
    if scheme == "mem":
        store = _MEMORY_BUCKETS.setdefault(netloc, {})

        def commit(data: bytes) -> None:
            store[key] = data

        return commit
    if scheme == "file":
        root = Path("/") / unquote(netloc) if netloc else Path("/")
        target = root / unquote(key)

        def commit(data: bytes) -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        return commit
    raise OutputError(f"failed to open {bucket}: unsupported scheme {scheme!r}")


class Opener:
    """Defines output flags on a parser and opens the output they select."""

    def __init__(
        self,
        parser: argparse.ArgumentParser,
        file_flag: str,
        force_flag: str,
        append_flag: str,
        file_help_name: str,
    ) -> None:
        self.filename_transform: FilenameTransform = lambda name: name
        self.perm = 0o666
        self._force_flag = force_flag
        self._file_dest = file_flag.replace("-", "_")
        self._force_dest = force_flag.replace("-", "_")
        self._append_dest = append_flag.replace("-", "_")
        parser.add_argument(
            f"-{file_flag}",
            f"--{file_flag}",
            dest=self._file_dest,
            default="",
            metavar=file_help_name,
            help=f"use the file {file_help_name} for output. Defaults to stdout if not set.",
        )
        parser.add_argument(
            f"-{force_flag}",
            f"--{force_flag}",
            dest=self._force_dest,
            action="store_true",
            help=f"overwrites {file_help_name} if it already exists and -{append_flag} is not set.",
        )
        parser.add_argument(
            f"-{append_flag}",
            f"--{append_flag}",
            dest=self._append_dest,
            action="store_true",
            help=f"appends to {file_help_name} if it already exists.",
        )

    def _open_file(self, filename: str, extra_flags: int) -> NamedWriter:
        flags = os.O_WRONLY | os.O_CREAT | getattr(os, "O_SYNC", 0) | extra_flags
        fd = os.open(filename, flags, self.perm)
        stream = os.fdopen(fd, "w", encoding="utf-8", newline="")
        return NamedWriter(stream, filename)

    def _open_blob_store(self, url: str, force: bool, append: bool) -> NamedWriter:
        if append or not force:
            raise OutputError(f"blob store must use -{self._force_flag} flag")
        parts = urlsplit(url)
        key = parts.path.removeprefix("/")
        bucket = urlunsplit((parts.scheme, parts.netloc, "", parts.query, parts.fragment))
        commit = _bucket_committer(parts.scheme, bucket, parts.netloc, key)
        return NamedWriter(_BlobStream(commit), url)

    def open(self, namespace: argparse.Namespace) -> Union[NamedWriter, IO[str]]:
        """Open the output selected by the parsed flags in namespace.

        With no file set, standard output is returned. An existing file is
        appended to with the append flag, truncated with the force flag, and
        otherwise FileExistsError is raised. Blob store URLs need the force
        flag and no append flag.
        """
        filename = self.filename_transform(getattr(namespace, self._file_dest, "") or "")
        force = bool(getattr(namespace, self._force_dest, False))
        append = bool(getattr(namespace, self._append_dest, False))
        if not filename:
            return sys.stdout
        if _is_url(filename):
            return self._open_blob_store(filename, force, append)
        if append:
            return self._open_file(filename, os.O_APPEND)
        if force:
            return self._open_file(filename, os.O_TRUNC)
        return self._open_file(filename, os.O_EXCL)


_default_opener: Optional[Opener] = None


def define_flags(
    parser: argparse.ArgumentParser,
    file_flag: str,
    force_flag: str,
    append_flag: str,
    file_help_name: str,
) -> Opener:
    """Define the output flags on parser and make the result the default opener."""
    global _default_opener
    _default_opener = Opener(parser, file_flag, force_flag, append_flag, file_help_name)
    return _default_opener


def open_output(namespace: argparse.Namespace) -> Union[NamedWriter, IO[str]]:
    """Open the output using the default opener made by define_flags."""
    if _default_opener is None:
        raise OutputError("define_flags must be called before open_output")
    return _default_opener.open(namespace)