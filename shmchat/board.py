"""A message board shared between chat processes through a file.

The board lives in a single file inside a directory. Writers take an
exclusive lock on the file and readers a shared one, so any number of
readers may look at the board at once while a writer has it to itself.
"""

from __future__ import annotations

import fcntl
import os
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator

MAX_RECEIVERS = 10
MAX_CONTENT = 100
MAX_MESSAGES = 100

BOARD_FILENAME = "shmchat.board"

_END_OF_RECEIVERS = -1
_HEADER = struct.Struct("<i")
_RECORD = struct.Struct(f"<i{MAX_RECEIVERS}ii{MAX_CONTENT}s")
_BOARD_SIZE = _HEADER.size + MAX_MESSAGES * _RECORD.size


class BoardError(Exception):
    """Raised when the board cannot be created, opened or used."""


class BoardFullError(BoardError):
    """Raised when no slot is left on the board for another message."""


@dataclass(frozen=True)
class Message:
    """One message on the board."""

    sender_id: int
    receivers: tuple[int, ...]
    content: str

    def is_for(self, client_id: int) -> bool:
        """Tell whether ``client_id`` is among the message's receivers."""
        for receiver in self.receivers:
            if receiver == client_id:
                return True
            if receiver == _END_OF_RECEIVERS:
                break
        return False


def _board_path(directory: str | os.PathLike[str]) -> Path:
    return Path(directory) / BOARD_FILENAME


def _encode_content(content: str) -> bytes:
    text = content.split("\0", 1)[0]
    return text.encode("utf-8")[: MAX_CONTENT - 1]


def _decode_content(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="ignore")


class ChatBoard:
    """An open handle on a board file."""

    def __init__(self, path: Path, handle: BinaryIO) -> None:
        self.path = path
        self._file: BinaryIO | None = handle

    def _handle(self) -> BinaryIO:
        if self._file is None:
            raise BoardError("the board is closed")
        return self._file

    def _locked(self, mode: int) -> "_Lock":
        return _Lock(self._handle(), mode)

    def _read_last_index(self, handle: BinaryIO) -> int:
        handle.seek(0)
        data = handle.read(_HEADER.size)
        if len(data) != _HEADER.size:
            raise BoardError(f"board file {self.path} is damaged")
        return _HEADER.unpack(data)[0]

    def _read_records(self, handle: BinaryIO, first: int, last: int) -> Iterator[Message]:
        handle.seek(_HEADER.size + first * _RECORD.size)
        for _ in range(first, last + 1):
            data = handle.read(_RECORD.size)
            if len(data) != _RECORD.size:
                raise BoardError(f"board file {self.path} is damaged")
            fields = _RECORD.unpack(data)
            sender_id = fields[0]
            slots = fields[1 : 1 + MAX_RECEIVERS]
            num_recv = max(0, min(fields[1 + MAX_RECEIVERS], MAX_RECEIVERS))
            content = fields[2 + MAX_RECEIVERS]
            yield Message(sender_id, tuple(slots[:num_recv]), _decode_content(content))

    def post(self, sender_id: int, receivers, content: str) -> int:
        """Put a message on the board and return its index.

        Content longer than the slot allows is cut short.
        """
        receivers = tuple(int(r) for r in receivers)
        if not 1 <= len(receivers) <= MAX_RECEIVERS:
            raise ValueError(
                f"number of receivers must be between 1 and {MAX_RECEIVERS}"
            )
        slots = list(receivers) + [_END_OF_RECEIVERS] * (MAX_RECEIVERS - len(receivers))
        if len(receivers) < MAX_RECEIVERS:
            slots[len(receivers) + 1 :] = [0] * (MAX_RECEIVERS - len(receivers) - 1)
        record = _RECORD.pack(sender_id, *slots, len(receivers), _encode_content(content))

        with self._locked(fcntl.LOCK_EX) as handle:
            index = self._read_last_index(handle) + 1
            if index >= MAX_MESSAGES:
                raise BoardFullError("message buffer full, cannot send more messages")
            handle.seek(_HEADER.size + index * _RECORD.size)
            handle.write(record)
            handle.seek(0)
            handle.write(_HEADER.pack(index))
            handle.flush()
        return index

    def last_index(self) -> int:
        """Return the index of the newest message, or -1 if there is none."""
        with self._locked(fcntl.LOCK_SH) as handle:
            return self._read_last_index(handle)

    def read_since(self, out_idx: int) -> list[Message]:
        """Return every message from index ``out_idx`` up to the newest."""
        if out_idx < 0:
            raise ValueError("out_idx must not be negative")
        with self._locked(fcntl.LOCK_SH) as handle:
            last = self._read_last_index(handle)
            if last < out_idx:
                return []
            return list(self._read_records(handle, out_idx, last))

    def close(self) -> None:
        """Release the handle on the board file."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "ChatBoard":
        return self

    def __exit__(self, *args) -> None:
        self.close()


class _Lock:
    def __init__(self, handle: BinaryIO, mode: int) -> None:
        self._handle = handle
        self._mode = mode

    def __enter__(self) -> BinaryIO:
        fcntl.flock(self._handle.fileno(), self._mode)
        return self._handle

    def __exit__(self, *args) -> None:
        fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)


def create_board(directory) -> ChatBoard:
    """Create an empty board in ``directory``, replacing any old one."""
    path = _board_path(directory)
    try:
        handle = open(path, "w+b")
    except OSError as exc:
        raise BoardError(f"failed to create board {path}: {exc}") from exc
    with _Lock(handle, fcntl.LOCK_EX):
        handle.write(_HEADER.pack(-1))
        handle.write(bytes(_BOARD_SIZE - _HEADER.size))
        handle.flush()
    return ChatBoard(path, handle)


def open_board(directory) -> ChatBoard:
    """Open the board that already exists in ``directory``."""
    path = _board_path(directory)
    try:
        handle = open(path, "r+b")
    except OSError as exc:
        raise BoardError(f"failed to open board {path}: {exc}") from exc
    if os.fstat(handle.fileno()).st_size != _BOARD_SIZE:
        handle.close()
        raise BoardError(f"board file {path} is damaged")
    return ChatBoard(path, handle)


def remove_board(directory) -> None:
    """Delete the board file in ``directory``."""
    path = _board_path(directory)
    try:
        path.unlink()
    except OSError as exc:
        raise BoardError(f"failed to remove board {path}: {exc}") from exc