"""Create the shared board and start a terminal window for each chat client."""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path

from shmchat.board import MAX_RECEIVERS, BoardError, create_board, remove_board


def client_command(client_id: int, directory) -> list[str]:
    """Return the command line that opens a terminal running one client."""
    title = str(client_id)
    return [
        "xterm",
        "-title",
        title,
        "-e",
        sys.executable,
        "-m",
        "shmchat.client",
        title,
        str(Path(directory).resolve()),
    ]


def launch_clients(num_clients: int, directory) -> list[subprocess.Popen]:
    """Start ``num_clients`` client terminals and return their processes."""
    if not 1 <= num_clients <= MAX_RECEIVERS:
        raise ValueError(
            f"Invalid number of clients. Must be between 1 and {MAX_RECEIVERS}."
        )
    processes: list[subprocess.Popen] = []
    try:
        for client_id in range(num_clients):
            processes.append(subprocess.Popen(client_command(client_id, directory)))
    except OSError:
        for process in processes:
            process.terminate()
            process.wait()
        raise
    return processes


def _read_count() -> int | None:
    print("Enter the number of chat clients to create: ", end="", flush=True)
    tokens = sys.stdin.readline().split()
    if not tokens:
        return None
    try:
        return int(tokens[0])
    except ValueError:
        return None


def _cleanup(board, directory) -> None:
    board.close()
    try:
        remove_board(directory)
    except BoardError as exc:
        print(exc, file=sys.stderr)


def main(argv=None) -> int:
    """Create the board, start the clients and wait for them all to exit."""
    parser = argparse.ArgumentParser(prog="shmchat")
    parser.add_argument("directory", nargs="?", default=".")
    args = parser.parse_args(argv)
    directory = args.directory

    try:
        board = create_board(directory)
    except BoardError as exc:
        print(exc, file=sys.stderr)
        return 1

    count = _read_count()
    if count is None or not 1 <= count <= MAX_RECEIVERS:
        print(f"Invalid number of clients. Must be between 1 and {MAX_RECEIVERS}.")
        _cleanup(board, directory)
        return 1

    try:
        processes = launch_clients(count, directory)
    except OSError as exc:
        print(f"Failed to execute child process: {exc}", file=sys.stderr)
        _cleanup(board, directory)
        return 1

    for client_id, process in enumerate(processes):
        print(f"Started chat client {client_id} with PID {process.pid}")

    print("Waiting for all chat clients to exit...")
    for client_id, process in enumerate(processes):
        status = process.wait()
        print(f"Chat client {client_id} exited with status {status}")

    print("Cleaning up resources...")
    _cleanup(board, directory)
    print("Chat system terminated.")
    return 0


if __name__ == "__main__":
    sys.exit(main())