"""Interactive chat client that reads and posts messages on a shared board."""

from __future__ import annotations

import re
import sys
import time
from typing import TextIO

from shmchat.board import (
    MAX_CONTENT,
    MAX_RECEIVERS,
    BoardError,
    BoardFullError,
    ChatBoard,
    Message,
    open_board,
)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _parse_int(line: str) -> int | None:
    tokens = line.split()
    if not tokens:
        return None
    try:
        return int(tokens[0])
    except ValueError:
        return None


def _leading_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


class ChatClient:
    """One participant in the chat, talking to the user through text streams."""

    def __init__(
        self,
        client_id: int,
        board: ChatBoard,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        pause: float = 1.0,
    ) -> None:
        self.client_id = client_id
        self.board = board
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.pause = pause
        self.out_idx = 0

    def _say(self, text: str = "", end: str = "\n") -> None:
        self.stdout.write(text + end)
        self.stdout.flush()

    def _ask(self, prompt: str) -> str | None:
        self._say(prompt, end="")
        line = self.stdin.readline()
        return line if line else None

    def check_messages(self) -> list[Message]:
        """Show the messages addressed to this client since the last check.

        Returns the messages that were shown. Nothing is printed when the
        board holds no message newer than the last check.
        """
        if self.board.last_index() < self.out_idx:
            return []
        messages = self.board.read_since(self.out_idx)
        mine = [message for message in messages if message.is_for(self.client_id)]
        self._say("\n--- New Messages ---")
        for message in mine:
            self._say(f"From Client {message.sender_id}: {message.content}")
        if not mine:
            self._say("No new messages for you.")
        self._say("-------------------\n")
        self.out_idx += len(messages)
        return mine

    def send_message(self) -> int | None:
        """Ask for receivers and content and post the message.

        Returns the index of the posted message, or None if nothing was sent.
        """
        line = self._ask("Enter the number of recipients: ")
        count = _parse_int(line) if line is not None else None
        if count is None or not 1 <= count <= MAX_RECEIVERS:
            self._say(
                f"Invalid number of recipients. Must be between 1 and {MAX_RECEIVERS}."
            )
            return None

        receivers = []
        for number in range(1, count + 1):
            line = self._ask(f"Enter recipient {number} ID: ")
            receiver = _parse_int(line) if line is not None else None
            if receiver is None:
                self._say("Invalid recipient ID.")
                return None
            receivers.append(receiver)

        self._say(f"Enter message content (up to {MAX_CONTENT - 1} characters):")
        line = self.stdin.readline()
        if not line:
            self._say("Error reading message content.")
            return None
        content = line.split("\n", 1)[0]

        try:
            index = self.board.post(self.client_id, receivers, content)
        except BoardFullError:
            self._say("Message buffer full. Cannot send more messages.")
            return None
        self._say("Message sent successfully!")
        return index

    def _read_choice(self) -> str | None:
        self._say("Send a new message? [y/N/e]: ", end="")
        while True:
            line = self.stdin.readline()
            if not line:
                return None
            stripped = line.strip()
            if stripped:
                return stripped[0]

    def run(self) -> None:
        """Check for messages and offer to send one until the user exits."""
        while True:
            self.check_messages()
            self._say(f"Chat Client {self.client_id}")
            choice = self._read_choice()
            if choice is None or choice in "eE":
                self._say(f"Exiting chat client {self.client_id}...")
                break
            if choice in "yY":
                self.send_message()
            if self.pause > 0:
                time.sleep(self.pause)


def main(argv=None) -> int:
    """Start a chat client: ``<client_id> [directory]``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) not in (1, 2):
        print("Usage: shmchat-client <client_id> [directory]")
        return 1
    client_id = _leading_int(args[0])
    directory = args[1] if len(args) == 2 else "."

    try:
        board = open_board(directory)
    except BoardError as exc:
        print(f"Failed to open the board: {exc}", file=sys.stderr)
        return 1

    with board:
        print(f"Chat client {client_id} started")
        ChatClient(client_id, board).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())