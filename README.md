# shmchat

A small terminal chat for several clients on one machine. The clients share a
message board kept in a file named `shmchat.board` inside a directory. Every
access to the board takes a file lock. A reader takes a shared lock and a writer
takes an exclusive one. Many clients can read at the same time, and only one
client can write at a time.

The package needs a POSIX system because it uses `fcntl.flock`. The launcher
also needs `xterm`.

## Installing

```
pip install .
```

## Starting a chat session

```
shmchat [directory]
```

The launcher creates a fresh, empty board in `directory`. If you leave the
directory out, it uses the current one, and any board already there is replaced.
The launcher then asks how many chat clients to start, from 1 to 10. Each client
opens in its own `xterm` window, with the client's number as the window title.

The launcher waits until every client has exited and reports each exit status.
It then removes the board file. If the number you enter is not valid, or the
windows cannot be started, the launcher removes the board and exits with
status 1.

## Running a client

Each window runs one client. You can also start a client yourself against a
board that already exists:

```
shmchat-client <client_id> [directory]
```

On each cycle the client first shows the messages addressed to it since the last
check. If no new message is for this client, it prints `No new messages for you.`
When the board holds nothing new at all, it prints nothing. Then it asks:

```
Send a new message? [y/N/e]:
```

- `y` sends a message. You give the number of recipients (1 to 10), then each
  recipient's ID, then one line of text. The text is cut to 99 bytes.
- `e`, or the end of input, exits the client.
- Any other answer waits one second and checks for messages again.

The board holds at most 100 messages. Once it is full, the client prints
`Message buffer full. Cannot send more messages.` and sends nothing.

## Using the board from Python

```python
from shmchat.board import create_board, open_board, remove_board

with create_board("."):
    pass

with open_board(".") as board:
    board.post(0, [1, 2], "hello")
    print(board.last_index())          # 0
    for message in board.read_since(0):
        if message.is_for(1):
            print(message.sender_id, message.receivers, message.content)

remove_board(".")
```

- `create_board(directory)` writes an empty board and returns an open
  `ChatBoard`.
- `open_board(directory)` opens a board that already exists.
- `remove_board(directory)` deletes the board file.
- `ChatBoard.post(sender_id, receivers, content)` returns the new message's
  index. It raises `ValueError` unless there are 1 to 10 receivers. It raises
  `BoardFullError` once the board is full.
- `ChatBoard.last_index()` returns the index of the newest message, or -1 if
  the board is empty.
- `ChatBoard.read_since(out_idx)` returns the `Message` objects from
  `out_idx` up to the newest.
- `Message` is a frozen dataclass with `sender_id`, `receivers` and `content`.
  `Message.is_for(client_id)` tells whether a client is among the receivers.

`BoardError` is raised when a board cannot be created, opened, read or
removed, and when it is used after `close()`. `BoardFullError` is a subclass
of it.

`shmchat.client.ChatClient(client_id, board, stdin=None, stdout=None, pause=1.0)`
runs the interactive client over any pair of text streams. Its methods are
`check_messages()`, `send_message()` and `run()`.

## What it does not do

The chat works only between processes on the same machine that can reach the
same directory. There is no network transport. Messages are never deleted one
by one, so a session ends when its 100 slots are used up. Nothing is kept after
the launcher removes the board.