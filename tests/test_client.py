import io

import pytest

from shmchat.board import MAX_MESSAGES, Message, create_board
from shmchat.client import ChatClient, main


@pytest.fixture
def board(tmp_path):
    with create_board(tmp_path) as b:
        yield b


def make_client(board, client_id=0, text=""):
    out = io.StringIO()
    client = ChatClient(client_id, board, stdin=io.StringIO(text), stdout=out, pause=0)
    return client, out


def test_send_message_posts_to_board(board):
    client, out = make_client(board, 0, "2\n1\n3\nhello\n")
    assert client.send_message() == 0
    assert board.read_since(0) == [Message(0, (1, 3), "hello")]
    assert "Message sent successfully!" in out.getvalue()


def test_send_message_rejects_bad_count(board):
    client, out = make_client(board, 0, "0\n")
    assert client.send_message() is None
    assert "Invalid number of recipients. Must be between 1 and 10." in out.getvalue()
    assert board.last_index() == -1


def test_send_message_rejects_too_many_recipients(board):
    client, out = make_client(board, 0, "11\n")
    assert client.send_message() is None
    assert board.last_index() == -1


def test_send_message_rejects_bad_recipient(board):
    client, out = make_client(board, 0, "1\nabc\n")
    assert client.send_message() is None
    assert "Invalid recipient ID." in out.getvalue()
    assert board.last_index() == -1


def test_send_message_without_content(board):
    client, out = make_client(board, 0, "1\n2\n")
    assert client.send_message() is None
    assert "Error reading message content." in out.getvalue()


def test_send_message_when_board_full(board):
    for _ in range(MAX_MESSAGES):
        board.post(1, [2], "x")
    client, out = make_client(board, 0, "1\n2\nlate\n")
    assert client.send_message() is None
    assert "Message buffer full. Cannot send more messages." in out.getvalue()
    assert board.last_index() == MAX_MESSAGES - 1


def test_check_messages_shows_only_own(board):
    board.post(0, [1], "hi one")
    board.post(0, [2], "hi two")
    client, out = make_client(board, 1)
    received = client.check_messages()
    assert received == [Message(0, (1,), "hi one")]
    text = out.getvalue()
    assert "From Client 0: hi one" in text
    assert "hi two" not in text
    assert client.out_idx == 2


def test_check_messages_only_new_once(board):
    board.post(3, [1], "first")
    client, out = make_client(board, 1)
    client.check_messages()
    before = out.getvalue()
    assert client.check_messages() == []
    assert out.getvalue() == before


def test_check_messages_none_for_client(board):
    board.post(0, [2], "elsewhere")
    client, out = make_client(board, 1)
    assert client.check_messages() == []
    assert "No new messages for you." in out.getvalue()


def test_check_messages_empty_board_prints_nothing(board):
    client, out = make_client(board, 1)
    assert client.check_messages() == []
    assert out.getvalue() == ""


def test_run_sends_and_exits(board):
    client, out = make_client(board, 4, "y\n1\n5\ngreetings\ne\n")
    client.run()
    assert board.read_since(0) == [Message(4, (5,), "greetings")]
    assert "Exiting chat client 4..." in out.getvalue()


def test_run_ends_at_end_of_input(board):
    client, out = make_client(board, 2, "n\n")
    client.run()
    assert out.getvalue().count("Chat Client 2") == 2
    assert board.last_index() == -1


def test_main_usage_error(capsys):
    assert main([]) == 1
    assert "Usage" in capsys.readouterr().out


def test_main_missing_board(tmp_path):
    assert main(["0", str(tmp_path)]) == 1


def test_main_runs_client(tmp_path, monkeypatch, capsys):
    create_board(tmp_path).close()
    monkeypatch.setattr("sys.stdin", io.StringIO("e\n"))
    assert main(["7", str(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert "Chat client 7 started" in out
    assert "Exiting chat client 7..." in out