"""Tests for fire-and-forget commands."""

import json
import socket
import time

import pytest

from shimtabs.protocol import CommandDispatcher, build_command
from tests.fake_shim import free_port


@pytest.fixture
def listener():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(5)
    sock.settimeout(2.0)
    yield sock
    sock.close()


def receive_one(listener):
    conn, _ = listener.accept()
    with conn:
        conn.settimeout(2.0)
        data = b""
        while True:
            chunk = conn.recv(4096)
            if not chunk:
                break
            data += chunk
    return json.loads(data.decode("utf-8"))


class TestBuildCommand:
    def test_exactly_three_keys_unchanged(self):
        assert build_command("switch_tab", 42, 7) == {
            "action": "switch_tab",
            "tabId": 42,
            "windowId": 7,
        }

    def test_large_ids_are_not_transformed(self):
        payload = build_command("close_tab", 2**40, -1)
        assert json.loads(json.dumps(payload)) == payload


class TestCommandDispatcher:
    def test_send_command_writes_json(self, listener):
        port = listener.getsockname()[1]
        CommandDispatcher("127.0.0.1", port).send_command("switch_tab", 5, 99)

        assert receive_one(listener) == {"action": "switch_tab", "tabId": 5, "windowId": 99}

    def test_switch_tab_uses_switch_action(self, listener):
        port = listener.getsockname()[1]
        CommandDispatcher("127.0.0.1", port).switch_tab(3, 4)

        assert receive_one(listener)["action"] == "switch_tab"

    def test_each_command_uses_its_own_connection(self, listener):
        port = listener.getsockname()[1]
        dispatcher = CommandDispatcher("127.0.0.1", port)
        dispatcher.send_command("switch_tab", 1, 1)
        dispatcher.send_command("switch_tab", 2, 1)

        received = {receive_one(listener)["tabId"], receive_one(listener)["tabId"]}
        assert received == {1, 2}

    def test_unreachable_shim_is_silent(self):
        dispatcher = CommandDispatcher("127.0.0.1", free_port(), connect_timeout=0.5)
        start = time.monotonic()
        assert dispatcher.send_command("switch_tab", 1, 2) is None
        assert time.monotonic() - start < 2.0
