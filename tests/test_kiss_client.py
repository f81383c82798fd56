"""Tests for the KISS TCP client implementation."""

from __future__ import annotations

import socket
import threading
import time

import pytest

from kiss_aprs.aprs.kiss import FEND, KISSCommand, KISSFramer, encode_kiss_frame
from kiss_aprs.aprs.kiss_client import KISSClient, KISSClientConfig, KISSClientError


def _start_kiss_server(
    payloads: list[bytes] | None, received: list[bytes] | None = None
) -> tuple[int, threading.Thread]:
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    port = server.getsockname()[1]

    def _run() -> None:
        conn, _ = server.accept()
        try:
            if payloads is not None:
                for payload in payloads:
                    conn.sendall(payload)
                    time.sleep(0.05)
                # Give client a moment before closing
                time.sleep(0.1)
            elif received is not None:
                conn.settimeout(1.0)
                received.append(conn.recv(1024))
            else:
                time.sleep(0.5)
        finally:
            conn.close()
            server.close()

    thread = threading.Thread(target=_run, daemon=True)
    thread.start()
    return port, thread


def _unused_port() -> int:
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    return port


def test_kiss_client_receives_chunks() -> None:
    frame = encode_kiss_frame(b"test aprs", port=2)
    port, thread = _start_kiss_server([frame[:4], frame[4:]])

    framer = KISSFramer()
    frames = []
    client = KISSClient(KISSClientConfig(host="127.0.0.1", port=port, timeout=1.0))
    with client:
        while not frames:
            frames.extend(framer.feed(client.read_chunk()))

    thread.join(timeout=1)
    assert frames[0].port == 2
    assert frames[0].command is KISSCommand.DATA
    assert frames[0].payload == b"test aprs"


def test_kiss_client_timeout() -> None:
    port, thread = _start_kiss_server(None)
    client = KISSClient(KISSClientConfig(host="127.0.0.1", port=port, timeout=0.2))
    with client:
        with pytest.raises(TimeoutError):
            client.read_chunk(timeout=0.2)

    thread.join(timeout=1)


def test_kiss_client_send_frame() -> None:
    received: list[bytes] = []
    port, thread = _start_kiss_server(None, received)

    client = KISSClient(KISSClientConfig(host="127.0.0.1", port=port, timeout=1.0))
    with client:
        client.send_frame(b"A" + bytes([FEND]), port=1)
        thread.join(timeout=2)

    assert received == [encode_kiss_frame(b"A" + bytes([FEND]), port=1)]


def test_kiss_client_remote_close_raises() -> None:
    port, thread = _start_kiss_server([])
    client = KISSClient(KISSClientConfig(host="127.0.0.1", port=port, timeout=1.0))
    with client:
        thread.join(timeout=2)
        with pytest.raises(KISSClientError):
            client.read_chunk()


def test_kiss_client_requires_connection() -> None:
    client = KISSClient()

    assert not client.is_connected
    with pytest.raises(KISSClientError):
        client.read_chunk()
    with pytest.raises(KISSClientError):
        client.send_frame(b"data")


def test_kiss_client_connect_failure() -> None:
    client = KISSClient(
        KISSClientConfig(host="127.0.0.1", port=_unused_port(), timeout=0.5)
    )

    with pytest.raises(KISSClientError):
        client.connect()
    assert not client.is_connected


def test_kiss_client_close_is_idempotent() -> None:
    port, thread = _start_kiss_server(None)
    client = KISSClient(KISSClientConfig(host="127.0.0.1", port=port, timeout=1.0))

    client.connect()
    assert client.is_connected
    client.close()
    client.close()

    assert not client.is_connected
    thread.join(timeout=1)
