"""Minimal KISS TCP client for reading from Direwolf or a TNC bridge.

The client only moves bytes: received chunks are handed to the caller
unparsed so the :class:`~kiss_aprs.aprs.kiss.KISSFramer` can recover frame
boundaries across reads.
"""

from __future__ import annotations

import socket
from dataclasses import dataclass
from typing import Optional

from .kiss import BytesLike, KISSCommand, encode_kiss_frame

_READ_SIZE = 4096


class KISSClientError(RuntimeError):
    pass


@dataclass(slots=True)
class KISSClientConfig:
    host: str = "127.0.0.1"
    port: int = 8001
    timeout: float = 2.0


class KISSClient:
    def __init__(self, config: KISSClientConfig | None = None) -> None:
        self._config = config or KISSClientConfig()
        self._socket: socket.socket | None = None

    @property
    def config(self) -> KISSClientConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        return self._socket is not None

    def connect(self) -> None:
        if self._socket is not None:
            return
        try:
            sock = socket.create_connection(
                (self._config.host, self._config.port), timeout=self._config.timeout
            )
        except OSError as exc:
            raise KISSClientError(
                f"Unable to connect to KISS server at {self._config.host}:{self._config.port}: {exc}"
            ) from exc
        sock.settimeout(self._config.timeout)
        self._socket = sock

    def read_chunk(self, timeout: Optional[float] = None) -> bytes:
        """Return the next block of raw bytes received from the server."""
        sock = self._require_socket()
        sock.settimeout(timeout if timeout is not None else self._config.timeout)
        try:
            chunk = sock.recv(_READ_SIZE)
        except socket.timeout as exc:
            raise TimeoutError("Timed out waiting for KISS data") from exc
        except OSError as exc:
            raise KISSClientError(f"Socket error while reading: {exc}") from exc
        if not chunk:
            raise KISSClientError("KISS connection closed by remote host")
        return chunk

    def send_frame(
        self,
        payload: BytesLike,
        *,
        port: int = 0,
        command: KISSCommand | int = KISSCommand.DATA,
    ) -> None:
        sock = self._require_socket()
        frame = encode_kiss_frame(payload, port=port, command=command)
        try:
            sock.sendall(frame)
        except OSError as exc:
            raise KISSClientError(f"Failed to send KISS frame: {exc}") from exc

    def close(self) -> None:
        if self._socket is None:
            return
        try:
            self._socket.close()
        finally:
            self._socket = None

    def __enter__(self) -> "KISSClient":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_socket(self) -> socket.socket:
        if self._socket is None:
            raise KISSClientError("KISS connection not established")
        return self._socket
