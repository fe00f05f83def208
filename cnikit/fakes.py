"""Test doubles for plugin arguments, execution and version decoding."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FakeCNIArgs:
    """Arguments that return a fixed environment."""

    env: list[str] | None = None

    def as_env(self) -> list[str] | None:
        return self.env


@dataclass
class FakeRawExec:
    """Records the calls it receives and returns configured values."""

    result_bytes: bytes = b""
    exec_error: Exception | None = None
    found_path: str = ""
    find_error: Exception | None = None

    received_plugin_path: str | None = None
    received_stdin_data: bytes | None = None
    received_environ: list[str] | None = None
    received_plugin: str | None = None
    received_paths: list[str] | None = None

    def exec_plugin(self, plugin_path, stdin_data, environ, timeout=None) -> bytes:
        self.received_plugin_path = plugin_path
        self.received_stdin_data = stdin_data
        self.received_environ = environ
        if self.exec_error is not None:
            raise self.exec_error
        return self.result_bytes

    def find_in_path(self, plugin, paths) -> str:
        self.received_plugin = plugin
        self.received_paths = paths
        if self.find_error is not None:
            raise self.find_error
        return self.found_path


@dataclass
class FakeVersionDecoder:
    """Records the bytes it is asked to decode and returns a configured value."""

    plugin_info: object = None
    error: Exception | None = None
    received_json_bytes: bytes | None = None

    def decode(self, json_bytes):
        self.received_json_bytes = json_bytes
        if self.error is not None:
            raise self.error
        return self.plugin_info