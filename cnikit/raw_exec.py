"""Running plugin executables as child processes."""

from __future__ import annotations

import errno
import io
import json
import signal
import subprocess
import sys
import time

from .find import find_in_path as _find_in_path

_RETRIES = 6


class PluginError(Exception):
    """An error reported by a plugin, in the CNI error format."""

    def __init__(self, msg: str = "", code: int = 0, details: str = "", cni_version: str = ""):
        self.msg = msg
        self.code = code
        self.details = details
        self.cni_version = cni_version
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"{self.msg}; {self.details}" if self.details else self.msg

    def __eq__(self, other) -> bool:
        if not isinstance(other, PluginError):
            return NotImplemented
        return (self.code, self.msg, self.details) == (other.code, other.msg, other.details)

    def __hash__(self) -> int:
        return hash((self.code, self.msg, self.details))

    def to_dict(self) -> dict:
        data: dict = {"code": self.code, "msg": self.msg}
        if self.cni_version:
            data["cniVersion"] = self.cni_version
        if self.details:
            data["details"] = self.details
        return data


def _env_dict(environ):
    if environ is None:
        return None
    env = {}
    for entry in environ:
        key, sep, value = entry.partition("=")
        if sep:
            env[key] = value
    return env


def _describe_returncode(code: int) -> str:
    if code < 0:
        name = signal.strsignal(-code) or f"signal {-code}"
        return f"signal: {name.lower()}"
    return f"exit status {code}"


class RawExec:
    """Runs plugins from disk, forwarding their stderr to ``stderr``."""

    def __init__(self, stderr=None):
        self.stderr = stderr

    def exec_plugin(self, plugin_path, stdin_data, environ, timeout=None) -> bytes:
        """Run the plugin and return its stdout, raising PluginError on failure."""
        env = _env_dict(environ)
        for attempt in range(_RETRIES):
            try:
                proc = subprocess.run(
                    [plugin_path],
                    input=stdin_data,
                    env=env,
                    capture_output=True,
                    timeout=timeout,
                )
            except subprocess.TimeoutExpired as exc:
                raise self._plugin_err("signal: killed", exc.stdout or b"", exc.stderr or b"") from exc
            except OSError as exc:
                if exc.errno == errno.ETXTBSY and attempt < _RETRIES - 1:
                    time.sleep(1)
                    continue
                raise self._plugin_err(str(exc), b"", b"") from exc
            if proc.returncode != 0:
                raise self._plugin_err(_describe_returncode(proc.returncode), proc.stdout, proc.stderr)
            break
        else:  # pragma: no cover - loop always breaks or raises
            raise PluginError("netplugin failed: text file busy")

        if self.stderr is not None and proc.stderr:
            self._forward_stderr(proc.stderr)
        return proc.stdout

    def _forward_stderr(self, data: bytes) -> None:
        try:
            if isinstance(self.stderr, io.TextIOBase) or self.stderr is sys.stderr:
                self.stderr.write(data.decode(errors="replace"))
            else:
                self.stderr.write(data)
        except (OSError, TypeError, ValueError):
            pass

    @staticmethod
    def _plugin_err(reason: str, stdout: bytes, stderr: bytes) -> PluginError:
        if not stdout:
            if not stderr:
                return PluginError(f"netplugin failed with no error message: {reason}")
            return PluginError(f"netplugin failed: {json.dumps(stderr.decode(errors='replace'))}")
        try:
            data = json.loads(stdout)
            if not isinstance(data, dict):
                raise ValueError("diagnostic message is not a JSON object")
            return PluginError(
                msg=str(data.get("msg", "")),
                code=int(data.get("code", 0)),
                details=str(data.get("details", "")),
                cni_version=str(data.get("cniVersion", "")),
            )
        except (ValueError, TypeError) as exc:
            text = json.dumps(stdout.decode(errors="replace"))
            return PluginError(f"netplugin failed but error parsing its diagnostic message {text}: {exc}")

    def find_in_path(self, plugin, paths) -> str:
        """Find a plugin executable on the given search path."""
        return _find_in_path(plugin, paths)