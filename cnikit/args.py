"""Environment construction for plugin invocations."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


class InheritedArgs:
    """Arguments that inherit the whole environment of this process."""

    # No explicit environment: the child process inherits this one.
    environ: list[str] | None = None

    def as_env(self) -> list[str] | None:
        """Return None so that the child inherits this process's environment."""
        return self.environ


_INHERITED = InheritedArgs()


def args_from_env() -> InheritedArgs:
    """Return arguments that inherit the current environment."""
    return _INHERITED


def _current_environ() -> list[str]:
    return [f"{key}={value}" for key, value in os.environ.items()]


@dataclass
class Args:
    """The CNI_* variables for one plugin invocation."""

    command: str = ""
    container_id: str = ""
    netns: str = ""
    plugin_args: list[tuple[str, str]] = field(default_factory=list)
    plugin_args_str: str = ""
    ifname: str = ""
    path: str = ""

    def as_env(self) -> list[str]:
        """Return the process environment with the CNI variables applied last."""
        plugin_args_str = self.plugin_args_str or stringify(self.plugin_args)
        env = _current_environ()
        env += [
            f"CNI_COMMAND={self.command}",
            f"CNI_CONTAINERID={self.container_id}",
            f"CNI_NETNS={self.netns}",
            f"CNI_ARGS={plugin_args_str}",
            f"CNI_IFNAME={self.ifname}",
            f"CNI_PATH={self.path}",
        ]
        return dedup_env(env)


@dataclass
class DelegateArgs:
    """Arguments for delegation: inherit everything but override CNI_COMMAND."""

    command: str = ""

    def as_env(self) -> list[str]:
        """Return the process environment with CNI_COMMAND overridden."""
        env = _current_environ()
        env.append(f"CNI_COMMAND={self.command}")
        return dedup_env(env)


def stringify(plugin_args) -> str:
    """Join key/value pairs as ``K1=V1;K2=V2``."""
    return ";".join("=".join(pair) for pair in plugin_args)


def dedup_env(env) -> list[str]:
    """Remove duplicate keys, keeping the last value; entries without '=' are kept."""
    out: list[str] = []
    values: dict[str, str] = {}
    for entry in env:
        key, sep, value = entry.partition("=")
        if not sep:
            out.append(entry)
            continue
        values[key] = value
    out.extend(f"{key}={value}" for key, value in values.items())
    return out