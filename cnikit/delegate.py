"""Delegating a CNI command to another plugin found on CNI_PATH."""

from __future__ import annotations

import os
import sys

from .args import DelegateArgs
from .exec import DefaultExec, Result, exec_plugin_with_result, exec_plugin_without_result


def _delegate_common(delegate_plugin: str, exec):
    runner = exec if exec is not None else DefaultExec(stderr=sys.stderr)
    cni_path = os.environ.get("CNI_PATH", "")
    paths = cni_path.split(os.pathsep) if cni_path else []
    plugin_path = runner.find_in_path(delegate_plugin, paths)
    return plugin_path, runner


def delegate_add(delegate_plugin, netconf, exec=None, timeout=None) -> Result:
    """Run ``delegate_plugin`` with ADD, overriding any inherited CNI_COMMAND."""
    plugin_path, runner = _delegate_common(delegate_plugin, exec)
    return exec_plugin_with_result(plugin_path, netconf, DelegateArgs(command="ADD"), runner, timeout)


def delegate_check(delegate_plugin, netconf, exec=None, timeout=None) -> None:
    """Run ``delegate_plugin`` with CHECK, overriding any inherited CNI_COMMAND."""
    plugin_path, runner = _delegate_common(delegate_plugin, exec)
    exec_plugin_without_result(plugin_path, netconf, DelegateArgs(command="CHECK"), runner, timeout)


def delegate_del(delegate_plugin, netconf, exec=None, timeout=None) -> None:
    """Run ``delegate_plugin`` with DEL, overriding any inherited CNI_COMMAND."""
    plugin_path, runner = _delegate_common(delegate_plugin, exec)
    exec_plugin_without_result(plugin_path, netconf, DelegateArgs(command="DEL"), runner, timeout)