"""Executing plugins and decoding their results and version information."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field

from .raw_exec import RawExec

CURRENT_VERSION = "1.0.0"
SUPPORTED_RESULT_VERSIONS = ("0.1.0", "0.2.0", "0.3.0", "0.3.1", "0.4.0", "1.0.0")
_LEGACY_VERSIONS = ("0.1.0", "0.2.0")


def _is_v6(address: str) -> bool:
    return ":" in address


def _unsupported(version: str) -> ValueError:
    return ValueError(f"unsupported CNI result version {json.dumps(version)}")


@dataclass
class Result:
    """A plugin result as a JSON object, tagged with its spec version."""

    cni_version: str
    data: dict = field(default_factory=dict)

    @classmethod
    def from_bytes(cls, data) -> "Result":
        """Parse a result, checking that its version is supported."""
        try:
            parsed = json.loads(data)
        except (ValueError, TypeError) as exc:
            raise ValueError(f"decoding version from network config: {exc}") from exc
        if not isinstance(parsed, dict):
            raise ValueError("decoding version from network config: result is not a JSON object")
        version = parsed.get("cniVersion") or "0.1.0"
        if version not in SUPPORTED_RESULT_VERSIONS:
            raise _unsupported(version)
        return cls(version, parsed)

    @property
    def ips(self) -> list[dict]:
        return list(self._modern()["ips"])

    def _modern(self) -> dict:
        data = copy.deepcopy(self.data)
        out: dict = {"ips": [], "routes": [], "interfaces": data.get("interfaces", [])}
        if self.cni_version in _LEGACY_VERSIONS:
            for key in ("ip4", "ip6"):
                block = data.get(key)
                if not block:
                    continue
                entry = {"address": block.get("ip", "")}
                if block.get("gateway"):
                    entry["gateway"] = block["gateway"]
                out["ips"].append(entry)
                out["routes"].extend(block.get("routes") or [])
        else:
            for ip in data.get("ips") or []:
                ip = dict(ip)
                ip.pop("version", None)
                out["ips"].append(ip)
            out["routes"] = data.get("routes") or []
        if "dns" in data:
            out["dns"] = data["dns"]
        return out

    def as_version(self, version: str) -> "Result":
        """Return this result converted to ``version``."""
        if version not in SUPPORTED_RESULT_VERSIONS:
            raise _unsupported(version)
        if version == self.cni_version:
            return Result(version, copy.deepcopy(self.data))
        modern = self._modern()
        out: dict = {"cniVersion": version}
        if version in _LEGACY_VERSIONS:
            for key, want_v6 in (("ip4", False), ("ip6", True)):
                ip = next((i for i in modern["ips"] if _is_v6(i.get("address", "")) == want_v6), None)
                if ip is None:
                    continue
                block = {"ip": ip.get("address", "")}
                if ip.get("gateway"):
                    block["gateway"] = ip["gateway"]
                routes = [r for r in modern["routes"] if _is_v6(r.get("dst", "")) == want_v6]
                if routes:
                    block["routes"] = routes
                out[key] = block
        else:
            if modern["interfaces"]:
                out["interfaces"] = modern["interfaces"]
            ips = []
            for ip in modern["ips"]:
                ip = dict(ip)
                if version != "1.0.0":
                    ip = {"version": "6" if _is_v6(ip.get("address", "")) else "4", **ip}
                ips.append(ip)
            if ips:
                out["ips"] = ips
            if modern["routes"]:
                out["routes"] = modern["routes"]
        if "dns" in modern:
            out["dns"] = modern["dns"]
        return Result(version, out)

    def to_json(self) -> str:
        """Serialise the result as JSON text."""
        return json.dumps(self.data)


@dataclass
class PluginInfo:
    """The spec versions a plugin supports."""

    cni_version: str = CURRENT_VERSION
    versions: list[str] = field(default_factory=list)

    def supported_versions(self) -> list[str]:
        return list(self.versions)


def plugin_supports(*args) -> PluginInfo:
    """Return a PluginInfo listing the given versions."""
    if not args:
        raise ValueError("programmer error: you must support at least one version")
    return PluginInfo(CURRENT_VERSION, list(args))


class PluginDecoder:
    """Decodes the output of the VERSION command."""

    def decode(self, json_bytes) -> PluginInfo:
        try:
            info = json.loads(json_bytes)
        except (ValueError, TypeError) as exc:
            raise ValueError(f"decoding version info: {exc}") from exc
        if not isinstance(info, dict):
            raise ValueError("decoding version info: not a JSON object")
        cni_version = info.get("cniVersion") or ""
        if not cni_version:
            raise ValueError("decoding version info: missing field cniVersion")
        supported = info.get("supportedVersions") or []
        if not supported:
            if cni_version == "0.2.0":
                return plugin_supports("0.1.0", "0.2.0")
            raise ValueError("decoding version info: missing field supportedVersions")
        return PluginInfo(cni_version, list(supported))


class DefaultExec(RawExec, PluginDecoder):
    """Finds and runs plugins from disk and decodes their version output."""


_default_exec = DefaultExec()


def exec_plugin_with_result(plugin_path, netconf, args, exec=None, timeout=None) -> Result:
    """Run a plugin and parse its stdout as a Result."""
    runner = exec or _default_exec
    stdout = runner.exec_plugin(plugin_path, netconf, args.as_env(), timeout)
    return Result.from_bytes(stdout)


def exec_plugin_without_result(plugin_path, netconf, args, exec=None, timeout=None) -> None:
    """Run a plugin, discarding its stdout."""
    runner = exec or _default_exec
    runner.exec_plugin(plugin_path, netconf, args.as_env(), timeout)


def get_version_info(plugin_path, exec=None, timeout=None) -> PluginInfo:
    """Ask a plugin which spec versions it supports; old plugins report 0.1.0."""
    from .args import Args

    runner = exec or _default_exec
    args = Args(command="VERSION", netns="dummy", ifname="dummy", path="dummy")
    stdin = json.dumps({"cniVersion": CURRENT_VERSION}).encode()
    try:
        stdout = runner.exec_plugin(plugin_path, stdin, args.as_env(), timeout)
    except Exception as exc:
        if str(exc) == "unknown CNI_COMMAND: VERSION":
            return plugin_supports("0.1.0")
        raise
    return runner.decode(stdout)