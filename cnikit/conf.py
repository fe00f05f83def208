"""Loading and manipulating network configuration files."""

from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from .exec import Result


class NotFoundError(LookupError):
    """No configuration with the requested name exists in a directory."""

    def __init__(self, dir: str, name: str):
        self.dir = dir
        self.name = name
        super().__init__(str(self))

    def __str__(self) -> str:
        return f'no net configuration with name "{self.name}" in {self.dir}'

    def __eq__(self, other) -> bool:
        if not isinstance(other, NotFoundError):
            return NotImplemented
        return (self.dir, self.name) == (other.dir, other.name)

    def __hash__(self) -> int:
        return hash((self.dir, self.name))


class NoConfigsFoundError(LookupError):
    """A directory holds no configuration files at all."""

    def __init__(self, dir: str):
        self.dir = dir
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"no net configurations found in {self.dir}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, NoConfigsFoundError):
            return NotImplemented
        return self.dir == other.dir

    def __hash__(self) -> int:
        return hash(self.dir)


@dataclass
class NetConf:
    """The fields of a plugin configuration that the runtime understands."""

    cni_version: str = ""
    name: str = ""
    type: str = ""
    capabilities: dict[str, bool] = field(default_factory=dict)
    ipam: dict = field(default_factory=dict)
    dns: dict = field(default_factory=dict)
    prev_result: dict | None = None


@dataclass
class NetworkConfig:
    """A single plugin configuration and its raw JSON bytes."""

    network: NetConf
    bytes: bytes = b""


@dataclass
class NetworkConfigList:
    """A named chain of plugin configurations."""

    name: str = ""
    cni_version: str = ""
    disable_check: bool = False
    plugins: list[NetworkConfig] = field(default_factory=list)
    bytes: bytes = b""


def _kind(value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _decode_error(exc: json.JSONDecodeError) -> str:
    rest = exc.doc[exc.pos:]
    if not rest.strip():
        return "unexpected end of JSON input"
    if exc.msg == "Expecting value":
        return f"invalid character {rest[0]!r} looking for beginning of value"
    return str(exc)


def _loads(data):
    try:
        return json.loads(data)
    except json.JSONDecodeError as exc:
        raise ValueError(_decode_error(exc)) from exc
    except UnicodeDecodeError as exc:
        raise ValueError(str(exc)) from exc


def _json_default(obj):
    if isinstance(obj, Result):
        return obj.data
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    raise TypeError(f"value of type {type(obj).__name__} is not JSON serialisable")


def _dumps(obj) -> bytes:
    text = json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=_json_default)
    for char, escape in (("<", "\\u003c"), (">", "\\u003e"), ("&", "\\u0026"),
                         ("\u2028", "\\u2028"), ("\u2029", "\\u2029")):
        text = text.replace(char, escape)
    return text.encode()


def _as_bytes(data) -> bytes:
    return data.encode() if isinstance(data, str) else bytes(data)


def _read(filename) -> bytes:
    try:
        return Path(filename).read_bytes()
    except OSError as exc:
        raise OSError(f"error reading {filename}: open {filename}: {exc.strerror or exc}") from exc


def _string_field(raw: dict, key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"cannot unmarshal {_kind(value)} into field {key} of type string")
    return value


def _object_field(raw: dict, key: str) -> dict:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"cannot unmarshal {_kind(value)} into field {key} of type object")
    return value


def _netconf_from_mapping(raw: dict) -> NetConf:
    capabilities = _object_field(raw, "capabilities")
    for key, enabled in capabilities.items():
        if not isinstance(enabled, bool):
            raise ValueError(f"cannot unmarshal {_kind(enabled)} into capability {key} of type boolean")
    prev_result = raw.get("prevResult")
    if prev_result is not None and not isinstance(prev_result, dict):
        raise ValueError(f"cannot unmarshal {_kind(prev_result)} into field prevResult of type object")
    return NetConf(
        cni_version=_string_field(raw, "cniVersion"),
        name=_string_field(raw, "name"),
        type=_string_field(raw, "type"),
        capabilities=dict(capabilities),
        ipam=_object_field(raw, "ipam"),
        dns=_object_field(raw, "dns"),
        prev_result=prev_result,
    )


def conf_from_bytes(data) -> NetworkConfig:
    """Parse a single plugin configuration."""
    data = _as_bytes(data)
    try:
        raw = _loads(data)
        if not isinstance(raw, dict):
            raise ValueError(f"cannot unmarshal {_kind(raw)} into a network configuration")
        network = _netconf_from_mapping(raw)
    except ValueError as exc:
        raise ValueError(f"error parsing configuration: {exc}") from exc
    if not network.type:
        raise ValueError("error parsing configuration: missing 'type'")
    return NetworkConfig(network=network, bytes=data)


def conf_from_file(filename) -> NetworkConfig:
    """Read and parse a single plugin configuration file."""
    return conf_from_bytes(_read(filename))


def conf_list_from_bytes(data) -> NetworkConfigList:
    """Parse a configuration list holding a chain of plugins."""
    data = _as_bytes(data)
    prefix = "error parsing configuration list"
    try:
        raw = _loads(data)
    except ValueError as exc:
        raise ValueError(f"{prefix}: {exc}") from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"{prefix}: cannot unmarshal {_kind(raw)} into a configuration list")

    if "name" not in raw:
        raise ValueError(f"{prefix}: no name")
    name = raw["name"]
    if not isinstance(name, str):
        raise ValueError(f"{prefix}: invalid name type {_kind(name)}")

    cni_version = ""
    if "cniVersion" in raw:
        cni_version = raw["cniVersion"]
        if not isinstance(cni_version, str):
            raise ValueError(f"{prefix}: invalid cniVersion type {_kind(cni_version)}")

    disable_check = False
    if "disableCheck" in raw:
        disable_check = raw["disableCheck"]
        if not isinstance(disable_check, bool):
            raise ValueError(f"{prefix}: invalid disableCheck type {_kind(disable_check)}")

    if "plugins" not in raw:
        raise ValueError(f"{prefix}: no 'plugins' key")
    plugins = raw["plugins"]
    if not isinstance(plugins, list):
        raise ValueError(f"{prefix}: invalid 'plugins' type {_kind(plugins)}")
    if not plugins:
        raise ValueError(f"{prefix}: no plugins in list")

    parsed = []
    for index, plugin in enumerate(plugins):
        try:
            parsed.append(conf_from_bytes(_dumps(plugin)))
        except ValueError as exc:
            raise ValueError(f"failed to parse plugin config {index}: {exc}") from exc

    return NetworkConfigList(
        name=name,
        cni_version=cni_version,
        disable_check=disable_check,
        plugins=parsed,
        bytes=data,
    )


def conf_list_from_file(filename) -> NetworkConfigList:
    """Read and parse a configuration list file."""
    return conf_list_from_bytes(_read(filename))


def _extension(name: str) -> str:
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def conf_files(directory, extensions) -> list[str]:
    """List the files in ``directory`` (not recursively) with one of ``extensions``."""
    try:
        entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except FileNotFoundError:
        return []
    return [
        os.path.join(directory, entry.name)
        for entry in entries
        if not entry.is_dir(follow_symlinks=False) and _extension(entry.name) in extensions
    ]


def load_conf(directory, name) -> NetworkConfig:
    """Find the single plugin configuration called ``name`` in ``directory``."""
    files = conf_files(directory, [".conf", ".json"])
    if not files:
        raise NoConfigsFoundError(directory)
    for conf_file in sorted(files):
        conf = conf_from_file(conf_file)
        if conf.network.name == name:
            return conf
    raise NotFoundError(directory, name)


def load_conf_list(directory, name) -> NetworkConfigList:
    """Find the configuration list called ``name``, falling back to a single configuration."""
    files = sorted(conf_files(directory, [".conflist"]))
    for conf_file in files:
        conf = conf_list_from_file(conf_file)
        if conf.name == name:
            return conf

    try:
        single = load_conf(directory, name)
    except NoConfigsFoundError:
        if files:
            raise NotFoundError(directory, name) from None
        raise
    return conf_list_from_conf(single)


def inject_conf(original: NetworkConfig, new_values) -> NetworkConfig:
    """Return a copy of ``original`` with top-level keys set from ``new_values``."""
    try:
        config = _loads(original.bytes)
        if not isinstance(config, dict):
            raise ValueError(f"cannot unmarshal {_kind(config)} into an object")
    except ValueError as exc:
        raise ValueError(f"unmarshal existing network bytes: {exc}") from exc

    for key, value in new_values.items():
        if key == "":
            raise ValueError("keys cannot be empty")
        if value is None:
            raise ValueError(f"key '{key}' value must not be nil")
        config[key] = value

    return conf_from_bytes(_dumps(config))


def conf_list_from_conf(original: NetworkConfig) -> NetworkConfigList:
    """Wrap a single configuration in a list holding it as the only plugin."""
    raw_config = _loads(original.bytes)
    raw_list = {
        "name": original.network.name,
        "cniVersion": original.network.cni_version,
        "plugins": [raw_config],
    }
    return conf_list_from_bytes(_dumps(raw_list))