import json

import pytest

from cnikit.exec import (
    CURRENT_VERSION,
    exec_plugin_with_result,
    exec_plugin_without_result,
    get_version_info,
    plugin_supports,
)
from cnikit.fakes import FakeCNIArgs, FakeRawExec, FakeVersionDecoder


class _PluginExec:
    def __init__(self, raw, decoder):
        self.raw = raw
        self.decoder = decoder

    def exec_plugin(self, plugin_path, stdin_data, environ, timeout=None):
        return self.raw.exec_plugin(plugin_path, stdin_data, environ, timeout)

    def find_in_path(self, plugin, paths):
        return self.raw.find_in_path(plugin, paths)

    def decode(self, json_bytes):
        return self.decoder.decode(json_bytes)


@pytest.fixture
def raw():
    return FakeRawExec(
        result_bytes=b'{ "cniVersion": "0.3.1", "ips": [ { "version": "4", "address": "1.2.3.4/24" } ] }'
    )


@pytest.fixture
def decoder():
    return FakeVersionDecoder(plugin_info=plugin_supports("0.42.0"))


@pytest.fixture
def plugin_exec(raw, decoder):
    return _PluginExec(raw, decoder)


@pytest.fixture
def cniargs():
    return FakeCNIArgs(env=["SOME=ENV"])


NETCONF = b'{ "some": "stdin", "cniVersion": "0.3.1" }'
PLUGIN_PATH = "/some/plugin/path"


def test_cni_args_returns_configured_env(cniargs):
    assert cniargs.as_env() == ["SOME=ENV"]


def test_cni_args_default_env_is_none():
    assert FakeCNIArgs().as_env() is None


def test_raw_exec_records_and_returns(raw):
    out = raw.exec_plugin("/p", b"in", ["A=B"])
    assert out == raw.result_bytes
    assert (raw.received_plugin_path, raw.received_stdin_data, raw.received_environ) == ("/p", b"in", ["A=B"])


def test_raw_exec_raises_configured_error_after_recording(raw):
    raw.exec_error = RuntimeError("banana")
    with pytest.raises(RuntimeError, match="banana"):
        raw.exec_plugin("/p", b"in", ["A=B"])
    assert raw.received_plugin_path == "/p"


def test_find_in_path_records_and_returns():
    fake = FakeRawExec(found_path="/bin/noop")
    assert fake.find_in_path("noop", ["/bin"]) == "/bin/noop"
    assert fake.received_plugin == "noop"
    assert fake.received_paths == ["/bin"]


def test_find_in_path_raises_configured_error():
    fake = FakeRawExec(find_error=FileNotFoundError("missing"))
    with pytest.raises(FileNotFoundError, match="missing"):
        fake.find_in_path("noop", ["/bin"])
    assert fake.received_plugin == "noop"


def test_version_decoder_records_and_returns(decoder):
    info = decoder.decode(b'{ "some": "version-info" }')
    assert info.supported_versions() == ["0.42.0"]
    assert decoder.received_json_bytes == b'{ "some": "version-info" }'


def test_version_decoder_raises_configured_error():
    decoder = FakeVersionDecoder(error=ValueError("bad"))
    with pytest.raises(ValueError, match="bad"):
        decoder.decode(b"{}")
    assert decoder.received_json_bytes == b"{}"


def test_exec_with_result_unmarshals_result(plugin_exec, cniargs):
    result = exec_plugin_with_result(PLUGIN_PATH, NETCONF, cniargs, plugin_exec)
    assert len(result.ips) == 1
    assert result.ips[0]["address"] == "1.2.3.4/24"


def test_exec_with_result_passes_arguments(plugin_exec, raw, cniargs):
    exec_plugin_with_result(PLUGIN_PATH, NETCONF, cniargs, plugin_exec)
    assert raw.received_plugin_path == PLUGIN_PATH
    assert raw.received_stdin_data == NETCONF
    assert raw.received_environ == ["SOME=ENV"]


def test_exec_with_result_returns_error(plugin_exec, raw, cniargs):
    raw.exec_error = RuntimeError("banana")
    with pytest.raises(RuntimeError, match="^banana$"):
        exec_plugin_with_result(PLUGIN_PATH, NETCONF, cniargs, plugin_exec)


def test_exec_without_result_passes_arguments(plugin_exec, raw, cniargs):
    assert exec_plugin_without_result(PLUGIN_PATH, NETCONF, cniargs, plugin_exec) is None
    assert raw.received_plugin_path == PLUGIN_PATH
    assert raw.received_stdin_data == NETCONF
    assert raw.received_environ == ["SOME=ENV"]


def test_exec_without_result_returns_error(plugin_exec, raw, cniargs):
    raw.exec_error = RuntimeError("banana")
    with pytest.raises(RuntimeError, match="^banana$"):
        exec_plugin_without_result(PLUGIN_PATH, NETCONF, cniargs, plugin_exec)


def test_get_version_info_execs_version_command(plugin_exec, raw):
    raw.result_bytes = b'{ "some": "version-info" }'
    get_version_info(PLUGIN_PATH, plugin_exec)
    assert raw.received_plugin_path == PLUGIN_PATH
    assert "CNI_COMMAND=VERSION" in raw.received_environ
    assert json.loads(raw.received_stdin_data) == {"cniVersion": CURRENT_VERSION}


def test_get_version_info_decodes(plugin_exec, raw, decoder):
    raw.result_bytes = b'{ "some": "version-info" }'
    info = get_version_info(PLUGIN_PATH, plugin_exec)
    assert info.supported_versions() == ["0.42.0"]
    assert json.loads(decoder.received_json_bytes) == {"some": "version-info"}


def test_get_version_info_old_plugin(plugin_exec, raw):
    raw.exec_error = RuntimeError("unknown CNI_COMMAND: VERSION")
    info = get_version_info(PLUGIN_PATH, plugin_exec)
    assert info.supported_versions() == ["0.1.0"]
    env = raw.received_environ
    assert "CNI_NETNS=dummy" in env
    assert "CNI_IFNAME=dummy" in env
    assert "CNI_PATH=dummy" in env