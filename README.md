# cnikit

A library for container network configurations and the plugin programs
that act on them. cnikit loads and edits network configurations, finds
plugin executables on a search path, builds the `CNI_*` environment for
them, runs them as child processes and decodes what they print.

## Installing

    pip install .

To run the tests:

    pip install .[test]
    pytest

## Configurations: `cnikit.conf`

- `conf_from_bytes(data)` and `conf_from_file(filename)` parse a single
  plugin configuration into a `NetworkConfig`, which holds a `NetConf`
  (`cni_version`, `name`, `type`, `capabilities`, `ipam`, `dns`,
  `prev_result`) and the raw `bytes`. A configuration without a `type`
  is rejected with `ValueError`.
- `conf_list_from_bytes(data)` and `conf_list_from_file(filename)` parse
  a configuration list into a `NetworkConfigList` (`name`,
  `cni_version`, `disable_check`, `plugins`, `bytes`).
- `conf_files(directory, extensions)` lists the files directly in a
  directory that have one of the given extensions; a missing directory
  gives an empty list.
- `load_conf(directory, name)` searches the `.conf` and `.json` files of
  a directory, in name order, for a configuration called `name`.
- `load_conf_list(directory, name)` searches the `.conflist` files first
  and falls back to a single configuration, wrapped as a list.
- `inject_conf(original, new_values)` returns a new `NetworkConfig` with
  top-level keys set; empty keys and `None` values are refused.
- `conf_list_from_conf(original)` wraps one configuration in a list.

Lookups that find nothing raise `NoConfigsFoundError` (the directory has
no configuration files) or `NotFoundError` (none has the requested name).

## Running plugins

- `cnikit.find.find_in_path(plugin, paths)` returns the full path of a
  plugin executable, trying `.exe` first on Windows.
- `cnikit.args.Args` holds `command`, `container_id`, `netns`,
  `plugin_args`, `plugin_args_str`, `ifname` and `path`; its `as_env()`
  returns this process's environment with the `CNI_*` variables set last.
  `DelegateArgs` overrides only `CNI_COMMAND`, and `args_from_env()`
  gives arguments that inherit the environment unchanged.
- `cnikit.raw_exec.RawExec(stderr=None).exec_plugin(plugin_path,
  stdin_data, environ, timeout=None)` runs a plugin and returns its
  stdout. A failing plugin raises `PluginError`, built from the error
  JSON on its stdout or from its stderr. Starting a plugin whose file is
  busy being written is retried, a second apart.
- `cnikit.exec.exec_plugin_with_result(...)` parses the output as a
  `Result`; `exec_plugin_without_result(...)` discards it;
  `get_version_info(plugin_path)` runs the `VERSION` command and returns
  a `PluginInfo`, reporting `0.1.0` for plugins too old to know it.
  `Result.as_version(version)` converts a result between spec versions
  and `Result.to_json()` serialises it.
- `cnikit.delegate.delegate_add`, `delegate_check` and `delegate_del`
  let a plugin call another plugin found on `CNI_PATH`.

```python
from cnikit.args import Args
from cnikit.conf import inject_conf, load_conf_list
from cnikit.exec import exec_plugin_with_result
from cnikit.find import find_in_path

net_list = load_conf_list("/etc/cni/net.d", "mynet")
plugin = net_list.plugins[0]
conf = inject_conf(plugin, {"name": net_list.name, "cniVersion": net_list.cni_version})

args = Args(
    command="ADD",
    container_id="example-container",
    netns="/var/run/netns/example",
    ifname="eth0",
    path="/opt/cni/bin",
)
plugin_path = find_in_path(plugin.network.type, ["/opt/cni/bin"])
result = exec_plugin_with_result(plugin_path, conf.bytes, args)
print(result.to_json())
```

## Testing code that runs plugins

`cnikit.fakes` provides `FakeRawExec`, `FakeVersionDecoder` and
`FakeCNIArgs`, which record the calls they receive and return configured
values or raise configured errors, so that code using an executor can be
tested without real plugin programs.

## What cnikit does not do

cnikit has no command-line program. It does not run a whole
configuration list for you: chaining plugins with each one's result
passed to the next, running them in reverse for delete, filtering
capability arguments into `runtimeConfig`, and keeping an on-disk cache
of results per attachment are left to the caller.