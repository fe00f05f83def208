import os

import pytest

from cnikit.find import EXECUTABLE_FILE_EXTENSIONS, find_in_path


@pytest.fixture
def dirs(tmp_path):
    plugin_dir = tmp_path / "plugins"
    empty_dir = tmp_path / "nothing-here"
    plugin_dir.mkdir()
    empty_dir.mkdir()
    (plugin_dir / "a-cni-plugin").write_text("")
    (plugin_dir / ("a-plugin-with-extension" + EXECUTABLE_FILE_EXTENSIONS[0])).write_text("")
    return str(plugin_dir), str(empty_dir)


def test_multiple_paths(dirs):
    plugin_dir, empty_dir = dirs
    found = find_in_path("a-cni-plugin", [empty_dir, plugin_dir])
    assert found == os.path.join(plugin_dir, "a-cni-plugin")


def test_name_without_extension(dirs):
    plugin_dir, empty_dir = dirs
    found = find_in_path("a-plugin-with-extension", [empty_dir, plugin_dir])
    assert found == os.path.join(plugin_dir, "a-plugin-with-extension" + EXECUTABLE_FILE_EXTENSIONS[0])


def test_no_paths(dirs):
    with pytest.raises(ValueError, match="^no paths provided$"):
        find_in_path("a-cni-plugin", [])


def test_no_plugin_name(dirs):
    with pytest.raises(ValueError, match="^no plugin name provided$"):
        find_in_path("", list(dirs))


def test_not_found(dirs):
    _, empty_dir = dirs
    with pytest.raises(FileNotFoundError) as info:
        find_in_path("a-cni-plugin", [empty_dir])
    assert str(info.value) == f'failed to find plugin "a-cni-plugin" in path [{empty_dir}]'


def test_directory_separator(dirs):
    _, empty_dir = dirs
    bogus = ".." + os.sep + "pluginname"
    with pytest.raises(ValueError) as info:
        find_in_path(bogus, [empty_dir])
    assert str(info.value) == "invalid plugin name: " + bogus


def test_directory_is_not_a_plugin(tmp_path):
    (tmp_path / "sub").mkdir()
    with pytest.raises(FileNotFoundError):
        find_in_path("sub", [str(tmp_path)])