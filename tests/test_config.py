from pathlib import Path

import pytest

from cmpler.config import Config, OptLevel, find_config_file
from cmpler.errors import CompilerError, ConfigError


def test_defaults():
    cfg = Config()
    assert cfg.opt_level is OptLevel.DEFAULT
    assert cfg.emit_ir is False
    assert cfg.emit_obj is False
    assert cfg.target is None
    assert cfg.output is None
    assert cfg.verbose is False


def test_from_file_reads_values(tmp_path):
    path = tmp_path / "cmpler.toml"
    path.write_text(
        'emit_ir = true\nemit_obj = true\ntarget = "x86_64"\n'
        'output = "out.ll"\nverbose = true\n'
    )
    cfg = Config.from_file(path)
    assert cfg.emit_ir is True
    assert cfg.emit_obj is True
    assert cfg.target == "x86_64"
    assert cfg.output == Path("out.ll")
    assert cfg.verbose is True


def test_missing_keys_use_defaults(tmp_path):
    path = tmp_path / "cmpler.toml"
    path.write_text("emit_ir = true\n")
    cfg = Config.from_file(path)
    assert cfg == Config(emit_ir=True)


def test_opt_level_in_file_is_ignored(tmp_path):
    path = tmp_path / "cmpler.toml"
    path.write_text('opt_level = "none"\n')
    assert Config.from_file(path).opt_level is OptLevel.DEFAULT


def test_unreadable_file_raises_config_error(tmp_path):
    with pytest.raises(ConfigError) as info:
        Config.from_file(tmp_path / "absent.toml")
    assert str(info.value).startswith("Failed to read config file")


def test_invalid_toml_raises_config_error(tmp_path):
    path = tmp_path / "cmpler.toml"
    path.write_text("emit_ir = = true\n")
    with pytest.raises(ConfigError) as info:
        Config.from_file(path)
    assert str(info.value).startswith("Failed to parse config TOML")


def test_wrong_type_raises_config_error(tmp_path):
    path = tmp_path / "cmpler.toml"
    path.write_text('emit_ir = "yes"\n')
    with pytest.raises(CompilerError) as info:
        Config.from_file(path)
    assert info.value.report.startswith("Configuration error: ")


def test_find_config_file_walks_upwards(tmp_path):
    (tmp_path / "cmpler.toml").write_text("")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert find_config_file("cmpler.toml", nested) == tmp_path / "cmpler.toml"


def test_find_config_file_prefers_nearest(tmp_path):
    (tmp_path / "cmpler.toml").write_text("")
    inner = tmp_path / "inner"
    inner.mkdir()
    (inner / "cmpler.toml").write_text("")
    assert find_config_file("cmpler.toml", inner) == inner / "cmpler.toml"


def test_find_config_file_ignores_directories(tmp_path):
    (tmp_path / "unlikely-config-name.toml").mkdir()
    assert find_config_file("unlikely-config-name.toml", tmp_path) is None


def test_load_uses_working_directory(tmp_path, monkeypatch):
    (tmp_path / "cmpler.toml").write_text("emit_obj = true\n")
    sub = tmp_path / "src"
    sub.mkdir()
    monkeypatch.chdir(sub)
    cfg = Config.load()
    assert cfg.emit_obj is True
    assert cfg.emit_ir is False


def test_opt_level_names():
    assert Config().opt_level.value == "default"
    names = ["none", "less", "default", "aggressive"]
    assert [OptLevel(name) for name in names] == [
        OptLevel.NONE,
        OptLevel.LESS,
        OptLevel.DEFAULT,
        OptLevel.AGGRESSIVE,
    ]