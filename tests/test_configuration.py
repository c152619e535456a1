import argparse
import json
import logging

import pytest

from lagrange_keyboard.generate_configuration import (
    PER_COLUMN_KEYS,
    Configuration,
    GenerateConfigAction,
    load_configuration,
    parse_override,
    shape_config,
)


def test_defaults():
    config = load_configuration()

    assert dict(config) == shape_config
    assert config.row_count == config['row_count'] == 5
    for key in PER_COLUMN_KEYS:
        assert len(config[key]) == config.column_count


def test_configuration_is_read_only(config):
    with pytest.raises(AttributeError):
        config.draft = False
    with pytest.raises(AttributeError):
        config.no_such_key  # pylint: disable=pointless-statement


def test_replace(config):
    final = config.replace(draft=False)

    assert not final.draft
    assert config.draft
    assert final.resolution == (3, 0.2)
    assert config.resolution == (12, 2)

    with pytest.raises(ValueError):
        config.replace(no_such_key=1)


@pytest.mark.parametrize("text,expected", [
    ("draft=false", ("draft", False)),
    ("row_radius=200.5", ("row_radius", 200.5)),
    ("nub_sides=[0, 2]", ("nub_sides", [0, 2])),
    ("engine=cadquery", ("engine", "cadquery")),
    (" save_dir = out", ("save_dir", " out")),
])
def test_parse_override(text, expected):
    assert parse_override(text) == expected


@pytest.mark.parametrize("text", ["draft", "=1", ""])
def test_malformed_override(text):
    with pytest.raises(ValueError):
        parse_override(text)


def test_load_file_and_overrides(tmp_path, caplog):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({'row_radius': 200, 'bogus': 1}), encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        config = load_configuration(path, ["draft=false", "wall_thickness=4"])

    assert config.row_radius == 200
    assert config.wall_thickness == 4
    assert not config.draft
    assert 'bogus' not in config
    assert "bogus" in caplog.text


def test_per_column_lengths_are_checked():
    with pytest.raises(ValueError, match="column_radius"):
        load_configuration(overrides=["column_radius=[1, 2]"])


def test_generate_config(tmp_path):
    parser = argparse.ArgumentParser()
    parser.add_argument("--generate-config", action=GenerateConfigAction)
    path = tmp_path / "default.json"

    with pytest.raises(SystemExit):
        parser.parse_args(["--generate-config", str(path)])

    assert json.loads(path.read_text(encoding="utf-8")) == json.loads(json.dumps(shape_config))


def test_mapping_interface():
    config = Configuration({'a': 1, 'b': 2})
    assert len(config) == 2
    assert list(config) == ['a', 'b']
    assert "Configuration" in repr(config)
