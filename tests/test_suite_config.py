import json

import pytest

from node_compat_app import suite_config


def test_load_config_from_file(config_file):
    """Test that the configuration is parsed as-is from a JSON file."""
    config = suite_config.load_config(config_file)
    assert config["nodeVersion"] == "18.12.1"
    assert list(config["tests"]) == ["common", "parallel", "pseudo-tty", "sequential"]


def test_load_config_default_location():
    """The bundled configuration lives next to the module and is loadable."""
    config = suite_config.load_config()
    assert config["nodeVersion"]
    for section in suite_config.CONFIG_SECTIONS:
        assert isinstance(config[section], dict)


def test_load_config_keeps_unknown_keys(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"nodeVersion": "1", "extra": True}))
    assert suite_config.load_config(path)["extra"] is True


def test_load_config_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        suite_config.load_config(tmp_path / "missing.json")


def test_load_config_malformed_json_raises(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{'invalid_json':}")
    with pytest.raises(json.JSONDecodeError):
        suite_config.load_config(path)


def test_get_suites_missing_section_is_empty():
    assert suite_config.get_suites({"nodeVersion": "1"}, "darwinIgnore") == {}


def test_check_config_clean(sample_config):
    assert suite_config.check_config(sample_config) == []


def test_check_bundled_config_is_clean():
    assert suite_config.check_config(suite_config.load_config()) == []


def test_check_config_ignore_not_in_tests(sample_config):
    sample_config["ignore"]["sequential"] = ["test-not-listed.js"]
    problems = suite_config.check_config(sample_config)
    assert problems == [
        {
            "section": "ignore",
            "suite": "sequential",
            "entry": "test-not-listed.js",
            "problem": "not listed in tests",
        }
    ]


def test_check_config_bad_shapes(sample_config):
    sample_config["windowsIgnore"] = ["not", "an", "object"]
    sample_config["tests"]["pummel"] = "test-x.js"
    del sample_config["nodeVersion"]
    problems = {
        (p["section"], p["problem"]) for p in suite_config.check_config(sample_config)
    }
    assert ("nodeVersion", "missing nodeVersion") in problems
    assert ("windowsIgnore", "section is not an object") in problems
    assert ("tests", "suite is not a list of strings") in problems


def test_check_config_non_object_document():
    assert suite_config.check_config([]) == [
        {
            "section": "",
            "suite": "",
            "entry": "",
            "problem": "document is not an object",
        }
    ]
