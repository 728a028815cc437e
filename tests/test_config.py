"""Tests for rule thresholds and threshold config loading."""

import json

import pytest

from compliance_metrics.config import (
    DEFAULT_THRESHOLDS,
    ConfigError,
    Thresholds,
    load_thresholds,
)
from compliance_metrics.models import RuleKind


def _write_config(tmp_path, data):
    path = tmp_path / ".compliance-metrics.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


# --- defaults ---

def test_default_thresholds():
    assert DEFAULT_THRESHOLDS == Thresholds(
        file_length=300, function_length=30, max_params=3, cyclomatic_complexity=10
    )


def test_for_rule_maps_rule_names_to_thresholds():
    assert DEFAULT_THRESHOLDS.for_rule(RuleKind.FILE_LENGTH) == 300
    assert DEFAULT_THRESHOLDS.for_rule(RuleKind.FUNCTION_LENGTH) == 30
    assert DEFAULT_THRESHOLDS.for_rule(RuleKind.MAX_PARAMS) == 3
    assert DEFAULT_THRESHOLDS.for_rule(RuleKind.CYCLOMATIC_COMPLEXITY) == 10


def test_magic_number_has_no_threshold():
    assert DEFAULT_THRESHOLDS.for_rule(RuleKind.MAGIC_NUMBER) is None


# --- load_thresholds ---

def test_missing_config_returns_defaults(tmp_path):
    assert load_thresholds(str(tmp_path / "nope.json")) == DEFAULT_THRESHOLDS


def test_config_overrides_only_named_rules(tmp_path):
    path = _write_config(tmp_path, {"file-length": 500, "max-params": 4})
    thresholds = load_thresholds(path)
    assert thresholds.file_length == 500
    assert thresholds.max_params == 4
    assert thresholds.function_length == 30
    assert thresholds.cyclomatic_complexity == 10


def test_unknown_rule_is_rejected(tmp_path):
    path = _write_config(tmp_path, {"magic-number": 3})
    with pytest.raises(ConfigError, match="Unknown rule 'magic-number'"):
        load_thresholds(path)


def test_negative_threshold_is_rejected(tmp_path):
    path = _write_config(tmp_path, {"function-length": -1})
    with pytest.raises(ConfigError):
        load_thresholds(path)


def test_non_integer_threshold_is_rejected(tmp_path):
    for value in ("30", 2.5, True):
        path = _write_config(tmp_path, {"function-length": value})
        with pytest.raises(ConfigError):
            load_thresholds(path)


def test_config_must_be_an_object(tmp_path):
    path = _write_config(tmp_path, [300, 30])
    with pytest.raises(ConfigError, match="JSON object"):
        load_thresholds(path)


def test_invalid_json_is_a_config_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_thresholds(str(path))
