import io

import pytest
import yaml

from hgcrocfg.outputs import (
    default_output_path,
    emit_parameters_yaml,
    page_included,
    write_register_csv,
)


@pytest.mark.parametrize(
    "path, ext, expected",
    [
        ("settings.yaml", ".csv", "settings.csv"),
        ("registers.csv", "yaml", "registers.yaml"),
        ("a.b.yaml", ".csv", "a.b.csv"),
        ("noext", ".csv", "noext.csv"),
    ],
)
def test_default_output_path(path, ext, expected):
    assert default_output_path(path, ext) == expected


def _csv_text(settings, version="v1.2.3"):
    buf = io.StringIO()
    write_register_csv(buf, settings, version)
    return buf.getvalue()


def test_register_csv_header_lines():
    lines = _csv_text({}, "v1.2.3").splitlines()
    assert lines == [
        "# This register settings file was generated by pfcompile",
        "#    v1.2.3",
        "#    The columns are: page, register, value (in hex)",
    ]


def test_register_csv_row_format():
    lines = _csv_text({1: {2: 10}}).splitlines()
    assert lines[-1] == "1,2,0x0a"


def test_register_csv_sorted_and_roundtrip():
    settings = {297: {3: 0xFF, 0: 0x01}, 5: {7: 0x80, 1: 0}}
    rows = [
        line for line in _csv_text(settings).splitlines() if not line.startswith("#")
    ]
    parsed = [tuple(int(c, 0) for c in row.split(",")) for row in rows]
    assert parsed == sorted(parsed)
    back = {}
    for page, reg, val in parsed:
        back.setdefault(page, {})[reg] = val
    assert back == settings


def test_page_included_default():
    assert page_included("TOP", [], True) is True
    assert page_included("TOP", [], False) is False


def test_page_included_prefix_case_insensitive():
    assert page_included("CHANNEL_3", [("channel", False)], True) is False
    assert page_included("TOP", [("channel", False)], True) is True


def test_page_included_last_rule_wins():
    rules = [("CH", False), ("CHANNEL_1", True)]
    assert page_included("CHANNEL_12", rules, True) is True
    assert page_included("CHANNEL_2", rules, True) is False
    rules_reversed = list(reversed(rules))
    assert page_included("CHANNEL_12", rules_reversed, True) is False


def test_page_included_longer_prefix_no_match():
    assert page_included("CH", [("CHANNEL", False)], True) is True


def test_emit_yaml_roundtrip():
    params = {"TOP": {"PHASE": 3, "EN_PLL": 1}, "CHANNEL_0": {"DACB": 63}}
    text = emit_parameters_yaml(params, ["generated", "v0.0.0"])
    assert yaml.safe_load(text) == params


def test_emit_yaml_comments_first():
    text = emit_parameters_yaml({"TOP": {"PHASE": 0}}, ["first", "second"])
    lines = text.splitlines()
    assert lines[:2] == ["# first", "# second"]


def test_emit_yaml_sorted_pages():
    text = emit_parameters_yaml({"TOP": {"B": 1, "A": 2}, "CM0": {"X": 0}})
    top_keys = [line[:-1] for line in text.splitlines() if not line.startswith(" ")]
    assert top_keys == ["CM0", "TOP"]
    assert text.index("A:") < text.index("B:")
    assert "  A: 2" in text.splitlines()


def test_emit_yaml_empty():
    assert yaml.safe_load(emit_parameters_yaml({}, ["c"])) == {}