import pytest

import machineimage.util

from machineimage.exceptions import InvalidDuration, InvalidSpec, InvalidTemplate

@pytest.mark.parametrize("value,seconds", [
    ("0", 0),
    ("5s", 5),
    ("5m", 300),
    ("1h", 3600),
    ("1m30s", 90),
    ("300ms", 0.3),
    ("1.5h", 5400),
])
def test_parse_duration(value, seconds):
    assert machineimage.util.parse_duration(value, "timeout") == pytest.approx(seconds)

@pytest.mark.parametrize("value", ["SO BAD", "", "5", "5 s", "-5s", "5x", 5])
def test_parse_duration_invalid(value):
    with pytest.raises(InvalidDuration):
        machineimage.util.parse_duration(value, "timeout")

@pytest.mark.parametrize("value,expected", [
    (None, False),
    (True, True),
    (False, False),
    ("", False),
    ("true", True),
    ("1", True),
    ("False", False),
])
def test_to_bool(value, expected):
    assert machineimage.util.to_bool(value, "flag") is expected

@pytest.mark.parametrize("value", ["NOT A BOOL", "yes", 1, [True]])
def test_to_bool_invalid(value):
    with pytest.raises(InvalidSpec, match="'flag'"):
        machineimage.util.to_bool(value, "flag")

def test_to_int():
    assert machineimage.util.to_int(3, "count") == 3
    assert machineimage.util.to_int("42", "count") == 42

    for value in (True, "4.2", None, "four"):
        with pytest.raises(InvalidSpec):
            machineimage.util.to_int(value, "count")

def test_to_str_dict_rejects_non_string_values():
    with pytest.raises(InvalidSpec, match="labels.team"):
        machineimage.util.to_str_dict({"team" : 1}, "labels")

def test_render_resolves_placeholders():
    name = machineimage.util.render("packer-{{timestamp}}", "name")

    assert name.startswith("packer-")
    assert name[len("packer-"):].isdigit()

    name = machineimage.util.render("disk-{{ uuid }}", "name")

    assert "{{" not in name
    assert len(name) == len("disk-") + 36

def test_render_unknown_placeholder():
    with pytest.raises(InvalidTemplate, match="isotime"):
        machineimage.util.render("packer-{{isotime}}", "name")

def test_collect():
    errs = []

    def fail():
        raise InvalidSpec("nope")

    assert machineimage.util.collect(errs, fail) is None
    assert machineimage.util.collect(errs, lambda: 7) == 7
    assert [str(err) for err in errs] == ["nope"]
