import pytest

from mobilespo.ussd.validators import mask_phone, normalize_phone, valid_phone


@pytest.mark.parametrize("raw, expected", [
    ("0123456789", "+27123456789"),
    ("123456789", "+27123456789"),
    ("+27123456789", "+27123456789"),
    ("082 123 4567", "+27821234567"),
    ("(082) 123-4567", "+27821234567"),
    ("+44 20 7946 0958", "+442079460958"),
])
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


def test_valid_phone_requires_digits():
    assert valid_phone("+27 82")
    assert not valid_phone("")
    assert not valid_phone("abc")
    assert not valid_phone(None)


def test_mask_phone_keeps_prefix_only():
    assert mask_phone("+27821234567") == "+27821***"
    assert mask_phone(None) == "unknown"
