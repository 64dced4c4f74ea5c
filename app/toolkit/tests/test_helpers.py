"""Tests for toolkit.helpers."""

import pytest

from toolkit.helpers import mask_email


@pytest.mark.parametrize(
    "email,expected",
    [
        ("john.doe@example.com", "j***@example.com"),
        ("a@example.com", "***@example.com"),
        ("", "***"),
        ("not-an-email", "***"),
    ],
)
def test_mask_email(email, expected):
    assert mask_email(email) == expected
