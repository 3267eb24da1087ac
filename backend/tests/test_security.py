from datetime import date
import pytest
from usermgmt.core.security import calculate_age, get_password_hash, verify_password


def test_hash_is_not_plaintext_and_is_salted():
    first = get_password_hash("secret")
    second = get_password_hash("secret")
    assert first != "secret"
    assert first.startswith("$2b$")
    assert first != second


def test_verify_accepts_original_password():
    hashed = get_password_hash("secret")
    assert verify_password("secret", hashed) is True


@pytest.mark.parametrize("candidate", ["Secret", "secret ", "", "other"])
def test_verify_rejects_other_passwords(candidate):
    hashed = get_password_hash("secret")
    assert verify_password(candidate, hashed) is False


def test_verify_raises_on_malformed_hash():
    with pytest.raises(ValueError):
        verify_password("secret", "not-a-bcrypt-hash")


@pytest.mark.parametrize(
    "dob, today, expected",
    [
        (date(2000, 1, 1), date(2024, 1, 1), 24),
        (date(2000, 6, 15), date(2024, 6, 14), 23),
        (date(2000, 6, 15), date(2024, 6, 15), 24),
        (date(2000, 2, 29), date(2001, 2, 28), 0),
        (date(2000, 2, 29), date(2001, 3, 1), 1),
        (date(2024, 5, 1), date(2024, 5, 1), 0),
    ],
)
def test_calculate_age(dob, today, expected):
    assert calculate_age(dob, today) == expected


def test_calculate_age_defaults_to_today():
    today = date.today()
    assert calculate_age(date(today.year - 30, 1, 1)) == 30
