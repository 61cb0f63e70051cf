import pytest

from naming import MAX_VALUE_LENGTH, PLACEHOLDER_VALUE, to_valid_value, trim_length


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("environment-mycluster-dev", "environment-mycluster-dev"),
        ("My_Repo", "my-repo"),
        ("org/repo name!!", "org-repo-name"),
        ("--leading-and-trailing--", "leading-and-trailing"),
        ("v1.2.3", "v1.2.3"),
        ("0123456789ABCDEF", "0123456789abcdef"),
    ],
)
def test_to_valid_value(raw: str, expected: str) -> None:
    assert to_valid_value(raw) == expected


@pytest.mark.parametrize("raw", ["", "___", "...", "ÅÅÅ", "/"])
def test_to_valid_value_maps_unusable_input_to_placeholder(raw: str) -> None:
    assert to_valid_value(raw) == PLACEHOLDER_VALUE


def test_to_valid_value_is_length_bounded_and_ends_alphanumeric() -> None:
    value = to_valid_value("a" * 62 + "-" + "b" * 10)

    assert len(value) <= MAX_VALUE_LENGTH
    assert value == "a" * 62
    assert to_valid_value("x" * 500) == "x" * MAX_VALUE_LENGTH


def test_to_valid_value_is_deterministic() -> None:
    assert to_valid_value("Some Repo") == to_valid_value("Some Repo")


def test_trim_length_never_pads() -> None:
    assert trim_length("abc", 10) == "abc"
    assert trim_length("abcdef", 3) == "abc"
    assert trim_length("abc", 0) == ""
    assert trim_length("abc", -1) == ""
