"""Tests for the early argument scanner."""

from hypothesis import given, strategies as st

from freecol.services.scanner import find_arg


tokens = st.text(min_size=1, max_size=12, alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd")))


class TestFindArg:
    """Tests for find_arg."""

    def test_returns_following_token(self) -> None:
        assert find_arg("--freecol-data", ["--freecol-data", "/opt/data", "--fast"]) == "/opt/data"

    def test_last_occurrence_wins(self) -> None:
        args = ["--default-locale", "de", "--fast", "--default-locale", "fr"]
        assert find_arg("--default-locale", args) == "fr"

    def test_absent_option(self) -> None:
        assert find_arg("--freecol-data", ["--fast", "--server"]) is None

    def test_option_as_final_token(self) -> None:
        assert find_arg("--default-locale", ["--fast", "--default-locale"]) is None

    def test_empty_arguments(self) -> None:
        assert find_arg("--default-locale", []) is None

    def test_value_is_not_validated(self) -> None:
        assert find_arg("--default-locale", ["--default-locale", "--server"]) == "--server"

    def test_equals_form_is_not_recognised(self) -> None:
        assert find_arg("--default-locale", ["--default-locale=de"]) is None


@given(
    prefix=st.lists(tokens, max_size=5),
    values=st.lists(tokens, min_size=1, max_size=4),
    suffix=st.lists(tokens, max_size=5),
)
def test_last_occurrence_property(prefix: list[str], values: list[str], suffix: list[str]) -> None:
    """
    For any argument list with one or more occurrences of an option followed
    by a value, the scanner returns the value of the last occurrence.
    """
    args = list(prefix)
    for value in values:
        args.extend(["--opt", value])
    args.extend(suffix)

    assert find_arg("--opt", args) == values[-1]
