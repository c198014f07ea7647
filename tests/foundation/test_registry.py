"""Tests for ExtensionPoint."""

from concurrent.futures import ThreadPoolExecutor

from reckon.foundation.errors import ErrorCode, ReckonError
from reckon.foundation.registry import ExtensionPoint


class TestExtensionPoint:
    """Tests for the identifier-keyed registry."""

    def test_add_and_get(self) -> None:
        """Registered extensions resolve by identifier."""
        point: ExtensionPoint[int] = ExtensionPoint("numbers")
        assert point.add("one", 1)
        assert point.get("one").get() == 1
        assert "one" in point
        assert len(point) == 1

    def test_duplicate_refused(self) -> None:
        """The first registration wins."""
        point: ExtensionPoint[int] = ExtensionPoint("numbers")
        point.add("n", 1)
        assert not point.add("n", 2)
        assert point.get("n").get() == 1

    def test_none_refused(self) -> None:
        """None is not an extension."""
        point: ExtensionPoint[object] = ExtensionPoint("things")
        assert not point.add("nothing", None)
        assert "nothing" not in point

    def test_unknown_is_absent_with_problem(self) -> None:
        """Unknown identifiers give an absent result, not an exception."""
        point: ExtensionPoint[int] = ExtensionPoint("numbers")
        result = point.get("missing")

        assert result.is_empty
        assert result.has_errors
        error = result.problems[0].exception
        assert isinstance(error, ReckonError)
        assert error.code is ErrorCode.EXTENSION_NOT_FOUND

    def test_registration_order(self) -> None:
        """Identifiers and extensions keep registration order."""
        point: ExtensionPoint[str] = ExtensionPoint("letters")
        for letter in "cab":
            point.add(letter, letter.upper())
        assert point.identifiers() == ("c", "a", "b")
        assert point.extensions() == ("C", "A", "B")
        assert list(point) == ["c", "a", "b"]

    def test_remove(self) -> None:
        """remove() frees the identifier."""
        point: ExtensionPoint[int] = ExtensionPoint("numbers")
        point.add("n", 1)
        assert point.remove("n")
        assert not point.remove("n")
        assert point.add("n", 2)

    def test_concurrent_add_single_winner(self) -> None:
        """Exactly one concurrent registration succeeds."""
        point: ExtensionPoint[int] = ExtensionPoint("numbers")
        with ThreadPoolExecutor(max_workers=8) as executor:
            outcomes = list(executor.map(lambda i: point.add("shared", i), range(64)))
        assert outcomes.count(True) == 1
