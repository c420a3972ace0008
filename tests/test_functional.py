import pytest

from finflow.errors import NotFoundError
from finflow.functional import Either, Left, Nothing, Right, Some, find_first


def test_maybe_map():
    assert Some(5).map(lambda x: x * 2).get_or_else(0) == 10
    assert Nothing().map(lambda x: x * 2).get_or_else(0) == 0
    assert Nothing().is_none()


def test_find_first():
    assert find_first([1, 4, 6], lambda x: x % 2 == 0) == Some(4)
    assert find_first([], lambda x: True) == Nothing()


def test_either_outcomes():
    def safe_divide(x: int) -> Either[str, int]:
        if x == 0:
            return Left("Division by zero")
        return Right(10 // x)

    assert safe_divide(2) == Right(5)
    assert safe_divide(2).is_right()
    assert safe_divide(0).get_error() == "Division by zero"
    assert safe_divide(0).get_or_else(-1) == -1
    assert Left("e") != Right("e")


def test_unwrap_raises_carried_error():
    assert Right(3).unwrap() == 3
    with pytest.raises(NotFoundError):
        Left(NotFoundError("Goal", "g1")).unwrap()
    with pytest.raises(ValueError):
        Left("plain").unwrap()
    with pytest.raises(ValueError):
        Right(1).get_error()
