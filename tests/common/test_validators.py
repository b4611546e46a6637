import pytest

from rollcall.common.validators import require_id_list, require_int
from rollcall.core.exceptions import ValidationError


@pytest.mark.parametrize("value, expected", [(3, 3), ("7", 7), (4.0, 4)])
def test_require_int_accepts_whole_numbers(value, expected):
    assert require_int(value, "ID") == expected


@pytest.mark.parametrize("value", [True, False, 3.7, "abc", None, [1]])
def test_require_int_rejects_everything_else(value):
    with pytest.raises(ValidationError, match="ID must be an integer"):
        require_int(value, "ID")


def test_id_list_rejects_truncatable_values():
    assert require_id_list(["1", 2], "Students") == [1, 2]
    with pytest.raises(ValidationError):
        require_id_list([1, 2.5], "Students")
