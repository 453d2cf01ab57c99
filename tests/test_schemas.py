import pytest
from pydantic import ValidationError


def test_result_is_immutable(sample_result):
    assert isinstance(sample_result.potential_issues, tuple)
    assert isinstance(sample_result.recommendations, tuple)
    with pytest.raises(ValidationError):
        sample_result.observation = "changed"
    with pytest.raises(AttributeError):
        sample_result.potential_issues.append("Another issue")
