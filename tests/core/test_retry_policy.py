"""Retry Policy - verifies delay math and parameter validation.

Tests:
    - Default delays are 1000, 3000, 9000 ms and are capped at 10000
    - max_attempts = max_retries + 1
    - Invalid parameters are rejected at construction
"""

import pytest

from event_maker.core.retry_policy import RetryPolicy


def test_default_delay_sequence():
    policy = RetryPolicy()
    assert [policy.delay_ms(a) for a in range(3)] == [1000, 3000, 9000]


def test_delay_is_capped():
    policy = RetryPolicy()
    assert policy.delay_ms(3) == 10_000
    assert policy.delay_ms(10) == 10_000


def test_max_attempts():
    assert RetryPolicy().max_attempts == 4
    assert RetryPolicy(max_retries=0).max_attempts == 1


def test_custom_multiplier():
    policy = RetryPolicy(initial_delay_ms=100, multiplier=2, max_delay_ms=1000)
    assert [policy.delay_ms(a) for a in range(5)] == [100, 200, 400, 800, 1000]


@pytest.mark.parametrize("kwargs", [
    {"max_retries": -1},
    {"initial_delay_ms": -5},
    {"multiplier": 0.5},
])
def test_invalid_parameters_rejected(kwargs):
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)
