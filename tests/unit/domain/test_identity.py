"""
Unit tests for workload identity derivation.
"""

import pytest

from pod_lifecycle.domain.identity import derive_ordinal


@pytest.mark.parametrize(
    ("pod_name", "expected"),
    [
        ("worker-7", 7),
        ("worker-0", 0),
        ("kafka-consumer-12", 12),
        ("worker", 0),
        ("worker-abc", 0),
        ("worker-7a", 0),
        ("", 0),
        (None, 0),
    ],
)
def test_derive_ordinal(pod_name, expected):
    assert derive_ordinal(pod_name) == expected
