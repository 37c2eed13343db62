"""Workload identity helpers."""

from __future__ import annotations

import re

_ORDINAL_SUFFIX = re.compile(r"-(\d+)$")


def derive_ordinal(pod_name: str | None) -> int:
    """
    Parse the replica ordinal from a StatefulSet-style pod name.

    ``worker-7`` -> 7. Names without a trailing ``-<digits>`` yield 0.
    """
    if not pod_name:
        return 0
    match = _ORDINAL_SUFFIX.search(pod_name)
    return int(match.group(1)) if match else 0
