"""Wire-name to Python-name conversion."""

from __future__ import annotations

import re
from functools import lru_cache

# An acronym run followed by a capitalised word: "MLModel" -> "ML_Model"
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
# Lower/digit followed by upper: "instanceId" -> "instance_Id"
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


@lru_cache(maxsize=4096)
def xform_name(name: str) -> str:
    """Convert a CamelCase wire name to snake_case.

    ``DescribeVpcs`` -> ``describe_vpcs``, ``MLModelId`` -> ``ml_model_id``,
    ``VpcIds`` -> ``vpc_ids``. Names that are already snake_case pass
    through unchanged.
    """
    if "_" in name and name.lower() == name:
        return name
    s = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    s = _WORD_BOUNDARY.sub(r"\1_\2", s)
    return s.replace("-", "_").lower()
