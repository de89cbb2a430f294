"""Shared fixtures for adaptive_cat tests."""

from typing import List

import pytest

from adaptive_cat.types import MultiZetaStimulus, Stimulus, ZetaCatMap
from adaptive_cat.zeta import Zeta


# ── Item records ─────────────────────────────────────────────────────────────

S1 = {"difficulty": 0.5, "guessing": 0.5, "discrimination": 1, "slipping": 1, "word": "looking"}
S2 = {"difficulty": 3.5, "guessing": 0.5, "discrimination": 1, "slipping": 1, "word": "opaque"}
S3 = {"difficulty": 2, "guessing": 0.5, "discrimination": 1, "slipping": 1, "word": "right"}
S4 = {"difficulty": -2.5, "guessing": 0.5, "discrimination": 1, "slipping": 1, "word": "yes"}
S5 = {"difficulty": -1.8, "guessing": 0.5, "discrimination": 1, "slipping": 1, "word": "mom"}

# Three administered items used for the MLE reference scenario
REFERENCE_ZETAS = [
    {"a": 2.225, "b": -1.885, "c": 0.21, "d": 1},
    {"a": 1.174, "b": -2.411, "c": 0.212, "d": 1},
    {"a": 2.104, "b": -2.439, "c": 0.192, "d": 1},
]
REFERENCE_RESPONSES = [1, 0, 1]

# Two hard misses used for the EAP reference scenarios
MISSED_ZETAS = [
    {"a": 1, "b": -4.0, "c": 0.5, "d": 1},
    {"a": 1, "b": -3.0, "c": 0.5, "d": 1},
]


@pytest.fixture
def stimulus_records() -> List[dict]:
    """Five word items in input order s1..s5."""
    return [dict(S1), dict(S2), dict(S3), dict(S4), dict(S5)]


@pytest.fixture
def stimuli(stimulus_records) -> List[Stimulus]:
    """Parsed versions of s1..s5 in input order."""
    return [Stimulus.from_record(record) for record in stimulus_records]


def make_multi_zeta_stimulus(item_id: str, cat_groups: List[List[str]]) -> MultiZetaStimulus:
    """Item with one default parameter group per entry of ``cat_groups``."""
    return MultiZetaStimulus(
        zetas=[ZetaCatMap(cats=list(cats), zeta=Zeta()) for cats in cat_groups],
        metadata={"id": item_id, "content": f"Multi-Zeta Stimulus content {item_id}"},
    )


@pytest.fixture
def clowder_corpus() -> List[MultiZetaStimulus]:
    """
    Items 0-1 have parameters for both cats, item 2 only for cat1, item 3
    only for cat2 and item 4 for neither.
    """
    return [
        make_multi_zeta_stimulus("0", [["cat1"], ["cat2"]]),
        make_multi_zeta_stimulus("1", [["cat1"], ["cat2"]]),
        make_multi_zeta_stimulus("2", [["cat1"]]),
        make_multi_zeta_stimulus("3", [["cat2"]]),
        make_multi_zeta_stimulus("4", []),
    ]


@pytest.fixture
def clowder_cats() -> dict:
    return {
        "cat1": {"method": "MLE", "theta": 0.5},
        "cat2": {"method": "EAP", "theta": -1.0},
    }


@pytest.fixture
def reference_zetas() -> List[dict]:
    return [dict(zeta) for zeta in REFERENCE_ZETAS]


@pytest.fixture
def reference_responses() -> List[int]:
    return list(REFERENCE_RESPONSES)


@pytest.fixture
def missed_zetas() -> List[dict]:
    return [dict(zeta) for zeta in MISSED_ZETAS]
