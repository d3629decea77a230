from __future__ import annotations

import random

import pytest

from sjt_core.types import Scenario


def make_scenario(
    idx: int = 0,
    *,
    category: str | None = "Professional Boundaries",
    ideal_ranking: list[int] | None = None,
    text: str | None = None,
) -> Scenario:
    letters = "ABCDE"
    return Scenario(
        id=f"sc_{idx}",
        scenario=text if text is not None else f"Scenario {idx} in {category}",
        options=[f"{letters[i]}{idx}" for i in range(5)],
        ideal_ranking=list(ideal_ranking or [1, 2, 3, 4, 5]),
        explanations=[f"Explanation {letters[i]}{idx}" for i in range(5)],
        category=category,
    )


def build_synthetic_catalog(sizes: dict[str | None, int] | None = None) -> list[Scenario]:
    """Create a deterministic catalog with ``sizes[category]`` scenarios each."""

    sizes = sizes if sizes is not None else {"Boundaries": 4, "Confidentiality": 4, "Teamwork": 4}
    items: list[Scenario] = []
    for category, n in sizes.items():
        for _ in range(n):
            items.append(make_scenario(len(items), category=category))
    return items


@pytest.fixture
def synthetic_catalog() -> list[Scenario]:
    return build_synthetic_catalog()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)
