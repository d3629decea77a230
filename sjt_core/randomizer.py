from __future__ import annotations

import logging
import random
from typing import Iterable, List, Optional, Sequence

from .config import make_rng
from .shuffle import apply_permutation, invert_permutation, shuffle_indices
from .types import DisplayScenario, RankEntry, Scenario
from .validators import validate_scenario

log = logging.getLogger(__name__)


def randomize_scenario(scenario: Scenario, rng: Optional[random.Random] = None) -> DisplayScenario:
    """Shuffle options, ideal ranks and explanations with one shared permutation.

    Raises ``CatalogError`` for a malformed scenario before anything is drawn.
    """

    validate_scenario(scenario)
    perm = shuffle_indices(len(scenario.options), rng)
    log.debug("shuffle %s -> %s", scenario.id or scenario.scenario[:30], perm)
    return DisplayScenario(
        source=scenario,
        options=apply_permutation(scenario.options, perm),
        ideal_ranking=apply_permutation(scenario.ideal_ranking, perm),
        explanations=apply_permutation(scenario.explanations, perm),
        shuffle_map=perm,
        original_to_display=invert_permutation(perm),
    )


def randomize_test(scenarios: Iterable[Scenario], rng: Optional[random.Random] = None) -> List[DisplayScenario]:
    rng = rng or make_rng()
    return [randomize_scenario(sc, rng) for sc in scenarios]


def display_to_canonical(ranking: Iterable[RankEntry], shuffle_map: Sequence[int]) -> List[RankEntry]:
    return [RankEntry(option_index=shuffle_map[r.option_index], rank=r.rank) for r in ranking]


def canonical_to_display(ranking: Iterable[RankEntry], original_to_display: Sequence[int]) -> List[RankEntry]:
    return [RankEntry(option_index=original_to_display[r.option_index], rank=r.rank) for r in ranking]
