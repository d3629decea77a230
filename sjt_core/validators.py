from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Sequence
from .types import Scenario, RankEntry
from .config import OPTIONS_PER_QUESTION


class CatalogError(ValueError):
    """A catalog entry cannot be displayed or scored."""


def scenario_problems(sc: Scenario) -> List[str]:
    n = len(sc.options)
    out: List[str] = []
    if n == 0:
        out.append("no options")
    if len(sc.ideal_ranking) != n:
        out.append(f"ideal_ranking has {len(sc.ideal_ranking)} entries for {n} options")
    if len(sc.explanations) != n:
        out.append(f"explanations has {len(sc.explanations)} entries for {n} options")
    if sorted(sc.ideal_ranking) != list(range(1, len(sc.ideal_ranking) + 1)):
        out.append(f"ideal_ranking {list(sc.ideal_ranking)} is not a permutation of 1..{len(sc.ideal_ranking)}")
    return out


def validate_scenario(sc: Scenario) -> None:
    problems = scenario_problems(sc)
    if problems:
        label = sc.id or sc.scenario[:40]
        raise CatalogError(f"malformed scenario {label!r}: " + "; ".join(problems))


@dataclass
class RankingCheck:
    is_valid: bool
    is_complete: bool
    has_valid_ranks: bool
    issues: Dict[str, bool] = field(default_factory=dict)


def validate_ranking(ranking: Sequence[RankEntry], expected: int = OPTIONS_PER_QUESTION) -> RankingCheck:
    is_complete = len(ranking) == expected
    ranks = sorted(int(r.rank) for r in ranking)
    has_valid_ranks = ranks == list(range(1, expected + 1))
    indices = {int(r.option_index) for r in ranking}
    # the same option ranked twice would otherwise pass as complete
    if len(indices) != len(ranking) or any(i < 0 or i >= expected for i in indices):
        has_valid_ranks = False
    return RankingCheck(
        is_valid=is_complete and has_valid_ranks,
        is_complete=is_complete,
        has_valid_ranks=has_valid_ranks,
        issues={
            "incomplete": not is_complete,
            "duplicate_ranks": is_complete and not has_valid_ranks,
            "invalid_rank_values": any(r.rank < 1 or r.rank > expected for r in ranking),
        },
    )
