from __future__ import annotations
from collections import Counter
import os
from sjt_core.question_bank import load_bank
from sjt_core.selector import category_distribution, group_by_category, select_scenarios
from sjt_core.config import TEST_SIZE, make_rng

# Configurable targets; defaults match the packaged catalog
TARGETS = {
    "runs": int(os.getenv("TARGET_RUNS", 200)),
    "test_size": int(os.getenv("TARGET_TEST_SIZE", TEST_SIZE)),
    "seed": int(os.getenv("TARGET_SEED", 7)),
}

def main():
    items = load_bank()
    groups = group_by_category(items)
    dist = category_distribution(items)

    print(f"Catalog: {dist['total_questions']} scenarios in {dist['categories_count']} categories; "
          f"simulating {TARGETS['runs']} tests of {TARGETS['test_size']}.\n")

    rng = make_rng(TARGETS["seed"])
    picks: Counter = Counter()
    worst_spread = 0
    for _ in range(TARGETS["runs"]):
        chosen = select_scenarios(items, TARGETS["test_size"], rng)
        counts = Counter(sc.category or "Uncategorized" for sc in chosen)
        picks.update(counts)
        open_cats = [c for c in groups if len(groups[c]) > counts.get(c, 0)]
        if open_cats:
            spread = max(counts.values()) - min(counts.get(c, 0) for c in open_cats)
            worst_spread = max(worst_spread, spread)

    for cat, rows in sorted(groups.items()):
        avg = picks[cat] / TARGETS["runs"]
        print(f"{cat}: catalog={len(rows)}  avg picked={avg:.2f}")

    if worst_spread > 1:
        print(f"\n  → Unbalanced: a category with spare scenarios trailed by {worst_spread}")
    else:
        print("\n  ✓ Selections stay within one scenario of balance")

if __name__ == "__main__":
    main()
