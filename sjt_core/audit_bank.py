from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from . import config
from .question_bank import load_bank
from .selector import available_categories, category_distribution
from .types import Scenario
from .validators import scenario_problems


def _blank_category() -> dict[str, object]:
    return {"scenarios": 0, "malformed": 0, "missing_id": 0}


def audit_items(items: Iterable[Scenario]) -> dict[str, object]:
    items = list(items)
    coverage: dict[str, dict[str, object]] = {cat: _blank_category() for cat in available_categories(items)}
    totals = {"scenarios": 0, "malformed": 0, "missing_id": 0}
    errors: list[str] = []

    for pos, item in enumerate(items):
        cat = item.category or config.UNCATEGORIZED
        data = coverage.setdefault(cat, _blank_category())
        data["scenarios"] += 1  # type: ignore[operator]
        totals["scenarios"] += 1

        if not item.id and config.BANK_EXPECT_IDS:
            data["missing_id"] += 1  # type: ignore[operator]
            totals["missing_id"] += 1

        problems = scenario_problems(item)
        if problems:
            data["malformed"] += 1  # type: ignore[operator]
            totals["malformed"] += 1
            errors.append(f"#{pos} {item.id or '(no id)'}: " + "; ".join(problems))

    warnings: list[str] = []
    for cat, data in coverage.items():
        count = data["scenarios"]
        if count < config.BANK_MIN_PER_CATEGORY:  # type: ignore[operator]
            warnings.append(f"{cat} has {count} scenarios (<{config.BANK_MIN_PER_CATEGORY})")
        missing = data["missing_id"]
        if missing and config.BANK_EXPECT_IDS:
            warnings.append(f"{cat} has {missing} scenarios missing id")

    summary = {
        "coverage": coverage,
        "distribution": category_distribution(items)["distribution"],
        "errors": errors,
        "warnings": warnings,
        "totals": totals,
    }
    return summary


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[str, dict[str, object]] = summary["coverage"]  # type: ignore[assignment]
    dist: dict[str, dict[str, int]] = summary["distribution"]  # type: ignore[assignment]
    print("=== Catalog Coverage ===")
    for cat in sorted(coverage):
        data = coverage[cat]
        share = dist.get(cat, {}).get("percentage", 0)
        print(f"  {cat:<32} {data['scenarios']:3d} scenarios ({share:3d}%)  malformed: {data['malformed']}")

    for title, key in (("Errors", "errors"), ("Warnings", "warnings")):
        msgs: list[str] = summary[key]  # type: ignore[assignment]
        if msgs:
            print(f"\n{title}:")
            for msg in msgs:
                print(f" - {msg}")
    if not summary["errors"] and not summary["warnings"]:
        print("\nNo warnings.")

    print("\nTotals:", summary["totals"])


def write_summary(summary: dict[str, object], path: Path = Path("/tmp/catalog_audit.json")) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    print(text)
    return text


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Audit a scenario catalog for structure and category coverage.")
    ap.add_argument("--bank", default=None, help="catalog JSON (defaults to the packaged catalog)")
    ap.add_argument("--out", default="/tmp/catalog_audit.json")
    a = ap.parse_args(argv)

    items = load_bank(a.bank)
    summary = audit_items(items)
    print_report(summary)
    write_summary(summary, Path(a.out))
    if summary["errors"]:
        return 1
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
