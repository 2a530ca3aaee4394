from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from . import config
from .question_bank import LEVELS, SKILLS, load_bank
from .types import AssessmentItem, ChoiceItem


def _blank_level() -> dict[str, object]:
    return {
        "skills": {sk: 0 for sk in SKILLS},
        "items": 0,
        "core": 0,
        "points": 0,
    }


def audit_items(items: Iterable[AssessmentItem]) -> dict[str, object]:
    coverage: dict[str, dict[str, object]] = {lvl: _blank_level() for lvl in LEVELS}
    totals = {"items": 0, "core": 0, "fill-blank": 0, "choice": 0}
    warnings: list[str] = []
    seen: set[str] = set()

    for item in items:
        if item.id in seen:
            warnings.append(f"duplicate item id {item.id}")
        seen.add(item.id)

        data = coverage.setdefault(item.level, _blank_level())
        data["skills"][item.skill] = data["skills"].get(item.skill, 0) + 1  # type: ignore[index]
        data["items"] += 1  # type: ignore[operator]
        data["points"] += int(item.points)  # type: ignore[operator]
        totals["items"] += 1
        if item.is_core:
            data["core"] += 1  # type: ignore[operator]
            totals["core"] += 1

        if isinstance(item, ChoiceItem):
            totals["choice"] += 1
            if item.correct_answer not in item.options:
                warnings.append(f"{item.id} correct_answer is not one of its options")
        else:
            totals["fill-blank"] += 1

        if int(item.points) <= 0:
            warnings.append(f"{item.id} has non-positive points ({item.points})")

    for level in LEVELS:
        data = coverage[level]
        if data["items"] < config.MIN_ITEMS_PER_LEVEL:  # type: ignore[operator]
            warnings.append(
                f"{level} has {data['items']} items (<{config.MIN_ITEMS_PER_LEVEL})"
            )
        if data["items"] and not data["core"]:
            warnings.append(f"{level} has no core items")

    return {"coverage": coverage, "warnings": warnings, "totals": totals}


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[str, dict[str, object]] = summary["coverage"]  # type: ignore[assignment]
    print("=== Bank Coverage ===")
    for level in LEVELS:
        data = coverage.get(level) or _blank_level()
        skills = data["skills"]  # type: ignore[index]
        parts = "  ".join(f"{sk}:{skills.get(sk, 0):2d}" for sk in SKILLS)  # type: ignore[union-attr]
        print(f"{level}  items:{data['items']:3d}  core:{data['core']:2d}  points:{data['points']:3d}  {parts}")

    warnings: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")

    print("\nTotals:", summary["totals"])


def write_summary(summary: dict[str, object], path: Path = Path("/tmp/bank_audit.json")) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    return text


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Report item-bank coverage per level and skill.")
    ap.add_argument("--bank", default=None, help="bank JSON file (defaults to the packaged bank)")
    ap.add_argument("--out", default="/tmp/bank_audit.json")
    a = ap.parse_args(argv)

    items = load_bank(a.bank)
    summary = audit_items(items)
    print_report(summary)
    write_summary(summary, Path(a.out))
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
