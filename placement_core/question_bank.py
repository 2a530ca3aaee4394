from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, List, Optional
from .types import AssessmentItem, ChoiceItem, FillBlankItem

LEVELS = ["A1", "A2", "B1", "B2"]
SKILLS = ["grammar", "vocabulary", "reading"]
CHOICE_KINDS = ("multiple-choice", "reading-comprehension")
_PACKAGED_BANK = Path(__file__).parent / "data" / "bank.json"


def _points(raw: Dict[str, Any]) -> int:
    points = int(raw.get("points", 1))
    if points <= 0:
        raise ValueError(f"item {raw.get('id')!r}: points must be positive, got {points}")
    return points


def item_from_dict(raw: Dict[str, Any]) -> AssessmentItem:
    kind = raw.get("kind") or raw.get("type")
    level = raw.get("level")
    skill = raw.get("skill")
    if level not in LEVELS:
        raise ValueError(f"item {raw.get('id')!r}: unknown level {level!r}")
    if skill not in SKILLS:
        raise ValueError(f"item {raw.get('id')!r}: unknown skill {skill!r}")
    common = dict(
        id=str(raw["id"]),
        level=level,
        skill=skill,
        points=_points(raw),
        prompt=str(raw.get("prompt") or raw.get("question") or ""),
        correct_answer=str(raw.get("correct_answer", raw.get("correctAnswer", ""))),
        explanation=str(raw.get("explanation") or ""),
        topics=tuple(raw.get("topics") or ()),
        is_core=bool(raw.get("is_core", raw.get("isCore", False))),
    )
    if kind == "fill-blank":
        return FillBlankItem(**common)
    if kind in CHOICE_KINDS:
        options = tuple(str(o) for o in (raw.get("options") or ()))
        if not options:
            raise ValueError(f"item {common['id']!r}: {kind} item needs options")
        return ChoiceItem(kind=kind, options=options, **common)
    raise ValueError(f"item {raw.get('id')!r}: unknown kind {kind!r}")


def load_bank(path: Optional[str] = None) -> List[AssessmentItem]:
    if path:
        data = Path(path).read_text(encoding="utf-8")
    else:
        data = _PACKAGED_BANK.read_text(encoding="utf-8")
    items = [item_from_dict(r) for r in json.loads(data)]
    seen: set[str] = set()
    for it in items:
        if it.id in seen:
            raise ValueError(f"duplicate item id {it.id!r}")
        seen.add(it.id)
    return items
