from __future__ import annotations
import argparse, json, logging
from placement_core.engine import PlacementExam
from placement_core.question_bank import load_bank
from placement_core.types import ChoiceItem


def ask(item) -> str:
    print(f"\n[{item.level} | {item.skill}] {item.prompt}")
    if isinstance(item, ChoiceItem):
        for i, opt in enumerate(item.options): print(f"  [{i}] {opt}")
        while True:
            v = input("Your choice (index): ").strip()
            if v.isdigit() and int(v) < len(item.options): return item.options[int(v)]
            print("Enter one of the listed indexes.")
    return input("Your answer: ").strip()


def main(argv=None):
    ap = argparse.ArgumentParser(description="Run the adaptive placement exam in the terminal.")
    ap.add_argument("--bank", default=None, help="bank JSON file (defaults to the packaged bank)")
    ap.add_argument("--json", action="store_true", help="print the full result as JSON")
    ap.add_argument("-v", "--verbose", action="store_true")
    a = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if a.verbose else logging.WARNING)

    exam = PlacementExam(load_bank(a.bank))
    print("Placement exam. Ctrl+C to stop early.")
    try:
        while True:
            item = exam.get_next_question()
            if item is None: break
            exam.submit_answer(item.id, ask(item))
    except KeyboardInterrupt:
        print("\nStopped early; scoring the answers given so far.")

    res = exam.calculate_final_result()
    if a.json:
        print(json.dumps(res.to_dict(), ensure_ascii=False, indent=2))
        return 0
    print(f"\nRecommended level: {res.recommended_level} (unit {res.recommended_unit}, lesson {res.recommended_lesson})")
    print(f"Overall accuracy: {res.confidence_score}%  ({res.questions_answered}/{res.total_questions} items asked)")
    print("Levels: " + ", ".join(f"{k} {v}%" for k, v in res.detailed_scores.items()))
    print("Skills: " + ", ".join(f"{k} {v}%" for k, v in res.skill_breakdown.items()))
    for rec in res.recommendations: print(f"  - {rec}")
    print(f"Estimated study time: {res.estimated_study_time}")
    return 0


if __name__ == "__main__": raise SystemExit(main())
