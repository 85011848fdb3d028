import os
import sys
from pathlib import Path

from openai import OpenAIError

from llm_evals.config import create_client, load_api_key
from llm_evals.errors import EvalError
from llm_evals.evaluation.analysis import SUMMARY_HEADER
from llm_evals.evaluation.prompt_comparison import compare_prompts, load_test_cases
from llm_evals.models.llm_client import LLMConfig
from llm_evals.models.race_prompts import PROMPTS
from llm_evals.utils.io import get_run_timestamp, write_csv, write_json


# Usage: python -m llm_evals.experiments.compare_prompts [cases.csv] [model]
# data/races.csv is written by llm_evals.experiments.make_races_csv
def main():
    #parse args
    cases_path = sys.argv[1].strip() if len(sys.argv) > 1 else "data/races.csv"
    model = sys.argv[2].strip() if len(sys.argv) > 2 else "gpt-4o-mini"

    OUT_DIR = Path("outputs") / "prompt_comparison"
    os.makedirs(OUT_DIR, exist_ok=True)

    try:
        cases = load_test_cases(cases_path, feature_name="race")
        client = create_client(load_api_key())
        results = compare_prompts(client, LLMConfig(model=model, max_completion_tokens=64), cases, PROMPTS)
    except (EvalError, OpenAIError, FileNotFoundError) as e:
        print(f"Error comparing prompts: {e}")
        sys.exit(1)

    timestamp = get_run_timestamp()
    summary_path = OUT_DIR / f"prompt_comparison_{timestamp}.csv"
    write_csv(str(summary_path), SUMMARY_HEADER, [r.summary_row() for r in results.values()])
    write_json(
        str(OUT_DIR / f"prompt_comparison_{timestamp}.json"),
        {name: vars(r) for name, r in results.items()},
    )

    #print summary
    print("\n===== PROMPT COMPARISON RESULTS =====")
    for name, r in results.items():
        print(f"{name:<10} {r.correct_predictions}/{r.total_predictions}  ({r.accuracy:.2%})")
        for ex in r.incorrect_examples[:2]:
            print(f"    predicted={ex['predicted']!r} expected={ex['actual']!r}")

    print(f"\nFull results saved to: {OUT_DIR}")


if __name__ == "__main__":
    main()
