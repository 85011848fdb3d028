import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from llm_evals.errors import NoDataError
from llm_evals.evaluation.analysis import MAX_INCORRECT_EXAMPLES, AnalysisResult
from llm_evals.evaluation.batching import run_bounded
from llm_evals.models.llm_client import LLMConfig, call_llm

JUDGE_SYSTEM_PROMPT = "You answer with the competitor's name only."


@dataclass(frozen=True)
class RaceCase:
    feature: str
    expected: str


# Read a feature/__expected CSV produced by convert_to_csv
def load_test_cases(path: str, feature_name: str) -> List[RaceCase]:

    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Test case file not found: {path}")

    cases: List[RaceCase] = []
    with open(path, "r", encoding="utf-8", newline="") as f:
        for row in csv.DictReader(f):
            feature = (row.get(feature_name) or "").strip()
            expected = (row.get("__expected") or "").strip()
            if feature and expected:
                cases.append(RaceCase(feature=feature, expected=expected))

    return cases


def answers_match(output: Optional[str], expected: str) -> bool:
    if output is None:
        return False
    return output.strip().strip(".").lower() == expected.strip().lower()


def score_prompt(
    client: Any,
    cfg: LLMConfig,
    cases: List[RaceCase],
    prompt_name: str,
    prompt_fn: Callable[[str], str],
    max_concurrency: int = 3,
) -> AnalysisResult:

    if not cases:
        raise NoDataError("No test cases to evaluate")

    def ask(_: int, case: RaceCase) -> str:
        return call_llm(client, JUDGE_SYSTEM_PROMPT, prompt_fn(case.feature), cfg)

    # failed calls come back as None and count as wrong answers
    outputs = run_bounded(cases, ask, max_concurrency=max_concurrency)

    correct = 0
    incorrect_examples: List[Dict[str, str]] = []
    for case, output in zip(cases, outputs):
        if answers_match(output, case.expected):
            correct += 1
        elif len(incorrect_examples) < MAX_INCORRECT_EXAMPLES:
            incorrect_examples.append({
                "race": case.feature,
                "predicted": "" if output is None else output.strip(),
                "actual": case.expected,
            })

    return AnalysisResult(
        model=f"{cfg.model}:{prompt_name}",
        total_predictions=len(cases),
        correct_predictions=correct,
        accuracy=correct / len(cases),
        incorrect_examples=incorrect_examples,
    )


# Run every prompt variant over the same cases
def compare_prompts(
    client: Any,
    cfg: LLMConfig,
    cases: List[RaceCase],
    prompts: Dict[str, Callable[[str], str]],
    max_concurrency: int = 3,
) -> Dict[str, AnalysisResult]:

    return {
        name: score_prompt(client, cfg, cases, name, fn, max_concurrency=max_concurrency)
        for name, fn in prompts.items()
    }
