from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError

from llm_evals.errors import NoDataError
from llm_evals.utils.io import PredictionResult, get_run_timestamp, read_prediction_rows, write_csv
from llm_evals.utils.logging import get_logger

logger = get_logger(__name__)

MAX_INCORRECT_EXAMPLES = 5

SUMMARY_HEADER = {
    "model": "Model",
    "accuracy": "Accuracy",
    "total_predictions": "Total Predictions",
    "correct_predictions": "Correct Predictions",
}


@dataclass
class AnalysisResult:
    model: str
    total_predictions: int
    correct_predictions: int
    accuracy: float
    incorrect_examples: List[Dict[str, str]] = field(default_factory=list)

    def summary_row(self) -> Dict[str, object]:
        return {key: getattr(self, key) for key in SUMMARY_HEADER}


@dataclass
class AnalysisReport:
    base: AnalysisResult
    comparison: AnalysisResult
    summary_path: str

    @property
    def accuracy_difference(self) -> float:
        return self.base.accuracy - self.comparison.accuracy


# Accuracy plus the first few mismatches
def calculate_accuracy(predictions: Sequence[PredictionResult]) -> AnalysisResult:
    if not predictions:
        raise NoDataError("No predictions to analyze")

    correct = 0
    incorrect_examples: List[Dict[str, str]] = []

    for p in predictions:
        if p.prediction == p.actual_variety:
            correct += 1
        elif len(incorrect_examples) < MAX_INCORRECT_EXAMPLES:
            incorrect_examples.append({
                "winery": p.winery,
                "predicted": p.prediction,
                "actual": p.actual_variety,
            })

    return AnalysisResult(
        model=predictions[0].model,
        total_predictions=len(predictions),
        correct_predictions=correct,
        accuracy=correct / len(predictions),
        incorrect_examples=incorrect_examples,
    )


def read_predictions_file(path: str) -> List[PredictionResult]:

    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    valid: List[PredictionResult] = []
    for row in read_prediction_rows(str(path)):
        try:
            valid.append(PredictionResult.model_validate(row))
        except ValidationError as e:
            logger.debug("Skipping invalid prediction row in %s: %s", path, e)

    if not valid:
        raise NoDataError(f"No valid records found in {path}")

    return valid


def print_report(base: AnalysisResult, comparison: AnalysisResult) -> None:
    print("=== Model Performance Analysis ===\n")

    for result in (base, comparison):
        print(f"\n{result.model} Results:")
        print(f"Total Predictions: {result.total_predictions}")
        print(f"Correct Predictions: {result.correct_predictions}")
        print(f"Accuracy: {result.accuracy * 100:.2f}%\n")

    diff = base.accuracy - comparison.accuracy
    print("Performance Difference:")
    print(f"Base Model outperforms Comparison Model by {diff * 100:.2f}%\n")

    print("=== Sample Incorrect Predictions from Comparison Model ===\n")
    for i, example in enumerate(comparison.incorrect_examples, 1):
        print(f"Example {i}:")
        print(f"Winery: {example['winery']}")
        print(f"Predicted: {example['predicted']}")
        print(f"Actual: {example['actual']}\n")


def analyze_predictions(
    base_model_file: str,
    comparison_model_file: str,
    out_dir: str = "./data",
    timestamp: Optional[str] = None,
    dataset_type: Optional[str] = None,
) -> AnalysisReport:
    """Compare two prediction files and write a summary CSV.

    Both files must contain at least one valid row. A different number of
    rows between the two files is reported but does not stop the analysis.
    """
    print("Starting analysis...\n")

    base_predictions = read_predictions_file(base_model_file)
    comparison_predictions = read_predictions_file(comparison_model_file)

    if len(base_predictions) != len(comparison_predictions):
        logger.warning(
            "Different number of predictions between models (Base Model: %d, Comparison Model: %d)",
            len(base_predictions),
            len(comparison_predictions),
        )

    base = calculate_accuracy(base_predictions)
    comparison = calculate_accuracy(comparison_predictions)

    print_report(base, comparison)

    timestamp = timestamp or get_run_timestamp()
    name = f"analysis_results_{dataset_type}_{timestamp}.csv" if dataset_type else f"analysis_results_{timestamp}.csv"
    summary_path = str(Path(out_dir) / name)

    write_csv(summary_path, SUMMARY_HEADER, [base.summary_row(), comparison.summary_row()])
    print(f"Analysis results saved to {summary_path}")

    return AnalysisReport(base=base, comparison=comparison, summary_path=summary_path)
