import argparse
import sys
from typing import List, Optional

from llm_evals.config import BASE_MODEL, EvalConfig, create_client, load_api_key
from llm_evals.errors import ConfigurationError, EvalError
from llm_evals.evaluation.pipeline import DATASET_NAMES, check_num_samples, run_evaluation


def parse_datasets(value: str) -> List[str]:
    datasets = [d.strip() for d in value.split(",") if d.strip()]
    unknown = [d for d in datasets if d not in DATASET_NAMES]
    if not datasets or unknown:
        raise ConfigurationError(
            f"Invalid datasets '{value}'. Use a comma list of: {', '.join(DATASET_NAMES)}"
        )
    return datasets


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="llm-evals",
        description="Compare a model against the base model on the wine variety task.",
    )
    ap.add_argument("model", nargs="?", help="Comparison model, e.g. gpt-4o-mini")
    ap.add_argument("datasets", nargs="?", default="train,validation",
                    help="Comma list: train,validation (default: both)")
    ap.add_argument("num_samples", nargs="?", type=int, default=3,
                    help="Records per dataset, -1 for all (default: 3)")
    ap.add_argument("--data-dir", default="./data",
                    help="Folder holding the datasets and outputs (default: ./data)")
    ap.add_argument("--base-model", default=BASE_MODEL,
                    help=f"Base model (default: {BASE_MODEL})")
    ap.add_argument("--env-file", default=None, help="Path to a .env file with OPENAI_API_KEY")
    return ap


# Usage: python -m llm_evals.experiments.run_evaluation <model> <datasets> <numSamples>
# Example: python -m llm_evals.experiments.run_evaluation gpt-4o-mini train,validation -1
def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if not args.model:
        print("Please provide a comparison model name", file=sys.stderr)
        return 1

    try:
        datasets = parse_datasets(args.datasets)
        check_num_samples(args.num_samples)
        api_key = load_api_key(args.env_file)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    config = EvalConfig.from_data_dir(
        create_client(api_key),
        data_dir=args.data_dir,
        base_model=args.base_model,
    )

    try:
        reports = run_evaluation(
            config,
            comparison_model=args.model,
            num_samples=args.num_samples,
            datasets=datasets,
        )
    except (EvalError, OSError, ValueError) as e:
        print(f"Error during evaluation: {e}", file=sys.stderr)
        return 1

    print("\n===== EVALUATION SUMMARY =====")
    for dataset, report in reports.items():
        print(
            f"{DATASET_NAMES[dataset]}: {report.base.model} {report.base.accuracy:.2%} vs "
            f"{report.comparison.model} {report.comparison.accuracy:.2%} "
            f"(diff {report.accuracy_difference * 100:+.2f} pts)"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
