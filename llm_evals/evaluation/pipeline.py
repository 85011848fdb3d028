from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Type
import time

from pydantic import BaseModel

from llm_evals.config import EvalConfig
from llm_evals.errors import ConfigurationError
from llm_evals.evaluation.analysis import AnalysisReport, analyze_predictions
from llm_evals.evaluation.batching import make_batches, run_batches, run_bounded
from llm_evals.models.predictor import build_variety_schema, generate_prompt, get_prediction
from llm_evals.utils.io import (
    PredictionResult,
    WineRecord,
    append_predictions,
    get_dataset_type,
    get_run_timestamp,
    get_unique_varieties,
    load_records,
    prediction_file_path,
)

STORE_COMPLETIONS_MODEL = "gpt-4o-mini"
DATASET_NAMES = {"train": "Training", "validation": "Validation"}


def check_num_samples(num_samples: int) -> int:
    if num_samples < -1:
        raise ConfigurationError(
            f"Invalid number of samples {num_samples}. Use -1 for all records or a count >= 0."
        )
    return num_samples


def sample_records(records: List[WineRecord], num_samples: int) -> List[WineRecord]:
    check_num_samples(num_samples)
    # -1 means every record
    if num_samples == -1:
        return list(records)
    return records[:num_samples]


# Predict a batch concurrently; failed records are dropped
def process_batch(
    config: EvalConfig,
    records: Sequence[WineRecord],
    start_idx: int,
    model: str,
    timestamp: str,
    varieties: List[str],
    response_format: Type[BaseModel],
    store_completions: bool,
) -> List[PredictionResult]:

    def predict_one(record_id: int, record: WineRecord) -> PredictionResult:
        prompt = generate_prompt(record, varieties)
        prediction = get_prediction(
            config.client,
            model,
            prompt,
            response_format,
            timestamp,
            store_completions=store_completions,
            base_model=config.base_model,
            retries=config.retries,
        )
        return PredictionResult(
            record_id=record_id,
            model=model,
            prediction=prediction,
            timestamp=datetime.now(timezone.utc).isoformat(),
            winery=record.winery,
            variety=record.variety,
            actual_variety=record.variety,
        )

    results = run_bounded(
        records,
        predict_one,
        max_concurrency=config.max_concurrency,
        start_idx=start_idx,
    )
    return [r for r in results if r is not None]


def run_predictions(
    config: EvalConfig,
    dataset_path: str,
    comparison_model: str = "gpt-4o-mini",
    store_completions: bool = True,
    num_samples: int = -1,
    timestamp: Optional[str] = None,
    dataset_type: Optional[str] = None,
) -> Dict[str, str]:
    """Generate predictions with the base model and the comparison model.

    Each finished batch is appended to
    ``predictions_{model}_{dataset_type}_{timestamp}.csv`` before the next
    batch starts. Returns the output path per model.
    """
    timestamp = timestamp or get_run_timestamp()
    dataset_type = dataset_type or get_dataset_type(dataset_path)

    # label set and schema are computed once for the whole run
    varieties = get_unique_varieties(config.train_path)
    response_format = build_variety_schema(varieties)

    records = load_records(dataset_path)
    print("Parsing Stats:", {"totalValid": len(records)})

    sampled = sample_records(records, num_samples)
    total_batches = len(make_batches(sampled, config.batch_size))

    outputs: Dict[str, str] = {}

    # Process models sequentially
    for model in [config.base_model, comparison_model]:
        print(f"\nStarting processing with model: {model}")
        out_path = prediction_file_path(config.data_dir, model, dataset_type, timestamp)
        outputs[model] = out_path
        total_processed = 0

        def handle_batch(batch_number: int, n_batches: int, start: int, batch: List[WineRecord]):
            nonlocal total_processed
            print(f"\nProcessing batch {batch_number}/{n_batches}...")
            batch_start = time.monotonic()

            batch_results = process_batch(
                config,
                batch,
                start,
                model,
                timestamp,
                varieties,
                response_format,
                store_completions,
            )

            # persisted before moving on, so an interruption loses one batch at most
            saved = append_predictions(batch_results, out_path)
            if saved:
                print(f"Saved {saved} new results for model {model} ({dataset_type} dataset)")

            total_processed += len(batch_results)
            pct = (start + len(batch)) / len(sampled) * 100
            print(f"Batch {batch_number} completed in {time.monotonic() - batch_start:.1f}s")
            print(f"Progress: {pct:.1f}% ({total_processed}/{len(sampled)} records processed)")
            return batch_results

        run_batches(
            sampled,
            handle_batch,
            batch_size=config.batch_size,
            delay_seconds=config.batch_delay_seconds,
        )

        print(f"\nCompleted processing for model {model}: {total_processed} records processed "
              f"({total_batches} batches)\n")

    return outputs


def run_evaluation(
    config: EvalConfig,
    comparison_model: str,
    num_samples: int = 3,
    datasets: Sequence[str] = ("train", "validation"),
    timestamp: Optional[str] = None,
) -> Dict[str, AnalysisReport]:
    """Run predictions and the accuracy comparison for each selected dataset."""

    # only the training run of the mini model persists completions
    check_num_samples(num_samples)
    store_completions = comparison_model == STORE_COMPLETIONS_MODEL and "train" in datasets
    timestamp = timestamp or get_run_timestamp()

    print("Starting evaluation with following configuration:")
    print(f"- Comparison model: {comparison_model}")
    print(f"- Storing completions: {store_completions}")
    print(f"- Number of samples: {num_samples}")
    print(f"- Datasets: {', '.join(datasets)}")
    print(f"- Timestamp: {timestamp}\n")

    reports: Dict[str, AnalysisReport] = {}

    for dataset in datasets:
        dataset_path = config.dataset_path(dataset)
        dataset_name = DATASET_NAMES.get(dataset, dataset)

        print(f"\n=== Processing {dataset_name} Dataset ===")

        outputs = run_predictions(
            config,
            dataset_path,
            comparison_model=comparison_model,
            store_completions=store_completions,
            num_samples=num_samples,
            timestamp=timestamp,
            dataset_type=dataset,
        )

        print(f"\nAnalyzing {dataset_name} results...")
        reports[dataset] = analyze_predictions(
            outputs[config.base_model],
            outputs[comparison_model],
            out_dir=config.data_dir,
            timestamp=timestamp,
            dataset_type=dataset,
        )

    return reports
