import csv
import math
import os
import json
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from llm_evals.errors import DatasetParseError, RecordValidationError
from llm_evals.utils.logging import get_logger

logger = get_logger(__name__)


# One wine review from the training/validation CSV
class WineRecord(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    winery: str = Field(min_length=1)
    province: str = ""
    country: str = ""
    region_1: str = ""
    description: str = Field(min_length=1)
    taster_name: str = ""
    points: Optional[int] = None
    price: Optional[float] = None
    variety: str = Field(min_length=1)

    @field_validator("province", "country", "region_1", "taster_name", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    # optional numbers: blank or unreadable values ("N/A") become None
    @field_validator("points", mode="before")
    @classmethod
    def _parse_points(cls, value: Any) -> Optional[int]:
        number = _to_number(value)
        if number is None or not number.is_integer():
            return None
        return int(number)

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value: Any) -> Optional[float]:
        return _to_number(value)


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


# One model prediction as written to / read back from a predictions CSV
class PredictionResult(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    record_id: int
    model: str
    prediction: str
    timestamp: str
    winery: str
    variety: str
    actual_variety: str


PREDICTION_HEADER = {
    "record_id": "Record ID",
    "model": "Model",
    "prediction": "Prediction",
    "timestamp": "Timestamp",
    "winery": "Winery",
    "variety": "Original Variety",
    "actual_variety": "Actual Variety",
}


def validate_record(row: Dict[str, Any]) -> WineRecord:
    try:
        return WineRecord.model_validate(row)
    except ValidationError as e:
        raise RecordValidationError(str(e)) from e


# Stream records lazily; call again to restart from the top of the file
def iter_records(path: str) -> Iterator[WineRecord]:

    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")

    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        try:
            for row in reader:
                # skip blank lines and rows with stray extra columns
                if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
                    continue
                row.pop(None, None)
                try:
                    yield validate_record(row)
                except RecordValidationError as e:
                    logger.debug("Skipping row %d of %s: %s", reader.line_num, path, e)
        except (csv.Error, UnicodeDecodeError) as e:
            raise DatasetParseError(f"Parse error in {path} at line {reader.line_num}: {e}") from e


def load_records(path: str) -> List[WineRecord]:
    return list(iter_records(path))


# Closed label set: distinct varieties in first-seen order
def get_unique_varieties(path: str) -> List[str]:

    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")

    varieties: Dict[str, None] = {}
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        try:
            for row in reader:
                variety = (row.get("variety") or "").strip()
                if variety:
                    varieties[variety] = None
        except (csv.Error, UnicodeDecodeError) as e:
            raise DatasetParseError(f"Parse error in {path} at line {reader.line_num}: {e}") from e

    return list(varieties)


# Timestamp shared by every file of one run: MM-DD-HH-mm
def get_run_timestamp(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime("%m-%d-%H-%M")


def get_dataset_type(dataset_path: str) -> str:
    return "train" if "train" in str(dataset_path) else "validation"


def prediction_file_path(data_dir: str, model: str, dataset_type: str, timestamp: str) -> str:
    return str(Path(data_dir) / f"predictions_{model}_{dataset_type}_{timestamp}.csv")


# Append a batch of predictions; header only when the file is new
def append_predictions(results: Iterable[PredictionResult], path: str) -> int:

    results = list(results)
    if not results:
        return 0

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    new_file = not path.exists() or path.stat().st_size == 0

    with open(path, "a", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        if new_file:
            writer.writerow(PREDICTION_HEADER.values())
        for r in results:
            row = r.model_dump()
            writer.writerow([row[key] for key in PREDICTION_HEADER])

    return len(results)


def read_prediction_rows(path: str) -> Iterator[Dict[str, str]]:
    titles = {title: key for key, title in PREDICTION_HEADER.items()}

    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        try:
            for row in reader:
                yield {titles.get(k, k): v for k, v in row.items() if k is not None}
        except (csv.Error, UnicodeDecodeError) as e:
            raise DatasetParseError(f"Parse error in {path} at line {reader.line_num}: {e}") from e


# Summary rows (analysis report, prompt comparison) with a fresh header
def write_csv(path: str, header: Dict[str, str], rows: Iterable[Dict[str, Any]]):

    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header.values())
        for row in rows:
            writer.writerow([row.get(key, "") for key in header])


# Turn an in-memory dataset into a feature/__expected CSV for prompt evals
def convert_to_csv(
    dataset: List[Dict[str, str]],
    feature_name: str,
    ground_truth: str,
    out_path: str,
) -> str:

    os.makedirs(os.path.dirname(os.path.abspath(out_path)), exist_ok=True)

    with open(out_path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([feature_name, "__expected"])
        for item in dataset:
            writer.writerow([item[feature_name], item[ground_truth]])

    return out_path


# Final Results JSON
def write_json(path: str, data: Dict[str, Any]):

    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=str)
