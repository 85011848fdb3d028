"""Pytest configuration and fixtures."""
import csv
from pathlib import Path
from types import SimpleNamespace

import pytest

WINE_FIELDS = [
    "winery", "province", "country", "region_1", "description",
    "taster_name", "points", "price", "variety",
]

VARIETIES = ["Pinot Noir", "Chardonnay", "Red Blend"]


class FakeClient:
    """Stands in for ``openai.OpenAI``: records every call and lets the test
    decide what each one returns (or raises)."""

    def __init__(self, parse_fn=None, create_fn=None):
        self.parse_fn = parse_fn
        self.create_fn = create_fn
        self.parse_calls = []
        self.create_calls = []
        self.chat = SimpleNamespace(
            completions=SimpleNamespace(parse=self._parse, create=self._create)
        )

    def _parse(self, **kwargs):
        self.parse_calls.append(kwargs)
        message = self.parse_fn(**kwargs)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    def _create(self, **kwargs):
        self.create_calls.append(kwargs)
        content = self.create_fn(**kwargs)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content, refusal=None))]
        )


def parsed_message(parsed=None, refusal=None):
    return SimpleNamespace(parsed=parsed, refusal=refusal, content=None)


def wine_row(i, variety, **overrides):
    row = {
        "winery": f"Winery {i}",
        "province": "Oregon",
        "country": "US",
        "region_1": "Willamette Valley",
        "description": f"Tasting note number {i}",
        "taster_name": "Paul Gregutt",
        "points": str(85 + i % 10),
        "price": "25.0",
        "variety": variety,
    }
    row.update(overrides)
    return row


def write_wine_csv(path: Path, rows):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=WINE_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    return path


def truth_from_prompt(kwargs, rows):
    """Answer with the ground truth of the record the prompt was built from."""
    prompt = kwargs["messages"][1]["content"]
    for row in rows:
        if f'"{row["description"]}"' in prompt:
            return row["variety"]
    raise AssertionError("prompt does not match any record")


@pytest.fixture
def wine_rows():
    """Ten well-formed rows over three varieties."""
    return [wine_row(i, VARIETIES[i % 3]) for i in range(10)]


@pytest.fixture
def data_dir(tmp_path, wine_rows):
    """Data folder with matching training and validation files."""
    root = tmp_path / "data"
    write_wine_csv(root / "winemag_train_dataset.csv", wine_rows)
    write_wine_csv(root / "winemag_validation_dataset.csv", wine_rows)
    return root


@pytest.fixture
def no_backoff(monkeypatch):
    """Record backoff delays instead of sleeping."""
    delays = []
    monkeypatch.setattr("llm_evals.models.predictor.time.sleep", delays.append)
    return delays
