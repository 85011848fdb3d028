import csv
from datetime import datetime

import pytest

from conftest import VARIETIES, wine_row, write_wine_csv
from llm_evals.errors import DatasetParseError, RecordValidationError
from llm_evals.utils.io import (
    PredictionResult,
    append_predictions,
    convert_to_csv,
    get_dataset_type,
    get_run_timestamp,
    get_unique_varieties,
    iter_records,
    load_records,
    prediction_file_path,
    read_prediction_rows,
    validate_record,
)


def _prediction(i, prediction="Pinot Noir", actual="Pinot Noir", model="gpt-4o"):
    return PredictionResult(
        record_id=i,
        model=model,
        prediction=prediction,
        timestamp="2024-10-01T12:00:00+00:00",
        winery=f"Winery {i}",
        variety=actual,
        actual_variety=actual,
    )


def test_reader_returns_only_well_formed_rows(tmp_path):
    good = [wine_row(i, VARIETIES[i % 3]) for i in range(4)]
    bad = [
        wine_row(10, "Chardonnay", winery=""),
        wine_row(11, "Chardonnay", description="   "),
        wine_row(12, ""),
    ]
    path = write_wine_csv(tmp_path / "wines.csv", good[:2] + bad + good[2:])

    records = load_records(str(path))

    assert len(records) == 4
    assert [r.winery for r in records] == [f"Winery {i}" for i in range(4)]


def test_reader_skips_short_rows(tmp_path):
    path = write_wine_csv(tmp_path / "wines.csv", [wine_row(0, "Red Blend")])
    with open(path, "a", encoding="utf-8", newline="") as f:
        f.write("Lonely Winery,Oregon\n")

    assert len(load_records(str(path))) == 1


def test_reader_is_lazy_and_restartable(tmp_path, wine_rows):
    path = write_wine_csv(tmp_path / "wines.csv", wine_rows)

    first = iter_records(str(path))
    assert next(first).winery == "Winery 0"
    assert next(first).winery == "Winery 1"

    again = iter_records(str(path))
    assert next(again).winery == "Winery 0"


def test_reader_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_records(str(tmp_path / "nope.csv"))


def test_reader_unrecoverable_row_raises_parse_error(tmp_path):
    path = write_wine_csv(
        tmp_path / "wines.csv",
        [wine_row(0, "Red Blend", description="x" * 500)],
    )
    old_limit = csv.field_size_limit(100)
    try:
        with pytest.raises(DatasetParseError):
            load_records(str(path))
    finally:
        csv.field_size_limit(old_limit)


def test_record_fields_are_typed():
    record = validate_record(wine_row(3, " Pinot Noir ", points="88", price=""))

    assert record.points == 88
    assert record.price is None
    assert record.variety == "Pinot Noir"


def test_validate_record_raises_typed_error():
    with pytest.raises(RecordValidationError):
        validate_record(wine_row(0, "Red Blend", winery=None))


def test_unreadable_optional_numbers_keep_the_row(tmp_path):
    rows = [
        wine_row(0, "Red Blend"),
        wine_row(1, "Chardonnay", price="N/A"),
        wine_row(2, "Pinot Noir", points="88.5"),
        wine_row(3, "Pinot Noir", points="90.0", price="nan"),
    ]
    path = write_wine_csv(tmp_path / "wines.csv", rows)

    records = load_records(str(path))

    assert len(records) == 4
    assert records[1].price is None
    assert records[2].points is None
    assert records[3].points == 90
    assert records[3].price is None


def test_bom_prefixed_file_is_read(tmp_path):
    path = tmp_path / "export.csv"
    write_wine_csv(path, [wine_row(0, "Red Blend"), wine_row(1, "Chardonnay")])
    path.write_bytes(b"\xef\xbb\xbf" + path.read_bytes())

    assert [r.winery for r in load_records(str(path))] == ["Winery 0", "Winery 1"]
    assert get_unique_varieties(str(path)) == ["Red Blend", "Chardonnay"]


def test_invalid_utf8_raises_parse_error(tmp_path):
    path = write_wine_csv(tmp_path / "wines.csv", [wine_row(0, "Red Blend")])
    with open(path, "ab") as f:
        f.write(b"Bad \xff Winery,Oregon,US,,note,,88,20,Red Blend\n")

    with pytest.raises(DatasetParseError):
        load_records(str(path))
    with pytest.raises(DatasetParseError):
        get_unique_varieties(str(path))


def test_prediction_rows_with_invalid_utf8_raise_parse_error(tmp_path):
    path = tmp_path / "predictions.csv"
    append_predictions([_prediction(0)], str(path))
    with open(path, "ab") as f:
        f.write(b"1,gpt-4o,\xff,ts,W,Pinot Noir,Pinot Noir\n")

    with pytest.raises(DatasetParseError):
        list(read_prediction_rows(str(path)))


def test_unique_varieties_keep_first_seen_order(tmp_path):
    rows = [
        wine_row(0, "Merlot "),
        wine_row(1, "Syrah"),
        wine_row(2, "Merlot"),
        wine_row(3, ""),
    ]
    path = write_wine_csv(tmp_path / "train.csv", rows)

    assert get_unique_varieties(str(path)) == ["Merlot", "Syrah"]


def test_append_writes_header_once_and_keeps_duplicates(tmp_path):
    path = tmp_path / "out" / "predictions.csv"

    assert append_predictions([_prediction(0), _prediction(1)], str(path)) == 2
    assert append_predictions([_prediction(0)], str(path)) == 1

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Record ID,Model,Prediction,Timestamp,Winery,Original Variety,Actual Variety"
    assert len(lines) == 4
    assert lines[1] == lines[3]


def test_append_nothing_creates_no_file(tmp_path):
    path = tmp_path / "predictions.csv"

    assert append_predictions([], str(path)) == 0
    assert not path.exists()


def test_prediction_paths_encode_model_dataset_and_run(tmp_path):
    path = prediction_file_path(str(tmp_path), "gpt-4o-mini", "validation", "10-01-12-30")

    assert path.endswith("predictions_gpt-4o-mini_validation_10-01-12-30.csv")
    assert get_dataset_type("./data/winemag_train_dataset.csv") == "train"
    assert get_dataset_type("./data/winemag_validation_dataset.csv") == "validation"


def test_run_timestamp_format():
    assert get_run_timestamp(datetime(2024, 3, 7, 9, 5)) == "03-07-09-05"


def test_convert_to_csv_quotes_fields_with_commas(tmp_path):
    dataset = [
        {"race": "Flash Fiona on a Skateboard, Cowboy Carl on a horse", "likely_winner": "Cowboy Carl"},
        {"race": "Runner Rachel vs Walker Will", "likely_winner": "Runner Rachel"},
    ]
    out = convert_to_csv(dataset, "race", "likely_winner", str(tmp_path / "races.csv"))

    with open(out, encoding="utf-8", newline="") as f:
        rows = list(csv.reader(f))

    assert rows[0] == ["race", "__expected"]
    assert rows[1] == [dataset[0]["race"], "Cowboy Carl"]
    assert '"Flash Fiona on a Skateboard, Cowboy Carl on a horse"' in open(out, encoding="utf-8").read()
