import numpy as np
import pytest

from tumor_report.config import FEATURE_COLUMNS
from tumor_report.data import DatasetLoader, Preprocessor, rescale, split_indices
from tumor_report.errors import DataQualityError


@pytest.fixture
def dataset(wdbc_csv):
    return DatasetLoader().load_csv(wdbc_csv)


def test_binary_label_mirrors_diagnosis(dataset):
    frame = Preprocessor().select_features(dataset["df"], FEATURE_COLUMNS)
    expected = (frame["diagnosis"].astype(str) == "M").astype(int)
    assert (frame["diagnosis_binary"] == expected).all()
    assert set(frame.columns) == {"id", "diagnosis", "diagnosis_binary", *FEATURE_COLUMNS}


def test_null_feature_fails_fast(dataset):
    df = dataset["df"].copy()
    df.loc[12, "area_mean"] = np.nan
    with pytest.raises(DataQualityError) as exc:
        Preprocessor().select_features(df, FEATURE_COLUMNS)
    assert exc.value.column == "area_mean"
    assert exc.value.row == 12


def test_infinite_feature_fails_fast(dataset):
    df = dataset["df"].copy()
    df.loc[4, "area_mean"] = np.inf
    with pytest.raises(DataQualityError) as exc:
        Preprocessor().select_features(df, FEATURE_COLUMNS)
    assert exc.value.column == "area_mean"
    assert exc.value.row == 4


def test_rescale_bounds_and_order(dataset):
    frame, scaler = rescale(dataset["df"], FEATURE_COLUMNS)
    for col in FEATURE_COLUMNS:
        assert frame[col].min() == pytest.approx(0.0)
        assert frame[col].max() == pytest.approx(1.0)
        order = np.argsort(dataset["df"][col].to_numpy(), kind="stable")
        assert np.all(np.diff(frame[col].to_numpy()[order]) >= 0)
    assert scaler.n_features_in_ == len(FEATURE_COLUMNS)


def test_rescale_constant_column_maps_to_zero(dataset):
    df = dataset["df"].copy()
    df["smoothness_mean"] = 0.1
    frame, _ = rescale(df, FEATURE_COLUMNS)
    assert (frame["smoothness_mean"] == 0.0).all()


def test_split_is_a_partition():
    train_idx, test_idx = split_indices(57, 0.2, seed=11)
    assert len(test_idx) == round(0.2 * 57)
    assert set(train_idx).isdisjoint(test_idx)
    assert set(train_idx) | set(test_idx) == set(range(57))


def test_split_is_reproducible():
    first = split_indices(100, 0.2, seed=5)
    second = split_indices(100, 0.2, seed=5)
    other = split_indices(100, 0.2, seed=6)
    assert np.array_equal(first[1], second[1])
    assert np.array_equal(first[0], second[0])
    assert not np.array_equal(first[1], other[1])


def test_split_rejects_bad_fraction():
    with pytest.raises(ValueError):
        split_indices(10, 1.5)


def test_run_full_scaling(dataset):
    processed = Preprocessor(seed=1).run(dataset)
    frame = processed["frame"]

    assert len(processed["X_train"]) + len(processed["X_test"]) == 60
    assert len(processed["X_test"]) == 12
    assert set(processed["train_ids"]).isdisjoint(processed["test_ids"])
    assert list(processed["X_train"].columns) == FEATURE_COLUMNS
    for col in FEATURE_COLUMNS:
        assert frame[col].min() == pytest.approx(0.0)
        assert frame[col].max() == pytest.approx(1.0)
    info = processed["preprocessing_info"]
    assert info["scaler_fit_on"] == "full"
    assert info["leakage_note"]
    assert info["train_malignant"] + info["test_malignant"] == 22


def test_run_train_only_scaling(dataset):
    processed = Preprocessor(seed=1, fit_on="train").run(dataset)
    for col in FEATURE_COLUMNS:
        assert processed["X_train"][col].min() == pytest.approx(0.0)
        assert processed["X_train"][col].max() == pytest.approx(1.0)
    assert processed["preprocessing_info"]["leakage_note"] is None


def test_unknown_fit_mode():
    with pytest.raises(ValueError):
        Preprocessor(fit_on="test")


def test_run_rejects_split_with_empty_test_set(wdbc_frame, write_csv):
    # round(0.2 * 2) == 0 leaves no test rows
    two_rows = wdbc_frame.iloc[[0, 40]]
    dataset = DatasetLoader().load_csv(write_csv(two_rows, "two.csv"))
    with pytest.raises(DataQualityError, match="train/test split"):
        Preprocessor().run(dataset)


def test_run_accepts_smallest_nonempty_split(wdbc_frame, write_csv):
    three_rows = wdbc_frame.iloc[[0, 1, 40]]
    processed = Preprocessor().run(DatasetLoader().load_csv(write_csv(three_rows)))
    assert len(processed["X_test"]) == 1
    assert len(processed["X_train"]) == 2
