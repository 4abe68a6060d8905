import pandas as pd
import pytest

from tumor_report.analysis import DataExplorer


def _dataset(columns: dict, diagnosis: list[str]) -> dict:
    df = pd.DataFrame({"id": [str(i) for i in range(len(diagnosis))],
                       "diagnosis": diagnosis, **columns})
    return {"df": df, "feature_names": list(columns), "target_name": "diagnosis"}


@pytest.fixture
def ranked():
    """Four benign then four malignant rows with known separations."""
    return DataExplorer().run(_dataset(
        {
            "a": [1, 2, 3, 4, 11, 12, 13, 14],
            "b": [1, 2, 3, 4, 2, 3, 4, 5],
            "c": [1, 2, 3, 4, 4, 3, 2, 1],
            "d": [1, 2, 3, 5, 11, 12, 13, 14],
        },
        ["B"] * 4 + ["M"] * 4,
    ))


def test_welch_ranking_order(ranked):
    top = ranked["top_discriminative_features"]
    assert [r["feature"] for r in top] == ["a", "d", "b", "c"]
    assert top[0]["t_statistic"] == pytest.approx(10.9545, abs=1e-3)
    assert top[2]["t_statistic"] == pytest.approx(1.0954, abs=1e-3)
    assert top[3]["t_statistic"] == 0.0
    assert top[3]["p_value"] == pytest.approx(1.0)
    assert top[3]["effect_size"] == 0.0


def test_means_keyed_by_diagnosis_name(ranked):
    means = ranked["stats_by_diagnosis"]
    assert set(means) == {"Malignant", "Benign"}
    assert means["Malignant"]["a"] == pytest.approx(12.5)
    assert means["Benign"]["a"] == pytest.approx(2.5)
    assert means["Malignant"]["c"] == means["Benign"]["c"] == pytest.approx(2.5)


def test_class_balance(ranked):
    balance = ranked["class_balance"]
    assert balance["counts"] == {"Benign": 4, "Malignant": 4}
    assert balance["imbalance_ratio"] == 1.0
    assert balance["status"] == "balanced"


def test_only_strong_pair_reported(ranked):
    corr = ranked["feature_correlations"]
    assert corr["n_highly_correlated"] == 1
    pair = corr["highly_correlated_pairs"][0]
    assert (pair["feature_1"], pair["feature_2"]) == ("a", "d")
    assert pair["correlation"] == pytest.approx(0.998, abs=1e-3)
    assert corr["matrix"]["a"]["a"] == pytest.approx(1.0)


def test_label_correlations_strongest_first(ranked):
    with_label = ranked["feature_correlations"]["with_malignant"]
    assert list(with_label)[0] == "a"
    assert list(with_label)[-1] == "c"
    assert with_label["a"] == pytest.approx(0.9759, abs=1e-3)


def test_no_outliers_inside_fences(ranked):
    outliers = ranked["outlier_summary"]
    assert outliers["total_outlier_values"] == 0
    assert outliers["features_with_outliers"] == {}


def test_iqr_outlier_counts():
    report = DataExplorer().run(_dataset(
        {
            "x": [10, 11, 12, 13, 14, 15, 16, 100],
            "y": [5.0] * 8,
            "z": [-50, 1, 2, 3, 4, 5, 6, 7],
        },
        ["B"] * 4 + ["M"] * 4,
    ))
    outliers = report["outlier_summary"]
    assert outliers["features_with_outliers"] == {"x": 1, "z": 1}
    assert outliers["total_outlier_values"] == 2
    assert outliers["n_features_with_outliers"] == 2
    assert outliers["by_diagnosis"] == {"Benign": {"z": 1}, "Malignant": {"x": 1}}


@pytest.mark.parametrize("diagnosis", [
    ["B", "B", "B", "M"],
    ["B", "B", "B", "B"],
])
def test_ranking_needs_two_samples_per_class(diagnosis):
    report = DataExplorer().run(_dataset(
        {"a": [1.0, 2.0, 3.0, 9.0], "b": [4.0, 3.0, 2.0, 1.0]}, diagnosis,
    ))
    assert report["top_discriminative_features"] == []
