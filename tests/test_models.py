import numpy as np
import pandas as pd
import pytest

from tumor_report.config import FEATURE_COLUMNS
from tumor_report.data import DatasetLoader, Preprocessor
from tumor_report.errors import InferenceError, ModelFitError
from tumor_report.models import (
    DecisionTreeTrainer,
    ForestTrainer,
    KNNTrainer,
    ModelTrainer,
    NearestNeighborVoteClassifier,
)
from tumor_report.models.knn import rule_of_thumb_k


@pytest.fixture
def processed(wdbc_csv):
    dataset = DatasetLoader().load_csv(wdbc_csv)
    return Preprocessor(seed=2).run(dataset)


# KNN

LINE_X = np.array([[0.0], [1.0], [3.0], [4.0]])
LINE_Y = np.array([0, 1, 1, 0])


def test_knn_k1_returns_label_of_identical_training_point(processed):
    X = processed["X_train"]
    y = processed["y_train"].to_numpy()
    model = NearestNeighborVoteClassifier(k=1).fit(X, y)
    assert np.array_equal(model.predict(X.iloc[:10]), y[:10])


def test_knn_vote_tie_goes_to_nearest_neighbor():
    model = NearestNeighborVoteClassifier(k=2).fit(LINE_X, LINE_Y)
    assert model.predict([[0.9]])[0] == 1
    assert model.predict([[0.1]])[0] == 0


def test_knn_majority_vote_and_scores():
    model = NearestNeighborVoteClassifier(k=3).fit(LINE_X, LINE_Y)
    # neighbors of 2.9: 3.0 (1), 4.0 (0), 1.0 (1)
    assert model.predict([[2.9]])[0] == 1
    assert model.malignant_score([[2.9]])[0] == pytest.approx(2 / 3)
    # neighbors of 0.2: 0.0 (0), 1.0 (1), 3.0 (1) -> malignant wins, score still P(M)
    proba = model.predict_proba([[0.2]])
    assert proba.sum(axis=1) == pytest.approx(1.0)
    assert model.malignant_score([[0.2]])[0] == pytest.approx(proba[0, 1])


def test_knn_score_is_probability_of_malignant_when_benign_wins():
    model = NearestNeighborVoteClassifier(k=3).fit(LINE_X, np.array([0, 0, 1, 0]))
    # neighbors of 3.1: 3.0 (1), 4.0 (0), 1.0 (0)
    assert model.predict([[3.1]])[0] == 0
    assert model.malignant_score([[3.1]])[0] == pytest.approx(1 / 3)
    assert model.predict_proba([[3.1]])[0, 0] == pytest.approx(2 / 3)


def test_knn_rejects_wrong_feature_count():
    model = NearestNeighborVoteClassifier(k=1).fit(LINE_X, LINE_Y)
    with pytest.raises(InferenceError):
        model.predict([[1.0, 2.0]])


def test_knn_rejects_k_larger_than_training_set():
    with pytest.raises(ModelFitError):
        NearestNeighborVoteClassifier(k=5).fit(LINE_X, LINE_Y)


def test_rule_of_thumb_k():
    assert rule_of_thumb_k(48) == 7
    assert rule_of_thumb_k(455) == 21
    assert rule_of_thumb_k(0) == 1


def test_knn_trainer_selects_first_best_k(processed):
    result = KNNTrainer().fit(
        processed["X_train"], processed["y_train"],
        processed["X_test"], processed["y_test"],
    )
    table = result.sweep.table
    assert list(table["k"]) == list(range(1, 22))
    assert result.best_k == table.loc[table["test_accuracy"].idxmax(), "k"]
    assert result.best.k == result.best_k
    assert result.rule_of_thumb_k == rule_of_thumb_k(len(processed["X_train"]))


def test_knn_trainer_drops_k_above_training_size():
    X = pd.DataFrame(LINE_X, columns=["x"])
    y = pd.Series(LINE_Y)
    result = KNNTrainer(k_candidates=range(1, 8)).fit(X, y, X, y)
    assert list(result.sweep.table["k"]) == [1, 2, 3, 4]


# Decision tree

def test_tree_complexity_table_and_pruning(processed):
    result = DecisionTreeTrainer(seed=0).fit(processed["X_train"], processed["y_train"])

    table = result.complexity_table
    assert list(table.columns) == ["ccp_alpha", "n_leaves", "train_error", "cv_error"]
    assert table["ccp_alpha"].iloc[0] == pytest.approx(0.0)
    assert table["train_error"].iloc[0] == pytest.approx(0.0)
    assert table["n_leaves"].is_monotonic_decreasing

    assert result.pruned.ccp_alpha == 0.02
    assert result.unpruned.ccp_alpha == 0.0
    assert result.pruned.get_n_leaves() <= result.unpruned.get_n_leaves()
    assert set(result.importances.index) == set(FEATURE_COLUMNS)
    assert "class:" in result.rules

    proba = result.pruned.predict_proba(processed["X_test"])
    assert ((proba >= 0) & (proba <= 1)).all()


# Forest

def test_forest_sweep_selects_lowest_oob_error(processed):
    result = ForestTrainer(n_estimators=40, seed=0).fit(
        processed["X_train"], processed["y_train"]
    )
    table = result.sweep.table
    assert list(table["mtry"]) == list(range(1, 10))
    assert result.mtry == table.loc[table["oob_error"].idxmin(), "mtry"]
    assert result.forest.max_features == result.mtry
    assert result.bagging.max_features is None
    assert len(result.bagging.estimators_) == 40
    assert result.forest_importances.sum() == pytest.approx(1.0)


def test_forest_skips_mtry_outside_feature_range(processed):
    result = ForestTrainer(n_estimators=10, mtry_candidates=[2, 10, 12], seed=0).fit(
        processed["X_train"], processed["y_train"]
    )
    assert list(result.sweep.table["mtry"]) == [2]
    assert result.mtry == 2


def test_forest_is_reproducible_with_seed(processed):
    a = ForestTrainer(n_estimators=15, mtry_candidates=[3], seed=4).fit(
        processed["X_train"], processed["y_train"]
    )
    b = ForestTrainer(n_estimators=15, mtry_candidates=[3], seed=4).fit(
        processed["X_train"], processed["y_train"]
    )
    assert np.array_equal(
        a.forest.predict_proba(processed["X_test"]),
        b.forest.predict_proba(processed["X_test"]),
    )


# Orchestration

def test_model_trainer_rejects_single_class(processed):
    single = dict(processed)
    single["y_train"] = pd.Series(np.zeros(len(processed["X_train"]), dtype=int))
    with pytest.raises(ModelFitError, match="single class"):
        ModelTrainer(n_estimators=5).run(single)


def test_model_trainer_collects_models(processed):
    results = ModelTrainer(n_estimators=20, seed=0).run(processed)
    assert set(results["trained_models"]) == {
        "decision_tree", "decision_tree_unpruned", "bagging",
        "random_forest", "knn", "knn_rule_of_thumb",
    }
    params = results["selected_params"]
    assert params["mtry"] in range(1, 10)
    assert params["k"] in range(1, 22)
    assert params["ccp_alpha"] == 0.02
