"""Matplotlib figures for the report, written as PNG files."""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
from sklearn.tree import plot_tree  # noqa: E402

from tumor_report.config import (  # noqa: E402
    COMPARED_MODELS,
    LABEL_NAMES,
    NEGATIVE_LABEL,
    POSITIVE_LABEL,
)
from tumor_report.utils import get_logger  # noqa: E402

log = get_logger(__name__)

CLASS_COLORS = {NEGATIVE_LABEL: "#4C72B0", POSITIVE_LABEL: "#C44E52"}
MODEL_LABELS = {
    "decision_tree": "Pruned decision tree",
    "bagging": "Bagging",
    "random_forest": "Random forest",
    "knn": "KNN",
}


def _save(fig, output_dir: Path, filename: str) -> str:
    path = output_dir / filename
    fig.tight_layout()
    fig.savefig(path, dpi=120)
    plt.close(fig)
    log.info("Saved plot: %s", path)
    return str(path)


def plot_class_balance(df: pd.DataFrame, target: str, output_dir: Path) -> str:
    counts = df[target].value_counts().reindex([NEGATIVE_LABEL, POSITIVE_LABEL], fill_value=0)
    fig, ax = plt.subplots(figsize=(5, 4))
    ax.bar(
        [LABEL_NAMES[c] for c in counts.index],
        counts.values,
        color=[CLASS_COLORS[c] for c in counts.index],
    )
    for i, v in enumerate(counts.values):
        ax.text(i, v, str(int(v)), ha="center", va="bottom")
    ax.set_ylabel("Samples")
    ax.set_title("Diagnosis class balance")
    return _save(fig, output_dir, "class_balance.png")


def plot_feature_boxplots(df: pd.DataFrame, features: list[str], target: str,
                          output_dir: Path) -> str:
    ncols = 5
    nrows = -(-len(features) // ncols)
    fig, axes = plt.subplots(nrows, ncols, figsize=(3 * ncols, 3.2 * nrows), squeeze=False)
    groups = [NEGATIVE_LABEL, POSITIVE_LABEL]
    for ax, feat in zip(axes.flat, features):
        data = [df.loc[df[target] == g, feat].to_numpy() for g in groups]
        ax.boxplot(data)
        ax.set_xticks([1, 2], [LABEL_NAMES[g] for g in groups])
        ax.set_title(feat, fontsize=9)
    for ax in list(axes.flat)[len(features):]:
        ax.axis("off")
    fig.suptitle("Feature distributions by diagnosis")
    return _save(fig, output_dir, "feature_boxplots.png")


def plot_correlation_heatmap(matrix: dict, output_dir: Path) -> str:
    corr = pd.DataFrame(matrix)
    corr = corr.loc[corr.columns]
    labels = [c.replace("_mean", "") for c in corr.columns]
    fig, ax = plt.subplots(figsize=(7, 6))
    im = ax.imshow(corr.to_numpy(), cmap="RdBu_r", vmin=-1, vmax=1)
    ax.set_xticks(range(len(labels)), labels, rotation=45, ha="right", fontsize=8)
    ax.set_yticks(range(len(labels)), labels, fontsize=8)
    for i in range(len(labels)):
        for j in range(len(labels)):
            r = corr.iat[i, j]
            if pd.notna(r):
                ax.text(j, i, f"{r:.2f}", ha="center", va="center", fontsize=6,
                        color="white" if abs(r) > 0.6 else "black")
    fig.colorbar(im, ax=ax, shrink=0.8, label="Pearson r")
    ax.set_title("Feature correlations")
    return _save(fig, output_dir, "feature_correlations.png")


def plot_importances(importances: pd.Series, title: str, output_dir: Path,
                     filename: str) -> str:
    ordered = importances.sort_values()
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.barh(ordered.index, ordered.values, color="#55A868")
    ax.set_xlabel("Mean decrease in impurity")
    ax.set_title(title)
    return _save(fig, output_dir, filename)


def plot_complexity_curve(table: pd.DataFrame, chosen_alpha: float,
                          output_dir: Path) -> str:
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.plot(table["ccp_alpha"], table["train_error"], marker="o", label="Training error")
    if table["cv_error"].notna().any():
        ax.plot(table["ccp_alpha"], table["cv_error"], marker="s", label="Cross-validated error")
    ax.axvline(chosen_alpha, color="grey", linestyle="--", label=f"ccp_alpha={chosen_alpha}")
    ax.set_xlabel("ccp_alpha")
    ax.set_ylabel("Error rate")
    ax.set_title("Decision tree complexity vs error")
    ax.legend()
    return _save(fig, output_dir, "tree_complexity.png")


def plot_pruned_tree(tree, feature_names: list[str], output_dir: Path) -> str:
    fig, ax = plt.subplots(figsize=(12, 7))
    plot_tree(
        tree,
        feature_names=feature_names,
        class_names=[LABEL_NAMES[NEGATIVE_LABEL], LABEL_NAMES[POSITIVE_LABEL]],
        filled=True,
        rounded=True,
        fontsize=8,
        ax=ax,
    )
    ax.set_title("Pruned decision tree")
    return _save(fig, output_dir, "pruned_tree.png")


def plot_sweep(sweep, title: str, output_dir: Path, filename: str) -> str:
    table = sweep.table
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.plot(table[sweep.param_name], table[sweep.score_name], marker="o")
    ax.axvline(sweep.best_value, color="grey", linestyle="--")
    ax.set_xlabel(sweep.param_name)
    ax.set_ylabel(sweep.score_name.replace("_", " "))
    ax.set_title(title)
    return _save(fig, output_dir, filename)


def plot_roc_overlay(evaluations: dict, output_dir: Path,
                     models: list[str] = COMPARED_MODELS) -> str:
    fig, ax = plt.subplots(figsize=(6, 6))
    for name in models:
        if name not in evaluations:
            continue
        roc = evaluations[name]["roc"]
        ax.plot(
            roc.fpr, roc.tpr, drawstyle="steps-post",
            label=f"{MODEL_LABELS.get(name, name)} (AUC={roc.auc:.3f})",
        )
    ax.plot([0, 1], [0, 1], color="grey", linestyle=":")
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1.02)
    ax.set_xlabel("False positive rate")
    ax.set_ylabel("True positive rate")
    ax.set_title("ROC comparison")
    ax.legend(loc="lower right")
    return _save(fig, output_dir, "roc_comparison.png")


def render_all(raw_data: dict, eda_report: dict, training_results: dict,
               evaluation_results: dict, output_dir: str) -> list[str]:
    """Write every report figure into ``output_dir`` and return the paths."""
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    df = raw_data["df"]
    features = raw_data["feature_names"]
    target = raw_data["target_name"]
    tree = training_results["tree"]
    forest = training_results["forest"]
    knn = training_results["knn"]

    return [
        plot_class_balance(df, target, out),
        plot_feature_boxplots(df, features, target, out),
        plot_correlation_heatmap(eda_report["feature_correlations"]["matrix"], out),
        plot_complexity_curve(tree.complexity_table, tree.ccp_alpha, out),
        plot_pruned_tree(tree.pruned, features, out),
        plot_importances(tree.importances, "Decision tree importance", out,
                         "importance_tree.png"),
        plot_importances(forest.bagging_importances, "Bagging importance", out,
                         "importance_bagging.png"),
        plot_importances(forest.forest_importances,
                         f"Random forest importance (mtry={forest.mtry})", out,
                         "importance_forest.png"),
        plot_sweep(forest.sweep, "Random forest OOB error by mtry", out, "mtry_sweep.png"),
        plot_sweep(knn.sweep, "KNN test accuracy by k", out, "k_sweep.png"),
        plot_roc_overlay(evaluation_results["evaluations"], out),
    ]
