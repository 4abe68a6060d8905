"""Report compilation: plain-text summary and JSON export."""

import json
import math
from datetime import datetime, timezone

import numpy as np
import pandas as pd

from tumor_report import __version__
from tumor_report.config import COMPARED_MODELS
from tumor_report.utils import get_logger

log = get_logger(__name__)

WIDTH = 72


class Reporter:
    """Compiles stage outputs into one report dict and renders it as text."""

    def generate(
        self,
        dataset_metadata: dict,
        eda_report: dict,
        preprocessing_info: dict,
        training_results: dict,
        evaluation_results: dict,
        plot_paths: list[str] | None = None,
    ) -> dict:
        """Build the report dict. Fitted models and arrays stay out of it."""
        tree = training_results["tree"]
        forest = training_results["forest"]
        knn = training_results["knn"]

        evaluations = {
            name: {k: v for k, v in metrics.items() if k not in ("confusion", "roc")}
            | {"roc": metrics["roc"].to_dict()}
            for name, metrics in evaluation_results["evaluations"].items()
        }

        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
            "dataset": dataset_metadata,
            "eda": eda_report,
            "preprocessing": preprocessing_info,
            "training": {
                "selected_params": training_results["selected_params"],
                "train_time_seconds": training_results["train_time_seconds"],
                "tree_complexity": tree.complexity_table.to_dict(orient="records"),
                "tree_rules": tree.rules,
                "tree_importance": tree.importances.to_dict(),
                "bagging_importance": forest.bagging_importances.to_dict(),
                "forest_importance": forest.forest_importances.to_dict(),
                "mtry_sweep": forest.sweep.table.to_dict(orient="records"),
                "k_sweep": knn.sweep.table.to_dict(orient="records"),
            },
            "evaluation": {
                "models": evaluations,
                "best_model_name": evaluation_results["best_model_name"],
            },
            "plots": plot_paths or [],
        }

    def print_summary(self, report: dict) -> str:
        """Render the report as human-readable text tables."""
        lines = []

        def section(title):
            lines.extend(["", "=" * WIDTH, title, "=" * WIDTH])

        section("BREAST TUMOR CLASSIFIER COMPARISON")
        ds = report["dataset"]
        lines.append(f"Dataset: {ds['name']}")
        lines.append(f"Samples: {ds['n_samples']}  Features used: {ds['n_features']}")

        section("CLASS BALANCE")
        balance = report["eda"]["class_balance"]
        for label, count in balance["counts"].items():
            pct = 100 * balance["proportions"].get(label, 0.0)
            lines.append(f"  {label:<12} {count:>6}  ({pct:.1f}%)")

        section("SUMMARY STATISTICS")
        summary = pd.DataFrame(report["eda"]["basic_stats"]["summary"])
        lines.append(summary.T.round(4).to_string())

        section("FEATURE CORRELATIONS")
        corr = report["eda"]["feature_correlations"]
        lines.append("  Correlation with malignant diagnosis:")
        for feat, r in corr["with_malignant"].items():
            lines.append(f"    {feat:<26}{r:>8.4f}")
        lines.append(
            f"  Feature pairs above the correlation threshold: {corr['n_highly_correlated']}"
        )
        for pair in corr["highly_correlated_pairs"]:
            lines.append(
                f"    {pair['feature_1']:<26}{pair['feature_2']:<26}{pair['correlation']:>8.4f}"
            )

        ranked = report["eda"]["top_discriminative_features"]
        if ranked:
            section("DISCRIMINATIVE FEATURES (Welch t-test, malignant vs benign)")
            lines.append(f"  {'feature':<26}{'t':>10}{'p':>12}{'effect':>8}")
            for r in ranked:
                lines.append(
                    f"  {r['feature']:<26}{r['t_statistic']:>10.3f}"
                    f"{r['p_value']:>12.2e}{r['effect_size']:>8.3f}"
                )

        section("SPLIT AND SCALING")
        prep = report["preprocessing"]
        lines.append(
            f"  train={prep['train_samples']} (malignant {prep['train_malignant']})  "
            f"test={prep['test_samples']} (malignant {prep['test_malignant']})  "
            f"seed={prep['seed']}"
        )
        lines.append(f"  min-max scaler fit on: {prep['scaler_fit_on']}")
        if prep.get("leakage_note"):
            lines.append(f"  NOTE: {prep['leakage_note']}")

        section("MODEL TUNING")
        params = report["training"]["selected_params"]
        lines.append(f"  Decision tree ccp_alpha: {params['ccp_alpha']}")
        lines.append(f"  Random forest mtry (lowest OOB error): {params['mtry']}")
        lines.append(
            f"  KNN k (best test accuracy): {params['k']}  "
            f"(rule of thumb k={params['k_rule_of_thumb']})"
        )
        lines.append("")
        lines.append(pd.DataFrame(report["training"]["mtry_sweep"]).to_string(index=False))
        lines.append("")
        lines.append(pd.DataFrame(report["training"]["k_sweep"]).to_string(index=False))

        section("TEST SET PERFORMANCE")
        models = report["evaluation"]["models"]
        header = f"  {'model':<24}{'acc':>8}{'prec':>8}{'recall':>8}{'spec':>8}{'f1':>8}{'auc':>8}"
        lines.append(header)
        lines.append("  " + "-" * (len(header) - 2))
        for name, m in models.items():
            lines.append(
                f"  {name:<24}{m['accuracy']:>8.4f}{m['precision']:>8.4f}"
                f"{m['recall']:>8.4f}{m['specificity']:>8.4f}{m['f1']:>8.4f}"
                f"{m['roc_auc']:>8.4f}"
            )

        for name in COMPARED_MODELS:
            if name not in models:
                continue
            cm = models[name]["confusion_matrix"]
            lines.append("")
            lines.append(f"  Confusion matrix: {name} (rows=predicted, cols=actual)")
            lines.append(f"  {'':<12}{'Benign':>10}{'Malignant':>12}")
            lines.append(f"  {'Benign':<12}{cm['tn']:>10}{cm['fn']:>12}")
            lines.append(f"  {'Malignant':<12}{cm['fp']:>10}{cm['tp']:>12}")

        lines.append("")
        lines.append(f"Best model by F1: {report['evaluation']['best_model_name']}")
        if report["plots"]:
            lines.append(f"Plots written: {len(report['plots'])}")
        lines.append("=" * WIDTH)
        return "\n".join(lines)

    def save_json(self, report: dict, path: str):
        log.info("Writing JSON report with %d sections", len(report))
        with open(path, "w") as f:
            json.dump(self._make_serializable(report), f, indent=2)

    def _make_serializable(self, obj):
        """Convert numpy / pandas values to native JSON-safe Python types."""
        if isinstance(obj, dict):
            return {str(k): self._make_serializable(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [self._make_serializable(v) for v in obj]
        if isinstance(obj, np.ndarray):
            return self._make_serializable(obj.tolist())
        if isinstance(obj, (pd.Series, pd.DataFrame)):
            return self._make_serializable(obj.to_dict())
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, (float, np.floating)):
            value = float(obj)
            return None if math.isnan(value) or math.isinf(value) else value
        if isinstance(obj, np.bool_):
            return bool(obj)
        return obj
