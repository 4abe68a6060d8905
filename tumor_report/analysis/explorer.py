"""Exploratory data analysis of the diagnostic dataset."""

import numpy as np
import pandas as pd
from scipy import stats

from tumor_report.config import LABEL_NAMES, NEGATIVE_LABEL, POSITIVE_LABEL
from tumor_report.utils import get_logger

log = get_logger(__name__)


class DataExplorer:
    """Summary statistics, class balance and per-feature comparisons."""

    def __init__(self, correlation_threshold: float = 0.9):
        self.correlation_threshold = correlation_threshold
        self.report = {}

    def run(self, dataset: dict) -> dict:
        """
        Run the exploratory analysis on a loaded dataset.

        Returns an EDA report dict; every value is plain data so the
        reporter can print or serialize it.
        """
        df = dataset["df"]
        feature_names = dataset["feature_names"]
        target_name = dataset["target_name"]

        log.info("Running exploratory data analysis on %d samples", len(df))

        self.report = {
            "basic_stats": self._basic_stats(df, feature_names),
            "class_balance": self._class_balance(df, target_name),
            "feature_correlations": self._correlations(df, feature_names, target_name),
            "stats_by_diagnosis": self._grouped_means(df, feature_names, target_name),
            "top_discriminative_features": self._discriminative_features(
                df, feature_names, target_name
            ),
            "outlier_summary": self._outlier_analysis(df, feature_names, target_name),
        }

        log.info("EDA complete: %d analysis sections generated", len(self.report))
        return self.report

    def _basic_stats(self, df: pd.DataFrame, features: list[str]) -> dict:
        desc = df[features].describe()
        return {
            "shape": list(df.shape),
            "summary": desc.to_dict(),
            "dtypes": df.dtypes.astype(str).to_dict(),
            "n_missing": int(df[features].isnull().sum().sum()),
        }

    def _class_balance(self, df: pd.DataFrame, target: str) -> dict:
        """Analyze diagnosis class distribution."""
        counts = df[target].value_counts()
        proportions = df[target].value_counts(normalize=True)
        imbalance_ratio = counts.max() / counts.min() if counts.min() > 0 else float("inf")

        balance_status = "balanced" if imbalance_ratio < 1.5 else (
            "moderate_imbalance" if imbalance_ratio < 3.0 else "severe_imbalance"
        )

        log.info(
            "Class balance: %s (ratio=%.2f, malignant=%.1f%%)",
            balance_status, imbalance_ratio,
            100 * proportions.get(POSITIVE_LABEL, 0.0),
        )

        return {
            "counts": {LABEL_NAMES[str(k)]: int(v) for k, v in counts.items()},
            "proportions": {
                LABEL_NAMES[str(k)]: round(float(v), 4) for k, v in proportions.items()
            },
            "imbalance_ratio": float(imbalance_ratio),
            "status": balance_status,
        }

    def _correlations(self, df: pd.DataFrame, features: list[str], target: str) -> dict:
        """
        Pearson correlations among features and with the malignant indicator.

        Pairs are read from the strict upper triangle so each unordered pair
        appears once, strongest first.
        """
        corr = df[features].corr()
        i, j = np.triu_indices(len(features), k=1)
        pairs = pd.Series(
            corr.to_numpy()[i, j],
            index=pd.MultiIndex.from_arrays([corr.index[i], corr.columns[j]]),
        )
        strong = pairs[pairs.abs() > self.correlation_threshold]
        strong = strong.sort_values(key=abs, ascending=False)

        malignant = (df[target] == POSITIVE_LABEL).astype(float)
        with_label = df[features].corrwith(malignant).sort_values(key=abs, ascending=False)

        log.info(
            "Found %d feature pairs with |r|>%.2f", len(strong), self.correlation_threshold,
        )
        if with_label.notna().any():
            log.info(
                "Strongest correlation with malignancy: %s (r=%.3f)",
                with_label.index[0], with_label.iloc[0],
            )

        return {
            "matrix": corr.round(4).to_dict(),
            "highly_correlated_pairs": [
                {"feature_1": a, "feature_2": b, "correlation": round(float(r), 4)}
                for (a, b), r in strong.items()
            ],
            "n_highly_correlated": int(len(strong)),
            "with_malignant": with_label.round(4).to_dict(),
        }

    def _grouped_means(self, df: pd.DataFrame, features: list[str], target: str) -> dict:
        grouped = df.groupby(target, observed=True)[features].mean()
        return {
            LABEL_NAMES[str(label)]: row.round(6).to_dict()
            for label, row in grouped.iterrows()
        }

    def _discriminative_features(self, df: pd.DataFrame, features: list[str],
                                 target: str) -> list[dict]:
        """
        Rank features by a Welch t-test between malignant and benign samples.
        """
        malignant = df[df[target] == POSITIVE_LABEL]
        benign = df[df[target] == NEGATIVE_LABEL]
        if len(malignant) < 2 or len(benign) < 2:
            log.warning(
                "Discriminative analysis needs at least 2 samples per class "
                "(malignant=%d, benign=%d)", len(malignant), len(benign),
            )
            return []

        results = []
        for feat in features:
            t_stat, p_val = stats.ttest_ind(
                malignant[feat], benign[feat], equal_var=False
            )
            std = df[feat].std()
            effect_size = abs(malignant[feat].mean() - benign[feat].mean()) / std if std > 0 else 0.0

            results.append({
                "feature": feat,
                "t_statistic": round(float(t_stat), 4),
                "p_value": float(p_val),
                "effect_size": round(float(effect_size), 4),
            })

        results.sort(key=lambda x: abs(x["t_statistic"]), reverse=True)

        log.info("Top discriminative features:")
        for i, r in enumerate(results[:5]):
            log.info(
                "  %d. %s (t=%.2f, d=%.2f, p=%.2e)",
                i + 1, r["feature"], r["t_statistic"],
                r["effect_size"], r["p_value"],
            )

        return results

    def _outlier_analysis(self, df: pd.DataFrame, features: list[str], target: str) -> dict:
        """
        Count values outside the 1.5 * IQR boxplot whiskers.

        Fences come from all rows; the flagged values are also broken down
        by diagnosis.
        """
        values = df[features]
        q = values.quantile([0.25, 0.75])
        spread = 1.5 * (q.loc[0.75] - q.loc[0.25])
        flagged = values.lt(q.loc[0.25] - spread) | values.gt(q.loc[0.75] + spread)

        per_feature = flagged.sum()
        per_feature = per_feature[per_feature > 0].astype(int)
        by_class = flagged[per_feature.index].groupby(df[target], observed=True).sum()

        log.info(
            "Outlier analysis: %d values outside the IQR fences across %d features",
            per_feature.sum(), len(per_feature),
        )

        return {
            "features_with_outliers": per_feature.to_dict(),
            "total_outlier_values": int(per_feature.sum()),
            "n_features_with_outliers": int(len(per_feature)),
            "by_diagnosis": {
                LABEL_NAMES[str(label)]: {k: int(v) for k, v in row.items() if v > 0}
                for label, row in by_class.iterrows()
            },
        }
