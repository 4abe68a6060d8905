"""
Tumor classifier comparison pipeline.

Orchestrates the full report: data loading -> EDA -> preprocessing ->
model training -> evaluation -> reporting. A single synchronous run with
fixed seed and tuning constants.
"""

import os
import traceback
from typing import Callable

from tumor_report import __version__
from tumor_report.analysis import DataExplorer
from tumor_report.config import (
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SCALE_FIT,
    FOREST_TREES,
    K_CANDIDATES,
    MTRY_CANDIDATES,
    SEED,
    TEST_FRACTION,
)
from tumor_report.data import DatasetLoader, Preprocessor
from tumor_report.evaluation import ModelEvaluator, Reporter
from tumor_report.models import ModelTrainer
from tumor_report.utils import get_logger

log = get_logger(__name__)

DISCLAIMER = (
    "DISCLAIMER: This report is an ML teaching and research tool built on "
    "publicly available data. It does NOT provide medical diagnoses or "
    "replace professional medical advice."
)

STAGES = [
    "Data Loading",
    "Exploratory Analysis",
    "Preprocessing",
    "Model Training",
    "Evaluation",
    "Report Generation",
]


class TumorReportPipeline:
    """
    Runs the complete classifier comparison on one CSV file.

    Stages:
        1. Data Loading    - read and type-check the CSV
        2. EDA             - summary statistics and class balance
        3. Preprocessing   - select features, rescale, seeded split
        4. Training        - decision tree, bagging / forest, KNN sweeps
        5. Evaluation      - confusion matrices and ROC on the test rows
        6. Reporting       - text summary, plots, JSON report
    """

    def __init__(
        self,
        csv_path: str,
        output_dir: str = DEFAULT_OUTPUT_DIR,
        seed: int = SEED,
        test_fraction: float = TEST_FRACTION,
        scale_fit: str = DEFAULT_SCALE_FIT,
        n_estimators: int = FOREST_TREES,
        mtry_candidates=MTRY_CANDIDATES,
        k_candidates=K_CANDIDATES,
        make_plots: bool = True,
        on_progress: Callable[[int, int, str], None] | None = None,
    ):
        self.csv_path = csv_path
        self.output_dir = output_dir
        self.seed = seed
        self.test_fraction = test_fraction
        self.scale_fit = scale_fit
        self.n_estimators = n_estimators
        self.mtry_candidates = mtry_candidates
        self.k_candidates = k_candidates
        self.make_plots = make_plots
        self.on_progress = on_progress

        # Pipeline state
        self._raw_data = None
        self._eda_report = None
        self._processed_data = None
        self._training_results = None
        self._evaluation_results = None
        self._report = None
        self._summary = None

    @property
    def processed_data(self) -> dict | None:
        return self._processed_data

    @property
    def training_results(self) -> dict | None:
        return self._training_results

    @property
    def evaluation_results(self) -> dict | None:
        return self._evaluation_results

    @property
    def summary(self) -> str | None:
        return self._summary

    def run(self) -> dict:
        """
        Execute the full pipeline.

        Returns the final report dict.
        """
        log.info("=" * 60)
        log.info("BREAST TUMOR CLASSIFIER COMPARISON v%s", __version__)
        log.info("=" * 60)
        log.info(DISCLAIMER)

        stage_fns = [
            self._stage_load,
            self._stage_eda,
            self._stage_preprocess,
            self._stage_train,
            self._stage_evaluate,
            self._stage_report,
        ]
        total = len(STAGES)

        for i, (stage_name, stage_fn) in enumerate(zip(STAGES, stage_fns), start=1):
            log.info("-" * 60)
            log.info("STAGE %d/%d: %s", i, total, stage_name)
            log.info("-" * 60)
            if self.on_progress:
                self.on_progress(i, total, stage_name)
            try:
                stage_fn()
            except Exception:
                log.error("Stage '%s' failed:\n%s", stage_name, traceback.format_exc())
                raise

        return self._report

    def _stage_load(self):
        loader = DatasetLoader()
        self._raw_data = loader.load_csv(self.csv_path)

    def _stage_eda(self):
        explorer = DataExplorer()
        self._eda_report = explorer.run(self._raw_data)

    def _stage_preprocess(self):
        preprocessor = Preprocessor(
            test_fraction=self.test_fraction,
            seed=self.seed,
            fit_on=self.scale_fit,
        )
        self._processed_data = preprocessor.run(self._raw_data)

    def _stage_train(self):
        trainer = ModelTrainer(
            seed=self.seed,
            n_estimators=self.n_estimators,
            mtry_candidates=self.mtry_candidates,
            k_candidates=self.k_candidates,
        )
        self._training_results = trainer.run(self._processed_data)

    def _stage_evaluate(self):
        evaluator = ModelEvaluator()
        self._evaluation_results = evaluator.run(
            self._training_results, self._processed_data
        )

    def _stage_report(self):
        os.makedirs(self.output_dir, exist_ok=True)

        plot_paths = []
        if self.make_plots:
            from tumor_report.evaluation.plots import render_all
            plot_paths = render_all(
                self._raw_data,
                self._eda_report,
                self._training_results,
                self._evaluation_results,
                self.output_dir,
            )

        reporter = Reporter()
        self._report = reporter.generate(
            dataset_metadata=self._processed_data["metadata"],
            eda_report=self._eda_report,
            preprocessing_info=self._processed_data["preprocessing_info"],
            training_results=self._training_results,
            evaluation_results=self._evaluation_results,
            plot_paths=plot_paths,
        )

        self._summary = reporter.print_summary(self._report)
        print("\n" + self._summary)

        json_path = os.path.join(self.output_dir, "report.json")
        reporter.save_json(self._report, json_path)
        log.info("Full JSON report saved to: %s", json_path)
