from tumor_report.data.loader import DatasetLoader
from tumor_report.data.preprocessor import Preprocessor, rescale, split_indices

__all__ = ["DatasetLoader", "Preprocessor", "rescale", "split_indices"]
