"""
Breast Tumor Classifier Comparison Report.

A single-run exploratory analysis that loads the breast-tumor diagnostic
CSV, summarizes and rescales the ten mean-valued cell measurements, and
compares a decision tree, bagged / random forest ensembles and a
k-nearest-neighbors classifier through confusion matrices and ROC curves.

DISCLAIMER: This is a machine learning teaching and research report built
on publicly available data. It does NOT provide medical diagnoses or
replace professional medical advice.
"""

__version__ = "0.1.0"
