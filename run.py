#!/usr/bin/env python3
"""
Breast tumor classifier comparison - one command to run everything.

Usage:
    python run.py data.csv                 # Full report with plots
    python run.py data.csv --no-plots      # Text summary and JSON only
"""

import sys

from tumor_report.__main__ import main


if __name__ == "__main__":
    main(sys.argv[1:])
