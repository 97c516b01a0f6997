#!/usr/bin/env python
"""
Run the MASI-weighted agreement permutation test.

Usage:
    python run_masi_agreement.py
    python run_masi_agreement.py --ratings data/sample_ratings.csv --trials 1000 --seed 7
    python run_masi_agreement.py --config configs/experiment.yaml --workers 4
"""

from masi_agreement.cli.run_experiment import main


if __name__ == "__main__":
    main()
