"""
Audit Module - Fairness and bias analysis of tabular datasets.

Quick Start:
    from audit_module import Dataset, FairnessAnalyzer

    dataset = Dataset.from_csv("loans.csv")
    outcome = FairnessAnalyzer().run(dataset, extended=True)
    if outcome.ok:
        print(outcome.result.base.overall_bias_score)
"""

from audit_module.src import (
    Dataset,
    FairnessAnalyzer,
    analyze_dataset,
    analyze_dataset_extended,
    run_analysis,
)

__all__ = [
    'Dataset',
    'FairnessAnalyzer',
    'analyze_dataset',
    'analyze_dataset_extended',
    'run_analysis',
]
