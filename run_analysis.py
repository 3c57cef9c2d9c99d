"""
Fairness Audit Runner

Analyzes a CSV dataset for bias:
1. Profile columns (protected attributes, targets)
2. Aggregate groups and compute fairness metrics
3. Flag threshold violations and recommend mitigations
4. Optionally run significance tests, extended metrics,
   intersectional, temporal and proxy-correlation analysis

Usage:
    python run_analysis.py --data data/loans.csv
    python run_analysis.py --data data/loans.csv --config config.yml --extended \
        --output reports/result.json --history reports/history.csv
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from shared.config import AnalysisConfig, DEFAULT_CONFIG
from shared.logging import get_logger

from audit_module.src.config_loader import load_config
from audit_module.src.dataset import Dataset
from audit_module.src.exceptions import ConfigurationError
from audit_module.src.fairness_analyzer import FairnessAnalyzer
from audit_module.src.history import append_history_row, build_history_row

logger = get_logger(__name__)


def _print_summary(analyzer: FairnessAnalyzer, result) -> None:
    """Print analysis summary."""
    print("\n" + "=" * 60)
    print("FAIRNESS AUDIT SUMMARY")
    print("=" * 60)

    print(f"\nRecords: {result.total_records}  Groups: {result.total_groups}")
    print(f"Protected attributes: {', '.join(result.protected_attributes)}")
    targets = ', '.join(result.target_columns) or '-'
    if result.targets_are_fallback:
        targets += " (fallback, low confidence)"
    print(f"Targets: {targets}")

    print("\nMetrics:")
    for line in analyzer.interpret(result):
        print(f"  {line}")

    print(f"\nOverall bias score: {result.overall_bias_score:.3f}")

    print("\nFlags:")
    for flag in result.flags:
        print(f"  [{flag.severity}] {flag.type}: {flag.message}")
    if not result.flags:
        print("  none")

    print("\nRecommendations:")
    for rec in result.recommendations:
        print(f"  [{rec.priority}] {rec.type}: {rec.action}")
    if not result.recommendations:
        print("  none")

    print("\n" + "=" * 60)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run a fairness audit on a CSV dataset")
    parser.add_argument(
        '--data',
        type=str,
        required=True,
        help='Path to CSV data file'
    )
    parser.add_argument(
        '--config',
        type=str,
        help='Path to YAML config file (defaults when omitted)'
    )
    parser.add_argument(
        '--extended',
        action='store_true',
        help='Also run tests, extended metrics, intersectional, temporal and proxy analysis'
    )
    parser.add_argument(
        '--output',
        type=str,
        help='Write the result as JSON to this path'
    )
    parser.add_argument(
        '--history',
        type=str,
        help='Append a summary row to this CSV history file'
    )

    args = parser.parse_args(argv)

    config: AnalysisConfig = DEFAULT_CONFIG
    if args.config:
        try:
            config = load_config(args.config)
        except ConfigurationError as e:
            logger.error(f"Config error: {e}")
            return 1

    dataset = Dataset.from_csv(args.data)
    analyzer = FairnessAnalyzer(config)
    outcome = analyzer.run(dataset, extended=args.extended)

    if not outcome.ok:
        print(f"\nAnalysis failed [{outcome.error.kind.value}]: {outcome.error.message}")
        return 1

    result = outcome.result
    base = result.base if args.extended else result

    _print_summary(analyzer, base)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            json.dump(result.to_dict(), f, indent=2, default=str)
        print(f"Result written to {output_path}")

    if args.history:
        append_history_row(args.history, build_history_row(base))

    return 0


if __name__ == "__main__":
    sys.exit(main())
