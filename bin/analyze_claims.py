#!/usr/bin/env python3
"""
Claim Graph Analysis CLI

Structural analysis of claim graphs assembled from several independent
sources answering the same question.

Pipeline:
    1. Graph building       -> normalized claims and typed edges
    2. Topology / scoring   -> components, chains, leverage, percentile flags
    3. Patterns / shape     -> primary shape, secondary patterns, evidence
    4. Insights (optional)  -> ranked, de-duplicated findings

Usage:
    python bin/analyze_claims.py input.json
    python bin/analyze_claims.py input.json --insights -o output/analysis.json
    python bin/analyze_claims.py input.json --shape-only --json
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import argparse
import json
import logging
from dataclasses import replace
from typing import Any, Dict

from claimgraph.analysis.analyzer import StructuralAnalyzer
from claimgraph.analysis.display import (
    Colors,
    colored,
    display_analysis,
    display_insights,
    display_shape,
    print_header,
)
from claimgraph.analysis.insight_generator import InsightGenerator
from claimgraph.config.settings import AnalysisSettings
from claimgraph.core.models import AnalysisInput


# ---------------------------------------------------------------------------
# CLI Argument Parsing
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="analyze_claims",
        description="Structural analysis of multi-source claim graphs.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  %(prog)s claims.json                      Full analysis summary
  %(prog)s claims.json --insights           Include ranked insights
  %(prog)s claims.json --shape-only         Shape classification only
  %(prog)s claims.json --json               Print results as JSON
  %(prog)s claims.json -o out/result.json   Export results to JSON
""",
    )
    parser.add_argument("input", metavar="FILE", help="JSON file with claims and edges")

    mode = parser.add_argument_group("Analysis")
    mode.add_argument(
        "--shape-only",
        action="store_true",
        help="Only classify the shape (skips landscape, ratios, cascades)",
    )
    mode.add_argument("--insights", "-i", action="store_true", help="Generate ranked insights")

    output = parser.add_argument_group("Output")
    output.add_argument("--output", "-o", metavar="FILE", help="Export results to JSON file")
    output.add_argument("--json", action="store_true", help="Print results as JSON to stdout")
    output.add_argument("--quiet", "-q", action="store_true", help="Suppress console display")
    output.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    return parser


# ---------------------------------------------------------------------------
# Analysis Logic
# ---------------------------------------------------------------------------

def load_input(path: str) -> AnalysisInput:
    with open(path) as f:
        raw = json.load(f)
    data = AnalysisInput.from_dict(raw)
    if data.input_id is None:
        data = replace(data, input_id=Path(path).stem)
    return data


def run_analysis(args: argparse.Namespace, settings: AnalysisSettings) -> Dict[str, Any]:
    """Run the requested pipeline and return a JSON-ready result."""
    data = load_input(args.input)
    analyzer = StructuralAnalyzer(settings)

    if args.shape_only:
        shape = analyzer.problem_structure(data)
        return {"inputId": data.input_id, "shape": shape, "insights": None}

    analysis = analyzer.analyze(data)
    insights = InsightGenerator().generate(analysis) if args.insights else None
    return {"inputId": data.input_id, "analysis": analysis, "insights": insights}


def to_json(result: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {"inputId": result["inputId"]}
    if "analysis" in result:
        out.update(result["analysis"].to_dict())
    else:
        out["shape"] = result["shape"].to_dict()
    if result["insights"] is not None:
        out["insights"] = [i.to_dict() for i in result["insights"]]
    return out


# ---------------------------------------------------------------------------
# Output Helpers
# ---------------------------------------------------------------------------

def export_json(payload: Dict[str, Any], path: str) -> None:
    """Write results to a JSON file, creating parent directories as needed."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(payload, f, indent=2, default=str)


def display(result: Dict[str, Any]) -> None:
    print_header(f"Claim Graph Analysis: {result['inputId']}")
    if "analysis" in result:
        display_analysis(result["analysis"])
    else:
        display_shape(result["shape"])
    if result["insights"] is not None:
        display_insights(result["insights"])


# ---------------------------------------------------------------------------
# Entry Point
# ---------------------------------------------------------------------------

def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    log_level = (
        logging.DEBUG if args.verbose
        else logging.WARNING if args.quiet
        else logging.INFO
    )
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    settings = AnalysisSettings.from_env()
    if args.verbose:
        settings = replace(settings, debug=True)

    try:
        result = run_analysis(args, settings)
    except (OSError, ValueError) as exc:
        print(colored(f"Error: {exc}", Colors.RED), file=sys.stderr)
        if args.verbose:
            logging.exception("Analysis failed")
        return 1

    payload = to_json(result)
    if args.output:
        export_json(payload, args.output)
        if not args.quiet:
            print(colored(f"\nResults exported to: {args.output}", Colors.GREEN))

    if args.json:
        print(json.dumps(payload, indent=2, default=str))
    elif not args.quiet:
        display(result)

    return 0


if __name__ == "__main__":
    sys.exit(main())
