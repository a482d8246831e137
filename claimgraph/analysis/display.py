"""
Display Module

Terminal display formatting and colorized output for claim-graph results.

Provides:
    - Colors: ANSI terminal color codes
    - Display functions for analyses, shapes and insights
    - Text formatting utilities
"""

from __future__ import annotations

from typing import List, Sequence

from claimgraph.core.models import Severity
from .models import InsightData, PrimaryShape, ProblemStructure, StructuralAnalysis


# =============================================================================
# Terminal Colors
# =============================================================================

class Colors:
    """ANSI color codes for terminal output."""
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: str, bold: bool = False) -> str:
    """Apply color to text."""
    style = Colors.BOLD if bold else ""
    return f"{style}{color}{text}{Colors.RESET}"


def severity_color(severity: Severity) -> str:
    return {
        Severity.HIGH: Colors.RED,
        Severity.MEDIUM: Colors.YELLOW,
        Severity.LOW: Colors.GRAY,
    }.get(severity, Colors.RESET)


def shape_color(primary: PrimaryShape) -> str:
    return {
        PrimaryShape.CONVERGENT: Colors.GREEN,
        PrimaryShape.FORKED: Colors.RED,
        PrimaryShape.CONSTRAINED: Colors.YELLOW,
        PrimaryShape.PARALLEL: Colors.BLUE,
        PrimaryShape.SPARSE: Colors.GRAY,
    }.get(primary, Colors.RESET)


# =============================================================================
# Text Utilities
# =============================================================================

def wrap_text(text: str, width: int) -> List[str]:
    """Wrap text to specified width."""
    words = text.split()
    lines = []
    current_line = []
    current_len = 0

    for word in words:
        if current_len + len(word) + 1 <= width:
            current_line.append(word)
            current_len += len(word) + 1
        else:
            if current_line:
                lines.append(" ".join(current_line))
            current_line = [word]
            current_len = len(word)

    if current_line:
        lines.append(" ".join(current_line))

    return lines or [""]


def _pct(value: float) -> str:
    return f"{value * 100:.0f}%"


# =============================================================================
# Display Functions
# =============================================================================

def print_header(title: str, char: str = "=", width: int = 78) -> None:
    print(f"\n{colored(char * width, Colors.CYAN)}")
    print(f"{colored(f' {title} '.center(width), Colors.CYAN, bold=True)}")
    print(f"{colored(char * width, Colors.CYAN)}")


def print_subheader(title: str, char: str = "-", width: int = 78) -> None:
    print(f"\n{colored(f' {title} ', Colors.WHITE, bold=True)}")
    print(f"{colored(char * width, Colors.GRAY)}")


def display_shape(shape: ProblemStructure) -> None:
    """Display the primary shape, evidence and secondary patterns."""
    print_subheader("Shape")
    name = colored(shape.primary.value.upper(), shape_color(shape.primary), bold=True)
    print(f"  {'Primary:':<20} {name}")
    print(f"  {'Confidence:':<20} {_pct(shape.confidence)}")
    print(f"  {'Signal Strength:':<20} {_pct(shape.signal_strength)}")
    if shape.peaks:
        print(f"  {'Peaks:':<20} {', '.join(shape.peaks)} ({shape.peak_relationship.value})")

    if shape.evidence:
        print(f"\n  {colored('Evidence', Colors.WHITE, bold=True)}")
        for line in shape.evidence:
            for i, part in enumerate(wrap_text(line, 70)):
                print(f"    {'-' if i == 0 else ' '} {part}")

    if shape.patterns:
        print(f"\n  {colored('Secondary Patterns', Colors.WHITE, bold=True)}")
        for p in shape.patterns:
            sev = colored(p.severity.value.upper(), severity_color(p.severity))
            print(f"    {p.type.value:<12} {sev}")

    if shape.transfer_question:
        print(f"\n  {colored('Question:', Colors.MAGENTA, bold=True)} {shape.transfer_question}")


def display_analysis(analysis: StructuralAnalysis) -> None:
    """Display the full structural analysis."""
    g = analysis.graph
    land = analysis.landscape
    r = analysis.ratios

    print_subheader("Landscape")
    print(f"  {'Claims:':<20} {land.claim_count}")
    print(f"  {'Sources:':<20} {land.model_count}")
    print(f"  {'Dominant Type:':<20} {land.dominant_category}")
    print(f"  {'Dominant Role:':<20} {land.dominant_role}")
    print(f"  {'Convergence:':<20} {_pct(land.convergence_ratio)}")

    print_subheader("Topology")
    print(f"  {'Components:':<20} {g.component_count}")
    print(f"  {'Longest Chain:':<20} {' -> '.join(g.longest_chain) or '-'}")
    print(f"  {'Hub:':<20} {g.hub_claim or '-'} (dominance {g.hub_dominance:.2f})")
    ap_color = Colors.RED if g.articulation_points else Colors.GREEN
    print(f"  {'Articulation Pts:':<20} {colored(str(len(g.articulation_points)), ap_color)}")
    print(f"  {'Cluster Cohesion:':<20} {g.cluster_cohesion:.3f}")
    print(f"  {'Local Coherence:':<20} {g.local_coherence:.3f}")

    print_subheader("Core Ratios")
    for name, value in r.to_dict().items():
        print(f"  {name.capitalize() + ':':<20} {_pct(value)}")

    display_shape(analysis.shape)


def display_insights(insights: Sequence[InsightData]) -> None:
    print_subheader(f"Insights ({len(insights)})")
    if not insights:
        print(f"  {colored('No structural insights', Colors.GRAY)}")
        return
    for i in insights:
        sev = colored(f"[{i.severity.value.upper():<6}]", severity_color(i.severity))
        print(f"  {sev} {i.kind.value:<24} {i.claim.label} {colored(i.source.value, Colors.GRAY)}")
