from warp_reliability.analysis.budget import E2eBudget, FixedFaultBudget, TransmissionBudget
from warp_reliability.analysis.table import ReliabilityRow, ReliabilityTable, format_probability
from warp_reliability.analysis.simulator import ReliabilitySimulator, SkippedInstruction
from warp_reliability.analysis.reliability_analysis import ReliabilityAnalysis

__all__ = [
    "E2eBudget",
    "FixedFaultBudget",
    "TransmissionBudget",
    "ReliabilityRow",
    "ReliabilityTable",
    "format_probability",
    "ReliabilitySimulator",
    "SkippedInstruction",
    "ReliabilityAnalysis",
]
