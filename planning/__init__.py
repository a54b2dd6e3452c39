"""
Trade planning helpers on top of paperdesk: risk-based sizing, DCA, chat tools.

Stateless. Outputs feed the ledger's order calls (e.g. position size in
shares becomes the order quantity).
"""

from planning.dca import DCAInputs, DCAResult, calculate_dca
from planning.sizing import PositionInputs, PositionResult, calculate_position_size
from planning.tools import SIZE_POSITION_TOOL, TOOL_DECLARATIONS, run_tool

__all__ = [
    "DCAInputs",
    "DCAResult",
    "calculate_dca",
    "PositionInputs",
    "PositionResult",
    "calculate_position_size",
    "SIZE_POSITION_TOOL",
    "TOOL_DECLARATIONS",
    "run_tool",
]
