"""
Tool declarations for a chat assistant and the local dispatcher behind them.

The model client is external; it sends back a tool name and arguments and
run_tool answers with the payload to return as the function response.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from planning.sizing import PositionInputs, calculate_position_size

logger = logging.getLogger(__name__)

SIZE_POSITION_TOOL: dict[str, Any] = {
    "name": "size_position",
    "description": (
        "Given account size, risk percent, entry, and stop, calculate how many shares the user "
        "can buy while keeping risk under the chosen percent of the total account."
    ),
    "parameters": {
        "type": "object",
        "properties": {
            "account_size": {"type": "number", "description": "The total equity in the trading account."},
            "max_risk_pct": {
                "type": "number",
                "description": "The percentage of the account to risk on this single trade (e.g., 1.0 for 1%).",
            },
            "entry_price": {"type": "number", "description": "The price at which the trade is entered."},
            "stop_price": {
                "type": "number",
                "description": "The price at which the trade will be closed if it goes wrong (stop loss).",
            },
        },
        "required": ["account_size", "max_risk_pct", "entry_price", "stop_price"],
    },
}


def _size_position(args: Mapping[str, Any]) -> dict[str, Any]:
    required = SIZE_POSITION_TOOL["parameters"]["required"]
    missing = [k for k in required if args.get(k) is None]
    if missing:
        raise ValueError(f"size_position missing arguments: {', '.join(missing)}")
    inputs = PositionInputs(
        account_size=float(args["account_size"]),
        max_risk_pct=float(args["max_risk_pct"]),
        entry_price=float(args["entry_price"]),
        stop_price=float(args["stop_price"]),
    )
    return calculate_position_size(inputs).to_dict()


TOOLS: dict[str, Callable[[Mapping[str, Any]], dict[str, Any]]] = {
    "size_position": _size_position,
}

TOOL_DECLARATIONS: list[dict[str, Any]] = [SIZE_POSITION_TOOL]


def run_tool(name: str, args: Mapping[str, Any]) -> dict[str, Any]:
    """Execute a tool call. Unknown names raise KeyError."""
    handler = TOOLS.get(name)
    if handler is None:
        raise KeyError(f"Unknown tool: {name}")
    logger.info("Tool call %s(%s)", name, dict(args))
    return {"result": handler(args)}
