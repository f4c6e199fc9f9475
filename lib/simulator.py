"""
Simulator - Simulate latency and upstream failures in mock mode.

Lets clients exercise their error handling without calling Gemini or the
LaTeX build server.
"""

import asyncio
from fastapi import HTTPException


# Error scenarios selectable with the ?error= query parameter
ERROR_SCENARIOS = {
    "rate_limit": {
        "status_code": 429,
        "error": "rate_limit_exceeded",
        "message": "AI service rate limit reached. Please wait a minute and try again.",
    },
    "timeout": {
        "status_code": 504,
        "error": "gateway_timeout",
        "message": "Question generation timed out. Try with a smaller textbook PDF.",
    },
    "500": {
        "status_code": 500,
        "error": "internal_server_error",
        "message": "An unexpected error occurred. Please try again later.",
    },
    "compile": {
        "status_code": 500,
        "error": "compile_failed",
        "message": "PDF generation failed: LaTeX compilation failed with all compilers.",
    },
}


async def simulate_delay(delay_ms: int) -> None:
    """
    Simulate network latency.

    Args:
        delay_ms: Delay in milliseconds (0-30000)
    """
    if delay_ms > 0:
        await asyncio.sleep(delay_ms / 1000)


def simulate_error(error_type: str) -> None:
    """
    Raise the HTTP error for a named scenario.

    Unknown scenario names are ignored.

    Raises:
        HTTPException: With the scenario's status code and message
    """
    scenario = ERROR_SCENARIOS.get(error_type)
    if scenario is None:
        return
    raise HTTPException(
        status_code=scenario["status_code"],
        detail={"error": scenario["error"], "message": scenario["message"]},
    )
