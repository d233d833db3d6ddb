"""HTTP API for SmartCal."""

from __future__ import annotations


def main() -> None:
    """Run the API with uvicorn on API_HOST:PORT."""
    import uvicorn
    from dotenv import load_dotenv

    load_dotenv()

    from smartcal.config import API_HOST, API_PORT, DEBUG

    uvicorn.run("smartcal.api.app:app", host=API_HOST, port=API_PORT, reload=DEBUG)
