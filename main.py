"""
main.py
========
Central entry point for the VetScreen application.

Run with:
    uvicorn main:app --reload
"""

import logging

from dotenv import load_dotenv

load_dotenv()  # Load .env before any module reads env vars

# Configure logging for the entire application
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Suppress OpenAI SDK and HTTP transport logs so only pipeline logs appear
for _transport_logger_name in (
    "openai",
    "openai._base_client",
    "httpx",
    "httpcore",
    "sqlalchemy.engine",
):
    logging.getLogger(_transport_logger_name).setLevel(logging.CRITICAL)

from vetscreen.api.app import app  # noqa: E402
from vetscreen.db.session import init_db  # noqa: E402

init_db()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
