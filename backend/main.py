"""Entry point for running the FastAPI application."""

import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()

if __name__ == "__main__":
    # Port 3001 matches the desktop client's default API address.
    # Can be overridden: PORT=8000 python main.py
    port = int(os.getenv("PORT", "3001"))

    uvicorn.run(
        "src.api.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=port,
        reload=os.getenv("RELOAD", "false").lower() == "true",
    )
