#!/usr/bin/env python3
"""
ASGI entry point for the fixtrack service
"""
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

if __name__ == "__main__":
    # .env values never override variables already set in the environment
    env_file = os.environ.get("ENV_FILE", ".env")
    if Path(env_file).exists():
        load_dotenv(env_file, override=False)
        print(f"✓ Loaded environment from: {env_file}")
    else:
        print(f"⚠ No {env_file}, using system environment")

    debug = os.environ.get("DEBUG", "false").lower() in ("1", "true", "yes")
    uvicorn.run(
        "fixtrack.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", 8000)),
        reload=debug,
        log_level=os.environ.get("LOG_LEVEL", "debug" if debug else "info"),
    )
