"""
FastAPI demo protected by S3O authentication.

Usage:
    # Install dependencies
    pip install -e ".[fastapi]"

    # Run the server
    uvicorn examples.fastapi_demo:app --port 8009 --reload

    # Or directly
    python examples/fastapi_demo.py

Then open http://localhost:8009/ in a browser; you will be sent to S3O to
log in and returned with session cookies.

Environment variables:
    S3O_PROVIDER_URL - Override provider URL (default: https://s3o.ft.com)
    S3O_PUBLIC_KEY_URL - Override public key URL (default: https://s3o.ft.com/publickey)
    S3O_KEY_REFRESH_S - Seconds between public key refreshes (default: 600)
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

# Import from installed package
from s3o_gate import GateConfig, PublicKeyFetcher, S3OASGIMiddleware

logging.basicConfig(level=logging.DEBUG)

# Configuration from environment
CONFIG = GateConfig.from_env()
KEY_REFRESH_S = float(os.getenv("S3O_KEY_REFRESH_S", "600"))

keys = PublicKeyFetcher.from_config(CONFIG)


async def refresh_keys_forever():
    while True:
        await keys.refresh()
        await asyncio.sleep(KEY_REFRESH_S)


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = asyncio.create_task(refresh_keys_forever())
    yield
    task.cancel()


app = FastAPI(
    title="S3O Demo API",
    description="Demo API behind S3O authentication",
    version="0.1.0",
    lifespan=lifespan,
)

# Every route below requires an S3O login
app.add_middleware(S3OASGIMiddleware, key_source=keys, config=CONFIG)


@app.get("/")
async def root(request: Request):
    """Greets the logged in user."""
    return {
        "service": "S3O Demo API",
        "user": request.state.s3o_username,
        "provider_url": CONFIG.provider_url,
    }


@app.get("/health")
async def health():
    """Health check endpoint (also behind the gate)."""
    return {"status": "ok", "key_loaded": keys() is not None}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8009)
