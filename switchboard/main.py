# The module provides a FastAPI application that serves as the main entry point for Switchboard.
# Date: 2026-10-17
# Version: 0.1.0

from fastapi import FastAPI
from switchboard.api.v1.api import api_router
from switchboard.core.config import get_settings
from switchboard.utils.logger import console

console.set_level(get_settings().LOG_LEVEL)

app = FastAPI(
    title="Switchboard",
    version="0.1.0",
    description="A conversational assistant that routes each message to a specialised agent.",
)

@app.get("/", summary="Health Check", tags=["Status"])
def read_root():
    """Root endpoint to check if the service is alive."""
    console.info("Health check endpoint was hit.")
    return {"message": "Switchboard is alive and running!"}

# Include the v1 router with a global '/v1' prefix
app.include_router(api_router, prefix="/v1")
