"""
Main FastAPI Application for Progress Reconciliation.
Provides the JSON analytics endpoints over posted snapshots.
"""
import logging

from fastapi import FastAPI

from progress_recon.models import init_db, get_db
from progress_recon.api.v1 import api_router as v1_router

logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title="Progress Reconciliation App",
    description="Reconcile projects, BOQ activities and KPI records into earned-value analytics",
    version="1.0.0"
)

# Include v1 API routes
app.include_router(v1_router)


@app.on_event("startup")
def startup():
    """Create the write-back tables if missing."""
    init_db()
    logger.info("Write-back tables ready")


@app.get("/health")
def health():
    return {"status": "ok"}


__all__ = ["app", "get_db"]


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
