import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from nutrimood import __version__
from nutrimood.api import insights, logs
from nutrimood.config import ConfigurationError

logger = logging.getLogger(__name__)

app = FastAPI(title="NutriMood", version=__version__)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    """Invalid analyzer parameters are caller errors, not server faults."""
    logger.warning("Rejected parameters on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# Include routers
app.include_router(logs.router)
app.include_router(insights.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
