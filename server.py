# FastAPI Server for the Creator Campaign Engagement Workflow

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from config.app_config import LOG_LEVEL, CORS_ORIGINS
from database.config import init_db
from routers import (
    campaigns_router,
    negotiation_router,
    scripts_router,
    content_router,
    engagements_router,
    notifications_router,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(levelname)s - %(name)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Creator Campaign API",
    description="Campaign engagement workflow between brands and creators",
    version="1.0.0"
)


@app.on_event("startup")
def startup_event():
    # Local/dev convenience; production schemas are managed by Alembic
    init_db()
    logger.info("Database tables initialized")


# CORS Setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=False,  # Required when using "*"
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# WORKFLOW ROUTERS
# ============================================================================
app.include_router(campaigns_router)
app.include_router(negotiation_router)
app.include_router(scripts_router)
app.include_router(content_router)
app.include_router(engagements_router)
app.include_router(notifications_router)


@app.get("/health")
def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
