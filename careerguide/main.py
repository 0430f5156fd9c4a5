"""
Career Guidance Portal - Main Application

FastAPI backend with:
- PostgreSQL for institutions, courses, jobs and applications
- MongoDB for student profile documents
- JWT authentication with student / institute / company / admin roles

Run: uvicorn careerguide.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from careerguide import __version__
from careerguide.api.routes import api_router
from careerguide.core.config import get_settings
from careerguide.db.mongodb import init_mongo_indexes, test_mongo_connection
from careerguide.db.postgres import init_postgres_schema, test_postgres_connection

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Career Guidance Portal",
    description="""
    Connects students, institutions and companies.

    ## Features
    - **Authentication**: JWT-based auth for students, institutes, companies and admins
    - **Students**: Profile documents, completion tracking, course and job applications
    - **Institutes**: Courses, application review and batch admissions
    - **Companies**: Job postings and ranked qualified candidates
    - **Admin**: Organization verification and name reconciliation
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    """Create PostgreSQL tables and MongoDB indexes."""
    try:
        init_postgres_schema()
    except Exception as e:
        logger.warning("PostgreSQL schema initialization failed: %s", e)

    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Career Guidance Portal", "version": __version__}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "postgres": "connected" if test_postgres_connection() else "disconnected",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
