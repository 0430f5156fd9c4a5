"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from careerguide.api.routes.auth_routes import router as auth_router
from careerguide.api.routes.student_routes import router as student_router
from careerguide.api.routes.company_routes import router as company_router
from careerguide.api.routes.job_routes import router as job_router
from careerguide.api.routes.institute_routes import router as institute_router
from careerguide.api.routes.admin_routes import router as admin_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(student_router)
api_router.include_router(company_router)
api_router.include_router(job_router)
api_router.include_router(institute_router)
api_router.include_router(admin_router)
