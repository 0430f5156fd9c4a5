"""
Admin Routes

GET /admin/institutions - List institutions
PUT /admin/institutions/{id}/verify - Verify an institution
GET /admin/companies - List companies
PUT /admin/companies/{id}/verify - Verify a company
POST /admin/reconcile-names - Fill missing names on all course applications
"""

from typing import List

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import text

from careerguide.db.postgres import get_db_session, execute_raw_sql
from careerguide.core.auth import require_roles
from careerguide.services.reconciliation_service import get_reconciliation_service
from careerguide.schemas.schemas import OrganizationResponse, ReconcileResponse, MessageResponse

router = APIRouter(prefix="/admin", tags=["Admin"])

# Table names are fixed here, never taken from the request
ORGANIZATION_TABLES = {"institutions": "institutions", "companies": "companies"}


def _list(table: str) -> List[OrganizationResponse]:
    results = execute_raw_sql(
        f"SELECT id, name, verified, status, created_at FROM {ORGANIZATION_TABLES[table]} ORDER BY name"
    )
    return [
        OrganizationResponse(
            id=r["id"], name=r["name"], verified=bool(r["verified"]),
            status=r["status"], created_at=r["created_at"]
        ) for r in results
    ]


def _verify(table: str, entity_id: int) -> bool:
    with get_db_session() as db:
        result = db.execute(
            text(f"UPDATE {ORGANIZATION_TABLES[table]} SET verified = TRUE, status = 'active' WHERE id = :id"),
            {"id": entity_id}
        )
        return result.rowcount > 0


@router.get("/institutions", response_model=List[OrganizationResponse])
async def list_institutions(admin: dict = Depends(require_roles("admin"))):
    return _list("institutions")


@router.put("/institutions/{institution_id}/verify", response_model=MessageResponse)
async def verify_institution(institution_id: int, admin: dict = Depends(require_roles("admin"))):
    if not _verify("institutions", institution_id):
        raise HTTPException(status_code=404, detail="Institution not found")
    return MessageResponse(message="Institution verified")


@router.get("/companies", response_model=List[OrganizationResponse])
async def list_companies(admin: dict = Depends(require_roles("admin"))):
    return _list("companies")


@router.put("/companies/{company_id}/verify", response_model=MessageResponse)
async def verify_company(company_id: int, admin: dict = Depends(require_roles("admin"))):
    if not _verify("companies", company_id):
        raise HTTPException(status_code=404, detail="Company not found")
    return MessageResponse(message="Company verified")


@router.post("/reconcile-names", response_model=ReconcileResponse)
async def reconcile_names(admin: dict = Depends(require_roles("admin"))):
    """Fill missing student/course/institution names on every course application."""
    return ReconcileResponse(updated=get_reconciliation_service().reconcile())
