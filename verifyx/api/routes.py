import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional

from verifyx.database import get_db
from verifyx.core.verdict import Category
from verifyx.schemas import (
    ReportCreated,
    ReportResponse,
    ReportSubmission,
    StatisticsResponse,
    VerdictResponse,
    VerifyRequest,
)
from verifyx.services.analysis_service import AnalysisService
from verifyx.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


def get_analysis_service(db: Session = Depends(get_db)) -> AnalysisService:
    return AnalysisService(db)


def _check_value(value: Optional[str], hint: str = "missing value") -> str:
    if not value:
        raise HTTPException(status_code=400, detail=hint)
    if len(value.encode("utf-8")) > settings.MAX_VALUE_KB * 1024:
        raise HTTPException(status_code=413, detail=f"value exceeds {settings.MAX_VALUE_KB}kb")
    return value


def _run_analysis(service: AnalysisService, input_type: Optional[str], value: str) -> dict:
    try:
        return service.verify(input_type, value).to_dict()
    except Exception as e:
        logger.exception("Error while analyzing text")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")

# ============================================================================
# ANALYSIS ENDPOINTS
# ============================================================================

@router.post("/verify", response_model=VerdictResponse)
def verify_text(
    request: Optional[VerifyRequest] = None,
    service: AnalysisService = Depends(get_analysis_service)
):
    """Analyze a `{type, value}` body"""
    request = request or VerifyRequest()
    value = _check_value(request.value)
    return _run_analysis(service, request.type, value)

@router.get("/verify", response_model=VerdictResponse)
def verify_text_query(
    value: Optional[str] = None,
    type: str = "text",
    service: AnalysisService = Depends(get_analysis_service)
):
    """Convenience endpoint for quick browser testing: /verify?value=..."""
    value = _check_value(value, hint="missing value (use ?value=...)")
    return _run_analysis(service, type, value)

# ============================================================================
# REPORT ENDPOINTS
# ============================================================================

@router.post("/report", response_model=ReportCreated)
def submit_report(
    submission: Optional[ReportSubmission] = None,
    service: AnalysisService = Depends(get_analysis_service)
):
    submission = submission or ReportSubmission()
    _check_value(submission.value)
    try:
        report = service.submit_report(submission)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return ReportCreated(ok=True, id=report.id)

@router.get("/reports", response_model=List[ReportResponse])
def list_reports(
    limit: int = Query(default=settings.REPORTS_LIMIT, ge=1),
    category: Optional[Category] = None,
    service: AnalysisService = Depends(get_analysis_service)
):
    try:
        return service.list_reports(limit=limit, category=category)
    except SQLAlchemyError as e:
        logger.error(f"DB select error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/reports/{report_id}", response_model=ReportResponse)
def get_report(report_id: int, service: AnalysisService = Depends(get_analysis_service)):
    report = service.get_report(report_id)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    return report

@router.delete("/reports/{report_id}")
def delete_report(report_id: int, service: AnalysisService = Depends(get_analysis_service)):
    try:
        deleted = service.delete_report(report_id)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Report not found")
    return {"ok": True, "id": report_id}

@router.get("/statistics", response_model=StatisticsResponse)
def get_statistics(service: AnalysisService = Depends(get_analysis_service)):
    return service.get_statistics()

@router.get("/health")
def health_check():
    return {"status": "healthy", "service": settings.APP_NAME, "version": settings.VERSION}
