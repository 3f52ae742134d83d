import time
import logging
from typing import List, Optional
from sqlalchemy import desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from verifyx.core.risk_scorer import RiskScorer
from verifyx.core.verdict import Category, Verdict, category_for_score
from verifyx.models import Report
from verifyx.schemas import ReportResponse, ReportSubmission, StatisticsResponse
from verifyx.config import settings

logger = logging.getLogger(__name__)


class AnalysisService:
    def __init__(self, db: Session, risk_scorer: Optional[RiskScorer] = None):
        self.db = db
        self.risk_scorer = risk_scorer or RiskScorer()
        self.ruleset = self.risk_scorer.ruleset

    def verify(self, input_type: Optional[str], value: str) -> Verdict:
        """Run the analyzer on one submitted text"""
        start_time = time.time()
        verdict = self.risk_scorer.analyze(input_type, value)
        elapsed_ms = (time.time() - start_time) * 1000

        logger.info(
            f"Analyzed {len(value)} chars ({input_type or 'text'}) in {elapsed_ms:.1f}ms "
            f"- score {verdict.score}, category {verdict.category.value}"
        )
        return verdict

    # ============================================================================
    # REPORTS
    # ============================================================================

    def submit_report(self, submission: ReportSubmission) -> Report:
        report = Report(
            type=submission.type or "text",
            value=submission.value,
            reasons=list(submission.reasons),
            score=submission.score,
        )
        try:
            self.db.add(report)
            self.db.commit()
            self.db.refresh(report)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"DB insert error: {e}")
            raise

        logger.info(f"Stored report #{report.id} (score {report.score})")
        return report

    def list_reports(self, limit: Optional[int] = None, category: Optional[str] = None) -> List[ReportResponse]:
        limit = min(limit or settings.REPORTS_LIMIT, settings.REPORTS_LIMIT)

        query = self.db.query(Report)
        if category:
            query = self._filter_category(query, Category(category.lower()))

        rows = query.order_by(desc(Report.created_at), desc(Report.id)).limit(limit).all()
        return [self._to_response(r) for r in rows]

    def get_report(self, report_id: int) -> Optional[ReportResponse]:
        report = self.db.query(Report).filter(Report.id == report_id).first()
        if not report:
            return None
        return self._to_response(report)

    def delete_report(self, report_id: int) -> bool:
        report = self.db.query(Report).filter(Report.id == report_id).first()
        if not report:
            return False
        try:
            self.db.delete(report)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"DB delete error: {e}")
            raise
        return True

    def get_statistics(self) -> StatisticsResponse:
        high = self.ruleset.high_threshold
        medium = self.ruleset.medium_threshold

        total = self.db.query(func.count(Report.id)).scalar() or 0
        high_count = self.db.query(func.count(Report.id)).filter(Report.score >= high).scalar() or 0
        medium_count = self.db.query(func.count(Report.id)).filter(
            Report.score >= medium, Report.score < high
        ).scalar() or 0
        avg_score = self.db.query(func.avg(Report.score)).scalar() or 0

        recent = self.db.query(Report).order_by(desc(Report.created_at), desc(Report.id)).limit(10).all()

        return StatisticsResponse(
            total_reports=total,
            high=high_count,
            medium=medium_count,
            low=total - high_count - medium_count,
            avg_score=round(float(avg_score), 2),
            recent_reports=[self._to_response(r) for r in recent],
        )

    def _filter_category(self, query, category: Category):
        high = self.ruleset.high_threshold
        medium = self.ruleset.medium_threshold
        if category == Category.HIGH:
            return query.filter(Report.score >= high)
        if category == Category.MEDIUM:
            return query.filter(Report.score >= medium, Report.score < high)
        return query.filter(Report.score < medium)

    def _to_response(self, report: Report) -> ReportResponse:
        score = report.score or 0
        return ReportResponse(
            id=report.id,
            type=report.type,
            value=report.value,
            reasons=report.reasons,
            score=score,
            category=category_for_score(score, self.ruleset).value,
            created_at=report.created_at,
        )
