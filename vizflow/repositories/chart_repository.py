"""
Repository for Chart rows
"""
import uuid
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from vizflow.models import Chart
from vizflow.dtos import ChartSpec, SaveResult

logger = logging.getLogger(__name__)


class ChartRepository:
    """Handles Chart persistence for the generate path"""

    def __init__(self, session: Session):
        self.session = session

    def save(
        self,
        spec: ChartSpec,
        metadata: Dict[str, Any],
        chart_id: Optional[str] = None
    ) -> SaveResult:
        """
        Insert or replace a chart

        Args:
            spec: Canonical chart
            metadata: csv_id, sql_query, user_prompt, dashboard_id
            chart_id: Existing or pre-assigned id; a new UUID when None

        Returns:
            SaveResult; database errors are reported, not raised
        """
        chart_id = chart_id or str(uuid.uuid4())
        now = datetime.utcnow()

        try:
            chart = self.session.get(Chart, chart_id)
            if chart is None:
                chart = Chart(id=chart_id, created_at=now, updated_at=now, **self._columns(spec, metadata))
                self.session.add(chart)
            else:
                for key, value in self._columns(spec, metadata).items():
                    setattr(chart, key, value)
                chart.updated_at = now

            self.session.commit()
            self.session.refresh(chart)

        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to save chart {chart_id}: {e}")
            return SaveResult(id=chart_id, ok=False, error=f"Database error: {e}")

        logger.info(f"Saved chart {chart_id} ({spec.chart_type.value})")
        return SaveResult(id=chart_id, ok=True)

    def get(self, chart_id: str) -> Optional[Chart]:
        return self.session.get(Chart, chart_id)

    def list_recent(self, limit: int = 10) -> List[Chart]:
        """Most recently created charts first"""
        statement = (
            select(Chart)
            .order_by(Chart.created_at.desc())
            .limit(limit)
        )
        return list(self.session.exec(statement).all())

    @staticmethod
    def _columns(spec: ChartSpec, metadata: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "csv_id": metadata["csv_id"],
            "sql_query": metadata["sql_query"],
            "user_prompt": metadata.get("user_prompt"),
            "dashboard_id": metadata.get("dashboard_id"),
            "chart_type": spec.chart_type.value,
            "chart_options": spec.to_chart_options(),
            "spec": spec.model_dump(mode="json", by_alias=True),
        }
