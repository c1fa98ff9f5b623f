"""
Repository for Dashboards and the widgets stored inside them
"""
import uuid
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.attributes import flag_modified
from sqlmodel import Session, select
from vizflow.core.errors import DashboardNotFoundError, InputError, WidgetNotFoundError
from vizflow.models import Dashboard
from vizflow.dtos import ChartSpec, SaveResult, Widget

logger = logging.getLogger(__name__)


class WidgetRepository:
    """
    Handles Dashboard CRUD and widget reads/writes

    The widgets JSON array is always reassigned (and flagged) so the
    ORM notices in-place changes.
    """

    def __init__(self, session: Session):
        self.session = session

    # ============================================
    # DASHBOARDS
    # ============================================

    def create_dashboard(self, name: str, description: Optional[str] = None) -> Dashboard:
        now = datetime.utcnow()
        dashboard = Dashboard(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            widgets=[],
            created_at=now,
            updated_at=now
        )

        self.session.add(dashboard)
        self.session.commit()
        self.session.refresh(dashboard)

        logger.info(f"Created dashboard {dashboard.id}")
        return dashboard

    def get_dashboard(self, dashboard_id: str) -> Dashboard:
        """
        Raises:
            DashboardNotFoundError: no such dashboard
        """
        dashboard = self.session.get(Dashboard, dashboard_id)
        if dashboard is None:
            raise DashboardNotFoundError(dashboard_id)
        return dashboard

    def list_dashboards(self, limit: int = 50) -> List[Dashboard]:
        statement = (
            select(Dashboard)
            .order_by(Dashboard.updated_at.desc())
            .limit(limit)
        )
        return list(self.session.exec(statement).all())

    # ============================================
    # WIDGETS
    # ============================================

    def list_widgets(self, dashboard_id: str) -> List[Widget]:
        """Widgets in display order"""
        dashboard = self.get_dashboard(dashboard_id)
        return [Widget.from_record(record) for record in dashboard.widgets or []]

    def fetch(self, dashboard_id: str, widget_id: str) -> Widget:
        """
        Raises:
            DashboardNotFoundError: no such dashboard
            WidgetNotFoundError: carries the ids of the widgets that do exist
        """
        dashboard = self.get_dashboard(dashboard_id)
        records = dashboard.widgets or []
        for record in records:
            if record.get("id") == widget_id:
                return Widget.from_record(record)

        raise WidgetNotFoundError(
            dashboard_id,
            widget_id,
            available_widget_ids=[r.get("id") for r in records],
        )

    def save(
        self,
        dashboard_id: str,
        spec: ChartSpec,
        metadata: Dict[str, Any],
        widget_id: Optional[str] = None
    ) -> SaveResult:
        """
        Insert a widget, or replace it in place when widget_id exists

        A replaced widget keeps its position, id, created_at, chart_id and
        source_query. Last writer wins.

        Args:
            metadata: title, chart_id, source_query, user_prompt, update_prompt

        Returns:
            SaveResult with the stored widget; database errors are reported,
            not raised. A missing dashboard still raises.
        """
        dashboard = self.get_dashboard(dashboard_id)
        records = list(dashboard.widgets or [])
        now = datetime.utcnow()

        position = next((i for i, r in enumerate(records) if widget_id and r.get("id") == widget_id), None)

        if position is None:
            widget = Widget(
                id=widget_id or str(uuid.uuid4()),
                chart_id=metadata.get("chart_id"),
                type=spec.chart_type.value,
                title=metadata.get("title") or spec.styling.title or "Untitled Chart",
                spec=spec,
                source_query=metadata.get("source_query"),
                user_prompt=metadata.get("user_prompt"),
                created_at=now,
                last_updated=now,
            )
            records.append(widget.to_record())
        else:
            previous = Widget.from_record(records[position])
            widget = previous.model_copy(update={
                "type": spec.chart_type.value,
                "title": metadata.get("title") or previous.title,
                "spec": spec,
                "update_prompt": metadata.get("update_prompt", previous.update_prompt),
                "last_updated": now,
            })
            records[position] = widget.to_record()

        try:
            dashboard.widgets = records
            dashboard.updated_at = now
            flag_modified(dashboard, "widgets")
            self.session.add(dashboard)
            self.session.commit()

        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to save widget {widget.id} on dashboard {dashboard_id}: {e}")
            return SaveResult(id=widget.id, ok=False, error=f"Database error: {e}")

        logger.info(f"Saved widget {widget.id} on dashboard {dashboard_id} ({widget.type})")
        return SaveResult(id=widget.id, ok=True, widget=widget)

    def delete(self, dashboard_id: str, widget_id: str) -> Widget:
        """
        Raises:
            DashboardNotFoundError, WidgetNotFoundError
        """
        widget = self.fetch(dashboard_id, widget_id)
        dashboard = self.get_dashboard(dashboard_id)

        dashboard.widgets = [r for r in dashboard.widgets if r.get("id") != widget_id]
        dashboard.updated_at = datetime.utcnow()
        flag_modified(dashboard, "widgets")
        self.session.add(dashboard)
        self.session.commit()

        logger.info(f"Deleted widget {widget_id} from dashboard {dashboard_id}")
        return widget

    def reorder(self, dashboard_id: str, widget_ids: List[str]) -> List[Widget]:
        """
        Rearrange widgets to match widget_ids

        Raises:
            InputError: widget_ids is not a permutation of the current ids
        """
        dashboard = self.get_dashboard(dashboard_id)
        by_id = {r.get("id"): r for r in dashboard.widgets or []}

        if len(widget_ids) != len(by_id) or set(widget_ids) != set(by_id):
            raise InputError(
                "widgetIds must list every widget of the dashboard exactly once",
                field="widgetIds",
            )

        dashboard.widgets = [by_id[wid] for wid in widget_ids]
        dashboard.updated_at = datetime.utcnow()
        flag_modified(dashboard, "widgets")
        self.session.add(dashboard)
        self.session.commit()

        logger.info(f"Reordered {len(widget_ids)} widgets on dashboard {dashboard_id}")
        return [Widget.from_record(r) for r in dashboard.widgets]
