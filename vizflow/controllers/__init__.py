"""
Controllers - FastAPI routers, one module per resource
"""
from vizflow.controllers import chart_controller
from vizflow.controllers import dashboard_controller
from vizflow.controllers import job_controller
from vizflow.controllers import widget_controller

__all__ = [
    "chart_controller",
    "dashboard_controller",
    "job_controller",
    "widget_controller",
]
