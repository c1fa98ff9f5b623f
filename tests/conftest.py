"""Shared fixtures: in-memory SQLite, scripted LLM, API client."""

import os

# Must be set before vizflow.core.database builds its engine
os.environ["CHARTS_DB_URL"] = "sqlite://"
os.environ["DISABLE_AZURE_LLM"] = "1"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel

from vizflow.core.database import SessionLocal, engine
from vizflow.dtos import Axes, ChartSpec, ChartType, Series, Styling
from vizflow.pipeline.stages import ToolOrchestrator

from fakes import ScriptedCompletion


@pytest.fixture
def db_tables():
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(db_tables):
    with SessionLocal() as s:
        yield s


@pytest.fixture
def column_spec():
    """Single-series category chart that can become any other type"""
    return ChartSpec(
        chart_type=ChartType.COLUMN,
        series=[Series(name="Revenue", data=[120, 340, 210, 90])],
        axes=Axes(categories=["Q1", "Q2", "Q3", "Q4"], x_title="Quarter", y_title="USD"),
        styling=Styling(title="Revenue by quarter", legend=True),
    )


@pytest.fixture
def scripted_llm():
    """Replace with a ScriptedCompletion per test via scripted_llm.script(...)"""
    return ScriptedCompletion()


@pytest.fixture
def client(db_tables, scripted_llm):
    from vizflow.main import app
    from vizflow.dependencies.pipeline import get_orchestrator

    app.dependency_overrides[get_orchestrator] = lambda: ToolOrchestrator(completion_fn=scripted_llm)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
