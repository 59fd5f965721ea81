"""
Pytest configuration and shared fixtures.

This file registers custom pytest markers and command-line options, and
builds fresh engine components per test so no state leaks between tests.
"""

import pytest
from fastapi.testclient import TestClient

from src.api.deps import build_container
from src.api.main import app
from src.core.config import Settings
from src.services.approval_resolver import ApprovalResolver
from src.services.approval_workflow import ApprovalWorkflow
from src.services.events.event_publisher import EventPublisher
from src.services.notifications import NotificationService
from src.services.seed import seed_demo_data
from src.services.storage import (
    InMemoryApprovalLedger,
    InMemoryProjectRegistry,
    InMemoryPurchaseOrderStore,
    InMemoryRequisitionStore,
    InMemoryThresholdMatrixStore,
)
from src.services.workflow_tracker import WorkflowStatusTracker


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against real Azure resources"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring real Azure resources"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def projects():
    return InMemoryProjectRegistry()


@pytest.fixture
def matrix(projects):
    """Demo matrix: project "1" with L1 [0,5000) L2 [5000,25000) L3 [25000,100000); project "2" with no bands"""
    store = InMemoryThresholdMatrixStore()
    seed_demo_data(projects, store)
    return store


@pytest.fixture
def resolver(matrix, projects):
    return ApprovalResolver(matrix, projects)


@pytest.fixture
def ledger():
    return InMemoryApprovalLedger()


@pytest.fixture
def workflow(resolver, ledger):
    return ApprovalWorkflow(
        resolver=resolver,
        ledger=ledger,
        requisitions=InMemoryRequisitionStore(),
        orders=InMemoryPurchaseOrderStore(),
        tracker=WorkflowStatusTracker(),
        notifications=NotificationService(webhook_url=None),
        events=EventPublisher(service_bus_sender=None),
    )


def make_settings(**overrides) -> Settings:
    values = {"storage_backend": "memory", "seed_demo_data": True, "teams_webhook_url": None}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def client():
    """TestClient over a freshly built container (in-memory, demo data, no webhook)"""
    app.state.container = build_container(make_settings())
    return TestClient(app)
