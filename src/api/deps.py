from dataclasses import dataclass

from fastapi import Request

from ..core.config import Settings
from ..services.approval_resolver import ApprovalResolver
from ..services.approval_workflow import ApprovalWorkflow
from ..services.events.event_publisher import EventPublisher, create_event_publisher
from ..services.notifications import NotificationService
from ..services.seed import seed_demo_data
from ..services.storage import (
    ApprovalLedgerBase,
    InMemoryApprovalLedger,
    InMemoryProjectRegistry,
    InMemoryPurchaseOrderStore,
    InMemoryRequisitionStore,
    InMemoryThresholdMatrixStore,
    ProjectRegistryBase,
    SQLiteApprovalLedger,
    SQLiteThresholdMatrixStore,
    ThresholdMatrixStoreBase,
)
from ..services.workflow_tracker import WorkflowStatusTracker


@dataclass
class Container:
    """Everything a request handler needs, built once per application"""
    projects: ProjectRegistryBase
    matrix: ThresholdMatrixStoreBase
    ledger: ApprovalLedgerBase
    resolver: ApprovalResolver
    workflow: ApprovalWorkflow
    notifications: NotificationService
    events: EventPublisher


def build_container(settings: Settings) -> Container:
    projects = InMemoryProjectRegistry()

    if settings.storage_backend == "sqlite":
        matrix = SQLiteThresholdMatrixStore(settings.approvals_db_path)
        ledger = SQLiteApprovalLedger(settings.approvals_db_path)
    else:
        matrix = InMemoryThresholdMatrixStore()
        ledger = InMemoryApprovalLedger()

    if settings.seed_demo_data:
        seed_demo_data(projects, matrix)

    resolver = ApprovalResolver(matrix, projects)
    notifications = NotificationService(settings.teams_webhook_url, settings.api_base_url)
    events = create_event_publisher(settings.service_bus_connection_string, settings.service_bus_entity)
    workflow = ApprovalWorkflow(
        resolver=resolver,
        ledger=ledger,
        requisitions=InMemoryRequisitionStore(),
        orders=InMemoryPurchaseOrderStore(),
        tracker=WorkflowStatusTracker(),
        notifications=notifications,
        events=events,
    )
    return Container(
        projects=projects,
        matrix=matrix,
        ledger=ledger,
        resolver=resolver,
        workflow=workflow,
        notifications=notifications,
        events=events,
    )


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_resolver(request: Request) -> ApprovalResolver:
    return get_container(request).resolver


def get_workflow(request: Request) -> ApprovalWorkflow:
    return get_container(request).workflow


def get_matrix(request: Request) -> ThresholdMatrixStoreBase:
    return get_container(request).matrix


def get_projects(request: Request) -> ProjectRegistryBase:
    return get_container(request).projects
