"""
Service Desk SLA Engine - Main Application
===========================================

Stateless HTTP mirror of the SLA and workflow rules engine.

Modules:
- SLA: Policy, evaluation, aging, adherence and agent scorecards
- Workflow: Role-gated ticket status state machine
- Alerts: Classification of ticket events into alert records

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities and value objects
- Infrastructure: YAML policy file and watchdog hot reload
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Configuration and Core
from servicedesk.config import Settings, get_settings
from servicedesk.core import ApplicationException

# SLA Module - policy file
from servicedesk.sla.infrastructure import SLAPolicyManager

# Workflow Module
from servicedesk.workflow.application import StatusWorkflow
from servicedesk.workflow.domain import WorkflowPolicy

# Module Routers
from servicedesk.sla.interfaces import sla_router
from servicedesk.workflow.interfaces import workflow_router
from servicedesk.alerts.interfaces import alerts_router

# Shared
from servicedesk.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler
)
from servicedesk.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Load the SLA policy (fatal if the file is broken)
    3. Start watching the policy file
    4. Build the status workflow

    SHUTDOWN:
    1. Stop the policy file watcher
    """
    settings: Settings = app.state.settings

    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting SLA engine", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    logger.info("Loading SLA policy")
    policy_manager = SLAPolicyManager()
    policy_manager.load(settings.sla_policy_path)
    if settings.watch_sla_policy:
        policy_manager.start_watching()

    app.state.policy_manager = policy_manager
    app.state.workflow = StatusWorkflow(
        WorkflowPolicy(creator_can_cancel=settings.creator_can_cancel)
    )

    logger.info("SLA engine started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down SLA engine")
    policy_manager.stop_watching()
    logger.info("SLA engine shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Service Desk SLA Engine",
        description="""
    ## SLA & Workflow Rules Engine

    Computes SLA compliance, aging and adherence for ticket snapshots and
    enforces the role-gated status workflow. Nothing is persisted: callers
    send ticket snapshots and receive derived results.

    ---

    ### SLA

    - `GET /sla/policy` - Active targets, at-risk threshold, aging buckets
    - `POST /sla/evaluate` - Per-ticket compliance
    - `POST /sla/adherence` - Adherence overall, per priority, per window
    - `POST /sla/aging` - Open tickets by age bucket
    - `POST /sla/agent-performance` - Agent scorecard

    ### Status Workflow

    - `GET /status/workflow` - Statuses, transitions, role permissions
    - `GET /status/allowed-transitions/{status}` - Legal successors
    - `POST /status/validate` - Check a proposed change
    - `POST /status/apply` - Apply a change to a snapshot

    ### Alerts

    - `POST /alerts/classify` - Map a ticket event to an alert

    ---
    """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.settings = settings

    # === CORS Middleware ===
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # === Custom Middleware (from shared) ===
    # Last added runs first: the correlation id is set before request logging
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)
    app.add_exception_handler(ApplicationException, application_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # === Include Module Routers ===
    app.include_router(sla_router)
    app.include_router(workflow_router)
    app.include_router(alerts_router)

    # === Health Check Endpoint ===

    @app.get("/health", tags=["Health"], responses={
        200: {
            "description": "Service is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "version": "1.0.0",
                        "environment": "development",
                        "checks": {
                            "sla_policy": "loaded",
                            "policy_watcher": "running"
                        }
                    }
                }
            }
        }
    })
    async def health_check(request: Request):
        """Health check endpoint for load balancers and orchestrators."""
        policy_manager = getattr(request.app.state, "policy_manager", None)
        checks = {
            "sla_policy": "loaded" if policy_manager is not None else "not_loaded",
            "policy_watcher": (
                "running" if policy_manager is not None and policy_manager.is_watching else "stopped"
            ),
        }
        return {
            "status": "healthy" if policy_manager is not None else "degraded",
            "version": settings.app_version,
            "environment": settings.environment,
            "checks": checks
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "architecture": "Clean Architecture / Modular Monolith",
            "docs": "/docs",
            "health": "/health",
            "modules": {
                "sla": {
                    "prefix": "/sla",
                    "endpoints": [
                        "GET /sla/policy - Active SLA policy",
                        "POST /sla/evaluate - Evaluate ticket batch",
                        "POST /sla/adherence - Adherence report",
                        "POST /sla/aging - Aging report",
                        "POST /sla/agent-performance - Agent scorecard"
                    ]
                },
                "workflow": {
                    "prefix": "/status",
                    "endpoints": [
                        "GET /status/workflow - Status workflow",
                        "GET /status/allowed-transitions/{status} - Legal successors",
                        "POST /status/validate - Validate a transition",
                        "POST /status/apply - Apply a transition"
                    ]
                },
                "alerts": {
                    "prefix": "/alerts",
                    "endpoints": [
                        "POST /alerts/classify - Classify a ticket event"
                    ]
                }
            }
        }

    return app


app = create_app()


# === Entry Point ===

def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "servicedesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
