from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.adapters.github_client import GitHubClient
from app.config.config import settings
from app.routers import events, health
from app.routers import issues as issues_router
from app.services.issue_store import IssueStore

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.JSONRenderer(),
    ]
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.github_token:
        logger.warning("github_token_missing", env="GITHUB_PERSONAL_ACCESS_TOKEN")

    github_client = GitHubClient(
        token=settings.github_token,
        url=settings.github_graphql_url,
        timeout=settings.request_timeout_seconds,
    )
    store = IssueStore(client=github_client, default_path=settings.default_path, policy=settings.fetch_policy)
    app.state.issue_store = store

    # Initial fetch for the default path, as on first page mount
    if settings.fetch_on_startup and settings.github_token:
        outcome = await store.fetch(settings.default_path)
        if not outcome.ok:
            logger.warning("initial_fetch_failed", path=settings.default_path, reason=outcome.reason)

    yield

    await store.close()
    await github_client.close()
    logger.info("shutdown")


app = FastAPI(
    title="Issue Browser",
    description="Browse open GitHub issues and their reactions over the GraphQL API",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(events.router)
app.include_router(issues_router.router)
