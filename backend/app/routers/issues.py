"""Issue browser page and its JSON state API."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from app.schemas.issues import FetchRequest, UiState
from app.services.issue_store import FetchOutcome, IssueStore
from app.views.issues_page import render_issues_page

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["issues"])


def get_issue_store(request: Request) -> IssueStore:
    """FastAPI dependency that retrieves the typed IssueStore from app.state."""
    store: IssueStore = request.app.state.issue_store
    return store


StoreDep = Annotated[IssueStore, Depends(get_issue_store)]


# ----------------------------------------------------------------------
# HTML page
# ----------------------------------------------------------------------


@router.get("/", response_class=HTMLResponse)
async def issues_page(store: StoreDep) -> HTMLResponse:
    return HTMLResponse(render_issues_page(store.state))


@router.post("/search", response_class=HTMLResponse, response_model=None)
async def search(store: StoreDep, path: Annotated[str, Form()] = "") -> HTMLResponse | RedirectResponse:
    """Form submit: start a fresh search, then redirect back to the page."""
    return _page_after(await store.fetch(path))


@router.post("/more", response_class=HTMLResponse, response_model=None)
async def more(
    store: StoreDep,
    path: Annotated[str, Form()] = "",
    cursor: Annotated[str, Form()] = "",
) -> HTMLResponse | RedirectResponse:
    """More button: load the page after ``cursor`` and append it.

    Without a cursor, or once the last page is loaded, nothing is fetched.
    """
    if not cursor or not store.state.has_next_page:
        return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    return _page_after(await store.fetch(path or store.state.path, cursor=cursor))


def _page_after(outcome: FetchOutcome) -> HTMLResponse | RedirectResponse:
    if not outcome.ok and not outcome.cancelled:
        return HTMLResponse(render_issues_page(outcome.state), status_code=status.HTTP_502_BAD_GATEWAY)
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)


# ----------------------------------------------------------------------
# JSON API
# ----------------------------------------------------------------------


@router.get("/api/state", response_model=UiState)
async def get_state(store: StoreDep) -> UiState:
    return store.state


@router.post("/api/fetch", response_model=UiState)
async def fetch_issues(body: FetchRequest, store: StoreDep) -> UiState:
    return _state_after(await store.fetch(body.path, cursor=body.cursor))


@router.post("/api/more", response_model=UiState)
async def fetch_more_issues(store: StoreDep) -> UiState:
    state = store.state
    if not state.has_next_page:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No further page of issues to load")
    return _state_after(await store.fetch(state.path, cursor=state.end_cursor))


def _state_after(outcome: FetchOutcome) -> UiState:
    if outcome.cancelled:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Superseded by a newer fetch")
    if not outcome.ok:
        logger.warning("issues_api_fetch_failed", reason=outcome.reason)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=outcome.reason)
    return outcome.state
