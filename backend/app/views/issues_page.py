"""Server-side rendering of the issue browser page."""

from html import escape

from app.adapters.github_models import GraphQLError, Issue, Organization, Repository
from app.schemas.issues import UiState

TITLE = "Python GraphQL GitHub Client"
PATH_LABEL = "Show open issues for https://github.com/"
NO_INFORMATION = "No information yet ..."


def render_issues_page(state: UiState) -> str:
    """Render the whole page for ``state``. Pure: same state, same markup."""
    if state.errors:
        body = _render_errors(state.errors)
    elif state.organization is not None:
        body = _render_organization(state.organization, state)
    else:
        body = f"<p>{NO_INFORMATION}</p>"

    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        f'<head><meta charset="utf-8"><title>{TITLE}</title></head>\n'
        "<body>\n"
        f"<h1>{TITLE}</h1>\n"
        f"{_render_search_form(state.path)}\n"
        "<hr>\n"
        f"{body}\n"
        "</body>\n"
        "</html>\n"
    )


def _render_search_form(path: str) -> str:
    return (
        '<form method="post" action="/search">'
        f'<label for="url">{PATH_LABEL}</label>'
        f'<input id="url" name="path" type="text" value="{escape(path)}" style="width: 300px">'
        '<button type="submit">Search</button>'
        "</form>"
    )


def _render_errors(errors: list[GraphQLError]) -> str:
    messages = " ".join(error.message for error in errors)
    return f"<p><strong>Something went wrong:</strong> {escape(messages)}</p>"


def _render_organization(organization: Organization, state: UiState) -> str:
    parts = [
        "<div>",
        f"<p><strong>Issues from Organization:</strong> {_link(organization.url, organization.name or '')}</p>",
    ]
    if organization.repository is not None:
        parts.append(_render_repository(organization.repository, state))
    parts.append("</div>")
    return "\n".join(parts)


def _render_repository(repository: Repository, state: UiState) -> str:
    parts = [
        "<div>",
        f"<p><strong>In Repository:</strong> {_link(repository.url, repository.name)}</p>",
        "<ul>",
    ]
    edges = repository.issues.edges if repository.issues is not None else []
    parts.extend(_render_issue(edge.node) for edge in edges)
    parts.append("</ul>")
    if state.has_next_page:
        parts.append(_render_more_button(state.path, state.end_cursor))
    parts.append("</div>")
    return "\n".join(parts)


def _render_issue(issue: Issue) -> str:
    reactions = "".join(f"<li>{escape(str(edge.node.content))}</li>" for edge in issue.reactions.edges)
    return f"<li>{_link(issue.url, issue.title)}<ul>{reactions}</ul></li>"


def _render_more_button(path: str, cursor: str | None) -> str:
    return (
        '<form method="post" action="/more">'
        f'<input type="hidden" name="path" value="{escape(path)}">'
        f'<input type="hidden" name="cursor" value="{escape(cursor or "")}">'
        '<button type="submit">More</button>'
        "</form>"
    )


def _link(url: str, text: str) -> str:
    return f'<a href="{escape(url)}">{escape(text)}</a>'
