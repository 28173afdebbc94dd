"""CLI entry point for api-workbench."""

import functools
import logging
from contextlib import contextmanager
from pathlib import Path

import click

from api_workbench.config import load_settings
from api_workbench.errors import WorkbenchError
from api_workbench.http.executor import RequestExecutor, status_label
from api_workbench.model.base import HttpMethod, RequestDraft
from api_workbench.model.headers import format_headers
from api_workbench.search.query import query_json
from api_workbench.session import Session
from api_workbench.store.workspace import WorkspaceStore

METHODS = [m.value for m in HttpMethod]


@contextmanager
def _user_errors():
    """Turn core failures into a clean CLI error instead of a traceback."""
    try:
        yield
    except WorkbenchError as e:
        raise click.ClickException(str(e)) from e


def pass_session(f):
    """Like ``click.pass_obj``, but loads the store once the command's own
    arguments have parsed, so ``--help`` works even with a broken store file."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        session = click.get_current_context().obj
        with _user_errors():
            session.store.load()
        return f(session, *args, **kwargs)

    return wrapper


def _draft(method: str, url: str, headers: tuple[str, ...], data: str) -> RequestDraft:
    return RequestDraft(method=method, url=url, headers_text="\n".join(headers), body=data)


def _select(session: Session, ws_name: str, col_index: int) -> None:
    if not session.select_workspace(ws_name):
        raise click.ClickException(f"Workspace not found: {ws_name}")
    if not session.select_collection(col_index):
        raise click.ClickException(f"No collection at index {col_index} in {ws_name}")


def _show_response(session: Session, find: str | None, match: int, jsonpath: str | None, raw: bool) -> None:
    result = session.last_result
    if result is None:
        raise click.ClickException(str(session.last_error))

    click.echo(status_label(result.status_code) + f"  ({result.status_text})")
    click.echo(result.summary())
    click.echo(format_headers(result.response_headers))

    search = session.search
    if jsonpath:
        with _user_errors():
            click.echo(query_json(search.copy_text, jsonpath))
        return

    if find:
        search.search(find)
        for _ in range(match - 1):
            search.next()
        if search.match_count:
            click.echo(
                f"Match {search.current_index + 1} of {search.match_count} "
                f"(line {search.current_line + 1})",
                err=True,
            )
        else:
            click.echo(f"No matches for {find!r}", err=True)

    click.echo(search.copy_text if raw else search.text)


@click.group()
@click.option("--store", "store_path", default=None, type=click.Path(path_type=Path), help="Workspace store file.")
@click.option("--config", "config_path", default=None, type=click.Path(path_type=Path), help="YAML config file.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, store_path: Path | None, config_path: Path | None, verbose: bool):
    """API Workbench — compose, send and organise HTTP requests."""
    with _user_errors():
        settings = load_settings(config_path)
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    store = WorkspaceStore(store_path or settings.store_path)
    session = Session(store, executor=RequestExecutor(timeout=settings.timeout))
    ctx.obj = session
    ctx.call_on_close(session.close)


# -- workspaces ------------------------------------------------------------


@main.group()
def workspace():
    """Manage workspaces."""
    pass


@workspace.command("add")
@click.argument("name")
@pass_session
def workspace_add(session: Session, name: str):
    """Create a workspace."""
    with _user_errors():
        session.store.add_workspace(name)
    click.echo(f"Workspace {name!r} created.")


@workspace.command("list")
@pass_session
def workspace_list(session: Session):
    """List workspaces."""
    for ws in session.store.workspaces:
        click.echo(f"{ws.name}  ({len(ws.collections)} collections)")


# -- collections -----------------------------------------------------------


@main.group()
def collection():
    """Manage collections inside a workspace."""
    pass


@collection.command("add")
@click.argument("ws_name")
@click.argument("name")
@pass_session
def collection_add(session: Session, ws_name: str, name: str):
    """Create a collection in a workspace."""
    with _user_errors():
        col = session.store.add_collection(ws_name, name)
    if col is None:
        raise click.ClickException(f"Workspace not found: {ws_name}")
    click.echo(f"Collection {name!r} created in {ws_name!r}.")


@collection.command("list")
@click.argument("ws_name")
@pass_session
def collection_list(session: Session, ws_name: str):
    """List the collections of a workspace with their indices."""
    ws = session.store.find_workspace(ws_name)
    if ws is None:
        raise click.ClickException(f"Workspace not found: {ws_name}")
    for i, col in enumerate(ws.collections):
        click.echo(f"[{i}] {col.name}  ({len(col.requests)} requests)")


# -- requests --------------------------------------------------------------


@main.group()
def request():
    """Manage saved requests."""
    pass


@request.command("add")
@click.argument("ws_name")
@click.argument("col_name")
@click.argument("url")
@click.option("-X", "--method", default="GET", type=click.Choice(METHODS, case_sensitive=False), help="HTTP method.")
@click.option("-H", "--header", "headers", multiple=True, help="Header line 'Key: value'. Repeatable.")
@click.option("-d", "--data", default="", help="Request body.")
@click.option("--name", default=None, help="Request name (defaults to the URL).")
@pass_session
def request_add(session: Session, ws_name: str, col_name: str, url: str, method: str,
                headers: tuple[str, ...], data: str, name: str | None):
    """Save a request into a collection."""
    req = _draft(method.upper(), url, headers, data).to_request(name)
    with _user_errors():
        added = session.store.add_request(ws_name, col_name, req)
    if not added:
        raise click.ClickException(f"Collection not found: {ws_name}/{col_name}")
    click.echo(f"Request {req.name!r} saved to {col_name!r}.")


@request.command("list")
@click.argument("ws_name")
@click.argument("col_index", type=int)
@pass_session
def request_list(session: Session, ws_name: str, col_index: int):
    """List the requests of a collection with their indices."""
    col = session.store.collection_at(ws_name, col_index)
    if col is None:
        raise click.ClickException(f"No collection at index {col_index} in {ws_name}")
    for i, req in enumerate(col.requests):
        click.echo(f"[{i}] {req.method.value:<7} {req.name}  {req.url}")


@request.command("show")
@click.argument("ws_name")
@click.argument("col_index", type=int)
@click.argument("req_index", type=int)
@pass_session
def request_show(session: Session, ws_name: str, col_index: int, req_index: int):
    """Print a saved request."""
    req = session.store.request_at(ws_name, col_index, req_index)
    if req is None:
        raise click.ClickException(f"No request at index {req_index}")
    click.echo(f"{req.method.value} {req.url}")
    click.echo(format_headers(req.headers))
    click.echo(req.body)


@request.command("rename")
@click.argument("ws_name")
@click.argument("col_index", type=int)
@click.argument("req_index", type=int)
@click.argument("new_name")
@pass_session
def request_rename(session: Session, ws_name: str, col_index: int, req_index: int, new_name: str):
    """Rename a saved request."""
    with _user_errors():
        renamed = session.store.rename_request(ws_name, col_index, req_index, new_name)
    if not renamed:
        raise click.ClickException(f"No request at index {req_index}")
    click.echo(f"Request renamed to {new_name!r}.")


@request.command("delete")
@click.argument("ws_name")
@click.argument("col_index", type=int)
@click.argument("req_index", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@pass_session
def request_delete(session: Session, ws_name: str, col_index: int, req_index: int, yes: bool):
    """Delete a saved request."""
    req = session.store.request_at(ws_name, col_index, req_index)
    if req is None:
        raise click.ClickException(f"No request at index {req_index}")
    if not yes:
        click.confirm(f"Are you sure you want to delete the request '{req.name}'?", abort=True)
    with _user_errors():
        session.store.delete_request(ws_name, col_index, req_index)
    click.echo(f"Request {req.name!r} deleted.")


# -- execution -------------------------------------------------------------


_response_options = [
    click.option("--find", default=None, help="Highlight matches of this text in the body."),
    click.option("--match", default=1, type=click.IntRange(min=1), help="Which match is current (1-based)."),
    click.option("--jsonpath", default=None, help="Print the result of a JSONPath query instead of the body."),
    click.option("--raw", is_flag=True, help="Print the body without highlight markers."),
]


def _with_response_options(f):
    for option in reversed(_response_options):
        f = option(f)
    return f


@main.command()
@click.argument("url")
@click.option("-X", "--method", default="GET", type=click.Choice(METHODS, case_sensitive=False), help="HTTP method.")
@click.option("-H", "--header", "headers", multiple=True, help="Header line 'Key: value'. Repeatable.")
@click.option("-d", "--data", default="", help="Request body (ignored for GET/DELETE/HEAD/OPTIONS).")
@_with_response_options
@pass_session
def send(session: Session, url: str, method: str, headers: tuple[str, ...], data: str,
         find: str | None, match: int, jsonpath: str | None, raw: bool):
    """Send a request and print the response."""
    session.send(_draft(method.upper(), url, headers, data))
    _show_response(session, find, match, jsonpath, raw)


@main.command()
@click.argument("ws_name")
@click.argument("col_index", type=int)
@click.argument("req_index", type=int)
@_with_response_options
@pass_session
def run(session: Session, ws_name: str, col_index: int, req_index: int,
        find: str | None, match: int, jsonpath: str | None, raw: bool):
    """Send a saved request and print the response."""
    _select(session, ws_name, col_index)
    draft = session.load_request(req_index)
    if draft is None:
        raise click.ClickException(f"No request at index {req_index}")
    session.send(draft)
    _show_response(session, find, match, jsonpath, raw)


# -- interchange -----------------------------------------------------------


@main.command("import")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-w", "--workspace", "ws_name", required=True, help="Workspace to import into.")
@pass_session
def import_(session: Session, file_path: Path, ws_name: str):
    """Import a Postman v2.1 collection file."""
    if not session.select_workspace(ws_name):
        raise click.ClickException(f"Workspace not found: {ws_name}")
    try:
        payload = file_path.read_bytes()
    except OSError as e:
        raise click.ClickException(f"Read error: {e}") from e
    with _user_errors():
        col = session.import_collection(payload)
    click.echo(f"Imported {col.name!r} with {len(col.requests)} requests.")


@main.command()
@click.argument("ws_name")
@click.argument("col_index", type=int)
@click.option("-o", "--output", required=True, type=click.Path(dir_okay=False, path_type=Path), help="Destination file.")
@pass_session
def export(session: Session, ws_name: str, col_index: int, output: Path):
    """Export a collection as Postman v2.1 JSON."""
    _select(session, ws_name, col_index)
    text = session.export_collection()
    try:
        output.write_text(text, encoding="utf-8")
    except OSError as e:
        raise click.ClickException(f"Write error: {e}") from e
    click.echo(f"Collection exported to {output}")
