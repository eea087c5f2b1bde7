"""Taskdash CLI - personal task board."""

import json
import locale
import logging
import sys
from datetime import date

import click

from .adapters.auth_session import SessionTokenProvider, fetch_jwks, verify_token
from .board import TaskBoard
from .config import load_config
from .core.errors import ConfigurationError, TaskDashError
from .core.filters import TaskFilter
from .core.mutations import MutationResult, RolledBack
from .core.sorting import SortKey
from .core.tasks import Task, parse_priority
from .core.view import ViewStatus

PRIORITY_CHOICES = ["none", "low", "medium", "high"]
DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _open_board() -> TaskBoard:
    """Build the board and run the initial fetch; exit if it cannot be shown."""
    try:
        board = TaskBoard.from_config(load_config())
    except ConfigurationError as e:
        _fail(str(e))

    board.load()
    view = board.view()
    if view.status is ViewStatus.ERROR:
        hint = " Run the command again to retry." if view.error.retryable else ""
        _fail(f"{view.error.message}.{hint}")
    return board


def _task_to_dict(task: Task) -> dict:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "completed": task.completed,
        "priority": task.priority.label or None,
        "due_date": task.due_date.isoformat() if task.due_date else None,
        "tags": list(task.tags),
        "subtasks": [s.to_api() for s in task.subtasks],
        "project": task.project or None,
    }


def format_task_line(task: Task, as_of: date | None = None) -> str:
    """Single-line summary: status, priority, title, due date, tags, subtasks."""
    check = "x" if task.completed else " "
    marker = "!" * int(task.priority)
    line = f"[{check}] [{marker:3}] {task.title}  ({task.id})"

    days = task.days_until_due(as_of)
    if days is not None:
        if task.is_overdue(as_of):
            line += f"  due {task.due_date} OVERDUE"
        elif days == 0:
            line += "  due TODAY"
        else:
            line += f"  due {task.due_date}"

    if task.tags:
        line += "  " + " ".join(f"#{t}" for t in task.tags)
    progress = task.subtask_progress
    if progress.total:
        line += f"  [{progress.completed}/{progress.total}]"
    return line


def _report(result: MutationResult, success: str) -> None:
    if isinstance(result, RolledBack):
        _fail(f"{result.reason} (changes were reverted)")
    click.echo(success)


def _report_bulk(results: list[MutationResult], verb: str) -> None:
    failed = [r for r in results if isinstance(r, RolledBack)]
    click.echo(f"{verb} {len(results) - len(failed)} task(s).")
    if failed:
        for r in failed:
            click.echo(f"Error: task {r.task_id}: {r.reason}", err=True)
        sys.exit(1)


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Taskdash - personal task board."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.WARNING,
    )
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logging.getLogger(__name__).debug(f"Keeping default collation: {e}")


@main.command()
@click.option("--search", "-s", default="", help="Match title or description")
@click.option(
    "--filter",
    "active_filter",
    type=click.Choice([f.value for f in TaskFilter]),
    default=TaskFilter.ALL.value,
    show_default=True,
)
@click.option("--tag", default=None, help="Only tasks carrying this tag")
@click.option(
    "--sort",
    "sort_key",
    type=click.Choice([k.value for k in SortKey]),
    default=SortKey.DATE.value,
    show_default=True,
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks(search: str, active_filter: str, tag: str | None, sort_key: str, as_json: bool):
    """List tasks."""
    board = _open_board()
    board.set_search(search)
    board.set_filter(TaskFilter(active_filter))
    board.set_tag(tag)
    board.set_sort(SortKey(sort_key))
    view = board.view()

    if as_json:
        click.echo(json.dumps([_task_to_dict(t) for t in view.tasks], indent=2))
        return

    stats = view.stats
    click.echo(
        f"{stats.pending} pending, {stats.completed} completed "
        f"({stats.completion_percentage}%), {stats.due_today} due today"
    )
    if view.rejected:
        click.echo(f"Warning: {view.rejected} malformed task(s) were skipped.", err=True)
    if not view.tasks:
        click.echo("No tasks.")
        return
    for task in view.tasks:
        click.echo(format_task_line(task))


@main.command()
@click.argument("task_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(task_id: str, as_json: bool):
    """Show one task with its subtasks."""
    board = _open_board()
    task = board.select(task_id)
    if task is None:
        _fail(f"Unknown task: {task_id}")

    if as_json:
        click.echo(json.dumps(_task_to_dict(task), indent=2))
        return

    click.echo(format_task_line(task))
    if task.description:
        click.echo(f"\n{task.description}")
    if task.project:
        click.echo(f"\nList: {task.project}")
    if task.subtasks:
        progress = task.subtask_progress
        click.echo(f"\nSubtasks {progress.completed}/{progress.total} ({progress.percentage}%):")
        for subtask in task.subtasks:
            check = "x" if subtask.completed else " "
            click.echo(f"  [{check}] {subtask.title}  ({subtask.id})")


@main.command()
@click.argument("title")
@click.option("--description", "-d", default="")
@click.option("--priority", "-p", type=click.Choice(PRIORITY_CHOICES), default="none")
@click.option("--due", type=DATE_TYPE, default=None, help="Due date (YYYY-MM-DD)")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--project", default="", help="List the task belongs to")
def add(title: str, description: str, priority: str, due, tags: tuple[str, ...], project: str):
    """Add a task."""
    board = _open_board()
    try:
        result = board.add_task(
            title,
            description=description,
            priority=parse_priority(priority),
            due_date=due.date() if due else None,
            tags=tags,
            project=project,
        )
    except ValueError as e:
        _fail(str(e))
    _report(result, "Task added.")


@main.command()
@click.argument("task_id")
def toggle(task_id: str):
    """Toggle a task between open and completed."""
    board = _open_board()
    try:
        result = board.toggle_complete(task_id)
    except ValueError as e:
        _fail(str(e))
    _report(result, "Task updated.")


@main.command()
@click.argument("task_id")
@click.option("--title", default=None)
@click.option("--description", default=None)
@click.option("--priority", type=click.Choice(PRIORITY_CHOICES), default=None)
@click.option("--due", type=DATE_TYPE, default=None, help="Due date (YYYY-MM-DD)")
@click.option("--clear-due", is_flag=True, help="Remove the due date")
@click.option("--tag", "tags", multiple=True, help="Replace tags (repeatable)")
@click.option("--project", default=None)
def edit(task_id, title, description, priority, due, clear_due, tags, project):
    """Edit the fields of a task."""
    changes = {}
    if title is not None:
        changes["title"] = title
    if description is not None:
        changes["description"] = description
    if priority is not None:
        changes["priority"] = parse_priority(priority)
    if clear_due:
        changes["due_date"] = None
    elif due is not None:
        changes["due_date"] = due.date()
    if tags:
        changes["tags"] = list(tags)
    if project is not None:
        changes["project"] = project
    if not changes:
        _fail("Nothing to change.")

    board = _open_board()
    try:
        result = board.edit_task(task_id, **changes)
    except ValueError as e:
        _fail(str(e))
    _report(result, "Task saved.")


@main.command()
@click.argument("task_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def delete(task_id: str, yes: bool):
    """Delete a task."""
    if not yes:
        click.confirm("Are you sure you want to delete this task?", abort=True)
    board = _open_board()
    _report(board.delete_task(task_id), "Task deleted.")


@main.group()
def subtask():
    """Manage the subtasks of a task."""
    pass


@subtask.command("add")
@click.argument("task_id")
@click.argument("title")
def subtask_add(task_id: str, title: str):
    """Add a subtask."""
    board = _open_board()
    try:
        result = board.add_subtask(task_id, title)
    except ValueError as e:
        _fail(str(e))
    _report(result, "Subtask added.")


@subtask.command("toggle")
@click.argument("task_id")
@click.argument("subtask_id")
def subtask_toggle(task_id: str, subtask_id: str):
    """Toggle a subtask."""
    board = _open_board()
    try:
        result = board.toggle_subtask(task_id, subtask_id)
    except ValueError as e:
        _fail(str(e))
    _report(result, "Subtask updated.")


@subtask.command("edit")
@click.argument("task_id")
@click.argument("subtask_id")
@click.argument("title")
def subtask_edit(task_id: str, subtask_id: str, title: str):
    """Rename a subtask."""
    board = _open_board()
    try:
        result = board.edit_subtask(task_id, subtask_id, title)
    except ValueError as e:
        _fail(str(e))
    _report(result, "Subtask renamed.")


@subtask.command("delete")
@click.argument("task_id")
@click.argument("subtask_id")
def subtask_delete(task_id: str, subtask_id: str):
    """Delete a subtask."""
    board = _open_board()
    try:
        result = board.delete_subtask(task_id, subtask_id)
    except ValueError as e:
        _fail(str(e))
    _report(result, "Subtask deleted.")


@subtask.command("complete-all")
@click.argument("task_id")
def subtask_complete_all(task_id: str):
    """Mark every subtask of a task completed."""
    board = _open_board()
    try:
        result = board.complete_all_subtasks(task_id)
    except ValueError as e:
        _fail(str(e))
    _report(result, "All subtasks completed.")


@main.command("complete-all")
def complete_all():
    """Mark every open task completed."""
    board = _open_board()
    _report_bulk(board.complete_all(), "Completed")


@main.command("clear-completed")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def clear_completed(yes: bool):
    """Delete every completed task."""
    if not yes:
        click.confirm("Delete all completed tasks?", abort=True)
    board = _open_board()
    _report_bulk(board.clear_completed(), "Deleted")


@main.command("bulk-complete")
@click.argument("task_ids", nargs=-1, required=True)
def bulk_complete(task_ids: tuple[str, ...]):
    """Complete the given tasks."""
    board = _open_board()
    _report_bulk(board.bulk_complete(list(task_ids)), "Completed")


@main.command("bulk-delete")
@click.argument("task_ids", nargs=-1, required=True)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def bulk_delete(task_ids: tuple[str, ...], yes: bool):
    """Delete the given tasks, one after another."""
    if not yes:
        click.confirm(f"Delete {len(task_ids)} task(s)?", abort=True)
    board = _open_board()
    _report_bulk(board.bulk_delete(list(task_ids)), "Deleted")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats(as_json: bool):
    """Show task counts."""
    view = _open_board().view()
    s = view.stats
    data = {
        "total": s.total,
        "completed": s.completed,
        "pending": s.pending,
        "due_today": s.due_today,
        "overdue": s.overdue,
        "completion_percentage": s.completion_percentage,
    }
    if as_json:
        click.echo(json.dumps(data, indent=2))
        return
    for key, value in data.items():
        click.echo(f"{key.replace('_', ' '):22} {value}")


@main.command()
def tags():
    """List all tags in use."""
    view = _open_board().view()
    if not view.tags:
        click.echo("No tags.")
        return
    for tag in view.tags:
        click.echo(tag)


@main.command()
def token():
    """Sign in and print a bearer token for the task API."""
    try:
        provider = SessionTokenProvider(load_config())
        click.echo(provider.bearer_token())
    except TaskDashError as e:
        _fail(str(e))


@main.command("verify-token")
@click.argument("token_value", metavar="TOKEN")
@click.option("--secret", default=None, help="Shared secret instead of the published JWKS")
def verify_token_cmd(token_value: str, secret: str | None):
    """Verify a token's signature, issuer and audience."""
    config = load_config()
    if not config.app_url:
        _fail("APP_URL is not configured.")

    try:
        if secret:
            key, algorithms = secret, ["HS256"]
        else:
            key, algorithms = fetch_jwks(config.app_url, timeout=config.request_timeout), config.jwt_algorithms
        claims = verify_token(
            token_value,
            key,
            issuer=config.app_url,
            audience=config.app_url,
            algorithms=algorithms,
        )
    except TaskDashError as e:
        _fail(str(e))

    click.echo("Token is valid!")
    click.echo(json.dumps(claims, indent=2, default=str))


if __name__ == "__main__":
    main()
