from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from percy_env._schema import BuildContext, CIProvider

_ABSENT = Text("-", style="dim")


def _value(value: str | None) -> Text:
    if value is None:
        return _ABSENT
    return Text(value)


def _make_context_table(context: BuildContext) -> Table:
    table = Table(title="Build Context", show_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    ci_style = "dim" if context.ci is CIProvider.NONE else "cyan bold"
    table.add_row("CI", Text(context.ci.value, style=ci_style))
    table.add_row("Branch", _value(context.branch))
    table.add_row("Commit SHA", _value(context.commit_sha))
    table.add_row("Pull request", _value(context.pull_request_number))
    table.add_row("Repo", _value(context.repo))

    commit = context.commit
    table.add_section()
    table.add_row("Author", _value(_person(commit.author_name, commit.author_email)))
    table.add_row(
        "Committer", _value(_person(commit.committer_name, commit.committer_email))
    )
    table.add_row("Committed at", _value(commit.committed_at))
    message = commit.message.splitlines()[0] if commit.message else None
    table.add_row("Message", _value(message))
    return table


def _person(name: str | None, email: str | None) -> str | None:
    if name and email:
        return f"{name} <{email}>"
    return name or email


def print_context(context: BuildContext, console: Console | None = None) -> None:
    """Print a rich-formatted summary of the build context to stderr."""
    if console is None:
        console = Console(stderr=True)
    console.print(_make_context_table(context))


def print_error(message: str, console: Console | None = None) -> None:
    if console is None:
        console = Console(stderr=True)
    console.print(Text(message, style="red bold"))
