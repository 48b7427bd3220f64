"""Text rendering of stacks for log and status output."""

from dataclasses import dataclass
from datetime import UTC, datetime

import click

from prstack.core.github.types import PRState
from prstack.core.types import Chain, CheckState, Commit, Node, StatusBits

MAX_TITLE_LEN = 50
MAX_LOG_COMMITS = 3
MAX_COMMIT_MESSAGE_LEN = 60
NO_REPO_HINT = "hint: run from a git repo or use -C <path> to see commits and current branch"

_UNICODE_SYMBOLS = {
    CheckState.PASS: "✓",
    CheckState.FAIL: "✗",
    CheckState.PENDING: "⏳",
    CheckState.NOT_APPLICABLE: "─",
}
_ASCII_SYMBOLS = {
    CheckState.PASS: "Y",
    CheckState.FAIL: "N",
    CheckState.PENDING: "?",
    CheckState.NOT_APPLICABLE: "-",
}
_COLORS = {
    CheckState.PASS: "green",
    CheckState.FAIL: "red",
    CheckState.PENDING: "yellow",
    CheckState.NOT_APPLICABLE: None,
}


@dataclass(frozen=True)
class RenderOptions:
    use_unicode: bool = True
    use_color: bool = True


@dataclass(frozen=True)
class LogEntry:
    """A branch shown by `log`, with its newest local commits.

    `commits` holds at most MAX_LOG_COMMITS commits, newest first;
    `extra_commits` counts the rest.
    """

    node: Node
    state: PRState = "OPEN"
    commits: tuple[Commit, ...] = ()
    extra_commits: int = 0


def truncate_title(title: str, max_len: int = MAX_TITLE_LEN) -> str:
    if len(title) <= max_len:
        return title
    return title[: max(max_len - 3, 0)] + "..."


def format_relative_time(timestamp: datetime, now: datetime | None = None) -> str:
    """Render a timestamp as "3 hours ago" style text."""
    now = now if now is not None else datetime.now(UTC)
    seconds = int((now - timestamp).total_seconds())
    if seconds < 0:
        return "just now"

    units = [
        ("year", 365 * 24 * 3600),
        ("month", 30 * 24 * 3600),
        ("week", 7 * 24 * 3600),
        ("day", 24 * 3600),
        ("hour", 3600),
        ("minute", 60),
        ("second", 1),
    ]
    for name, size in units:
        amount = seconds // size
        if amount >= 1:
            plural = "" if amount == 1 else "s"
            return f"{amount} {name}{plural} ago"
    return "just now"


def format_status_bits(status: StatusBits, options: RenderOptions) -> str:
    symbols = _UNICODE_SYMBOLS if options.use_unicode else _ASCII_SYMBOLS
    bits = [status.ci, status.approved, status.mergeable, status.stack_clear]
    rendered = []
    for bit in bits:
        symbol = symbols[bit]
        color = _COLORS[bit]
        if options.use_color and color is not None:
            symbol = click.style(symbol, fg=color)
        rendered.append(symbol)
    return "[" + " ".join(rendered) + "]"


def _marker(is_current: bool, options: RenderOptions) -> str:
    if options.use_unicode:
        marker = "◉" if is_current else "◯"
    else:
        marker = "*" if is_current else "o"
    if not options.use_color:
        return marker
    if is_current:
        return click.style(marker, fg="green", bold=True)
    return click.style(marker, dim=True)


def format_node_line(node: Node, *, is_current: bool, options: RenderOptions) -> str:
    marker = _marker(is_current, options)

    text = node.branch
    if is_current:
        text += " (current)"
    text += f" #{node.id} - {truncate_title(node.title)}"
    if node.is_draft:
        text += " (draft)"
    return f"{marker} {text}"


def _trunk_line(trunk: str, current_branch: str | None, options: RenderOptions) -> str:
    is_current = trunk == current_branch
    line = f"{_marker(is_current, options)} {trunk}"
    if is_current:
        line += " (current)"
    return line


def render_status(
    chain: Chain,
    statuses: dict[int, StatusBits],
    *,
    current_branch: str | None,
    options: RenderOptions,
    now: datetime | None = None,
) -> str:
    """Render the chain top first, ending with trunk, like a branch graph."""
    pipe = "│" if options.use_unicode else "|"
    lines: list[str] = []

    for node in reversed(chain.nodes):
        lines.append(
            format_node_line(node, is_current=node.branch == current_branch, options=options)
        )
        detail = format_status_bits(statuses.get(node.id, StatusBits.not_applicable()), options)
        if node.updated_at is not None:
            detail += f" {format_relative_time(node.updated_at, now)}"
        lines.append(f"{pipe} {detail}")

    lines.append(_trunk_line(chain.trunk, current_branch, options))
    return "\n".join(lines)


def format_log_line(node: Node, *, is_current: bool, state: PRState = "OPEN") -> str:
    line = f"#{node.id}: {node.title} ({node.branch} -> {node.base})"
    if node.is_draft:
        line += " [draft]"
    if state != "OPEN":
        line += f" [{state.lower()}]"
    if is_current:
        line = click.style(line, bold=True)
    return line


def _log_branch_line(entry: LogEntry, *, is_current: bool, options: RenderOptions) -> str:
    line = format_node_line(entry.node, is_current=is_current, options=options)
    if entry.state == "OPEN":
        return line
    marker, text = line.split(" ", 1)
    if options.use_color:
        return f"{marker} {click.style(text, dim=True, strikethrough=True)}"
    return f"{marker} {text} [{entry.state.lower()}]"


def render_log(
    entries: list[LogEntry],
    trunk: str,
    *,
    current_branch: str | None,
    options: RenderOptions,
    has_repo: bool,
    now: datetime | None = None,
) -> str:
    """Render log entries top first as a branch graph, ending with trunk.

    Each branch shows when its pull request was last updated, its URL and its
    newest local commits.
    """
    pipe = "│" if options.use_unicode else "|"

    def dim(text: str) -> str:
        return click.style(text, dim=True) if options.use_color else text

    lines: list[str] = []
    for entry in entries:
        node = entry.node
        lines.append(
            _log_branch_line(entry, is_current=node.branch == current_branch, options=options)
        )
        if node.updated_at is not None:
            lines.append(f"{pipe} {dim(format_relative_time(node.updated_at, now))}")
        if node.url:
            lines.append(f"{pipe} {dim(node.url)}")
        if entry.commits:
            lines.append(pipe)
            for commit in entry.commits:
                message = truncate_title(commit.message, MAX_COMMIT_MESSAGE_LEN)
                lines.append(f"{pipe} {dim(f'{commit.sha[:7]} - {message}')}")
            if entry.extra_commits > 0:
                lines.append(f"{pipe} {dim(f'+ {entry.extra_commits} more')}")
        lines.append(pipe)

    lines.append(_trunk_line(trunk, current_branch, options))

    if not has_repo and entries:
        lines.append("")
        lines.append(NO_REPO_HINT)
    return "\n".join(lines)
