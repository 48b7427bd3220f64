"""Markdown table describing a stack, embedded in each pull request description."""

import re

from prstack.core.types import Chain, Node

TABLE_OPEN_MARKER = "<!---PRSTACKOPEN-->"
TABLE_CLOSE_MARKER = "<!---PRSTACKCLOSE-->"
CURRENT_MARKER = "👉"

_BADGE_URL = "https://img.shields.io/github/pulls/detail/state/{repository}/{number}?label=%20"


def strip_title_prefix(title: str, prefix: str | None) -> str:
    """Remove delimited tags such as "[ABC-123]" from a title.

    `prefix` is the opening and closing delimiter, e.g. "[]".
    """
    if not prefix or len(prefix) != 2:
        return title
    opening, closing = re.escape(prefix[0]), re.escape(prefix[1])
    return re.sub(rf"\s*{opening}[^{closing}]*{closing}\s*", " ", title).strip()


def _status_cell(node: Node, repository: str, badges: bool) -> str:
    if badges:
        url = _BADGE_URL.format(repository=repository, number=node.id)
        return f"![]({url})"
    return "Draft" if node.is_draft else "Open"


def build_table(
    chain: Chain,
    title: str,
    repository: str,
    *,
    current_id: int | None = None,
    badges: bool = False,
    prefix: str | None = None,
    prelude: str | None = None,
) -> str:
    """Render the chain as a markdown table, bottom first.

    The row of `current_id` is marked so readers see where they are.
    `prelude` is placed between the heading and the table.
    """
    lines = [f"### Stacked PR Chain: {title}"]
    if prelude:
        lines += [prelude.rstrip("\n"), ""]
    lines += [
        "| PR | Title | Status |  Merges Into  |",
        "|:--:|:------|:-------|:-------------:|",
    ]
    previous: Node | None = None
    for node in chain:
        node_title = strip_title_prefix(node.title, prefix)
        if node.id == current_id:
            node_title = f"{CURRENT_MARKER} {node_title}"
        merges_into = f"#{previous.id}" if previous is not None else f"`{chain.trunk}`"
        status = _status_cell(node, repository, badges)
        lines.append(f"|#{node.id}|{node_title}|{status}|{merges_into}|")
        previous = node
    return "\n".join(lines)


def replace_table(body: str, table: str) -> str:
    """Insert the table into a description, replacing any previous one.

    The table is wrapped in marker comments. Text outside the markers is left
    untouched; a description without markers gets the table appended.
    """
    block = f"\n{TABLE_OPEN_MARKER}\n{table}\n{TABLE_CLOSE_MARKER}\n"
    if TABLE_OPEN_MARKER in body and TABLE_CLOSE_MARKER in body:
        pattern = re.compile(
            rf"\n?{re.escape(TABLE_OPEN_MARKER)}.*?{re.escape(TABLE_CLOSE_MARKER)}\n?",
            re.DOTALL,
        )
        return pattern.sub(lambda _: block, body, count=1)
    return body + block
