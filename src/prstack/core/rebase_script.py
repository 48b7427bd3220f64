"""Bash script that rebases a chain by hand with `git rebase --onto`.

An alternative to autorebase for people who want to drive each step
themselves: the script records every branch's original tip, rebases the
bottom branch onto trunk and each following branch onto the rebuilt branch
below it, then force-pushes all branches atomically.
"""

import shlex

from prstack.core.types import Chain


def _var(index: int) -> str:
    return f"ORIG_{index}"


def generate_rebase_script(chain: Chain, remote: str = "origin") -> str:
    trunk = shlex.quote(chain.trunk)
    lines = [
        "#!/usr/bin/env bash",
        f"# Rebase {len(chain)} stacked branch(es) onto {chain.trunk}.",
        "# If a step stops on a conflict: resolve it, run `git rebase --continue`,",
        "# then re-run the remaining lines.",
        "set -euo pipefail",
        "",
        f"git fetch {shlex.quote(remote)}",
        "",
    ]
    for index, node in enumerate(chain):
        lines.append(f"{_var(index)}=$(git rev-parse {shlex.quote(node.branch)})")
    lines.append("")

    for index, node in enumerate(chain):
        branch = shlex.quote(node.branch)
        lines.append(f"# #{node.id}: {node.title}")
        if index == 0:
            merge_base = f'"$(git merge-base {trunk} {branch})"'
            lines.append(f"git rebase --onto {trunk} {merge_base} {branch}")
        else:
            below = shlex.quote(chain[index - 1].branch)
            lines.append(f'git rebase --onto {below} "${_var(index - 1)}" {branch}')

    branches = " ".join(shlex.quote(branch) for branch in chain.branches)
    lines.append("")
    lines.append(f"git push --force --atomic {shlex.quote(remote)} {branches}")
    return "\n".join(lines) + "\n"
