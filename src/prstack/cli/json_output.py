"""JSON output for machine-parseable status."""

import json
from typing import Literal

from pydantic import BaseModel, ConfigDict

from prstack.cli.output import machine_output
from prstack.core.types import Chain, StatusBits

BitValue = Literal["pass", "fail", "pending", "n/a"]


class StatusBitsModel(BaseModel):
    model_config = ConfigDict(strict=True)

    ci: BitValue
    approved: BitValue
    mergeable: BitValue
    stack_clear: BitValue

    @staticmethod
    def from_bits(bits: StatusBits) -> "StatusBitsModel":
        return StatusBitsModel(
            ci=bits.ci.value,
            approved=bits.approved.value,
            mergeable=bits.mergeable.value,
            stack_clear=bits.stack_clear.value,
        )


class StatusEntryModel(BaseModel):
    """One row of `status --json`; trunk is the last entry and has no PR fields."""

    branch: str
    pr_number: int | None = None
    title: str | None = None
    url: str | None = None
    is_current: bool
    is_draft: bool = False
    is_trunk: bool = False
    status: StatusBitsModel | None = None
    updated_at: str | None = None


class StatusOutputModel(BaseModel):
    stack: list[StatusEntryModel]
    trunk: str


def build_status_output(
    chain: Chain,
    statuses: dict[int, StatusBits] | None,
    *,
    current_branch: str | None,
) -> StatusOutputModel:
    """Status entries top first, followed by trunk.

    `statuses` is None when checks were skipped; entries then omit `status`.
    """
    entries: list[StatusEntryModel] = []
    for node in reversed(chain.nodes):
        bits = statuses.get(node.id) if statuses is not None else None
        entries.append(
            StatusEntryModel(
                branch=node.branch,
                pr_number=node.id,
                title=node.title,
                url=node.url or None,
                is_current=node.branch == current_branch,
                is_draft=node.is_draft,
                status=StatusBitsModel.from_bits(bits) if bits is not None else None,
                updated_at=node.updated_at.isoformat() if node.updated_at is not None else None,
            )
        )
    entries.append(
        StatusEntryModel(
            branch=chain.trunk,
            is_current=chain.trunk == current_branch,
            is_trunk=True,
        )
    )
    return StatusOutputModel(stack=entries, trunk=chain.trunk)


def emit_json(model: BaseModel) -> None:
    """Write a model as indented JSON to stdout, leaving out unset optional fields."""
    data = model.model_dump(mode="json", exclude_none=True)
    machine_output(json.dumps(data, indent=2))

