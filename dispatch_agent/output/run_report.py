from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from ..models import SlotStatus

if TYPE_CHECKING:  # pragma: no cover
    from ..orchestrator import RunContext


@dataclass(slots=True)
class SlotLine:
    slot_id: str
    name: str
    status: str
    detail: str


@dataclass(slots=True)
class RunReport:
    articles_gathered: int
    analyses_returned: int
    slots_done: int
    slots_failed: int
    bundle_sent: bool
    fatal_error: Optional[str] = None
    lines: List[SlotLine] = field(default_factory=list)

    @classmethod
    def from_context(cls, ctx: "RunContext") -> "RunReport":
        lines = []
        for slot in ctx.slots:
            if slot.status is SlotStatus.DONE and slot.result is not None:
                detail = f"[{slot.result.headline}]({slot.result.image_url})"
            else:
                detail = slot.error or "-"
            lines.append(SlotLine(slot.id, slot.category_name, slot.status.value, detail))
        return cls(
            articles_gathered=ctx.articles_gathered,
            analyses_returned=ctx.analyses_returned,
            slots_done=sum(1 for s in ctx.slots if s.status is SlotStatus.DONE),
            slots_failed=sum(1 for s in ctx.slots if s.status is SlotStatus.ERROR),
            bundle_sent=ctx.bundle_sent,
            fatal_error=ctx.fatal_error,
            lines=lines,
        )

    def to_markdown(self) -> str:
        rows = "\n".join(
            f"| {ln.slot_id} | {ln.name} | {ln.status} | {ln.detail.replace('|', '/')} |" for ln in self.lines
        )
        fatal = f"\n**Run failed:** {self.fatal_error}\n" if self.fatal_error else ""
        return (
            "### Run Summary\n"
            f"{fatal}\n"
            f"- Articles gathered: {self.articles_gathered}\n"
            f"- Analyses returned: {self.analyses_returned}\n"
            f"- Slots done: {self.slots_done}\n"
            f"- Slots failed: {self.slots_failed}\n"
            f"- Final bundle sent: {'yes' if self.bundle_sent else 'no'}\n\n"
            "| Slot | Name | Status | Detail |\n"
            "|------|------|--------|--------|\n"
            f"{rows}\n"
        )
