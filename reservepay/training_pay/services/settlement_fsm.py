# -*- coding: utf-8 -*-
"""
Finite-state machines for the two settlement workflows.

Each machine is a closed set of stages with an explicit forward/backward
transition table and the milestone timestamp field stamped when a stage is
entered. The first stage has no milestone: it is the state a process is created in.

    Disbursement: DOC_DRAFT -> DOC_APPROVED -> CMS_DRAFT -> CMS_APPROVED
    Clawback:     REQUESTED -> DEPOSIT_CONFIRMED -> COMPLETED
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from training_pay.exceptions import InitialStateError, TerminalStateError, ValidationError


@dataclass(frozen=True)
class Transition:
    source: str
    target: str
    stamp: Optional[str] = None   # milestone field set on target
    clear: Optional[str] = None   # milestone field cleared (the stage being left)


@dataclass(frozen=True)
class StageMachine:
    kind: str
    stages: Tuple[str, ...]
    labels: Mapping[str, str]
    milestones: Mapping[str, str]
    forward: Dict[str, str] = field(init=False)
    backward: Dict[str, str] = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "forward", {a: b for a, b in zip(self.stages, self.stages[1:])})
        object.__setattr__(self, "backward", {b: a for a, b in zip(self.stages, self.stages[1:])})

    @property
    def initial(self) -> str:
        return self.stages[0]

    @property
    def terminal(self) -> str:
        return self.stages[-1]

    @property
    def choices(self):
        return [(s, self.labels.get(s, s)) for s in self.stages]

    def _check(self, status: str) -> None:
        if status not in self.stages:
            raise ValidationError(f"Unknown {self.kind} stage: {status!r}")

    def next(self, status: str) -> Transition:
        self._check(status)
        target = self.forward.get(status)
        if target is None:
            raise TerminalStateError(f"{self.kind} is already at its last stage ({status}).")
        return Transition(source=status, target=target, stamp=self.milestones.get(target))

    def previous(self, status: str) -> Transition:
        self._check(status)
        target = self.backward.get(status)
        if target is None:
            raise InitialStateError(f"{self.kind} is already at its first stage ({status}).")
        return Transition(source=status, target=target, clear=self.milestones.get(status))

    def is_terminal(self, status: str) -> bool:
        return status == self.terminal

    def index(self, status: str) -> int:
        self._check(status)
        return self.stages.index(status)


DISBURSEMENT = StageMachine(
    kind="DISBURSEMENT",
    stages=("DOC_DRAFT", "DOC_APPROVED", "CMS_DRAFT", "CMS_APPROVED"),
    labels={
        "DOC_DRAFT": "Official document drafted",
        "DOC_APPROVED": "Official document approved",
        "CMS_DRAFT": "CMS transfer drafted",
        "CMS_APPROVED": "CMS approved / paid",
    },
    milestones={
        "DOC_APPROVED": "doc_approved_at",
        "CMS_DRAFT": "cms_draft_at",
        "CMS_APPROVED": "cms_approved_at",
    },
)

CLAWBACK = StageMachine(
    kind="CLAWBACK",
    stages=("REQUESTED", "DEPOSIT_CONFIRMED", "COMPLETED"),
    labels={
        "REQUESTED": "Refund requested",
        "DEPOSIT_CONFIRMED": "Deposit confirmed",
        "COMPLETED": "Refund completed",
    },
    milestones={
        "DEPOSIT_CONFIRMED": "deposit_confirmed_at",
        "COMPLETED": "completed_at",
    },
)

MACHINES = {m.kind: m for m in (DISBURSEMENT, CLAWBACK)}


def machine_for(kind: str) -> StageMachine:
    try:
        return MACHINES[str(kind).upper()]
    except KeyError:
        raise ValidationError(f"Unknown settlement kind: {kind!r}")
