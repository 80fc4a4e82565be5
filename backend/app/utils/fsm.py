from __future__ import annotations
"""Finite state machine helper enforcing allowed status transitions.

The budget request lifecycle uses one graph for both the approver chain and the
office disbursement steps (see app.constants.workflow.WORKFLOW_GRAPH):

    from app.utils.fsm import TransitionValidator
    fsm = TransitionValidator(WORKFLOW_GRAPH)
    fsm.assert_can_transition(current_status, target_status)

Raises InvalidStateError (400) when the edge is missing.
"""
from typing import Dict, FrozenSet, Iterable, List
from app.errors import InvalidStateError


class TransitionValidator:
    def __init__(self, graph: Dict[str, Iterable[str]], field_name: str = 'status'):
        self.graph: Dict[str, FrozenSet[str]] = {k: frozenset(v) for k, v in graph.items()}
        self.field_name = field_name

    def allowed_targets(self, current: str) -> FrozenSet[str]:
        return self.graph.get(current, frozenset())

    def can_transition(self, current: str, target: str) -> bool:
        return target in self.allowed_targets(current)

    def is_terminal(self, status: str) -> bool:
        return status in self.graph and not self.graph[status]

    def states(self) -> List[str]:
        return list(self.graph)

    def assert_can_transition(self, current: str, target: str):
        if not self.can_transition(current, target):
            raise InvalidStateError(f"Invalid {self.field_name} transition {current} -> {target}")
        return True

__all__ = ['TransitionValidator']
