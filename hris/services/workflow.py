"""
HRIS Console - Status Workflows

Explicit transition tables for every record type with a status pipeline.

Payroll:
    draft/processing --validate--> validated --submit--> submitted
    submitted --approve--> approved --mark_paid--> paid
    submitted --reject--> rejected
Overtime / leave requests:
    pending --approve|reject|cancel--> approved | rejected | cancelled
Payroll adjustments:
    pending --approve|reject|cancel--> approved | rejected | cancelled
    approved --process--> processed

A transition missing from a table is illegal and raises
InvalidTransitionException. The backend still has the final say; these
tables stop a request that cannot succeed before it is sent.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple, Type

from hris.schemas.adjustment import AdjustmentStatus
from hris.schemas.leave import LeaveRequestStatus
from hris.schemas.overtime import OvertimeStatus
from hris.schemas.payroll import PayrollStatus
from hris.utils.error_handling import InvalidTransitionException


class WorkflowAction(str, Enum):
    VALIDATE = "validate"
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    MARK_PAID = "mark_paid"
    CANCEL = "cancel"
    PROCESS = "process"


class StatusMachine:
    """
    Finite state machine over a str Enum of statuses.

    `transitions` maps (status, action) to the resulting status.
    """

    def __init__(
        self,
        name: str,
        status_enum: Type[Enum],
        transitions: Mapping[Tuple[Enum, WorkflowAction], Enum],
        labels: Mapping[Enum, str],
    ):
        self.name = name
        self.status_enum = status_enum
        self.transitions: Dict[Tuple[Enum, WorkflowAction], Enum] = dict(transitions)
        self.labels: Dict[Enum, str] = dict(labels)
        sources = {source for source, _ in self.transitions}
        self.terminal_states: FrozenSet[Enum] = frozenset(s for s in status_enum if s not in sources)

    def _status(self, status) -> Enum:
        try:
            return self.status_enum(status)
        except ValueError:
            raise InvalidTransitionException(self.name, str(status), "change")

    @staticmethod
    def _action(action) -> Optional[WorkflowAction]:
        try:
            return WorkflowAction(action)
        except ValueError:
            return None

    def can_transition(self, status, action) -> bool:
        try:
            current = self._status(status)
        except InvalidTransitionException:
            return False
        act = self._action(action)
        return act is not None and (current, act) in self.transitions

    def next_state(self, status, action) -> Enum:
        """Resulting status of `action`, or InvalidTransitionException."""
        current = self._status(status)
        act = self._action(action)
        if act is None or (current, act) not in self.transitions:
            raise InvalidTransitionException(self.name, current.value, str(getattr(action, "value", action)))
        return self.transitions[(current, act)]

    def available_actions(self, status) -> List[WorkflowAction]:
        current = self._status(status)
        return [act for (source, act) in self.transitions if source == current]

    def is_terminal(self, status) -> bool:
        return self._status(status) in self.terminal_states

    def label(self, status) -> str:
        try:
            return self.labels.get(self._status(status), str(status))
        except InvalidTransitionException:
            return str(status)


# ===========================================
# MACHINES
# ===========================================

A = WorkflowAction

PAYROLL_WORKFLOW = StatusMachine(
    name="payroll",
    status_enum=PayrollStatus,
    transitions={
        (PayrollStatus.DRAFT, A.VALIDATE): PayrollStatus.VALIDATED,
        (PayrollStatus.PROCESSING, A.VALIDATE): PayrollStatus.VALIDATED,
        (PayrollStatus.VALIDATED, A.SUBMIT): PayrollStatus.SUBMITTED,
        (PayrollStatus.SUBMITTED, A.APPROVE): PayrollStatus.APPROVED,
        (PayrollStatus.SUBMITTED, A.REJECT): PayrollStatus.REJECTED,
        (PayrollStatus.APPROVED, A.MARK_PAID): PayrollStatus.PAID,
    },
    labels={
        PayrollStatus.DRAFT: "Draft",
        PayrollStatus.PROCESSING: "Processing",
        PayrollStatus.VALIDATED: "Validated",
        PayrollStatus.SUBMITTED: "Submitted",
        PayrollStatus.APPROVED: "Approved",
        PayrollStatus.REJECTED: "Rejected",
        PayrollStatus.PAID: "Paid",
        PayrollStatus.CANCELLED: "Cancelled",
    },
)

OVERTIME_WORKFLOW = StatusMachine(
    name="overtime",
    status_enum=OvertimeStatus,
    transitions={
        (OvertimeStatus.PENDING, A.APPROVE): OvertimeStatus.APPROVED,
        (OvertimeStatus.PENDING, A.REJECT): OvertimeStatus.REJECTED,
        (OvertimeStatus.PENDING, A.CANCEL): OvertimeStatus.CANCELLED,
    },
    labels={
        OvertimeStatus.PENDING: "Pending",
        OvertimeStatus.APPROVED: "Approved",
        OvertimeStatus.REJECTED: "Rejected",
        OvertimeStatus.CANCELLED: "Cancelled",
    },
)

LEAVE_WORKFLOW = StatusMachine(
    name="leave request",
    status_enum=LeaveRequestStatus,
    transitions={
        (LeaveRequestStatus.PENDING, A.APPROVE): LeaveRequestStatus.APPROVED,
        (LeaveRequestStatus.PENDING, A.REJECT): LeaveRequestStatus.REJECTED,
        (LeaveRequestStatus.PENDING, A.CANCEL): LeaveRequestStatus.CANCELLED,
    },
    labels={
        LeaveRequestStatus.PENDING: "Pending",
        LeaveRequestStatus.APPROVED: "Approved",
        LeaveRequestStatus.REJECTED: "Rejected",
        LeaveRequestStatus.CANCELLED: "Cancelled",
    },
)

ADJUSTMENT_WORKFLOW = StatusMachine(
    name="payroll adjustment",
    status_enum=AdjustmentStatus,
    transitions={
        (AdjustmentStatus.PENDING, A.APPROVE): AdjustmentStatus.APPROVED,
        (AdjustmentStatus.PENDING, A.REJECT): AdjustmentStatus.REJECTED,
        (AdjustmentStatus.PENDING, A.CANCEL): AdjustmentStatus.CANCELLED,
        (AdjustmentStatus.APPROVED, A.PROCESS): AdjustmentStatus.PROCESSED,
    },
    labels={
        AdjustmentStatus.PENDING: "Menunggu",
        AdjustmentStatus.APPROVED: "Disetujui",
        AdjustmentStatus.REJECTED: "Ditolak",
        AdjustmentStatus.PROCESSED: "Diproses",
        AdjustmentStatus.CANCELLED: "Dibatalkan",
    },
)

WORKFLOWS: Dict[str, StatusMachine] = {
    "payroll": PAYROLL_WORKFLOW,
    "overtime": OVERTIME_WORKFLOW,
    "leave": LEAVE_WORKFLOW,
    "adjustment": ADJUSTMENT_WORKFLOW,
}


def get_workflow(name: str) -> StatusMachine:
    try:
        return WORKFLOWS[name]
    except KeyError:
        raise ValueError(f"Unknown workflow: {name}")


def next_state(workflow: str, status, action) -> Enum:
    return get_workflow(workflow).next_state(status, action)


def can_transition(workflow: str, status, action) -> bool:
    return get_workflow(workflow).can_transition(status, action)


def available_actions(workflow: str, status) -> List[WorkflowAction]:
    return get_workflow(workflow).available_actions(status)


def is_terminal(workflow: str, status) -> bool:
    return get_workflow(workflow).is_terminal(status)


def labels(workflow: str) -> Dict[str, str]:
    """Display label for every status of a workflow, keyed by status value."""
    machine = get_workflow(workflow)
    return {status.value: machine.label(status) for status in machine.status_enum}
