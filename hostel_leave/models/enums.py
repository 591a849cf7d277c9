from enum import Enum

class LeaveStatus(str, Enum):
    Pending = "pending"
    Approved = "approved"
    Rejected = "rejected"


class LeaveType(str, Enum):
    Home = "home"
    Medical = "medical"
    Academic = "academic"
    Emergency = "emergency"
    Other = "other"


class LeaveOperation(str, Enum):
    Edit = "edit"
    Delete = "delete"
    Approve = "approve"
    Reject = "reject"


class LeaveDecision(str, Enum):
    Approve = "approve"
    Reject = "reject"

    @property
    def operation(self) -> LeaveOperation:
        return LeaveOperation(self.value)

    @property
    def target_status(self) -> LeaveStatus:
        return LeaveStatus.Approved if self is LeaveDecision.Approve else LeaveStatus.Rejected
