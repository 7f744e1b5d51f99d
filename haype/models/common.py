import enum


class RecordStatus(str, enum.Enum):
    """Lifecycle status shared by employees and customers."""
    active = "Active"
    inactive = "Inactive"
    closed = "Closed"
