"""
Status transition tables for applications and connection requests.

Terminal states map to an empty set. Re-applying the current status is
always allowed (no-op). Job status (active/closed/draft) has no table: the
poster may set any value.
"""

from typing import Dict, Set

from talentlink.schemas.schemas import ApplicationStatus, ConnectionStatus

APPLICATION_TRANSITIONS: Dict[str, Set[str]] = {
    ApplicationStatus.pending.value: {
        ApplicationStatus.reviewed.value,
        ApplicationStatus.accepted.value,
        ApplicationStatus.rejected.value,
    },
    ApplicationStatus.reviewed.value: {
        ApplicationStatus.accepted.value,
        ApplicationStatus.rejected.value,
    },
    ApplicationStatus.accepted.value: set(),
    ApplicationStatus.rejected.value: set(),
}

CONNECTION_TRANSITIONS: Dict[str, Set[str]] = {
    ConnectionStatus.pending.value: {
        ConnectionStatus.accepted.value,
        ConnectionStatus.rejected.value,
    },
    ConnectionStatus.accepted.value: set(),
    ConnectionStatus.rejected.value: set(),
}


def can_transition(table: Dict[str, Set[str]], current: str, new: str) -> bool:
    return current == new or new in table.get(current, set())
