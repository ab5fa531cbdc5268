from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus, RequestType
from .model import LeaveRequest


class RequestRepository(Protocol):
    def get(self, request_id: str) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(self, request: LeaveRequest) -> LeaveRequest:
        raise NotImplementedError

    def save(self, request: LeaveRequest, *, expected_status: RequestStatus) -> LeaveRequest:
        """Update the request only if its stored status is still `expected_status`.

        Raises ConcurrentModification otherwise; this is what stops a second
        approval from re-applying a ledger debit.
        """

        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[RequestStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        """Newest first."""

        raise NotImplementedError

    def find_covering(
        self,
        employee_id: str,
        work_date: date,
        *,
        request_type: RequestType,
        status: RequestStatus,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError
