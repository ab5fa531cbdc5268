from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Employee]:
        raise NotImplementedError

    def save(self, employee: Employee) -> Employee:
        """Persist `employee` if the stored version still equals `employee.version`.

        Returns the stored entity with its bumped version; raises
        ConcurrentModification when another writer got there first.
        """

        raise NotImplementedError
