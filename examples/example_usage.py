"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the session state machine and the approval
flow live in the services.
"""

import importlib

from config import get_settings_module

from src.attendance_ledger.attendance_ledger.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    print(container.attendance_service.get_state("employee"))
    for record in container.attendance_service.get_history("employee", limit=5):
        print(record.to_record())
    print(container.employee_service.get_balance_snapshot("employee").to_record())


if __name__ == "__main__":
    main()
