# vetscreen/applications/__init__.py
# ===================================
# Application lifecycle — VetScreen
#
# Public API:
#   - create_application()         — register a pending application
#   - update_application_status()  — completed -> approved | rejected

from vetscreen.applications.service import (  # noqa: F401
    DECISION_STATUSES,
    create_application,
    update_application_status,
)
