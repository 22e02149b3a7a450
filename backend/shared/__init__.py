"""
Shared module for configuration and infrastructure used by the REST API and CLI.

STRUCTURE:
- shared.infrastructure: Database and request plumbing
  - db.py: SQLAlchemy engine and sessions, get_db(), transactional()
  - correlation.py: Request ID middleware and log filter

- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Order/table/reservation statuses, transitions, limits

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Input sanitization, UTC helpers
  - schemas.py: Pydantic request/response schemas

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, transactional
    from shared.config.settings import settings
    from shared.config.constants import OrderStatus, ORDER_TRANSITIONS
    from shared.utils.exceptions import NotFoundError, ValidationError
    from shared.utils.schemas import CreateOrderRequest
"""
