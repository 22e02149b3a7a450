"""
Domain Services - application layer.

Services contain the business logic and own their transactions.
Routers stay thin: parse the request, call one service method, shape the output.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Model (entity, SQLAlchemy Session)

Usage:
    from rest_api.services.domain import OrderService

    # In router
    service = OrderService(db)
    order, alerts = service.create_complete_order(table_id, items)
"""

from .recipe_resolver import RecipeResolver, RecipeRequirement
from .inventory_service import InventoryService
from .table_service import TableService
from .availability_service import AvailabilityService
from .order_service import OrderService
from .order_query_service import OrderQueryService

__all__ = [
    "RecipeResolver",
    "RecipeRequirement",
    "InventoryService",
    "TableService",
    "AvailabilityService",
    "OrderService",
    "OrderQueryService",
]
