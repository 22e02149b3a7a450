"""
Services module for business logic.

- domain/: Application services (order lifecycle, inventory ledger,
  table occupancy and availability)

Usage:
    from rest_api.services.domain import InventoryService
    service = InventoryService(db)
    alerts = service.get_low_stock_alerts()
"""
