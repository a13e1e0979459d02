"""
ORM models for the workshop: customers and vehicles, the parts/service
catalog, workers, and work orders with their line items, assignments and logs.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .customers import (  # noqa: F401
    Customer,
    Vehicle,
)
from .catalog import (  # noqa: F401
    InventoryItem,
    ServiceItem,
)
from .workforce import (  # noqa: F401
    Worker,
)
from .work_orders import (  # noqa: F401
    WorkOrder,
    WorkOrderLineItem,
    WorkOrderAssignment,
    WorkOrderLog,
)
