"""
Top-level router of the API.

Aggregates the domain routers.  ``create_app`` mounts it under ``/api``;
when a new domain is added, include its router here.
"""

from fastapi import APIRouter

from .endpoints import (
    activity,
    comments,
    customers,
    file_activity,
    health,
    orders,
    products,
    reports,
    services,
    tasks,
    tickets,
    users,
)

router = APIRouter()

router.include_router(health.router, tags=["health"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(products.router, prefix="/products", tags=["products"])
router.include_router(orders.router, prefix="/orders", tags=["orders"])
router.include_router(services.router, prefix="/services", tags=["services"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])
router.include_router(customers.router, prefix="/customers", tags=["customers"])
router.include_router(reports.router, prefix="/reports", tags=["reports"])
router.include_router(activity.router, prefix="/activity", tags=["activity"])
router.include_router(file_activity.router, prefix="/file-activity", tags=["activity"])
router.include_router(comments.router, prefix="/comments", tags=["comments"])
