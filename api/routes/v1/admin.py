"""
api/routes/v1/admin.py -- Role-gated views for analysts and admins.

Routes (mounted under /api/v1):
  GET /analyst/reports  -- order counts per status (Analyst+)
  GET /admin/users      -- all accounts (Admin only)

Read-only aggregate routes -- no mutations here. The role check uses the
snapshot in the access token (require_role), so a demoted user keeps their
old reach until their access token expires.
"""

from fastapi import APIRouter, Depends, Request

from api.models import StatusReportResponse, UserResponse
from auth.dependencies import require_role
from auth.roles import Role
from auth.store import UserRepository
from orders.service import OrderService

analyst_router = APIRouter(prefix="/analyst", dependencies=[Depends(require_role(Role.analyst))])
admin_router = APIRouter(prefix="/admin", dependencies=[Depends(require_role(Role.admin))])


@analyst_router.get("/reports", response_model=StatusReportResponse)
def order_report(request: Request) -> StatusReportResponse:
    """Return order counts per status across all users."""
    order_service: OrderService = request.app.state.order_service
    counts = order_service.status_report()
    return StatusReportResponse(counts=counts, total=sum(counts.values()))


@admin_router.get("/users", response_model=list[UserResponse])
def list_users(request: Request) -> list[UserResponse]:
    """List every account, ordered by email."""
    user_store: UserRepository = request.app.state.user_store
    return [UserResponse.from_user(u) for u in user_store.list_users()]
