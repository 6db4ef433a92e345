# storefront/routes/logs.py
from datetime import datetime, time
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.log import Log
from storefront.models.users import User
from storefront.schemas.log import LogEntry, LogPage
from storefront.utils.pagination import normalize_paging, page_meta
from storefront.utils.tokenJWT import admin_required

router = APIRouter(prefix="/api/admin/logs", tags=["Logs"])


def _parse_bound(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """Parse an ISO date or datetime; a bare date expands to the start or end of that day."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if end_of_day and len(value) == 10:
        parsed = datetime.combine(parsed.date(), time.max)
    return parsed


# Audit trail, newest first
@router.get("", response_model=LogPage)
def get_logs(
    page: Optional[str] = Query("1"),
    limit: Optional[str] = Query("20"),
    action: Optional[str] = Query(None, description="Event name, e.g. ORDER_CREATE"),
    user_id: Optional[int] = Query(None, description="Acting user id"),
    resource: Optional[str] = Query(None, description="cart, orders, promos, ..."),
    status: Optional[str] = Query(None, description="SUCCESS or FAIL"),
    date_from: Optional[str] = Query(None, description="From date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, description="To date (YYYY-MM-DD), inclusive"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    page_no, page_size = normalize_paging(page, limit, max_limit=100, default_limit=20)
    query = db.query(Log)

    if action:
        query = query.filter(Log.action == action.strip().upper())
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)
    if resource:
        query = query.filter(Log.resource == resource.strip().lower())
    if status:
        query = query.filter(Log.status == status.strip().upper())

    # Malformed dates are ignored
    start = _parse_bound(date_from)
    if start:
        query = query.filter(Log.ts >= start)
    end = _parse_bound(date_to, end_of_day=True)
    if end:
        query = query.filter(Log.ts <= end)

    total = query.count()
    rows = (query
            .order_by(Log.ts.desc(), Log.id.desc())
            .offset((page_no - 1) * page_size)
            .limit(page_size)
            .all())

    data = [
        LogEntry(
            id=row.id, ts=row.ts, user_id=row.user_id,
            user_email=row.user.email if row.user else None,
            action=row.action, resource=row.resource, status=row.status,
            ip=row.ip, meta=row.meta,
        )
        for row in rows
    ]
    return {"data": data, "meta": page_meta(total, page_no, page_size)}
