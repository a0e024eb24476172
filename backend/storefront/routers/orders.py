from collections import defaultdict
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from storefront.database import get_db
from storefront.core.deps import CurrentUser, get_current_user
from storefront.models.order import Order, OrderItem

router = APIRouter(prefix="/api/orders", tags=["orders"])


def _shipping_address(o: Order) -> str:
    name = " ".join(p for p in (o.shipping_first_name, o.shipping_last_name) if p)
    street = " ".join(p for p in (o.shipping_street, o.shipping_house_number) if p)
    city = " ".join(p for p in (o.shipping_postal_code, o.shipping_city) if p)
    return ", ".join(p for p in (name, street, city, o.shipping_country) if p)


@router.get("")
async def list_orders(user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """Order history for the caller, newest first, with line items."""
    orders = list(await db.scalars(
        select(Order).where(Order.user_id == user.id).order_by(Order.created_at.desc())
    ))
    items_by_order = defaultdict(list)
    if orders:
        items = await db.scalars(
            select(OrderItem).where(OrderItem.order_id.in_([o.id for o in orders]))
        )
        for it in items:
            items_by_order[it.order_id].append({
                "id": it.id,
                "product_id": it.product_id,
                "quantity": it.quantity,
                "price_eur": float(it.price_eur),
            })

    return {
        "success": True,
        "orders": [
            {
                "id": o.id,
                "total_amount_eur": float(o.total_amount_eur),
                "status": o.status,
                "created_at": o.created_at.isoformat() if o.created_at else None,
                "shipping_address": _shipping_address(o),
                "items": items_by_order.get(o.id, []),
            }
            for o in orders
        ],
    }
