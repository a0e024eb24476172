from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from storefront.database import get_db
from storefront.core.deps import CurrentUser, require_admin
from storefront.models.news import News
from storefront.schemas.news import NewsCreate

router = APIRouter(prefix="/api/news", tags=["news"])


def _news_dict(n: News) -> dict:
    return {
        "id": n.id,
        "content": n.content,
        "author_id": n.author_id,
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }


@router.get("")
async def list_news(limit: int = Query(20, ge=1, le=100), db: AsyncSession = Depends(get_db)):
    news = await db.scalars(select(News).order_by(News.created_at.desc(), News.id.desc()).limit(limit))
    return {"success": True, "news": [_news_dict(n) for n in news]}


@router.post("", status_code=201)
async def publish_news(
    body: NewsCreate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Publish a news entry. Content is stored as written (markdown)."""
    if not body.content.strip():
        raise HTTPException(400, "Content is required")
    news = News(content=body.content, author_id=admin.id)
    db.add(news)
    await db.commit()
    await db.refresh(news)
    return {"success": True, "news": _news_dict(news)}
