"""
pricing.py - CoinGecko spot quotes for withdrawal conversion.
Quotes are cached in Redis for PRICE_CACHE_SECONDS; a Redis outage only disables the cache.
"""
import logging
from decimal import Decimal

import httpx
from redis.exceptions import RedisError

from storefront.config import settings
from storefront.core.redis import get_redis

logger = logging.getLogger(__name__)

COINGECKO_IDS = {"XMR": "monero"}


class PriceUnavailable(Exception):
    pass


async def _cached(key: str):
    try:
        redis = await get_redis()
        return await redis.get(key)
    except RedisError as e:
        logger.warning("[Price] cache read failed: %s", e)
        return None


async def _store(key: str, value: str) -> None:
    try:
        redis = await get_redis()
        await redis.set(key, value, ex=settings.PRICE_CACHE_SECONDS)
    except RedisError as e:
        logger.warning("[Price] cache write failed: %s", e)


async def fetch_price(currency: str, vs_currency: str = "eur") -> Decimal:
    """Current price of one unit of `currency` in `vs_currency`."""
    coin_id = COINGECKO_IDS.get(currency.upper())
    if not coin_id:
        raise PriceUnavailable(f"Unknown currency: {currency}")

    cache_key = f"price:{coin_id}:{vs_currency}"
    cached = await _cached(cache_key)
    if cached:
        return Decimal(cached)

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            r = await client.get(
                f"{settings.COINGECKO_BASE_URL}/simple/price",
                params={"ids": coin_id, "vs_currencies": vs_currency},
            )
            r.raise_for_status()
            data = r.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error("[Price] CoinGecko request failed for %s: %s", coin_id, e)
        raise PriceUnavailable(str(e)) from e

    price = (data.get(coin_id) or {}).get(vs_currency)
    if not price:
        raise PriceUnavailable(f"No {vs_currency} quote for {coin_id}")

    logger.info("[Price] %s/%s = %s", coin_id, vs_currency, price)
    await _store(cache_key, str(price))
    return Decimal(str(price))
