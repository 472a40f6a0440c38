from redis.asyncio import Redis

RedisClient = Redis


def create_redis_client(redis_url: str, health_check_interval: int = 30) -> RedisClient:
    """Build the process-wide client. No connection is opened until the first command."""
    return Redis.from_url(
        redis_url,
        decode_responses=True,
        health_check_interval=health_check_interval,
    )


async def close_redis_client(redis_client: RedisClient | None) -> None:
    if redis_client is not None:
        await redis_client.aclose()
