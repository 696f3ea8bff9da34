"""Live attendance notifications over Redis pub/sub."""
import json
from typing import Dict
import redis
from flask import current_app

class NotificationService:
    """Publishes session and scan events for live dashboards.

    Publishing is skipped when no ``REDIS_URL`` is configured.
    """

    _clients: Dict[str, redis.Redis] = {}

    @classmethod
    def _client(cls, url: str) -> redis.Redis:
        if url not in cls._clients:
            cls._clients[url] = redis.Redis.from_url(url)
        return cls._clients[url]

    @classmethod
    def publish(cls, event: str, payload: Dict) -> bool:
        """Publish an event; returns False when disabled or Redis is unreachable."""
        url = current_app.config.get('REDIS_URL')
        if not url:
            return False

        message = json.dumps({'event': event, 'data': payload}, default=str)
        channel = current_app.config.get('NOTIFICATION_CHANNEL', 'edusync:attendance')
        try:
            cls._client(url).publish(channel, message)
        except redis.RedisError as e:
            current_app.logger.warning('Notification %s not delivered: %s', event, e)
            return False
        return True
