"""DynamoDB-backed rate limit store shared across server instances.

Table layout: partition key ``pk`` (``"<route>#<client key>"``) with
``window_start`` (epoch ms), ``request_count`` and ``expires_at`` (epoch s,
for DynamoDB TTL) attributes. Increments are conditional writes, so
concurrent instances never push a window past its maximum.
"""

import asyncio
import time

from src.ratelimit.models import RateLimitResult, RateLimitRule
from src.ratelimit.store import RateLimitStore

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


class DynamoDBRateLimitStore(RateLimitStore):
    """Fixed windows stored as one DynamoDB item per (route, client key)."""

    def __init__(self, table_name: str, region: str = "us-east-1"):
        self._table_name = table_name
        self._region = region
        self._table = None

    def _get_table(self):
        """Lazy-init boto3 Table resource."""
        if self._table is None:
            import boto3

            dynamodb = boto3.resource("dynamodb", region_name=self._region)
            self._table = dynamodb.Table(self._table_name)
        return self._table

    async def check(self, route: str, client_key: str, rule: RateLimitRule) -> RateLimitResult:
        return await asyncio.to_thread(self._check_sync, route, client_key, rule)

    async def reset(self, route: str, client_key: str) -> None:
        await asyncio.to_thread(
            self._get_table().delete_item, Key={"pk": _partition_key(route, client_key)}
        )

    def _check_sync(self, route: str, client_key: str, rule: RateLimitRule) -> RateLimitResult:
        now_ms = int(time.time() * 1000)
        window_ms = int(rule.window_seconds * 1000)
        pk = _partition_key(route, client_key)

        # A second pass covers another instance opening the window between
        # our failed increment and our failed put.
        for _ in range(2):
            item = self._increment(pk, now_ms, window_ms, rule.max_requests)
            if item is not None:
                return _result(True, rule, int(item["request_count"]), int(item["window_start"]), now_ms)
            if self._open_window(pk, now_ms, window_ms):
                return _result(True, rule, 1, now_ms, now_ms)

        item = self._get_table().get_item(Key={"pk": pk}, ConsistentRead=True).get("Item", {})
        return _result(
            False,
            rule,
            int(item.get("request_count", rule.max_requests)),
            int(item.get("window_start", now_ms)),
            now_ms,
        )

    def _increment(self, pk: str, now_ms: int, window_ms: int, max_requests: int) -> dict | None:
        """Count a request in the live window, or return None if there is no
        live window or it is already full."""
        from botocore.exceptions import ClientError

        try:
            resp = self._get_table().update_item(
                Key={"pk": pk},
                UpdateExpression="SET request_count = request_count + :one",
                ConditionExpression="window_start > :cutoff AND request_count < :max",
                ExpressionAttributeValues={
                    ":one": 1,
                    ":cutoff": now_ms - window_ms,
                    ":max": max_requests,
                },
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") != CONDITIONAL_CHECK_FAILED:
                raise
            return None
        return resp["Attributes"]

    def _open_window(self, pk: str, now_ms: int, window_ms: int) -> bool:
        """Start a fresh window unless a live one exists."""
        from botocore.exceptions import ClientError

        try:
            self._get_table().put_item(
                Item={
                    "pk": pk,
                    "window_start": now_ms,
                    "request_count": 1,
                    "expires_at": (now_ms + window_ms) // 1000 + 1,
                },
                ConditionExpression="attribute_not_exists(pk) OR window_start <= :cutoff",
                ExpressionAttributeValues={":cutoff": now_ms - window_ms},
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") != CONDITIONAL_CHECK_FAILED:
                raise
            return False
        return True


def _partition_key(route: str, client_key: str) -> str:
    return f"{route}#{client_key}"


def _result(allowed: bool, rule: RateLimitRule, count: int, started_ms: int, now_ms: int) -> RateLimitResult:
    reset = max(0.0, (started_ms + rule.window_seconds * 1000 - now_ms) / 1000)
    return RateLimitResult(
        allowed=allowed,
        limit=rule.max_requests,
        remaining=max(0, rule.max_requests - count),
        reset_seconds=round(reset, 1),
    )
