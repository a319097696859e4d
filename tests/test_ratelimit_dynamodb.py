"""Tests for src/ratelimit/dynamodb_store.py — shared DynamoDB windows."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from src.ratelimit.dynamodb_store import DynamoDBRateLimitStore
from src.ratelimit.models import RateLimitRule

RULE = RateLimitRule(max_requests=3, window_seconds=60)
NOW = 1_700_000_000.0
NOW_MS = int(NOW * 1000)


def _conditional_failure(op: str = "UpdateItem") -> ClientError:
    return ClientError(
        {"Error": {"Code": "ConditionalCheckFailedException", "Message": "failed"}}, op
    )


@pytest.fixture
def mock_table():
    """Mock boto3 DynamoDB Table."""
    return MagicMock()


@pytest.fixture
def store(mock_table):
    """DynamoDBRateLimitStore with pre-injected mock table."""
    s = DynamoDBRateLimitStore(table_name="test-table", region="us-east-1")
    s._table = mock_table
    return s


@pytest.fixture(autouse=True)
def frozen_clock():
    with patch("src.ratelimit.dynamodb_store.time.time", return_value=NOW):
        yield


class TestCheck:

    async def test_increment_in_live_window(self, store, mock_table):
        mock_table.update_item.return_value = {
            "Attributes": {"pk": "weather#1.2.3.4", "window_start": NOW_MS - 10_000, "request_count": 2}
        }

        result = await store.check("weather", "1.2.3.4", RULE)
        assert result.allowed is True
        assert result.remaining == 1
        assert result.reset_seconds == 50.0
        mock_table.put_item.assert_not_called()

        kwargs = mock_table.update_item.call_args.kwargs
        assert kwargs["Key"] == {"pk": "weather#1.2.3.4"}
        assert kwargs["ExpressionAttributeValues"][":max"] == 3
        assert kwargs["ExpressionAttributeValues"][":cutoff"] == NOW_MS - 60_000

    async def test_opens_fresh_window(self, store, mock_table):
        mock_table.update_item.side_effect = _conditional_failure()

        result = await store.check("weather", "1.2.3.4", RULE)
        assert result.allowed is True
        assert result.remaining == 2

        item = mock_table.put_item.call_args.kwargs["Item"]
        assert item["window_start"] == NOW_MS
        assert item["request_count"] == 1
        assert item["expires_at"] > NOW

    async def test_full_window_rejected(self, store, mock_table):
        mock_table.update_item.side_effect = _conditional_failure()
        mock_table.put_item.side_effect = _conditional_failure("PutItem")
        mock_table.get_item.return_value = {
            "Item": {"window_start": NOW_MS - 30_000, "request_count": 3}
        }

        result = await store.check("weather", "1.2.3.4", RULE)
        assert result.allowed is False
        assert result.remaining == 0
        assert result.reset_seconds == 30.0
        # increment and put are each attempted twice before giving up
        assert mock_table.update_item.call_count == 2
        assert mock_table.put_item.call_count == 2

    async def test_race_with_other_instance(self, store, mock_table):
        """Another instance opens the window between our increment and put."""
        mock_table.update_item.side_effect = [
            _conditional_failure(),
            {"Attributes": {"window_start": NOW_MS, "request_count": 2}},
        ]
        mock_table.put_item.side_effect = _conditional_failure("PutItem")

        result = await store.check("weather", "1.2.3.4", RULE)
        assert result.allowed is True
        assert result.remaining == 1

    async def test_other_client_errors_propagate(self, store, mock_table):
        mock_table.update_item.side_effect = ClientError(
            {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow"}},
            "UpdateItem",
        )
        with pytest.raises(ClientError):
            await store.check("weather", "1.2.3.4", RULE)


class TestReset:

    async def test_reset_deletes_item(self, store, mock_table):
        await store.reset("flights", "1.2.3.4")
        mock_table.delete_item.assert_called_once_with(Key={"pk": "flights#1.2.3.4"})


class TestLazyInit:

    def test_table_is_none_initially(self):
        store = DynamoDBRateLimitStore(table_name="t", region="us-east-1")
        assert store._table is None

    @patch("boto3.resource")
    def test_table_created_on_first_use(self, mock_resource):
        mock_dynamodb = MagicMock()
        mock_resource.return_value = mock_dynamodb

        store = DynamoDBRateLimitStore(table_name="limits", region="eu-west-1")
        store._get_table()

        mock_resource.assert_called_once_with("dynamodb", region_name="eu-west-1")
        mock_dynamodb.Table.assert_called_once_with("limits")
