"""Tests for src/lambda_handler.py — Mangum adapter."""

from mangum import Mangum

from src.lambda_handler import handler
from src.main import app


class TestLambdaHandler:

    def test_wraps_app(self):
        assert isinstance(handler, Mangum)
        assert handler.app is app
