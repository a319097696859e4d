"""AWS Lambda entry point.

Mangum translates API Gateway HTTP API (v2) events into ASGI, so the proxy
runs unchanged on Lambda. Each warm container keeps its own in-memory rate
limit windows; set RATE_LIMIT_BACKEND=dynamodb to share them.
"""

from mangum import Mangum

from src.main import app

handler = Mangum(app, lifespan="off")
