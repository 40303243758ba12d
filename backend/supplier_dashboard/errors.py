# backend/supplier_dashboard/errors.py
from typing import List, Optional


class UpstreamError(RuntimeError):
    """Base class for failures talking to the marketplace backend."""


class UpstreamStatusError(UpstreamError):
    def __init__(self, url: str, status_code: int, body: Optional[str] = None):
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"{url} responded with HTTP {status_code}")


class GraphQLError(UpstreamError):
    """The GraphQL endpoint answered 200 but reported errors in the body."""

    def __init__(self, messages: List[str]):
        self.messages = messages
        super().__init__("; ".join(messages) or "GraphQL query failed")
