from fastapi import HTTPException
from fastapi.responses import ORJSONResponse

from ..models.response import ErrorResponse

TOO_LARGE = 'Request body too large'


class BodySizeLimitMiddleware:
    """
    Reject request bodies above ``max_bytes`` with 413.

    A declared Content-Length is checked up front. Bodies without one (chunked
    uploads) are counted as they are received, and the read fails with a 413
    HTTPException once the running total passes the limit.
    """

    def __init__(self, app, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = dict(scope["headers"]).get(b"content-length", b"")
        if length.isdigit() and int(length) > self.max_bytes:
            response = ORJSONResponse(
                status_code=413,
                content=ErrorResponse(error=TOO_LARGE).model_dump(exclude_none=True)
            )
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise HTTPException(status_code=413, detail=TOO_LARGE)
            return message

        await self.app(scope, limited_receive, send)
