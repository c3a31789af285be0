import time
import logging
import os

logger = logging.getLogger("ParkLedger.performance")

SLOW_REQUEST_MS = float(os.environ.get("PARKLEDGER_SLOW_REQUEST_MS", "300"))


class PerformanceTracer:
    def __init__(self, app, alert_threshold_ms=SLOW_REQUEST_MS):
        self.app = app
        self.alert_threshold_ms = alert_threshold_ms

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        start_time = time.perf_counter()
        request_path = scope.get("path", "")

        async def send_wrapper(response):
            if response["type"] == "http.response.start":
                duration_ms = (time.perf_counter() - start_time) * 1000
                rounded_duration = round(duration_ms, 2)

                logger.info(
                    "request",
                    extra={"endpoint": request_path, "duration_ms": rounded_duration}
                )

                if duration_ms > self.alert_threshold_ms:
                    logger.warning(
                        f"Slow request detected: {request_path} took {rounded_duration:.2f}ms",
                        extra={"endpoint": request_path, "duration_ms": rounded_duration}
                    )

                headers = list(response.get("headers", []))
                headers.append(
                    (b"x-response-time", f"{rounded_duration:.2f}ms".encode())
                )
                response["headers"] = headers

            await send(response)

        await self.app(scope, receive, send_wrapper)
