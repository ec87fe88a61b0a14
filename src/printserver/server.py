"""HTTP server for receipt printing requests from the POS front end."""

import logging
from typing import Awaitable, Callable, Optional

from aiohttp import web

from config.settings import Settings
from printserver.printing.manager import PrintManager, PrintStatus

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@web.middleware
async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Allow browser POS clients from any origin."""
    if request.method == "OPTIONS":
        return web.Response(status=200, headers=CORS_HEADERS)
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        exc.headers.update(CORS_HEADERS)
        raise
    response.headers.update(CORS_HEADERS)
    return response


class PrintServer:
    """aiohttp application exposing the print manager."""

    def __init__(self, settings: Settings, manager: Optional[PrintManager] = None):
        self.settings = settings
        self.manager = manager or PrintManager(settings)
        self.app = web.Application(middlewares=[cors_middleware])
        self._setup_routes()
        self._runner: Optional[web.AppRunner] = None

    def _setup_routes(self) -> None:
        """Setup HTTP routes."""
        self.app.router.add_get("/", self._handle_status)
        self.app.router.add_post("/print-server", self._handle_print)

    async def _handle_status(self, request: web.Request) -> web.Response:
        """Health check."""
        return web.json_response({"message": "Server running successfully!"})

    async def _handle_print(self, request: web.Request) -> web.Response:
        """Render and print one receipt."""
        try:
            payload = await request.json()
        except ValueError as e:
            logger.warning(f"Rejected print request with invalid JSON: {e}")
            return web.json_response({"message": "Invalid JSON body", "error": str(e)}, status=400)

        if not isinstance(payload, dict):
            return web.json_response({"message": "Request body must be a JSON object"}, status=400)

        result = await self.manager.handle(payload)
        return web.json_response(result.to_dict(), status=self._status_code(result.status))

    def _status_code(self, status: PrintStatus) -> int:
        if not self.settings.server.strict_status_codes:
            return 200
        return {
            PrintStatus.PRINTED: 200,
            PrintStatus.CONFIG_ERROR: 400,
            PrintStatus.FAILED: 500,
        }[status]

    async def start(self) -> None:
        """Start the web server."""
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.settings.server.host, self.settings.server.port)
        await site.start()
        logger.info(f"Server is running at http://localhost:{self.settings.server.port}")

    async def stop(self) -> None:
        """Stop the web server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Print server stopped")
