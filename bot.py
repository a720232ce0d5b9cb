"""
ReelSaver — aiohttp liveness routes.
Render's health checks (and uptime pingers) hit these so the service stays
alive; the same routes are mounted in webhook mode next to the webhook POST.
"""
import logging
from aiohttp import web
import config as cfg

logger = logging.getLogger(__name__)

# ── Web routes ────────────────────────────────────────────────────────────────
ReelSaver_Web = web.RouteTableDef()


@ReelSaver_Web.get("/", allow_head=True)
async def root_handler(request):
    return web.Response(text="Bot is running ✅", content_type="text/plain")


@ReelSaver_Web.get("/health", allow_head=True)
async def health_handler(request):
    return web.json_response({"status": "ok", "mode": cfg.MODE})


def build_web_app() -> web.Application:
    app = web.Application()
    app.add_routes(ReelSaver_Web)
    return app


async def web_server(app: web.Application = None) -> web.AppRunner:
    """Serve `app` (liveness routes by default) on cfg.PORT; caller cleans up the runner."""
    runner = web.AppRunner(app or build_web_app())
    await runner.setup()

    site = web.TCPSite(runner, host="0.0.0.0", port=cfg.PORT)
    await site.start()
    logger.info(f"🌐 Web server running on port {cfg.PORT}")
    return runner
