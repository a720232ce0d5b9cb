"""
Configuration
━━━━━━━━━━━━━
Reads all values from environment variables.
Copy .env.example → .env and fill in secrets for local dev.
On Render, set env vars in the Dashboard or render.yaml.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# ── Bot Credentials ────────────────────────────────────────────────────────────
BOT_TOKEN = os.getenv("BOT_TOKEN", "")

# ── Access (single Telegram chat allowed to use the bot) ──────────────────────
ALLOWED_CHAT_ID = os.getenv("ALLOWED_CHAT_ID", "").strip()

# ── Google Apps Script storage endpoint ───────────────────────────────────────
GAS_URL             = os.getenv("GAS_URL", "")
STORAGE_TIMEOUT     = float(os.getenv("STORAGE_TIMEOUT",     15))   # seconds
STORAGE_RETRIES     = int(os.getenv("STORAGE_RETRIES",       1))    # extra attempts
STORAGE_RETRY_DELAY = float(os.getenv("STORAGE_RETRY_DELAY", 1.0))  # seconds

# ── Webhook / Server (Render) ─────────────────────────────────────────────────
MODE         = os.getenv("MODE", "polling").lower()   # "webhook" | "polling"
PORT         = int(os.getenv("PORT", 10000))
WEBHOOK_PATH = os.getenv("WEBHOOK_PATH", "/webhook")

# Render sets RENDER_EXTERNAL_URL = https://your-service.onrender.com
_render_host = os.getenv("RENDER_EXTERNAL_URL", "").rstrip("/")
WEBHOOK_URL  = os.getenv("WEBHOOK_URL", f"{_render_host}{WEBHOOK_PATH}" if _render_host else "")

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
