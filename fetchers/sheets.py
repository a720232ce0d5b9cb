"""
Google Apps Script Fetcher — category list + reel rows kept in a spreadsheet.
Every call is a JSON POST to the one web-app URL, routed by its `action` field.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

import config as cfg

logger = logging.getLogger(__name__)

# Statuses worth a second attempt; anything else non-2xx is final.
RETRY_STATUSES = {429, 500, 502, 503, 504}


class StorageError(Exception):
    """Base for every failed storage call."""


class StorageTimeout(StorageError):
    pass


class StorageUnreachable(StorageError):
    pass


class StorageRejected(StorageError):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class StorageMalformed(StorageError):
    pass


class SheetsClient:
    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        self.url = url if url is not None else cfg.GAS_URL
        self.timeout = timeout if timeout is not None else cfg.STORAGE_TIMEOUT
        self.retries = retries if retries is not None else cfg.STORAGE_RETRIES
        self.retry_delay = retry_delay if retry_delay is not None else cfg.STORAGE_RETRY_DELAY

    # ── Public calls ───────────────────────────────────────────────────────────

    async def get_categories(self) -> List[str]:
        data = await self._post({"action": "getCategories"})
        if not isinstance(data, dict):
            raise StorageMalformed(f"getCategories: expected an object, got {type(data).__name__}")
        categories = data.get("categories") or []
        if not isinstance(categories, list):
            raise StorageMalformed("getCategories: 'categories' is not a list")
        names = [str(c).strip() for c in categories if c is not None]
        return [n for n in names if n]

    async def add_category(self, name: str):
        await self._post({"action": "addCategory", "category": name})

    async def save_reel(self, category: str, reel_url: str, use_case: str, extra_link: str):
        await self._post({
            "action":    "saveReel",
            "category":  category,
            "reelUrl":   reel_url,
            "useCase":   use_case,
            "extraLink": extra_link,
        })

    # ── Transport ──────────────────────────────────────────────────────────────

    async def _post(self, payload: Dict[str, Any]) -> Any:
        action = payload["action"]
        attempts = 1 + max(self.retries, 0)
        for attempt in range(1, attempts + 1):
            try:
                return await self._post_once(payload)
            except (StorageTimeout, StorageUnreachable) as e:
                error = e
            except StorageRejected as e:
                if e.status not in RETRY_STATUSES:
                    logger.error(f"GAS {action} rejected: {e}")
                    raise
                error = e
            except StorageMalformed as e:
                logger.error(f"GAS {action} malformed response: {e}")
                raise

            if attempt < attempts:
                logger.warning(
                    f"GAS {action} failed ({type(error).__name__}: {error}), "
                    f"retry {attempt}/{attempts - 1} in {self.retry_delay}s"
                )
                await asyncio.sleep(self.retry_delay)

        logger.error(f"GAS {action} failed after {attempts} attempt(s): {error}")
        raise error

    async def _post_once(self, payload: Dict[str, Any]) -> Any:
        action = payload["action"]
        try:
            async with aiohttp.ClientSession() as s:
                async with s.post(
                    self.url,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as r:
                    if not 200 <= r.status < 300:
                        raise StorageRejected(f"{action}: HTTP {r.status}", status=r.status)
                    try:
                        # Apps Script answers with text/plain, so skip the content-type check
                        data = await r.json(content_type=None)
                    except ValueError as e:
                        raise StorageMalformed(f"{action}: response is not JSON") from e
        except asyncio.TimeoutError as e:
            raise StorageTimeout(f"{action}: no response within {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise StorageUnreachable(f"{action}: {e}") from e

        if isinstance(data, dict) and (data.get("error") or data.get("status") == "error"):
            reason = data.get("error") or data.get("message") or "error status"
            raise StorageRejected(f"{action}: {reason}", status=r.status)
        return data
