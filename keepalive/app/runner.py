import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from .config import Settings
from .errors import ConfigurationMissing, PrimaryCheckFailed, SecondaryCheckFailed
from .history import now_iso

logger = logging.getLogger(__name__)

SOURCE_MANUAL = "manual"
SOURCE_SCHEDULED = "scheduled"


@dataclass
class RunResult:
    success: bool
    messages: List[str] = field(default_factory=list)
    source: str = SOURCE_MANUAL
    failures: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "messages": list(self.messages),
            "source": self.source,
            "failures": list(self.failures),
        }


def _email_of(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return "Unknown"
    user = data.get("user") if isinstance(data, dict) else None
    if isinstance(user, dict) and user.get("email"):
        return str(user["email"])
    return "Unknown"


class KeepAliveRunner:
    """Authenticates against the platform API and optionally pings the app.

    ``transport`` is handed to ``httpx.AsyncClient``; tests pass an
    ``httpx.MockTransport``.
    """

    def __init__(self, cfg: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.cfg = cfg
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self.transport,
            headers={"User-Agent": self.cfg.UA},
            follow_redirects=True,
        )

    async def _check_account(self, client: httpx.AsyncClient) -> str:
        started = time.monotonic()
        try:
            r = await client.get(
                self.cfg.API_URL,
                headers={
                    "Authorization": f"Bearer {self.cfg.KOYEB_TOKEN}",
                    "Content-Type": "application/json",
                },
            )
        except Exception as e:
            raise PrimaryCheckFailed(f"request error: {e}") from e
        elapsed_ms = round((time.monotonic() - started) * 1000)

        self._log_outcome("primary", self.cfg.API_URL, r.status_code, elapsed_ms)
        if not r.is_success:
            raise PrimaryCheckFailed(f"{r.status_code} {r.reason_phrase}", status_code=r.status_code)
        return f"Koyeb API check passed ({elapsed_ms}ms) - user: {_email_of(r)}"

    async def _ping_app(self, client: httpx.AsyncClient, url: str) -> str:
        started = time.monotonic()
        try:
            r = await client.get(url)
        except Exception as e:
            raise SecondaryCheckFailed(str(e) or type(e).__name__) from e
        elapsed_ms = round((time.monotonic() - started) * 1000)
        self._log_outcome("secondary", url, r.status_code, elapsed_ms)
        return f"App ping: {r.status_code} ({elapsed_ms}ms)"

    def _log_outcome(self, check: str, url: str, status: Optional[int], elapsed_ms: int) -> None:
        logger.info(json.dumps({
            "check": check,
            "http": status,
            "elapsed_ms": elapsed_ms,
            "url": url,
        }))

    async def run(self, source: str = SOURCE_MANUAL) -> RunResult:
        ts = now_iso()
        result = RunResult(success=True, source=source)

        if not self.cfg.has_token:
            err = ConfigurationMissing("KOYEB_TOKEN is not configured")
            logger.error(f"Keep-alive aborted: {err}")
            result.success = False
            result.failures.append(err.category)
            result.messages.append(f"[{ts}] ❌ Error: {err}. Set it in the environment.")
            return result

        result.messages.append(f"[{ts}] 🚀 Run started (source: {source})")

        async with self._client() as client:
            try:
                result.messages.append(f"[{ts}] ✅ {await self._check_account(client)}")
            except PrimaryCheckFailed as e:
                logger.warning(f"Primary check failed: {e}")
                result.success = False
                result.failures.append(e.category)
                if e.status_code is None:
                    result.messages.append(f"[{ts}] ❌ Koyeb API {e}")
                else:
                    result.messages.append(f"[{ts}] ❌ Koyeb API failed: {e}")

            if self.cfg.KOYEB_APP_URL:
                try:
                    result.messages.append(f"[{ts}] 🌐 {await self._ping_app(client, self.cfg.KOYEB_APP_URL)}")
                except SecondaryCheckFailed as e:
                    logger.warning(f"App ping failed: {e}")
                    result.failures.append(e.category)
                    result.messages.append(f"[{ts}] ⚠️ App ping failed: {e}")

        logger.info(f"Keep-alive finished (source={source}, success={result.success})")
        return result
