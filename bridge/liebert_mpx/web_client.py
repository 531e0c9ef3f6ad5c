# Liebert MPX Bridge
# Created by Matthew Valancy, Valpatel Software LLC
# Copyright 2026 GPL-3.0 License
# https://github.com/mvalancy/CyberPower-PDU

"""HTTP client for the Liebert MPX web interface with health tracking.

Reads are plain GETs of the device's HTML pages, parsed into typed
records. Writes are form POSTs with HTTP basic credentials; the device
answers a successful post with 200 or a redirect back to the page,
which is not followed.
"""

import asyncio
import logging
import time

import aiohttp

from .commands import (
    BranchCmd,
    PDUCmd,
    ReceptacleCmd,
    command_fields,
    command_path,
    settings_fields,
    settings_path,
)
from .config import Config
from .errors import TransportError
from .html_tree import Element, parse_document
from .pdu_model import (
    PAGE_BRANCH_INFO,
    PAGE_PDU_INFO,
    PAGE_RECEPTACLE_INFO,
    PATH_ACTIVE_ALARMS,
    PATH_RECEPTACLE_LIST,
    BranchInfo,
    BranchSettings,
    Event,
    Location,
    PDUInfo,
    PDUSettings,
    ReceptacleInfo,
    ReceptacleListEntry,
    ReceptacleSettings,
)
from .record_builder import (
    parse_branch_info,
    parse_pdu_info,
    parse_receptacle_info,
)
from .row_parser import parse_events, parse_receptacle_list

logger = logging.getLogger(__name__)


class MPXClient:
    """Async client for one MPX rack PDU web interface."""

    def __init__(self, host: str, username: str = "Liebert",
                 password: str = "Liebert", timeout: float = 10.0):
        self._host = host
        self._auth = aiohttp.BasicAuth(username, password)
        self._timeout = timeout
        self._session: aiohttp.ClientSession | None = None

        # Health tracking
        self._total_gets = 0
        self._failed_gets = 0
        self._total_posts = 0
        self._failed_posts = 0
        self._consecutive_failures = 0
        self._last_success_time: float | None = None
        self._last_error_time: float | None = None
        self._last_error_msg: str | None = None
        self._last_request_duration: float | None = None

    @classmethod
    def from_config(cls, config: Config) -> "MPXClient":
        return cls(config.host, config.username, config.password,
                   config.http_timeout)

    async def __aenter__(self) -> "MPXClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _url(self, path: str) -> str:
        return f"http://{self._host}{path}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            )
        return self._session

    async def close(self):
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def fetch(self, path: str) -> Element:
        """GET a page and return its parsed document tree."""
        url = self._url(path)
        self._total_gets += 1
        start = time.monotonic()
        try:
            async with self._get_session().get(url) as resp:
                if resp.status >= 400:
                    self._failed_gets += 1
                    self._record_failure(f"GET {url}: HTTP {resp.status}")
                    raise TransportError(url, status=resp.status)
                body = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._failed_gets += 1
            self._record_failure(f"GET {url}: {e!r}")
            raise TransportError(url, reason=str(e) or type(e).__name__) from e

        self._last_request_duration = time.monotonic() - start
        self._record_success()
        return parse_document(body)

    async def post_form(self, path: str, fields: list[tuple[str, str]]):
        """POST form fields with basic credentials.

        2xx and 3xx are success; redirects are not followed.
        """
        url = self._url(path)
        self._total_posts += 1
        start = time.monotonic()
        try:
            async with self._get_session().post(
                url, data=fields, auth=self._auth, allow_redirects=False,
            ) as resp:
                status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._failed_posts += 1
            self._record_failure(f"POST {url}: {e!r}")
            raise TransportError(url, reason=str(e) or type(e).__name__) from e

        if not 200 <= status < 400:
            self._failed_posts += 1
            self._record_failure(f"POST {url}: HTTP {status}")
            raise TransportError(url, status=status)

        self._last_request_duration = time.monotonic() - start
        self._record_success()
        logger.info("POST %s -> %d (%s)", path, status,
                    ", ".join(name for name, _ in fields))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_events(self) -> list[Event]:
        return parse_events(await self.fetch(PATH_ACTIVE_ALARMS))

    async def get_receptacles(self) -> list[ReceptacleListEntry]:
        return parse_receptacle_list(await self.fetch(PATH_RECEPTACLE_LIST))

    async def get_info_pdu(self, pdu: int) -> PDUInfo:
        doc = await self.fetch(Location(pdu).page(PAGE_PDU_INFO))
        return parse_pdu_info(doc)

    async def get_info_branch(self, pdu: int, branch: int) -> BranchInfo:
        doc = await self.fetch(Location(pdu, branch).page(PAGE_BRANCH_INFO))
        return parse_branch_info(doc)

    async def get_info_receptacle(self, pdu: int, branch: int,
                                  receptacle: int) -> ReceptacleInfo:
        location = Location(pdu, branch, receptacle)
        doc = await self.fetch(location.page(PAGE_RECEPTACLE_INFO))
        return parse_receptacle_info(doc)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def pdu_command(self, pdu: int, cmd: PDUCmd):
        await self.post_form(command_path(cmd, Location(pdu)),
                             command_fields(cmd))

    async def branch_command(self, pdu: int, branch: int, cmd: BranchCmd):
        await self.post_form(command_path(cmd, Location(pdu, branch)),
                             command_fields(cmd))

    async def receptacle_command(self, pdu: int, branch: int,
                                 receptacle: int, cmd: ReceptacleCmd):
        location = Location(pdu, branch, receptacle)
        await self.post_form(command_path(cmd, location), command_fields(cmd))

    async def pdu_reset_energy(self, pdu: int):
        await self.pdu_command(pdu, PDUCmd.RESET_ENERGY)

    async def pdu_test_event(self, pdu: int):
        await self.pdu_command(pdu, PDUCmd.TEST_EVENT)

    async def branch_reset_energy(self, pdu: int, branch: int):
        await self.branch_command(pdu, branch, BranchCmd.RESET_ENERGY)

    async def receptacle_identify(self, pdu: int, branch: int, receptacle: int):
        await self.receptacle_command(pdu, branch, receptacle,
                                      ReceptacleCmd.IDENTIFY)

    async def receptacle_reboot(self, pdu: int, branch: int, receptacle: int):
        await self.receptacle_command(pdu, branch, receptacle,
                                      ReceptacleCmd.REBOOT)

    async def receptacle_enable(self, pdu: int, branch: int, receptacle: int):
        await self.receptacle_command(pdu, branch, receptacle,
                                      ReceptacleCmd.ENABLE)

    async def receptacle_disable(self, pdu: int, branch: int, receptacle: int):
        await self.receptacle_command(pdu, branch, receptacle,
                                      ReceptacleCmd.DISABLE)

    async def receptacle_reset_energy(self, pdu: int, branch: int,
                                      receptacle: int):
        await self.receptacle_command(pdu, branch, receptacle,
                                      ReceptacleCmd.RESET_ENERGY)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def set_pdu_settings(self, pdu: int, settings: PDUSettings):
        await self.post_form(settings_path(settings, Location(pdu)),
                             settings_fields(settings))

    async def set_branch_settings(self, pdu: int, branch: int,
                                  settings: BranchSettings):
        await self.post_form(settings_path(settings, Location(pdu, branch)),
                             settings_fields(settings))

    async def set_receptacle_settings(self, pdu: int, branch: int,
                                      receptacle: int,
                                      settings: ReceptacleSettings):
        location = Location(pdu, branch, receptacle)
        await self.post_form(settings_path(settings, location),
                             settings_fields(settings))

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def get_health(self) -> dict:
        """Return HTTP connection health metrics."""
        return {
            "target": self._host,
            "total_gets": self._total_gets,
            "failed_gets": self._failed_gets,
            "total_posts": self._total_posts,
            "failed_posts": self._failed_posts,
            "consecutive_failures": self._consecutive_failures,
            "last_success": self._last_success_time,
            "last_error": self._last_error_time,
            "last_error_msg": self._last_error_msg,
            "last_request_duration_ms": (
                round(self._last_request_duration * 1000, 1)
                if self._last_request_duration is not None else None
            ),
            "reachable": self._consecutive_failures < 10,
        }

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def _record_success(self):
        self._consecutive_failures = 0
        self._last_success_time = time.time()

    def _record_failure(self, msg: str):
        self._consecutive_failures += 1
        self._last_error_time = time.time()
        self._last_error_msg = msg
        if self._consecutive_failures == 1:
            logger.warning("MPX: %s", msg)
        elif self._consecutive_failures <= 5:
            logger.error("MPX: %s (failure %d)", msg, self._consecutive_failures)
        elif self._consecutive_failures % 30 == 0:
            logger.error(
                "MPX: PDU unreachable for %d consecutive failures: %s",
                self._consecutive_failures, msg,
            )
