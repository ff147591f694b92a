"""Identity service adapter — implements TechnicianDirectory."""

from __future__ import annotations

import logging

import httpx

from app.application.ports.technician_directory import TechnicianDirectory
from app.config import settings
from app.domain.entities.technician import TechnicianInfo
from app.domain.errors import TechnicianNotFoundError

logger = logging.getLogger(__name__)


class IdentityServiceUnavailable(Exception):
    """The directory could not give a usable answer."""


class IdentityServiceClient(TechnicianDirectory):
    """Looks technicians up via ``GET {base_url}/api/users/{id}``.

    When the service cannot be reached, ``fail_open`` decides the outcome:
    proceed with a warning, or refuse the technician.
    """

    def __init__(
        self,
        base_url: str | None = None,
        enabled: bool | None = None,
        fail_open: bool | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = (base_url or settings.identity_service_url).rstrip("/")
        self._enabled = settings.identity_validation_enabled if enabled is None else enabled
        self._fail_open = settings.identity_fail_open if fail_open is None else fail_open
        self._timeout = timeout or settings.identity_service_timeout
        self._transport = transport

    async def validate(self, technician_id: int) -> None:
        if not self._enabled:
            logger.debug("Technician validation disabled, skipping %s", technician_id)
            return

        logger.info("Validating technician %s against %s", technician_id, self._base_url)
        try:
            info = await self._fetch(technician_id)
        except IdentityServiceUnavailable as e:
            if self._fail_open:
                logger.warning(
                    "Identity service unavailable (fail-open), proceeding without "
                    "validation for technician %s: %s", technician_id, e,
                )
                return
            logger.warning(
                "Identity service unavailable (fail-closed), blocking technician %s: %s",
                technician_id, e,
            )
            raise TechnicianNotFoundError(
                technician_id, TechnicianNotFoundError.UNAVAILABLE
            ) from e

        if info is None:
            logger.warning("Technician %s not found in identity service", technician_id)
            raise TechnicianNotFoundError(technician_id)
        if info.role is not None and not info.is_technician():
            logger.warning("User %s has role %s, not a technician", technician_id, info.role)
            raise TechnicianNotFoundError(technician_id)
        if not info.is_active():
            logger.warning("Technician %s is not active (status: %s)", technician_id, info.status)
            raise TechnicianNotFoundError(technician_id, TechnicianNotFoundError.NOT_ACTIVE)

        logger.info("Technician %s validated: %s (%s)", technician_id, info.name, info.status)

    async def get_info(self, technician_id: int) -> TechnicianInfo | None:
        if not self._enabled:
            return None
        try:
            return await self._fetch(technician_id)
        except IdentityServiceUnavailable as e:
            logger.warning("Error fetching technician info for %s: %s", technician_id, e)
            return None

    async def _fetch(self, technician_id: int) -> TechnicianInfo | None:
        """Returns None on 404; raises IdentityServiceUnavailable otherwise."""
        url = f"{self._base_url}/api/users/{technician_id}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            raise IdentityServiceUnavailable(f"{type(e).__name__}: {e}") from e

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise IdentityServiceUnavailable(f"HTTP {response.status_code}")

        try:
            data = response.json()
            return TechnicianInfo(
                id=int(data.get("id", technician_id)),
                name=data.get("name") or "",
                status=str(data.get("status") or ""),
                role=data.get("role"),
            )
        except (ValueError, TypeError, AttributeError) as e:
            raise IdentityServiceUnavailable(f"Malformed response: {e}") from e
