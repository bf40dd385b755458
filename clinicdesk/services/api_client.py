"""
Async REST client for the hospital management backend.

Wraps httpx with bearer-token auth, a single retry against the
``index.php`` base URL on 404, and uniform error translation into
ApiError. Every payload is validated into pydantic models before it is
handed to a screen.
"""

from typing import Any, Callable, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from clinicdesk.config import settings
from clinicdesk.logging_context import get_request_logger
from clinicdesk.schemas.availability_schema import AvailableDatesResponse, AvailableSlot
from clinicdesk.schemas.schedule_schema import DoctorSchedule, DoctorScheduleUpdate
from clinicdesk.schemas.token_schema import Token, TokenStatus

logger = get_request_logger(__name__)

_dates_adapter = TypeAdapter(AvailableDatesResponse)
_slots_adapter = TypeAdapter(list[AvailableSlot])
_schedule_adapter = TypeAdapter(list[DoctorSchedule])
_tokens_adapter = TypeAdapter(list[Token])
_token_adapter = TypeAdapter(Token)


class ApiError(Exception):
    """Raised for any failed backend call."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnauthorizedError(ApiError):
    """Raised on HTTP 401; the stored token has already been cleared."""


class ApiClient:
    """Backend client shared by all screens."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        base_url_with_index: Optional[str] = None,
        token: Optional[str] = None,
        timeout_sec: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.api.base_url).rstrip("/")
        self.base_url_with_index = (
            base_url_with_index or settings.api.base_url_with_index
        ).rstrip("/")
        self.token = token if token is not None else settings.api.token
        self._on_unauthorized: Optional[Callable[[], None]] = None
        self._client = httpx.AsyncClient(
            timeout=timeout_sec or settings.api.timeout_sec,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def set_token(self, token: str) -> None:
        self.token = token

    def clear_token(self) -> None:
        self.token = None

    def set_on_unauthorized(self, callback: Callable[[], None]) -> None:
        self._on_unauthorized = callback

    def _handle_unauthorized(self) -> None:
        self.clear_token()
        if self._on_unauthorized is not None:
            self._on_unauthorized()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            UnauthorizedError: On HTTP 401.
            ApiError: On any other non-2xx status or transport failure.
        """
        params = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            response = await self._client.request(
                method, f"{self.base_url}{endpoint}",
                params=params, json=json, headers=self._headers(),
            )
            if response.status_code == 404:
                logger.debug("404 for %s, retrying with index.php base", endpoint)
                response = await self._client.request(
                    method, f"{self.base_url_with_index}{endpoint}",
                    params=params, json=json, headers=self._headers(),
                )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, endpoint, exc)
            raise ApiError("Network error occurred") from exc

        if response.status_code == 401:
            self._handle_unauthorized()
            raise UnauthorizedError("Session expired. Please login again.", 401)

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            if response.is_error:
                raise ApiError(
                    f"HTTP error! status: {response.status_code}, message: {response.text}",
                    response.status_code,
                )
            return {}

        try:
            data = response.json()
        except ValueError as exc:
            raise ApiError("Invalid JSON response", response.status_code) from exc
        if response.is_error:
            message = data.get("message") if isinstance(data, dict) else None
            raise ApiError(
                message or f"API Error: {response.reason_phrase}", response.status_code
            )
        return data

    @staticmethod
    def _unwrap(data: Any) -> Any:
        """Strip the ``{success, data}`` envelope when present."""
        if isinstance(data, dict) and "data" in data:
            return data["data"]
        return data

    @staticmethod
    def _validate(adapter: TypeAdapter, payload: Any, what: str) -> Any:
        try:
            return adapter.validate_python(payload)
        except ValidationError as exc:
            logger.warning("Malformed %s payload: %s", what, exc)
            raise ApiError(f"Malformed {what} response") from exc

    # ------------------------------------------------------------------ #
    # Appointments availability
    # ------------------------------------------------------------------ #

    async def get_doctor_available_dates(self, doctor_id: int, month: str) -> AvailableDatesResponse:
        """Month aggregates; ``month`` is ``YYYY-MM``."""
        data = await self.request(
            "GET", f"/api/appointments/doctor/{doctor_id}/available-dates",
            params={"month": month},
        )
        payload = self._unwrap(data) or {}
        return self._validate(_dates_adapter, payload, "available dates")

    async def get_available_slots(
        self, doctor_id: int, date: str, duration: Optional[int] = None
    ) -> list[AvailableSlot]:
        data = await self.request(
            "GET", f"/api/appointments/doctor/{doctor_id}/slots",
            params={"date": date, "duration": duration},
        )
        payload = self._unwrap(data)
        if not isinstance(payload, list):
            return []
        return self._validate(_slots_adapter, payload, "slots")

    # ------------------------------------------------------------------ #
    # Doctor schedule
    # ------------------------------------------------------------------ #

    async def get_doctor_schedule(self, doctor_id: int) -> list[DoctorSchedule]:
        data = await self.request("GET", f"/api/doctors/{doctor_id}/schedule")
        payload = self._unwrap(data) or []
        return self._validate(_schedule_adapter, payload, "schedule")

    async def update_doctor_schedule(
        self, doctor_id: int, schedule: list[DoctorSchedule]
    ) -> list[DoctorSchedule]:
        body = DoctorScheduleUpdate(schedule=schedule).model_dump(mode="json")
        data = await self.request("PUT", f"/api/doctors/{doctor_id}/schedule", json=body)
        payload = self._unwrap(data) or []
        return self._validate(_schedule_adapter, payload, "schedule")

    # ------------------------------------------------------------------ #
    # Token queue
    # ------------------------------------------------------------------ #

    async def get_token_queue(self, reception_id: int, date: Optional[str] = None) -> list[Token]:
        data = await self.request(
            "GET", f"/api/tokens/queue/{reception_id}", params={"date": date}
        )
        payload = self._unwrap(data) or []
        return self._validate(_tokens_adapter, payload, "token queue")

    async def update_token_status(self, token_id: int, status: TokenStatus) -> Optional[Token]:
        data = await self.request(
            "PUT", f"/api/tokens/{token_id}/status", json={"status": status.value}
        )
        payload = self._unwrap(data)
        if not payload:
            return None
        return self._validate(_token_adapter, payload, "token")
