# barberbook/exceptions.py

from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class BarberBookError(Exception):
    """Base error for failures raised below the route layer."""

    def __init__(
        self,
        message: str,
        code: str = "BARBERBOOK_ERROR",
        status_code: int = 500,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"error": self.code, "detail": self.message}
        if self.details:
            result["details"] = self.details
        return result


class FlowError(BarberBookError):
    """An AI flow could not produce valid output."""

    def __init__(self, flow: str, message: str, status_code: int = 502):
        super().__init__(
            message=message,
            code="FLOW_ERROR",
            status_code=status_code,
            details={"flow": flow},
        )


class MapsError(BarberBookError):
    """A Google Maps / ViaCEP request failed."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message=message, code="MAPS_ERROR", status_code=status_code)


class NotConfiguredError(BarberBookError):
    def __init__(self, what: str):
        super().__init__(
            message=f"{what} is not configured",
            code="NOT_CONFIGURED",
            status_code=503,
        )


class InvalidTransitionError(BarberBookError):
    """Appointment status change not allowed from the current status."""

    def __init__(self, current: str, target: str):
        super().__init__(
            message=f"Cannot change appointment from '{current}' to '{target}'",
            code="INVALID_TRANSITION",
            status_code=409,
            details={"current": current, "target": target},
        )


async def barberbook_exception_handler(request: Request, exc: BarberBookError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
