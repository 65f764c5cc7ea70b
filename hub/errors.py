"""Error taxonomy shared by the managers and the API layer."""


class HubError(Exception):
    """Base error; the API renders it as {success: false, error: message}."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(HubError):
    status_code = 400


class NotFound(HubError):
    status_code = 404


class Forbidden(HubError):
    # Refusals are reported as bad requests, not 403.
    status_code = 400


class UpstreamError(HubError):
    status_code = 500


def require_fields(values: dict) -> None:
    """Raise ValidationError naming every blank or missing field."""
    missing = [key for key, value in values.items() if value is None or not str(value).strip()]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
