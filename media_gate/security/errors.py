"""Domain exceptions raised while serving a request."""


class GatewayError(Exception):
    """Base class for request-fatal gateway failures."""

    def __init__(self, code: str, message: str, status: int):
        self.code = code
        self.message = message
        self.status = status
        super().__init__(message)


class PermissionCheckError(GatewayError):
    """The permission provider could not produce a verdict."""

    def __init__(self, message: str = "Permission check failed"):
        super().__init__("permission_check_failed", message, status=500)


class FileDeliveryError(GatewayError):
    """The file passed the policy check but could not be read."""

    def __init__(self, message: str = "File is unavailable"):
        super().__init__("file_unavailable", message, status=500)
