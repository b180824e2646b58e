"""Domain errors raised by the service layer and mapped to HTTP by the API"""


class ServiceError(Exception):
    """Base class carrying a machine-readable code"""
    code = "SERVICE_ERROR"

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.code
        super().__init__(message)


class InvalidVideoUrlError(ServiceError):
    """URL is not a recognizable YouTube watch or short link"""
    code = "INVALID_VIDEO_URL"


class VideoAlreadyExistsError(ServiceError):
    """User already tracks this external video"""
    code = "VIDEO_ALREADY_EXISTS"


class VideoNotFoundError(ServiceError):
    """Video is missing, not owned by the requester, or unknown upstream"""
    code = "VIDEO_NOT_FOUND"


class DependencyError(ServiceError):
    """Dependency error for external service failures"""
    code = "DEPENDENCY_UNAVAILABLE"
