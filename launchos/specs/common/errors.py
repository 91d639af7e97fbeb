"""
Common exception classes for the application
"""
from typing import Optional, Dict, Any


class LaunchOSError(Exception):
    """Base exception class for LaunchOS errors"""
    def __init__(self, message: str, code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to standard error format"""
        return {
            "code": self.code,
            "message": str(self),
            "details": self.details
        }


class ConfigurationError(LaunchOSError):
    """Raised when there's an error in configuration or environment variables"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)


class GenerationError(LaunchOSError):
    """Raised when the drafting collaborator fails or returns an unusable shape"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="GENERATION_FAILURE", details=details)


class StoreError(LaunchOSError):
    """Raised when a persistent store call fails"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="STORE_FAILURE", details=details)


class PermissionDeniedError(LaunchOSError):
    """Raised when an actor may not mutate a task"""
    def __init__(self, actor_name: str, task_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"'{actor_name}' may only edit tasks assigned to them (task '{task_id}')"
        super().__init__(message, code="PERMISSION_DENIED", details=details)
        self.actor_name = actor_name
        self.task_id = task_id


class InvalidTransitionError(LaunchOSError):
    """Raised when a task status change is not an allowed lifecycle edge"""
    def __init__(self, current: str, target: str, details: Optional[Dict[str, Any]] = None):
        message = f"Cannot move task from '{current}' to '{target}'"
        super().__init__(message, code="INVALID_TRANSITION", details=details)


class BlueprintProtectedError(LaunchOSError):
    """Raised when deleting a system-provided blueprint"""
    def __init__(self, blueprint_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"Blueprint '{blueprint_id}' is a system blueprint and cannot be deleted"
        super().__init__(message, code="BLUEPRINT_PROTECTED", details=details)


class ResourceNotFoundError(LaunchOSError):
    """Raised when a requested resource is not found"""
    def __init__(self, resource_type: str, resource_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(message, code="RESOURCE_NOT_FOUND", details=details)
        self.resource_type = resource_type
        self.resource_id = resource_id
