"""
Exception hierarchy for the dsc-e2e test runner

Step-level errors carry the owning test id and step name so they can be
stored on a StepResult and still say where they came from.
"""

from typing import Any, Dict, Optional


class ErrorCodes:
    """Numeric error codes attached to DscE2EError instances"""
    # Configuration errors (1xxx)
    CONFIG_FILE_NOT_FOUND = 1001
    CONFIG_VALIDATION_FAILED = 1002
    INVALID_DURATION = 1003

    # Usage errors (2xxx)
    ASYNC_REGISTRATION = 2001
    RUN_ALREADY_EXECUTED = 2002

    # Step errors (3xxx)
    STEP_TIMEOUT = 3001
    STEP_FAILED = 3002

    # Driver errors (4xxx)
    DRIVER_ACQUISITION_FAILED = 4001
    DRIVER_QUIT_FAILED = 4002

    # Reporting errors (5xxx)
    REPORTING_FAILED = 5001


class DscE2EError(Exception):
    """Base exception class for the dsc-e2e framework"""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.code is not None:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


class InvalidDurationError(DscE2EError, ValueError):
    """A timeout expression could not be parsed"""

    def __init__(self, expr: Any):
        super().__init__(
            f"Invalid duration: {expr!r}",
            code=ErrorCodes.INVALID_DURATION,
            details={"expr": repr(expr)}
        )


class ConfigurationError(DscE2EError):
    """Configuration file or environment error"""

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        field: Optional[str] = None,
        code: int = ErrorCodes.CONFIG_VALIDATION_FAILED
    ):
        details = {}
        if config_file:
            details["config_file"] = config_file
        if field:
            details["field"] = field
        super().__init__(message, code=code, details=details)


class UsageError(DscE2EError):
    """The runner was used in a way it does not support"""
    pass


class AsyncRegistrationError(UsageError):
    """A test function tried to register its steps asynchronously"""

    def __init__(self, test_id: str):
        super().__init__(
            f'Test "{test_id}": test functions should not be async!',
            code=ErrorCodes.ASYNC_REGISTRATION,
            details={"test_id": test_id}
        )


class StepError(DscE2EError):
    """Error recorded against a single step of an attempt"""

    default_code = ErrorCodes.STEP_FAILED

    def __init__(self, message: str, test_id: Optional[str] = None, step: Optional[str] = None):
        self.test_id = test_id
        self.step = step
        super().__init__(
            message,
            code=self.default_code,
            details={"test_id": test_id, "step": step}
        )

    def __str__(self) -> str:
        return self.message


class StepTimeoutError(StepError):
    """A step did not settle within its budget"""
    default_code = ErrorCodes.STEP_TIMEOUT


class StepBodyError(StepError):
    """A step body raised"""
    pass


class DriverAcquisitionError(StepError):
    """A driver setup step failed"""
    default_code = ErrorCodes.DRIVER_ACQUISITION_FAILED


class DriverQuitError(StepError):
    """Quitting the driver failed"""
    default_code = ErrorCodes.DRIVER_QUIT_FAILED


class ReportingError(StepError):
    """Posting the attempt status to the grid failed"""
    default_code = ErrorCodes.REPORTING_FAILED
