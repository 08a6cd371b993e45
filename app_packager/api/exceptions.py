"""Exception definitions for app-packager API"""

from ..constants import MSG_RESOURCE_NOT_EXIST, ErrorCode


class AppPackagerError(Exception):
    """Base exception for app-packager"""

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class ConfigError(AppPackagerError):
    """Configuration error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIG_FORMAT_ERROR)


class UnsupportedFormatError(AppPackagerError):
    """Unknown export format tag"""

    def __init__(self, format_tag: str):
        super().__init__(f"Unsupported app format: {format_tag}", ErrorCode.UNSUPPORTED_FORMAT)
        self.format_tag = format_tag


class ImageError(AppPackagerError):
    """Image transfer error"""
    pass


class MalformedReferenceError(ImageError):
    """Image reference does not follow the reference grammar"""

    def __init__(self, reference: str, reason: str = "invalid reference format"):
        super().__init__(f"{reason}: {reference!r}", ErrorCode.MALFORMED_REFERENCE)
        self.reference = reference


class AuthRequiredError(ImageError):
    """Registry refused the request without credentials"""

    def __init__(self, image: str, message: str = ""):
        detail = f": {message}" if message else ""
        super().__init__(f"Image({image}) requires docker login{detail}", ErrorCode.AUTH_REQUIRED)
        self.image = image


class ImageNotFoundError(ImageError):
    """Remote image missing or not accessible"""

    def __init__(self, message: str, image: str = None):
        super().__init__(message, ErrorCode.IMAGE_NOT_FOUND)
        self.image = image


class LocalImageNotFoundError(ImageError):
    """Image is not present in the local runtime"""

    def __init__(self, image: str):
        super().__init__(f"Local image not found: {image}", ErrorCode.LOCAL_IMAGE_NOT_FOUND)
        self.image = image


class RemoteOperationError(ImageError):
    """Error reported by the image runtime or registry"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.REMOTE_OPERATION_FAILED)


class OperationTimeoutError(ImageError):
    """Deadline elapsed during a streamed operation"""

    def __init__(self, operation: str, timeout: float):
        super().__init__(
            f"{operation} timed out after {timeout:g}s",
            ErrorCode.OPERATION_TIMEOUT
        )
        self.operation = operation
        self.timeout = timeout


class OperationCancelledError(ImageError):
    """Streamed operation aborted by the caller"""

    def __init__(self, operation: str):
        super().__init__(f"{operation} cancelled", ErrorCode.OPERATION_CANCELLED)
        self.operation = operation


class ImageIOError(ImageError):
    """Local file error while saving or loading images"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.IMAGE_IO_FAILED)


class RegistryError(AppPackagerError):
    """Trusted registry management error"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message, ErrorCode.REGISTRY_ERROR)
        self.status_code = status_code


class RepositoryNotFoundError(RegistryError):
    """Repository lookup returned no such resource"""

    def __init__(self, namespace: str, name: str):
        super().__init__(MSG_RESOURCE_NOT_EXIST, 404)
        self.error_code = ErrorCode.REPOSITORY_NOT_FOUND
        self.namespace = namespace
        self.name = name


class PartialWriteError(AppPackagerError):
    """Fewer bytes written than requested"""

    def __init__(self, path: str, written: int, expected: int):
        super().__init__(
            f"write insufficient length for {path}: {written} of {expected} bytes",
            ErrorCode.PARTIAL_WRITE
        )
        self.path = path
        self.written = written
        self.expected = expected


class ManifestError(AppPackagerError):
    """Kubernetes resource could not be parsed or emitted"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.MANIFEST_INVALID)


class ExternalToolError(AppPackagerError):
    """External command exited with a failure"""

    def __init__(self, command: str, returncode: int, stderr: str = ""):
        message = f"{command} exited with status {returncode}"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message, ErrorCode.EXTERNAL_TOOL_FAILED)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class SignalWaitExhaustedError(AppPackagerError):
    """Awaited file did not appear within the wait budget"""

    def __init__(self, path: str, attempts: int):
        super().__init__(
            f"{path} did not appear after {attempts} attempts",
            ErrorCode.SIGNAL_WAIT_EXHAUSTED
        )
        self.path = path
        self.attempts = attempts


class ExportError(AppPackagerError):
    """Export job failed at a given stage"""

    def __init__(self, stage: str, cause: Exception):
        super().__init__(f"export failed during {stage}: {cause}", ErrorCode.EXPORT_FAILED)
        self.stage = stage
        self.cause = cause


class ArchiveImportError(AppPackagerError):
    """Import of a packaged application failed"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.IMPORT_FAILED)
