"""Global constants for app-packager"""

from types import MappingProxyType

APP_NAME = "app-packager"
LOG_FORMAT = "%(message)s"

# Project configuration
PROJECT_CONFIG_FILE = ".app-packager.yaml"

# Export directory layout
METADATA_FILE = "metadata.json"
COMPONENT_IMAGES_TAR = "component-images.tar"
PLUGIN_IMAGES_TAR = "plugin-images.tar"
COMPOSE_FILE = "docker-compose.yaml"
CHART_FILE = "Chart.yaml"
CHART_TEMPLATES_DIR = "templates"
DEPENDENT_IMAGES_FILE = "dependent_image.txt"
PACKAGE_FILE_PATTERN = "{app}-{version}-{suffix}.tar.gz"
EXPORT_DIR_PATTERN = "{app}-{version}-{suffix}"

# YAML document boundary used between appended manifests
DOCUMENT_SEPARATOR = "\n---\n"

# Image transfer defaults (minutes)
MIN_TIMEOUT_MINUTES = 1
DEFAULT_PULL_TIMEOUT = 30
DEFAULT_PUSH_TIMEOUT = 30
DEFAULT_SAVE_TIMEOUT = 60
DEFAULT_LOAD_TIMEOUT = 60
REMOVE_TIMEOUT = 1

DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1MB
ARCHIVE_FILE_MODE = 0o644
DEFAULT_DOCKER_TIMEOUT = 120  # seconds, per HTTP request to the daemon
PROGRESS_POLL_INTERVAL = 0.1  # seconds between deadline checks on a quiet stream

# Registry defaults
DEFAULT_DOMAIN = "docker.io"
LEGACY_DEFAULT_DOMAIN = "index.docker.io"
OFFICIAL_REPO_NAMESPACE = "library"
DEFAULT_TAG = "latest"
MAX_SHORT_DESCRIPTION = 140
DEFAULT_REGISTRY_SCHEME = "https"
DEFAULT_REQUEST_TIMEOUT = 30  # seconds
REPOSITORY_VISIBILITY = "private"

# Remote error message fragments
MSG_NO_PULL_ACCESS = "does not exist or no pull access"
MSG_NOT_EXIST = "does not exist"
MSG_RESOURCE_NOT_EXIST = "resource does not exist"

# Manifest-dependency signal wait
DEFAULT_SIGNAL_POLL_INTERVAL = 1.0  # seconds
DEFAULT_SIGNAL_MAX_ATTEMPTS = 40

# Packaging
DEFAULT_TAR_COMMAND = "tar"

# Kubernetes metadata fields assigned by the API server
SERVER_ASSIGNED_METADATA = ("namespace", "resourceVersion", "creationTimestamp", "uid")

# Chart.yaml
HELM_CHART_API_VERSION = "v2"
HELM_CHART_TYPE = "application"
VERSION_INFO_ANNOTATION = "version_info"

# Memory size (MiB) to label
MEMORY_LABELS = MappingProxyType({
    128: "micro",
    256: "small",
    512: "medium",
    1024: "large",
    2048: "2xlarge",
    4096: "4xlarge",
    8192: "8xlarge",
    16384: "16xlarge",
    32768: "32xlarge",
    65536: "64xlarge",
})
DEFAULT_MEMORY_LABEL = "small"


# Error codes
class ErrorCode:
    CONFIG_FORMAT_ERROR = "AP001"
    UNSUPPORTED_FORMAT = "AP002"
    MALFORMED_REFERENCE = "AP003"
    AUTH_REQUIRED = "AP004"
    IMAGE_NOT_FOUND = "AP005"
    LOCAL_IMAGE_NOT_FOUND = "AP006"
    REMOTE_OPERATION_FAILED = "AP007"
    OPERATION_TIMEOUT = "AP008"
    OPERATION_CANCELLED = "AP009"
    IMAGE_IO_FAILED = "AP010"
    PARTIAL_WRITE = "AP011"
    MANIFEST_INVALID = "AP012"
    EXTERNAL_TOOL_FAILED = "AP013"
    SIGNAL_WAIT_EXHAUSTED = "AP014"
    REGISTRY_ERROR = "AP015"
    REPOSITORY_NOT_FOUND = "AP016"
    EXPORT_FAILED = "AP017"
    IMPORT_FAILED = "AP018"


# Environment variables
ENV_CONFIG_PATH = "APP_PACKAGER_CONFIG"
ENV_HOME = "APP_PACKAGER_HOME"
ENV_LOG_LEVEL = "APP_PACKAGER_LOG_LEVEL"
ENV_DOCKER_HOST = "APP_PACKAGER_DOCKER_HOST"
ENV_PULL_TIMEOUT = "APP_PACKAGER_PULL_TIMEOUT"
ENV_PUSH_TIMEOUT = "APP_PACKAGER_PUSH_TIMEOUT"
ENV_SIGNAL_ATTEMPTS = "APP_PACKAGER_SIGNAL_ATTEMPTS"
ENV_SIGNAL_INTERVAL = "APP_PACKAGER_SIGNAL_INTERVAL"
ENV_TAR_COMMAND = "APP_PACKAGER_TAR"

# Display constants
EMOJI_SUCCESS = "✓"
EMOJI_ERROR = "✗"
EMOJI_PACKAGE = "📦"
