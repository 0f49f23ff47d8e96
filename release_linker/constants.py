"""
Release Linker Constants

Centralized constants for magic values, defaults, and configuration.
"""

# Default SSH Configuration
DEFAULT_SSH_PORT = 22
SSH_CONNECTION_TIMEOUT = 10
SSH_COMMAND_TIMEOUT = 600

# Remote shell discipline prepended to every remote command
REMOTE_SHELL_PRELUDE = "set -euo pipefail"

# Upload Configuration
UPLOAD_MAX_ATTEMPTS = 3
UPLOAD_RETRY_DELAY = 2
UPLOAD_TIMEOUT = 1800

# Remote Layout
DEFAULT_REMOTE_DIR = "/data/apps"
RELEASES_DIR_NAME = "releases"
ACTIVE_LINK_NAME = "website"

# Exit code used by the precondition check when the activation point is occupied
ACTIVE_LINK_OCCUPIED_EXIT_CODE = 3

# Packaging
DEFAULT_TAR_CONTAIN = "."
ARCHIVE_SUFFIX = ".tar.gz"
VERSION_FORMAT = "%Y%m%d%H%M%S"

# Display
HIDDEN_VALUE = "***hidden***"
INVALID_SPEC_REASON = "invalid host spec"
