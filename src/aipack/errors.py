"""Error taxonomy for workspace and pack path resolution."""

from __future__ import annotations

from pathlib import Path

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

CONFIGURATION = "CONFIGURATION"
WORKSPACE_REQUIRED = "WORKSPACE_REQUIRED"
PATH_UNRESOLVABLE = "PATH_UNRESOLVABLE"
MALFORMED_REFERENCE = "MALFORMED_REFERENCE"
REFERENCE_NOT_FOUND = "REFERENCE_NOT_FOUND"
CONFIG_INVALID = "CONFIG_INVALID"


class AipackError(Exception):
    """Base error; carries a stable code and the offending raw input."""

    code = "INTERNAL"

    def __init__(self, message: str, *, raw: str | None = None):
        super().__init__(message)
        self.raw = raw


class ConfigurationError(AipackError):
    """Home directory missing or inaccessible."""

    code = CONFIGURATION


class WorkspaceRequired(AipackError):
    """An operation needs a workspace but none is configured."""

    code = WORKSPACE_REQUIRED

    def __init__(self, context: str, *, raw: str | None = None):
        super().__init__(
            f"{context}.\nCause: No workspace available.\n"
            "Run 'aip init' in your project root folder to create the '.aipack/' "
            "workspace marker folder",
            raw=raw,
        )


class PathUnresolvable(AipackError):
    """A required root does not exist or cannot be canonicalized."""

    code = PATH_UNRESOLVABLE

    def __init__(self, message: str, *, raw: str | None = None, root: Path | None = None):
        super().__init__(message, raw=raw)
        self.root = root


class MalformedReference(AipackError):
    """Pack reference does not follow ``[namespace@]name[$scope][/sub_path]``."""

    code = MALFORMED_REFERENCE


class ReferenceNotFound(AipackError):
    """No repository root holds the referenced pack."""

    code = REFERENCE_NOT_FOUND


class ConfigInvalid(AipackError):
    """A config.toml file cannot be parsed or fails validation."""

    code = CONFIG_INVALID

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Config invalid (config path: {path})\n  reason: {reason}", raw=str(path))
        self.path = path
        self.reason = reason
