"""Process exit codes.

Each pipeline step that can fail maps to its own code so that CI logs show
which stage stopped the release without reading the output.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (malformed reference, invalid config, bad arguments)
    - 3: Build error (compile, test or lint phase failed)
    - 4: Packaging error (binary missing, archive not writable)
    - 5: Publish error (release creation or asset upload failed)
    - 6: Formula error (formula bump failed)
    """

    OK = 0
    USER_ERROR = 1
    BUILD_ERROR = 3
    PACKAGING_ERROR = 4
    PUBLISH_ERROR = 5
    FORMULA_ERROR = 6
