"""Process exit codes.

Each publish failure class maps to one of these codes so that scripts
wrapping ``hcs`` can tell a rejected release from a broken network or an
incomplete asset sync.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (invalid app.json, registry rejected the release)
    - 2: Environment error (keyring unavailable, invalid config)
    - 4: Network error (registry unreachable, malformed response)
    - 5: I/O error (archive could not be written or read back)
    - 6: Cancelled by the operator at a prompt
    - 7: Published, but some assets failed to upload
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 4
    IO_ERROR = 5
    CANCELLED = 6
    PARTIAL_PUBLISH = 7

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
