"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hcs.core.config import ConfigError
from hcs.core.errors import ErrorCode
from hcs.output.console import Style
from hcs.services.errors import (
    ContentStoreError,
    CredentialAbort,
    CredentialStoreError,
    HashError,
    ManifestError,
    PackagingError,
    PartialUploadFailure,
    PublishError,
    SignatureBuildError,
    SubmissionRejected,
    SubmissionTransportError,
)

if TYPE_CHECKING:
    from hcs.output.console import ConsoleProtocol

__all__ = ["print_publish_error", "publish_error_exit_code", "print_config_error"]


def print_publish_error(error: PublishError, console: ConsoleProtocol) -> None:
    """Print a pipeline error with appropriate formatting."""
    match error:
        case ManifestError() | PackagingError() | HashError():
            console.error(error.message)
        case CredentialAbort(message=message):
            console.warning(message)
        case CredentialStoreError(message=message, hint=hint):
            console.error(message)
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case SignatureBuildError(message=message):
            console.error(message)
        case SubmissionRejected(message=message):
            console.warning(f"the registry rejected the release: {message}")
        case SubmissionTransportError(url=url, message=message, status=status):
            detail = f"HTTP {status}: {message}" if status else message
            console.error(f"Failed pushing to the registry ({detail})")
            console.print(f"endpoint: {url}", Style.DIM)
        case ContentStoreError(message=message):
            console.error(f"could not set up the content store: {message}")
            console.print("hint: nothing was submitted; fix the AWS setup and retry", Style.DIM)
        case PartialUploadFailure(failed_paths=failed_paths):
            console.warning(f"Published, but asset sync is incomplete: {error.message}")
            for path in failed_paths:
                console.print(f"  failed: {path}", Style.DIM)
            console.print(
                "hint: the version is registered; re-run with --force to retry the upload "
                "instead of bumping the version",
                Style.DIM,
            )


def publish_error_exit_code(error: PublishError) -> int:
    """Get exit code for a pipeline error."""
    match error:
        case ManifestError() | SignatureBuildError() | SubmissionRejected():
            return int(ErrorCode.USER_ERROR)
        case PackagingError() | HashError():
            return int(ErrorCode.IO_ERROR)
        case CredentialAbort():
            return int(ErrorCode.CANCELLED)
        case CredentialStoreError() | ContentStoreError():
            return int(ErrorCode.ENV_ERROR)
        case SubmissionTransportError():
            return int(ErrorCode.NETWORK_ERROR)
        case PartialUploadFailure():
            return int(ErrorCode.PARTIAL_PUBLISH)
    return int(ErrorCode.USER_ERROR)


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.path is not None:
        console.print(f"config: {error.path}", Style.DIM)
