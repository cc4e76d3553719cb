"""Error types for the build/publish pipeline.

Each step returns one of these as the ``Err`` payload. They carry only
data; ``hcs.output.errors`` decides how they are shown and which exit code
they map to.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ManifestError:
    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"{self.path.name}: {self.reason}"


@dataclass(frozen=True, slots=True)
class PackagingError:
    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"could not create {self.path.name}: {self.reason}"


@dataclass(frozen=True, slots=True)
class HashError:
    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"could not fingerprint {self.path.name}: {self.reason}"


@dataclass(frozen=True, slots=True)
class CredentialAbort:
    """The operator declined to provide an access key or secret."""

    message: str = "no access key secret provided, publish cancelled"


@dataclass(frozen=True, slots=True)
class CredentialStoreError:
    """The OS keyring could not be read or written."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class SignatureBuildError:
    message: str


@dataclass(frozen=True, slots=True)
class SubmissionRejected:
    """The registry answered ``success: false``."""

    message: str


@dataclass(frozen=True, slots=True)
class SubmissionTransportError:
    """No usable answer from the registry (network failure or bad payload)."""

    url: str
    message: str
    status: int = 0


@dataclass(frozen=True, slots=True)
class ContentStoreError:
    """The S3 client for asset uploads could not be created."""

    message: str


@dataclass(frozen=True, slots=True)
class PartialUploadFailure:
    """The registry accepted the release but some assets did not upload."""

    failed_paths: tuple[str, ...]
    total: int

    @property
    def message(self) -> str:
        return f"{len(self.failed_paths)} of {self.total} assets failed to upload"


PackError = PackagingError | HashError
CredentialError = CredentialAbort | CredentialStoreError
SubmissionError = SubmissionRejected | SubmissionTransportError

PublishError = (
    ManifestError
    | PackagingError
    | HashError
    | CredentialAbort
    | CredentialStoreError
    | SignatureBuildError
    | SubmissionRejected
    | SubmissionTransportError
    | ContentStoreError
    | PartialUploadFailure
)
