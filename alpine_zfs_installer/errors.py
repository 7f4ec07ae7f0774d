from __future__ import annotations

from typing import Sequence


class InstallerError(RuntimeError):
    """Base for every fatal installer error."""


class ConfigError(InstallerError):
    pass


class PreconditionError(InstallerError):
    pass


class ConfirmationError(InstallerError):
    pass


class DetectionError(InstallerError):
    """A runtime fact (PARTUUID, partition number, kernel version) could not be determined."""


class CommandError(InstallerError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if stderr and stderr.strip():
            msg += f"\n{stderr.strip()}"
        super().__init__(msg)


class DownloadError(InstallerError):
    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Download failed: {url}: {reason}")


class StepFailed(InstallerError):
    def __init__(self, step_id: str, cause: BaseException) -> None:
        self.step_id = step_id
        self.cause = cause
        super().__init__(f"{step_id}: {cause}")
