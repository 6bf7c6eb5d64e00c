from __future__ import annotations

import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


class InstallerError(Exception):
    """Fatal installer error; the run stops and exits with ``exit_code``."""

    exit_code = 1


class UnsupportedEnvironment(InstallerError):
    pass


class PreconditionError(InstallerError):
    def __init__(self, check: str, message: str) -> None:
        super().__init__(message)
        self.check = check


class BootstrapFailure(InstallerError):
    pass


class CloneFailure(InstallerError):
    pass


class BackupFailure(InstallerError):
    pass


class UserCancelled(InstallerError):
    pass


class InstallerWarning(UserWarning):
    """Non-fatal condition, recorded in state and summarised at the end."""

    kind = "warning"


class PackageInstallWarning(InstallerWarning):
    kind = "package"


class ServiceEnableWarning(InstallerWarning):
    kind = "service"


class RecipeBuildWarning(InstallerWarning):
    kind = "recipe_build"


class RecipeParseWarning(InstallerWarning):
    kind = "recipe_parse"


class BackupWarning(InstallerWarning):
    kind = "backup"


class ConfigCopyWarning(InstallerWarning):
    kind = "config_copy"


class IconThemeWarning(InstallerWarning):
    kind = "icon_theme"


def record_warning(state: Dict[str, Any], warning: InstallerWarning) -> None:
    logger.warning("%s", warning)
    state.setdefault("execution", {}).setdefault("warnings", []).append(
        {"kind": warning.kind, "message": str(warning)}
    )
