from .step_10_detect_environment import DetectEnvironmentStep
from .step_15_check_preconditions import CheckPreconditionsStep
from .step_20_clone_dotfiles import CloneDotfilesStep
from .step_25_backup_config import BackupConfigStep
from .step_30_aggregate_packages import AggregatePackagesStep
from .step_40_install_packages import InstallPackagesStep
from .step_50_build_recipes import BuildRecipesStep
from .step_60_apply_config import ApplyConfigStep
from .step_65_install_icon_theme import InstallIconThemeStep
from .step_70_enable_services import EnableServicesStep
from .step_80_write_artifacts import WriteArtifactsStep
from .step_85_refresh_caches import RefreshCachesStep

__all__ = [
    "DetectEnvironmentStep",
    "CheckPreconditionsStep",
    "CloneDotfilesStep",
    "BackupConfigStep",
    "AggregatePackagesStep",
    "InstallPackagesStep",
    "BuildRecipesStep",
    "ApplyConfigStep",
    "InstallIconThemeStep",
    "EnableServicesStep",
    "WriteArtifactsStep",
    "RefreshCachesStep",
]
