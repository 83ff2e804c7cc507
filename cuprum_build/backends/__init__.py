"""
Process and filesystem backends used by the deploy pipeline.
"""

from cuprum_build.backends.cargo import CargoBackend
from cuprum_build.backends.install_copy import CopyInstallBackend, InstallResult

__all__ = ["CargoBackend", "CopyInstallBackend", "InstallResult"]
