"""Launch orchestration and cluster launcher interface."""

from launchprep.launch.base_launcher import BaseClusterLauncher
from launchprep.launch.controller import LaunchController, LaunchState
from launchprep.launch.directory_launcher import DirectoryLauncher

__all__ = ["BaseClusterLauncher", "DirectoryLauncher", "LaunchController", "LaunchState"]
