"""Fluent launch configuration and its frozen snapshot."""

from launchprep.preparer.plan import LaunchPlan
from launchprep.preparer.preparer import LaunchPreparer

__all__ = ["LaunchPlan", "LaunchPreparer"]
