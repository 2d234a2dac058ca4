"""Periodic refresh of the ``/blocks`` and ``/currency`` snapshots."""

from __future__ import annotations

from addrindex.taskmanager.manager import CronJob, TaskManager

__all__ = ["CronJob", "TaskManager"]
