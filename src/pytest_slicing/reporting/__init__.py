"""Reporting of the slicing plan."""

from __future__ import annotations

from pytest_slicing.reporting.console import SlicePlanReporter


__all__ = ['SlicePlanReporter']
