"""Command-line client for the Appian deployment-management REST API (v2)."""

__version__ = '0.1.0'
