"""Inventory tracking service for a printing-supplies business."""

__version__ = "1.0.0"
