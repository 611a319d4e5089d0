"""Utility helpers for the power budget package."""
