"""Maintenance jobs run by an external scheduler."""
