"""Filesystem, image, logging and validation helpers."""
