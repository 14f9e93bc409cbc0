"""Descriptor emitters for export installations."""

from .config_descriptor import ConfigDescriptorGenerator
from .export_descriptor import ExportDescriptorGenerator
from .fragments import FILE_CHECK_LOOP, render

__all__ = [
    "ConfigDescriptorGenerator",
    "ExportDescriptorGenerator",
    "FILE_CHECK_LOOP",
    "render",
]
