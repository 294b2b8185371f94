"""
Output format enumeration
"""

from enum import Enum


class OutputFormat(str, Enum):
    PDF = "pdf"
    PNG = "png"
    JSON = "json"
