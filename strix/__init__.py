"""
Strix - binary string extraction and triage

Pulls readable text out of untrusted executables, ties each string to the
section it lives in, classifies it, and digs out XOR- and Base64-hidden text.
"""

from .analyzer import StringAnalyzer, scan_buffer
from .config import ScanConfig

__version__ = '1.0.0'
__author__ = 'Strix Team'

__all__ = ['StringAnalyzer', 'ScanConfig', 'scan_buffer']
