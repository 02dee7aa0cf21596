"""
Shared utilities.

Author: Remote Docker Project
License: MIT
"""
