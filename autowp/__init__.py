"""
AutoWP: herramientas MCP sobre el REST API de WordPress
"""

__version__ = "1.0.0"
