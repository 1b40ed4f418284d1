"""
Warmap CLI.

Usage:
    warmap [OPTIONS] WARFILE

Prints every URL the web archive serves, the request method it is served
under, and what serves it.
"""

__version__ = "1.0.0"
__cli_name__ = "warmap"
