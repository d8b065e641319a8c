"""
idbscan - passive open port discovery for address ranges using InternetDB.
"""

__version__ = "0.1.0"
