"""
azblob-plugin: writable Azure blob SAS issuer

Creates block, append and page blobs on Azure Storage and returns
short-lived SAS URIs to them, along with an AI plugin manifest.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
