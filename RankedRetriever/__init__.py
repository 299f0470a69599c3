"""
RankedRetriever - vector space model search over a directory of text files.
"""
__version__ = "1.0.0"
