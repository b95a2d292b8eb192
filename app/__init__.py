"""
solc-compile API package.
"""
