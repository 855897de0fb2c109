"""
Admin web API for exchange settings and price sync.
"""
