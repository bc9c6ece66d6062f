"""Utility modules for profitshare."""
