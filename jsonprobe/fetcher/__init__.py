"""HTTP fetch boundary."""

from jsonprobe.fetcher.client import Fetcher, describe_error

__all__ = ["Fetcher", "describe_error"]
