from adapters.local.file_policy_backend import FilePolicyBackend
from adapters.local.sqlite_policy_backend import SQLitePolicyBackend

__all__ = ["FilePolicyBackend", "SQLitePolicyBackend"]
