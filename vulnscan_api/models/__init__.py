from vulnscan_api.models.user import User
from vulnscan_api.models.scan import Scan

__all__ = ["User", "Scan"]
