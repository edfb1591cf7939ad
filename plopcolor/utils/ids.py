"""
PlopColor Request ID Utilities
"""
import uuid
from datetime import datetime


def generate_request_id(prefix: str = "pal") -> str:
    """
    Generate a unique request ID for log correlation.

    Args:
        prefix: Short tag naming the request kind

    Returns:
        ID of the form ``{prefix}-{YYYYmmddHHMMSS}-{uuid8}``
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    short_uuid = uuid.uuid4().hex[:8]
    return f"{prefix}-{timestamp}-{short_uuid}"
