"""
Cover image link normalization
"""
import re
from typing import Optional


DRIVE_MARKER = "drive.google.com"
DRIVE_VIEW_URL = "https://drive.google.com/uc?export=view&id={file_id}"

# "/file/d/<id>/view" or "open?id=<id>"
_DRIVE_ID_PATTERN = re.compile(r"/d/(.*?)/|id=(.*?)(?:&|$)")


def normalize_cover_url(raw: Optional[str]) -> Optional[str]:
    """
    Turn a cover reference into a directly fetchable image URL.
    
    Google Drive share links are rewritten to the direct-view endpoint.
    Anything else, including Drive links without an extractable id, is
    returned unchanged. Empty input gives None so the caller can fall
    back to a placeholder image.
    """
    if not raw:
        return None
    if DRIVE_MARKER in raw:
        match = _DRIVE_ID_PATTERN.search(raw)
        file_id = (match.group(1) or match.group(2)) if match else None
        if file_id:
            return DRIVE_VIEW_URL.format(file_id=file_id)
    return raw
