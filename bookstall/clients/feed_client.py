"""
Client for the published catalog sheet (CSV over HTTP)
"""
import csv
import io
from typing import Dict, List, Optional
import requests
import structlog

from bookstall.errors import FeedUnavailable

logger = structlog.get_logger()


class FeedClient:
    """Fetches feed rows from a published spreadsheet"""
    
    def __init__(self, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()
    
    def fetch_rows(self, url: str) -> List[Dict[str, str]]:
        """
        Download the sheet and parse it with its header row
        
        Args:
            url: Published CSV URL
            
        Returns:
            One dict per non-empty row
            
        Raises:
            FeedUnavailable: On transport errors, HTTP errors or unparseable CSV
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("Error fetching catalog feed", url=url, error=str(e))
            raise FeedUnavailable(f"Could not fetch catalog feed: {e}") from e
        
        response.encoding = response.encoding or "utf-8"
        rows = self.parse_csv(response.text)
        logger.info("Catalog feed fetched", url=url, rows=len(rows))
        return rows
    
    @staticmethod
    def parse_csv(text: str) -> List[Dict[str, str]]:
        """Header-keyed rows; blank lines are skipped"""
        try:
            reader = csv.DictReader(io.StringIO(text))
            return [
                row for row in reader
                if any((value or "").strip() for value in row.values() if isinstance(value, str))
            ]
        except csv.Error as e:
            raise FeedUnavailable(f"Malformed catalog feed: {e}") from e
    
    def close(self):
        """Close HTTP session"""
        self.session.close()
