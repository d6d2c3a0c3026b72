# backend/app/services/sync_client.py
"""
Best-effort mirroring of form submissions to the spreadsheet sync endpoints.

Each sync_* call POSTs the record to /api/sync/<endpoint> and returns the
`synced` flag. Failures (network, non-2xx, success=false) are logged and
reported as False: no retry, no queue. Callers schedule these as background
tasks so a submission never waits on them.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import requests

logger = logging.getLogger(__name__)


class SpreadsheetSyncClient:
    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/") + "/api/sync"
        self.timeout = timeout
        self.http = session or requests.Session()

    def is_configured(self) -> bool:
        try:
            resp = self.http.get(f"{self.base_url}/status", timeout=self.timeout)
            if not resp.ok:
                return False
            result = resp.json()
            return bool(result.get("success") and (result.get("data") or {}).get("configured"))
        except (requests.RequestException, ValueError) as e:
            logger.error("Error checking spreadsheet sync configuration: %s", e)
            return False

    def _post(self, endpoint: str, data: Mapping[str, Any]) -> bool:
        try:
            resp = self.http.post(f"{self.base_url}/{endpoint}", json=dict(data), timeout=self.timeout)
            resp.raise_for_status()
            result = resp.json()
            if not result.get("success"):
                raise RuntimeError(result.get("error") or "Sync failed")
        except (requests.RequestException, ValueError, RuntimeError) as e:
            logger.error("Error syncing to spreadsheet (%s): %s", endpoint, e)
            return False
        logger.info("Synced to spreadsheet: %s", endpoint)
        return bool(result.get("synced"))

    def sync_contact(self, data: Mapping[str, Any]) -> bool:
        return self._post("contact", data)

    def sync_job_application(self, data: Mapping[str, Any]) -> bool:
        return self._post("job-application", data)

    def sync_get_started_request(self, data: Mapping[str, Any]) -> bool:
        return self._post("get-started", data)

    def sync_resume_upload(self, data: Mapping[str, Any]) -> bool:
        return self._post("resume-upload", data)

    def sync_newsletter_subscription(self, data: Mapping[str, Any]) -> bool:
        return self._post("newsletter", data)

    def close(self) -> None:
        self.http.close()


__all__ = ["SpreadsheetSyncClient"]
