# vulnscan_api/services/acunetix_service.py
import logging
from typing import Any, Dict, Iterable, Optional

import httpx

from vulnscan_api.core.config import settings
from vulnscan_api.services.profile_catalog import resolve_profile_id, resolve_template_id

logger = logging.getLogger(__name__)

SEVERITY_LEVELS = (0, 1, 2, 3)


class AcunetixError(Exception):
    """Raised when a call to the Acunetix API fails."""


def _error_message(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return body["message"]
    return str(exc)


class AcunetixService:
    """
    Client for the Acunetix REST API.

    Every call is authenticated with the static `X-Auth` API key. Failures are
    logged and re-raised as AcunetixError so callers only deal with one type.
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        self.base_url = (base_url or settings.ACUNETIX_API_URL).rstrip("/")
        self.client = httpx.Client(
            base_url=self.base_url,
            headers={
                "X-Auth": api_key if api_key is not None else settings.ACUNETIX_API_KEY,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=settings.ACUNETIX_TIMEOUT,
            verify=settings.ACUNETIX_VERIFY_SSL,
            transport=transport,
        )

    def close(self):
        self.client.close()

    def _request(self, action: str, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self.client.request(method, path, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPError as e:
            logger.error(f"Error {action}: {e}")
            raise AcunetixError(f"Failed to {action}: {_error_message(e)}") from e

    def create_target(self, url: str, description: str = "") -> Dict[str, Any]:
        response = self._request("create target", "POST", "/targets", json={
            "address": url,
            "description": description or f"Target for {url}",
            "criticality": 10,
        })
        data = response.json()
        logger.info(f"Target created: {url} with ID: {data.get('target_id')}")
        return data

    def start_scan(self, target_id: str, scan_type: str = "full", profile_id: Optional[str] = None) -> Dict[str, Any]:
        """Schedule an immediate scan of `target_id` with the profile matching `scan_type`."""
        response = self._request("start scan", "POST", "/scans", json={
            "target_id": target_id,
            "profile_id": resolve_profile_id(scan_type, profile_id),
            "schedule": {
                "disable": False,
                "start_date": None,
                "time_sensitive": False,
            },
        })
        data = response.json()
        logger.info(f"Scan started: {data.get('scan_id')} for target: {target_id}")
        return data

    def get_scan_status(self, scan_id: str) -> Dict[str, Any]:
        return self._request("get scan status", "GET", f"/scans/{scan_id}").json()

    def get_scan_results(self, scan_id: str) -> Dict[str, Any]:
        return self._request("get scan results", "GET", f"/scans/{scan_id}/results").json()

    def get_vulnerabilities(self, scan_id: str, severities: Optional[Iterable[int]] = None) -> Dict[str, Any]:
        """Vulnerabilities found by a scan, optionally restricted to the given severity levels (0-3)."""
        data = self._request("get vulnerabilities", "GET", f"/scans/{scan_id}/results/vulnerabilities").json()
        data.setdefault("vulnerabilities", [])
        if severities is not None:
            wanted = set(severities)
            data["vulnerabilities"] = [v for v in data["vulnerabilities"] if v.get("severity") in wanted]
        return data

    def delete_scan(self, scan_id: str) -> bool:
        self._request("delete scan", "DELETE", f"/scans/{scan_id}")
        logger.info(f"Scan deleted: {scan_id}")
        return True

    def generate_report(self, scan_id: str, report_type: str = "pdf") -> Dict[str, Any]:
        response = self._request("generate report", "POST", "/reports", json={
            "source": {
                "list_type": "scans",
                "id_list": [scan_id],
            },
            "template_id": resolve_template_id(report_type),
        })
        data = response.json()
        logger.info(f"Report generated: {data.get('report_id')} for scan: {scan_id}")
        return data

    def get_report_status(self, report_id: str) -> Dict[str, Any]:
        return self._request("get report status", "GET", f"/reports/{report_id}").json()

    def download_report(self, report_id: str) -> httpx.Response:
        """
        Open a streamed download of a finished report.

        The caller owns the returned response and must close it once the body
        has been consumed.
        """
        request = self.client.build_request("GET", f"/reports/{report_id}/download")
        try:
            response = self.client.send(request, stream=True)
            if response.is_error:
                # error bodies are small JSON documents carrying the engine message
                response.read()
                response.close()
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error downloading report: {e}")
            raise AcunetixError(f"Failed to download report: {_error_message(e)}") from e
        return response
