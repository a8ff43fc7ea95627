# vulnscan_api/services/scan_service.py
import logging
import datetime
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

import httpx
from sqlalchemy.orm import Session

from vulnscan_api import crud, models, schemas
from vulnscan_api.core.errors import bad_request, not_found
from vulnscan_api.models.scan import ACTIVE_STATUSES, STATUS_COMPLETED, STATUS_SCHEDULED, TERMINAL_STATUSES
from vulnscan_api.services.acunetix_service import AcunetixError, AcunetixService
from vulnscan_api.services.profile_catalog import resolve_profile_id

logger = logging.getLogger(__name__)

# Acunetix severity level -> local counter
SEVERITY_NAMES = {3: "high", 2: "medium", 1: "low", 0: "info"}
REPORT_READY_STATUS = "completed"


def is_valid_target_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def summarize_severities(vulnerabilities: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    summary = {name: 0 for name in SEVERITY_NAMES.values()}
    for vuln in vulnerabilities:
        name = SEVERITY_NAMES.get(vuln.get("severity"))
        if name:
            summary[name] += 1
    return summary


def threat_level_for(summary: Dict[str, int]) -> str:
    """Highest severity with at least one finding, or "none"."""
    for name in ("high", "medium", "low", "info"):
        if summary.get(name):
            return name
    return "none"


class ScanService:
    def __init__(self, db: Session, acunetix: AcunetixService):
        self.db = db
        self.acunetix = acunetix

    @staticmethod
    def _owner_filter(user: models.User) -> Optional[str]:
        # administrators see every scan
        return None if user.is_admin else user.id

    def _get_or_404(self, user: models.User, scan_id: str) -> models.Scan:
        scan = crud.crud_scan.get(self.db, scan_id=scan_id, user_id=self._owner_filter(user))
        if not scan:
            raise not_found("Scan")
        return scan

    def _to_schema(self, user: models.User, scan: models.Scan) -> schemas.scan.Scan:
        item = schemas.scan.Scan.model_validate(scan)
        if not user.is_admin:
            item.user = None
        return item

    def create_scan(self, *, user: models.User, scan_in: schemas.scan.ScanCreate) -> models.Scan:
        """Register the target with Acunetix, start the scan and record it locally."""
        if not is_valid_target_url(scan_in.target_url):
            raise bad_request("Invalid URL provided")

        target = self.acunetix.create_target(scan_in.target_url)
        profile_id = scan_in.profile_id if scan_in.scan_type == "custom" else None
        scan_data = self.acunetix.start_scan(target["target_id"], scan_in.scan_type, profile_id)

        scan = crud.crud_scan.create(self.db, scan_obj=models.Scan(
            acunetix_scan_id=scan_data["scan_id"],
            acunetix_target_id=target["target_id"],
            target_url=scan_in.target_url,
            scan_type=scan_in.scan_type,
            profile_id=scan_data.get("profile_id") or resolve_profile_id(scan_in.scan_type, profile_id),
            status=STATUS_SCHEDULED,
            start_time=datetime.datetime.utcnow(),
            user_id=user.id,
        ))
        logger.info(f"Scan created: {scan.id} for URL: {scan.target_url}")
        return scan

    def list_scans(self, *, user: models.User, page: int, page_size: int, status: str | None = None) -> schemas.scan.PaginatedScans:
        scans, pagination = crud.crud_scan.get_multi_paginated(
            self.db, page=page, page_size=page_size, user_id=self._owner_filter(user), status=status
        )
        return schemas.scan.PaginatedScans(scans=[self._to_schema(user, s) for s in scans], pagination=pagination)

    def _vulnerability_counts(self, scan: models.Scan) -> Dict[str, Any]:
        try:
            vulnerabilities = self.acunetix.get_vulnerabilities(scan.acunetix_scan_id)["vulnerabilities"]
        except AcunetixError as e:
            logger.warning(f"Could not fetch vulnerabilities for scan {scan.id}: {e}")
            return {}
        summary = summarize_severities(vulnerabilities)
        return {
            "high_vulnerabilities": summary["high"],
            "medium_vulnerabilities": summary["medium"],
            "low_vulnerabilities": summary["low"],
            "info_vulnerabilities": summary["info"],
            "threat_level": threat_level_for(summary),
        }

    def reconcile_status(self, scan: models.Scan) -> models.Scan:
        """
        Mirror the engine's view of a scan into the local record.

        Best effort: when Acunetix cannot be reached the stored status is kept
        and the error is only logged. A completed scan without a threat level
        never got its counts stored, so they are fetched again on the next read.
        """
        try:
            engine_scan = self.acunetix.get_scan_status(scan.acunetix_scan_id)
        except AcunetixError as e:
            logger.warning(f"Could not fetch Acunetix status for scan {scan.id}: {e}")
            return scan

        engine_status = (engine_scan.get("current_session") or {}).get("status")
        status_changed = bool(engine_status) and engine_status != scan.status

        changes: Dict[str, Any] = {}
        if status_changed:
            logger.info(f"Scan {scan.id} status changed: {scan.status} -> {engine_status}")
            changes["status"] = engine_status
            if engine_status in TERMINAL_STATUSES:
                changes["end_time"] = datetime.datetime.utcnow()

        current_status = engine_status if status_changed else scan.status
        if current_status == STATUS_COMPLETED and (status_changed or scan.threat_level is None):
            changes.update(self._vulnerability_counts(scan))

        if not changes:
            return scan
        return crud.crud_scan.update(self.db, db_obj=scan, obj_in=changes)

    def get_scan(self, *, user: models.User, scan_id: str) -> schemas.scan.Scan:
        scan = self.reconcile_status(self._get_or_404(user, scan_id))
        return self._to_schema(user, scan)

    def get_vulnerabilities(self, *, user: models.User, scan_id: str,
                            severities: Optional[List[int]] = None) -> schemas.scan.VulnerabilitiesResponse:
        """Findings straight from Acunetix; the summary always counts the unfiltered list."""
        scan = self._get_or_404(user, scan_id)
        vulnerabilities = self.acunetix.get_vulnerabilities(scan.acunetix_scan_id)["vulnerabilities"]
        summary = summarize_severities(vulnerabilities)
        if severities:
            wanted = set(severities)
            vulnerabilities = [v for v in vulnerabilities if v.get("severity") in wanted]
        return schemas.scan.VulnerabilitiesResponse(vulnerabilities=vulnerabilities, summary=summary)

    def get_results(self, *, user: models.User, scan_id: str) -> List[Dict[str, Any]]:
        """Result sessions Acunetix keeps for the scan (one per run)."""
        scan = self._get_or_404(user, scan_id)
        return self.acunetix.get_scan_results(scan.acunetix_scan_id).get("results", [])

    def delete_scan(self, *, user: models.User, scan_id: str):
        scan = self._get_or_404(user, scan_id)
        try:
            self.acunetix.delete_scan(scan.acunetix_scan_id)
        except AcunetixError as e:
            logger.warning(f"Could not delete scan from Acunetix: {e}")
        crud.crud_scan.remove(self.db, db_obj=scan)
        logger.info(f"Scan deleted: {scan_id}")

    def generate_report(self, *, user: models.User, scan_id: str, report_type: str) -> str:
        scan = self._get_or_404(user, scan_id)
        if scan.status != STATUS_COMPLETED:
            raise bad_request("Cannot generate report for incomplete scan")

        report = self.acunetix.generate_report(scan.acunetix_scan_id, report_type)
        report_id = report["report_id"]
        crud.crud_scan.update(self.db, db_obj=scan, obj_in={
            "report_id": report_id,
            "report_url": f"/api/scans/reports/{report_id}/download",
        })
        return report_id

    def _check_report_access(self, user: models.User, report_id: str):
        if not crud.crud_scan.get_by_report(self.db, report_id=report_id, user_id=self._owner_filter(user)):
            raise not_found("Report")

    def get_report_status(self, *, user: models.User, report_id: str) -> Dict[str, Any]:
        self._check_report_access(user, report_id)
        return self.acunetix.get_report_status(report_id)

    def open_report_download(self, *, user: models.User, report_id: str) -> httpx.Response:
        """Streamed report body; raises 400 with the engine status while the report is still being built."""
        self._check_report_access(user, report_id)
        report_status = self.acunetix.get_report_status(report_id).get("status")
        if report_status != REPORT_READY_STATUS:
            raise bad_request("Report is not ready for download", status=report_status)
        return self.acunetix.download_report(report_id)

    def get_stats(self, *, user: models.User) -> schemas.scan.ScanStats:
        owner = self._owner_filter(user)
        return schemas.scan.ScanStats(
            total_scans=crud.crud_scan.count(self.db, user_id=owner),
            completed_scans=crud.crud_scan.count(self.db, user_id=owner, statuses=[STATUS_COMPLETED]),
            running_scans=crud.crud_scan.count(self.db, user_id=owner, statuses=ACTIVE_STATUSES),
            vulnerabilities=crud.crud_scan.vulnerability_totals(self.db, user_id=owner),
        )
