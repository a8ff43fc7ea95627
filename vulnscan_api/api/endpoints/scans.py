# vulnscan_api/api/endpoints/scans.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask
from vulnscan_api import models
from vulnscan_api.schemas import common, scan as scan_schema
from vulnscan_api.services.acunetix_service import SEVERITY_LEVELS
from vulnscan_api.services.profile_catalog import load_catalog
from vulnscan_api.services.scan_service import ScanService
from vulnscan_api.api.deps import get_current_user, get_report_scan_service, get_scan_service
from vulnscan_api.core.errors import bad_request, server_error

router = APIRouter(tags=["Scans"])


@router.post("/api/scans", response_model=scan_schema.ScanStartedResponse, status_code=status.HTTP_201_CREATED,
             summary="Create a target in Acunetix and start scanning it")
def create_scan(
        scan_in: scan_schema.ScanCreate,
        current_user: models.User = Depends(get_current_user),
        scan_service: ScanService = Depends(get_scan_service)
):
    try:
        scan = scan_service.create_scan(user=current_user, scan_in=scan_in)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error creating scan", e)
    return {"message": "Scan started successfully", "scan": scan}


@router.get("/api/scans", response_model=scan_schema.PaginatedScans, summary="List scans")
def get_scans(
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        status: Optional[str] = Query(None),
        current_user: models.User = Depends(get_current_user),
        scan_service: ScanService = Depends(get_scan_service)
):
    """Administrators see every scan along with its owner, other users only their own."""
    try:
        return scan_service.list_scans(user=current_user, page=page, page_size=limit, status=status)
    except Exception as e:
        raise server_error("Error fetching scans", e)


@router.get("/api/scans/stats", response_model=scan_schema.ScanStatsResponse, summary="Scan and vulnerability totals")
def get_scan_stats(
        current_user: models.User = Depends(get_current_user),
        scan_service: ScanService = Depends(get_scan_service)
):
    try:
        return {"stats": scan_service.get_stats(user=current_user)}
    except Exception as e:
        raise server_error("Error fetching scan statistics", e)


@router.get("/api/scans/profiles", response_model=scan_schema.ScanProfilesResponse, summary="Scan types and report formats",
            dependencies=[Depends(get_current_user)])
def list_scan_profiles():
    """Scan types accepted by POST /api/scans and report types accepted by the report endpoint."""
    catalog = load_catalog()
    return {
        "scan_types": catalog["scan_types"],
        "report_templates": catalog["report_templates"],
        "default_scan_type": catalog["default_scan_type"],
        "default_report_type": catalog["default_report_type"],
    }


@router.get("/api/scans/reports/{report_id}/status", response_model=scan_schema.ReportStatusResponse,
            summary="Report generation status")
def get_report_status(
        report_id: str,
        current_user: models.User = Depends(get_current_user),
        scan_service: ScanService = Depends(get_scan_service)
):
    try:
        report = scan_service.get_report_status(user=current_user, report_id=report_id)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error fetching report status", e)
    return {"report_id": report_id, "status": report.get("status"), "report": report}


@router.get("/api/scans/reports/{report_id}/download", summary="Download a generated report",
            response_class=StreamingResponse)
def download_report(
        report_id: str,
        current_user: models.User = Depends(get_current_user),
        scan_service: ScanService = Depends(get_report_scan_service)
):
    try:
        upstream = scan_service.open_report_download(user=current_user, report_id=report_id)
    except HTTPException:
        scan_service.acunetix.close()
        raise
    except Exception as e:
        scan_service.acunetix.close()
        raise server_error("Error downloading report", e)

    def finish_download():
        upstream.close()
        scan_service.acunetix.close()

    return StreamingResponse(
        upstream.iter_bytes(),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="scan-report-{report_id}.pdf"'},
        background=BackgroundTask(finish_download),
    )


@router.get("/api/scans/{scan_id}", response_model=scan_schema.ScanResponse, summary="Scan details with refreshed status")
def get_scan(
        scan_id: str,
        current_user: models.User = Depends(get_current_user),
        scan_service: ScanService = Depends(get_scan_service)
):
    try:
        return {"scan": scan_service.get_scan(user=current_user, scan_id=scan_id)}
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error fetching scan", e)


@router.get("/api/scans/{scan_id}/vulnerabilities", response_model=scan_schema.VulnerabilitiesResponse,
            summary="Vulnerabilities found by a scan")
def get_scan_vulnerabilities(
        scan_id: str,
        severity: Optional[List[int]] = Query(None, description="Only return these severity levels (0=info .. 3=high)"),
        current_user: models.User = Depends(get_current_user),
        scan_service: ScanService = Depends(get_scan_service)
):
    if severity and any(level not in SEVERITY_LEVELS for level in severity):
        raise bad_request("Severity must be between 0 and 3")
    try:
        return scan_service.get_vulnerabilities(user=current_user, scan_id=scan_id, severities=severity)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error fetching vulnerabilities", e)


@router.get("/api/scans/{scan_id}/results", response_model=scan_schema.ScanResultsResponse,
            summary="Acunetix result sessions of a scan")
def get_scan_results(
        scan_id: str,
        current_user: models.User = Depends(get_current_user),
        scan_service: ScanService = Depends(get_scan_service)
):
    try:
        return {"results": scan_service.get_results(user=current_user, scan_id=scan_id)}
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error fetching scan results", e)


@router.delete("/api/scans/{scan_id}", response_model=common.MessageResponse, summary="Delete a scan")
def delete_scan(
        scan_id: str,
        current_user: models.User = Depends(get_current_user),
        scan_service: ScanService = Depends(get_scan_service)
):
    try:
        scan_service.delete_scan(user=current_user, scan_id=scan_id)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error deleting scan", e)
    return {"message": "Scan deleted successfully"}


@router.post("/api/scans/{scan_id}/report", response_model=scan_schema.ReportResponse, summary="Start report generation")
def generate_report(
        scan_id: str,
        report_in: Optional[scan_schema.ReportRequest] = None,
        current_user: models.User = Depends(get_current_user),
        scan_service: ScanService = Depends(get_scan_service)
):
    report_type = report_in.report_type if report_in else "pdf"
    try:
        report_id = scan_service.generate_report(user=current_user, scan_id=scan_id, report_type=report_type)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error generating report", e)
    return {"message": "Report generation started", "report_id": report_id}
