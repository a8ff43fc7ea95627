# vulnscan_api/schemas/scan.py
from pydantic import BaseModel
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime
from .common import PaginationInfo
from .user import UserSummary


class ScanCreate(BaseModel):
    target_url: str
    scan_type: Literal["full", "quick", "custom"] = "full"
    profile_id: Optional[str] = None    # only honoured for scan_type "custom"


class ScanStarted(BaseModel):
    id: str
    target_url: str
    scan_type: str
    status: str
    start_time: Optional[datetime] = None

    class Config:
        from_attributes = True


class Scan(ScanStarted):
    acunetix_scan_id: str
    acunetix_target_id: Optional[str] = None
    profile_id: Optional[str] = None
    end_time: Optional[datetime] = None
    threat_level: Optional[str] = None
    high_vulnerabilities: int = 0
    medium_vulnerabilities: int = 0
    low_vulnerabilities: int = 0
    info_vulnerabilities: int = 0
    report_id: Optional[str] = None
    report_url: Optional[str] = None
    user_id: str
    # Only filled in for administrators
    user: Optional[UserSummary] = None
    created_at: datetime
    updated_at: datetime


class ScanStartedResponse(BaseModel):
    success: bool = True
    message: str
    scan: ScanStarted


class ScanResponse(BaseModel):
    success: bool = True
    scan: Scan


class PaginatedScans(BaseModel):
    success: bool = True
    scans: List[Scan]
    pagination: PaginationInfo


class SeveritySummary(BaseModel):
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0


class VulnerabilityTotals(SeveritySummary):
    total: int = 0


class ScanStats(BaseModel):
    total_scans: int
    completed_scans: int
    running_scans: int
    vulnerabilities: VulnerabilityTotals


class ScanStatsResponse(BaseModel):
    success: bool = True
    stats: ScanStats


class VulnerabilitiesResponse(BaseModel):
    success: bool = True
    vulnerabilities: List[Dict[str, Any]]
    summary: SeveritySummary


class ScanResultsResponse(BaseModel):
    success: bool = True
    results: List[Dict[str, Any]]


class ReportRequest(BaseModel):
    report_type: str = "pdf"


class ReportResponse(BaseModel):
    success: bool = True
    message: str
    report_id: str


class ReportStatusResponse(BaseModel):
    success: bool = True
    report_id: str
    status: Optional[str] = None
    report: Dict[str, Any]


class ScanType(BaseModel):
    id: str
    name: str
    profile_id: str
    description: Optional[str] = None


class ReportTemplate(BaseModel):
    id: str
    name: str
    template_id: str


class ScanProfilesResponse(BaseModel):
    success: bool = True
    scan_types: List[ScanType]
    report_templates: List[ReportTemplate]
    default_scan_type: str
    default_report_type: str
