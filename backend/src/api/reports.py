# pyright: reportMissingTypeStubs=false
"""
Report API endpoints.

Every endpoint receives the store snapshot it works on in the request body
(in the persisted shape) together with the report parameters, and returns
the finished report. Nothing is stored server-side.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, HTTPException
from fastapi import status as http_status
from pydantic import BaseModel, Field

from services.insights_engine import ReportFacade, current_year_periods
from services.partner_calculators import apply_decline_reason
from utils.datetime_utils import clinic_today, parse_date_string
from api.responses import (
    PeriodComparisonResponse,
    CurrentMonthOverviewResponse,
    YearComparisonResponse,
    MonthlyComparisonResponse,
    PartnerEvolutionResponse,
    DentistPerformanceResponse,
    DentistListResponse,
    ComparisonPresetsResponse,
    DeclineReasonsResponse,
    YearlySummaryResponse,
    FinancialOverviewResponse,
    EntriesListResponse,
    ProspectionListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

PartnerMetric = Literal["exam_value", "exam_count"]


# Request models
class PeriodComparisonRequest(BaseModel):
    """Request model for comparing a date range with the same range last year."""
    daily: Dict[str, Any] = Field(default_factory=dict)
    start_date: str
    end_date: str


class CurrentMonthOverviewRequest(BaseModel):
    """Request model for the month-to-date overview."""
    daily: Dict[str, Any] = Field(default_factory=dict)
    today: Optional[str] = None  # YYYY-MM-DD, defaults to the clinic's current date


class YearComparisonRequest(BaseModel):
    """Request model for the year comparison grid (year_b against year_a)."""
    daily: Dict[str, Any] = Field(default_factory=dict)
    year_a: int
    year_b: int


class MonthlyComparisonRequest(BaseModel):
    """Request model for the monthly comparison chart."""
    daily: Dict[str, Any] = Field(default_factory=dict)
    year: Optional[int] = None  # Defaults to the clinic's current year


class PartnerPeriodsRequest(BaseModel):
    """Partner snapshot with an analysis period and a comparison period."""
    partners: Dict[str, Any] = Field(default_factory=dict)
    metric: PartnerMetric = "exam_value"
    # Missing periods default to year to date against the same span last year
    period1_start: Optional[str] = None
    period1_end: Optional[str] = None
    period2_start: Optional[str] = None
    period2_end: Optional[str] = None


class PartnerEvolutionRequest(PartnerPeriodsRequest):
    """Request model for the partner evolution report."""
    decline_reasons: Dict[str, str] = Field(default_factory=dict)


class DentistPerformanceRequest(PartnerPeriodsRequest):
    """Request model for one dentist's performance series."""
    dentist_name: str


class DentistListRequest(BaseModel):
    """Request model for listing the dentists of a partner snapshot."""
    partners: Dict[str, Any] = Field(default_factory=dict)
    metric: PartnerMetric = "exam_value"


class ComparisonPresetsRequest(BaseModel):
    """Request model for the quick-pick period pairs."""
    today: Optional[str] = None


class DeclineReasonRequest(BaseModel):
    """Request model for setting (or clearing, with '') a decline reason."""
    reasons: Dict[str, str] = Field(default_factory=dict)
    key: str
    reason: str = ''


class YearlySummaryRequest(BaseModel):
    """Request model for the yearly summary."""
    daily: Dict[str, Any] = Field(default_factory=dict)
    monthly_financials: Dict[str, Any] = Field(default_factory=dict)
    annual_financials: Dict[str, Any] = Field(default_factory=dict)
    prospections: List[Dict[str, Any]] = Field(default_factory=list)


class FinancialOverviewRequest(BaseModel):
    """Request model for the financial overview."""
    monthly_financials: Dict[str, Any] = Field(default_factory=dict)
    annual_financials: Dict[str, Any] = Field(default_factory=dict)
    selected_year: Optional[int] = None


class EntriesRequest(BaseModel):
    """Request model for listing daily entries."""
    daily: Dict[str, Any] = Field(default_factory=dict)
    search: Optional[str] = None


class ProspectionsRequest(BaseModel):
    """Request model for listing prospections."""
    prospections: List[Dict[str, Any]] = Field(default_factory=list)


def _resolve_today(today: Optional[str]) -> date:
    """Parse the optional 'today' override, falling back to the clinic's current date."""
    if today is None:
        return clinic_today()
    return parse_date_string(today)


def _resolve_periods(request: PartnerPeriodsRequest) -> Dict[str, Any]:
    """
    Fill missing period bounds from the year-to-date preset.

    Only absent bounds are filled; an empty string is passed on and rejected
    as a malformed date.
    """
    preset = current_year_periods(clinic_today())

    def pick(value: Optional[str], period: str, bound: str) -> Any:
        return value if value is not None else preset[period][bound]

    return {
        'period1_start': pick(request.period1_start, 'period1', 'start_date'),
        'period1_end': pick(request.period1_end, 'period1', 'end_date'),
        'period2_start': pick(request.period2_start, 'period2', 'start_date'),
        'period2_end': pick(request.period2_end, 'period2', 'end_date'),
    }


def _bad_request(e: ValueError) -> HTTPException:
    return HTTPException(
        status_code=http_status.HTTP_400_BAD_REQUEST,
        detail=str(e)
    )


def _internal_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail
    )


@router.post("/period-comparison", summary="Compare a date range with the same range last year")
async def get_period_comparison(request: PeriodComparisonRequest) -> PeriodComparisonResponse:
    """
    Get totals of a date range and of the same range one year earlier.

    Both bounds are inclusive. Growth is reported per metric.
    """
    try:
        result = ReportFacade().period_comparison(request.daily, request.start_date, request.end_date)
        return PeriodComparisonResponse(**result)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error computing period comparison for {request.start_date} to {request.end_date}: {e}")
        raise _internal_error("Não foi possível calcular o comparativo")


@router.post("/current-month-overview", summary="Get month-to-date and year-to-date figures")
async def get_current_month_overview(request: CurrentMonthOverviewRequest) -> CurrentMonthOverviewResponse:
    """Get month-to-date totals against last year and the year-to-date average ticket."""
    try:
        today = _resolve_today(request.today)
        result = ReportFacade().current_month_overview(request.daily, today)
        return CurrentMonthOverviewResponse(**result)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error computing current month overview: {e}")
        raise _internal_error("Não foi possível calcular o resumo do mês")


@router.post("/year-comparison", summary="Get the year-over-year comparison grid")
async def get_year_comparison(request: YearComparisonRequest) -> YearComparisonResponse:
    """
    Get the 12-row revenue grid of year_b against year_a.

    Quarterly, semesterly and annual changes appear on the first row they cover.
    """
    try:
        result = ReportFacade().year_comparison_grid(request.daily, request.year_a, request.year_b)
        return YearComparisonResponse(**result)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error computing year comparison {request.year_a} vs {request.year_b}: {e}")
        raise _internal_error("Não foi possível calcular a comparação anual")


@router.post("/monthly-comparison", summary="Get monthly revenue and patients against the previous year")
async def get_monthly_comparison(request: MonthlyComparisonRequest) -> MonthlyComparisonResponse:
    """Get revenue and patients per month for a year and the year before."""
    try:
        year = request.year if request.year is not None else clinic_today().year
        result = ReportFacade().monthly_comparison(request.daily, year)
        return MonthlyComparisonResponse(**result)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error computing monthly comparison: {e}")
        raise _internal_error("Não foi possível calcular a comparação mensal")


@router.post("/partners/evolution", summary="Get the partner evolution report")
async def get_partner_evolution(request: PartnerEvolutionRequest) -> PartnerEvolutionResponse:
    """
    Get per-dentist rankings and the comparison between two periods.

    Declining dentists carry the key under which a decline reason is stored
    and the reason currently recorded for it.
    """
    try:
        periods = _resolve_periods(request)
        result = ReportFacade().partner_evolution(
            request.partners,
            periods['period1_start'],
            periods['period1_end'],
            periods['period2_start'],
            periods['period2_end'],
            decline_reasons=request.decline_reasons,
            metric=request.metric
        )
        return PartnerEvolutionResponse(**result)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error computing partner evolution: {e}")
        raise _internal_error("Não foi possível calcular a evolução dos parceiros")


@router.post("/partners/dentist-performance", summary="Get one dentist's performance series")
async def get_dentist_performance(request: DentistPerformanceRequest) -> DentistPerformanceResponse:
    """Get a dentist's monthly series for both periods and yearly totals."""
    try:
        periods = _resolve_periods(request)
        result = ReportFacade().dentist_performance(
            request.partners,
            request.dentist_name,
            periods['period1_start'],
            periods['period1_end'],
            periods['period2_start'],
            periods['period2_end'],
            metric=request.metric
        )
        return DentistPerformanceResponse(**result)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error computing performance for dentist {request.dentist_name}: {e}")
        raise _internal_error("Não foi possível calcular o desempenho do dentista")


@router.post("/partners/dentists", summary="List dentists")
async def list_dentists(request: DentistListRequest) -> DentistListResponse:
    """List every dentist of a partner snapshot, alphabetically."""
    try:
        dentists = ReportFacade().list_dentists(request.partners, metric=request.metric)
        return DentistListResponse(dentists=dentists)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error listing dentists: {e}")
        raise _internal_error("Não foi possível listar os dentistas")


@router.post("/partners/presets", summary="Get the comparison period presets")
async def get_comparison_presets(request: ComparisonPresetsRequest) -> ComparisonPresetsResponse:
    """Get the quick-pick period pairs relative to today."""
    try:
        today = _resolve_today(request.today)
        return ComparisonPresetsResponse(**ReportFacade().comparison_presets(today))
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error computing comparison presets: {e}")
        raise _internal_error("Não foi possível calcular os períodos")


@router.post("/partners/decline-reason", summary="Set or clear a decline reason")
async def set_decline_reason(request: DeclineReasonRequest) -> DeclineReasonsResponse:
    """
    Return the decline reasons mapping with one reason set or cleared.

    The caller persists the returned mapping.
    """
    try:
        reasons = apply_decline_reason(request.reasons, request.key, request.reason)
        return DeclineReasonsResponse(reasons=reasons)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error updating decline reason {request.key}: {e}")
        raise _internal_error("Não foi possível atualizar o motivo")


@router.post("/summary", summary="Get the yearly summary")
async def get_yearly_summary(request: YearlySummaryRequest) -> YearlySummaryResponse:
    """Get operational, financial and prospection figures per year and month, with annual KPIs."""
    try:
        result = ReportFacade().yearly_summary(
            request.daily,
            request.monthly_financials,
            request.annual_financials,
            request.prospections
        )
        return YearlySummaryResponse(**result)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error computing yearly summary: {e}")
        raise _internal_error("Não foi possível calcular o resumo anual")


@router.post("/financial-overview", summary="Get the financial overview")
async def get_financial_overview(request: FinancialOverviewRequest) -> FinancialOverviewResponse:
    """Get the reconciled financial overview, expense breakdown and monthly series."""
    try:
        result = ReportFacade().financial_overview(
            request.monthly_financials,
            request.annual_financials,
            selected_year=request.selected_year
        )
        return FinancialOverviewResponse(**result)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error computing financial overview: {e}")
        raise _internal_error("Não foi possível calcular o painel financeiro")


@router.post("/entries", summary="List daily entries")
async def list_entries(request: EntriesRequest) -> EntriesListResponse:
    """List daily entries newest first, optionally filtered by a date search."""
    try:
        entries = ReportFacade().list_entries(request.daily, request.search)
        return EntriesListResponse(entries=entries)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error listing entries: {e}")
        raise _internal_error("Não foi possível listar os lançamentos")


@router.post("/prospections", summary="List prospections by year")
async def list_prospections(request: ProspectionsRequest) -> ProspectionListResponse:
    """List prospections grouped by meeting year, newest first."""
    try:
        groups = ReportFacade().list_prospections(request.prospections)
        return ProspectionListResponse(groups=groups)
    except HTTPException:
        raise
    except ValueError as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error listing prospections: {e}")
        raise _internal_error("Não foi possível listar as prospecções")
