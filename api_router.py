from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Body, HTTPException, Path, Query

from schemas import (
    BirthPayload,
    KigakuOut,
    DailyStarOut,
    SekkiYearOut,
)
from services.kigaku_services import (
    InvalidInput,
    calculate_kigaku_data,
    daily_star_data,
    sekki_year_data,
)


router = APIRouter(prefix="/api")


# --------------- Kigaku -----------------
@router.post("/kigaku/calculate", response_model=KigakuOut, tags=["Kigaku"], summary="Compute Honmei / Getsumei / Nichimei stars")
def calculate_kigaku(
    payload: BirthPayload = Body(
        ...,
        openapi_examples={
            "sample": {
                "summary": "At Risshun 1995",
                "value": {
                    "name": "Haruka",
                    "dateOfBirth": "1995-02-04",
                    "timeOfBirth": "16:12",
                    "timeZone": "Asia/Tokyo",
                    "lang_code": "ja",
                },
            }
        },
    ),
) -> KigakuOut:
    try:
        data = calculate_kigaku_data(payload)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    return KigakuOut(data=data)


@router.get("/kigaku/daily-star", response_model=DailyStarOut, tags=["Kigaku"], summary="Day star (Nichimei) for a date")
def daily_star(
    date: Optional[str] = Query(default=None, description="YYYY-MM-DD in the reference zone; today if omitted."),
    lang_code: Optional[str] = Query(default=None, description="'ja' or 'en'"),
) -> DailyStarOut:
    try:
        data = daily_star_data(date, lang_code)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    return DailyStarOut(data=data)


# --------------- Sekki -----------------
@router.get("/sekki/{year}", response_model=SekkiYearOut, tags=["Sekki"], summary="Principal solar terms of a calendar year")
def sekki_for_year(year: int = Path(..., ge=1, le=9998)) -> SekkiYearOut:
    return SekkiYearOut(data=sekki_year_data(year))
