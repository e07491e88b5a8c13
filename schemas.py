from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict


# --------- Common ---------
class ErrorDetail(BaseModel):
    field: Optional[str] = None
    issue: Optional[str] = None


class ErrorEnvelope(BaseModel):
    code: str = Field(default="SERVER_ERROR")
    message: str
    details: Optional[List[ErrorDetail]] = None


class ErrorResponse(BaseModel):
    error: ErrorEnvelope


# --------- Inputs ---------
class BirthPayload(BaseModel):
    """Birth details for a star reading."""
    model_config = ConfigDict(json_schema_extra={
        "examples": [
            {
                "name": "Haruka",
                "dateOfBirth": "1995-02-04",
                "timeOfBirth": "16:12",
                "timeZone": "Asia/Tokyo",
                "lang_code": "ja"
            }
        ]
    })

    name: Optional[str] = Field(default=None, description="Optional display name, echoed back.", examples=["Haruka"])
    dateOfBirth: str = Field(..., description="Birth date in ISO format YYYY-MM-DD.", examples=["1995-02-04"])  # YYYY-MM-DD
    timeOfBirth: Optional[str] = Field(default=None, description="Birth time in 24h format HH:MM or HH:MM:SS; midnight if omitted.", examples=["16:12"])  # HH:MM[:SS]
    timeZone: str = Field(default="Asia/Tokyo", description="IANA timezone the birth date/time is expressed in.", examples=["Asia/Tokyo"])
    lang_code: Optional[str] = Field(default=None, description="Language for star names: 'ja' or 'en'.", examples=["ja"])


# --------- Outputs ---------
class StarOut(BaseModel):
    number: int = Field(..., ge=1, le=9)
    name: str


class KigakuData(BaseModel):
    name: Optional[str] = None
    birthInstant: str = Field(..., description="Birth instant in the reference zone (ISO-8601).")
    astrologicalYear: Optional[int] = None
    astrologicalMonth: Optional[int] = None
    honmei: StarOut
    getsumei: StarOut
    nichimei: StarOut
    language: str


class KigakuOut(BaseModel):
    data: KigakuData


class DailyStarData(BaseModel):
    date: str
    star: StarOut
    language: str


class DailyStarOut(BaseModel):
    data: DailyStarData


class SekkiTermOut(BaseModel):
    name: str
    romaji: str
    english: str
    astrologicalMonth: int
    instant: str


class SekkiYearData(BaseModel):
    year: int
    fromTable: bool = Field(..., description="False when the year is missing and the fallback year start applies.")
    yearStart: str
    terms: List[SekkiTermOut] = Field(default_factory=list)


class SekkiYearOut(BaseModel):
    data: SekkiYearData
