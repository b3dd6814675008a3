"""Paid resource routes (Server).

These handlers hold no payment logic; `X402PaymentMiddleware` only lets a
request reach them once its payment has been verified.
"""

from __future__ import annotations

from fastapi import APIRouter

from ....application.server.dtos import (
    PremiumContentResponse,
    WeatherReport,
    WeatherResponse,
)

router = APIRouter(tags=["resources"])


@router.get("/weather", response_model=WeatherResponse)
async def get_weather() -> WeatherResponse:
    return WeatherResponse(report=WeatherReport(weather="sunny", temperature=70))


@router.get("/premium/content", response_model=PremiumContentResponse)
async def get_premium_content() -> PremiumContentResponse:
    return PremiumContentResponse(content="This is premium content")
