"""Schemas for structured model output (route analysis and address parsing)."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from ..models.domain import TrafficCondition


class EtaPayload(BaseModel):
    id: str
    eta: str = Field(..., description="Formatted time, e.g. 09:45 AM")
    traffic: TrafficCondition


class RouteAnalysisPayload(BaseModel):
    summary: str
    etas: List[EtaPayload] = Field(default_factory=list)


class CoordsPayload(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class ParsedAddressPayload(BaseModel):
    customerName: str
    address: str
    coords: CoordsPayload


_COORDS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "lat": {"type": "NUMBER"},
        "lng": {"type": "NUMBER"},
    },
    "required": ["lat", "lng"],
}

PARSED_ADDRESS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "customerName": {"type": "STRING"},
        "address": {"type": "STRING"},
        "coords": _COORDS_SCHEMA,
    },
    "required": ["customerName", "address", "coords"],
}

BULK_ADDRESS_SCHEMA = {"type": "ARRAY", "items": PARSED_ADDRESS_SCHEMA}

ROUTE_ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING"},
        "etas": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "STRING"},
                    "eta": {"type": "STRING", "description": "Formatted time, e.g., 09:45 AM"},
                    "traffic": {
                        "type": "STRING",
                        "description": "Traffic intensity for the leg: 'light', 'moderate', or 'heavy'",
                    },
                },
                "required": ["id", "eta", "traffic"],
            },
        },
    },
    "required": ["summary", "etas"],
}
