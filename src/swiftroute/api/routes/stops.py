"""Address resolution endpoints."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas.routing import CoordinateModel
from ...schemas.workspace import ParseAddressRequest, ParsedAddressModel
from ...services.resolution.address_parser import AddressResolutionError, AddressResolver, ResolvedAddress
from ..dependencies import get_address_resolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stops", tags=["stops"])


def _to_model(resolved: ResolvedAddress) -> ParsedAddressModel:
    return ParsedAddressModel(
        customer_name=resolved.customer_name,
        address=resolved.address,
        coords=CoordinateModel.from_domain(resolved.coords),
    )


@router.post("/parse", response_model=ParsedAddressModel, status_code=status.HTTP_200_OK)
async def parse_address(
    payload: ParseAddressRequest,
    resolver: AddressResolver = Depends(get_address_resolver),
) -> ParsedAddressModel:
    try:
        resolved = await resolver.parse_address(payload.input)
    except AddressResolutionError as exc:
        logger.warning(f"Address resolution failed: {exc}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return _to_model(resolved)


@router.post("/bulk-parse", response_model=List[ParsedAddressModel], status_code=status.HTTP_200_OK)
async def bulk_parse(
    payload: ParseAddressRequest,
    resolver: AddressResolver = Depends(get_address_resolver),
) -> List[ParsedAddressModel]:
    """Split a block of unstructured text into individual resolved addresses."""
    try:
        resolved = await resolver.bulk_parse_addresses(payload.input)
    except AddressResolutionError as exc:
        logger.warning(f"Bulk address resolution failed: {exc}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return [_to_model(item) for item in resolved]
