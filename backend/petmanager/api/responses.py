"""Render action results as HTTP responses."""

from __future__ import annotations

from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from petmanager.schemas.results import ActionResult, PetLookup, ResultKind
from petmanager.services.pet_lifecycle import CollectingInvalidator

INVALIDATE_HEADER = "X-Invalidate-Paths"

_STATUS_BY_KIND = {
    ResultKind.INVALID: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ResultKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ResultKind.FAILURE: status.HTTP_400_BAD_REQUEST,
    ResultKind.LOGIN_REQUIRED: status.HTTP_401_UNAUTHORIZED,
}


def result_response(
    result: ActionResult,
    *,
    success_status: int = status.HTTP_200_OK,
    failure_status: int | None = None,
    invalidator: CollectingInvalidator | None = None,
) -> JSONResponse:
    """JSON body for ``result`` with a status code derived from its kind."""
    if result.kind is ResultKind.SUCCESS:
        status_code = success_status
    elif result.kind is ResultKind.FAILURE and failure_status is not None:
        status_code = failure_status
    else:
        status_code = _STATUS_BY_KIND[result.kind]

    response = JSONResponse(
        status_code=status_code,
        content={
            key: value
            for key, value in result.model_dump(mode="json").items()
            if value is not None
        },
    )
    if result.kind is ResultKind.LOGIN_REQUIRED and result.navigate_to:
        response.headers["Location"] = result.navigate_to
    if invalidator is not None and invalidator.paths:
        response.headers[INVALIDATE_HEADER] = invalidator.header_value()
    return response


def lookup_response(lookup: PetLookup[Any]) -> JSONResponse:
    """JSON body for a read: the value itself, or an error envelope."""
    if lookup.kind is ResultKind.SUCCESS:
        return JSONResponse(content=jsonable_encoder(lookup.value))
    if lookup.kind is ResultKind.LOGIN_REQUIRED:
        response = JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={
                "kind": lookup.kind.value,
                "success": False,
                "navigate_to": lookup.navigate_to,
            },
        )
        if lookup.navigate_to:
            response.headers["Location"] = lookup.navigate_to
        return response
    if lookup.kind is ResultKind.NOT_FOUND:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"error": lookup.error}
        )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"error": lookup.error}
    )
