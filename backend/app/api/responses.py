"""Rendering facade outcomes as JSON:API responses"""

from fastapi import Response
from fastapi.responses import JSONResponse

from schemas.jsonapi import JSONAPI_MEDIA_TYPE, error_document
from services.outcomes import Outcome, OutcomeStatus


def render(outcome: Outcome) -> Response:
    if outcome.status == OutcomeStatus.NO_CONTENT:
        return Response(status_code=204)
    if outcome.succeeded:
        content = outcome.document
    else:
        content = error_document(outcome.errors())
    return JSONResponse(status_code=outcome.http_status, content=content, media_type=JSONAPI_MEDIA_TYPE)
