"""Trigger endpoint for the image metadata pipeline."""

import asyncio

from fastapi import APIRouter, Request, Response

from imagemeta.services.image_meta.pipeline import compute_image_meta

router = APIRouter()


@router.post("/")
async def image_meta(request: Request) -> Response:
    """
    Compute and persist metadata for the image named in the request body.

    The body is a MessagePack map with `filename` and `bucket`. The response
    is always a MessagePack body whose status matches the HTTP status:
    200 with shape fields, 400 for bad input, 500 for internal failures.
    """
    body = await request.body()

    # Storage and decoding block, keep them off the event loop
    result = await asyncio.to_thread(compute_image_meta, body)

    return Response(
        content=result.body,
        status_code=result.status_code,
        media_type=result.media_type,
    )
