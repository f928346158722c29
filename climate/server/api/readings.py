"""Reading endpoints: paged table data and aggregated chart series."""

import math

from starlette.requests import Request
from starlette.responses import JSONResponse

from climate.lib.aggregation import aggregate_rows
from climate.lib.db import get_readings_in_range, get_readings_page, period_bounds
from climate.lib.exceptions import InvalidQueryError, QueryError
from climate.lib.reading import Reading
from climate.logging import get_logger
from climate.server.validators import GraphQuery, InvalidParameter, PageQuery

logger = get_logger("server.api.readings")


async def get_readings(request: Request) -> JSONResponse:
    """Return one page of readings, newest first."""
    try:
        query = PageQuery.from_params(request.query_params)
    except InvalidParameter as err:
        return JSONResponse({"error": str(err)}, status_code=400)

    try:
        page = await get_readings_page(query.page, query.limit)
    except InvalidQueryError as err:
        return JSONResponse({"error": str(err)}, status_code=400)
    except QueryError:
        logger.exception("Database error fetching readings")
        return JSONResponse({"error": "Database unavailable"}, status_code=503)

    total = page["total"]
    return JSONResponse(
        {
            "data": [Reading.from_row(row).to_json() for row in page["items"]],
            "pagination": {
                "total": total,
                "page": query.page,
                "limit": query.limit,
                "totalPages": math.ceil(total / query.limit),
                "hasMore": page["has_more"],
            },
        }
    )


async def get_graph(request: Request) -> JSONResponse:
    """Return the bucketed chart series for a day, month or year."""
    try:
        query = GraphQuery.from_params(request.query_params)
    except InvalidParameter as err:
        return JSONResponse({"error": str(err)}, status_code=400)

    start, end = period_bounds(query.range, query.date)
    try:
        rows = await get_readings_in_range(start, end, query.range)
    except QueryError:
        logger.exception("Database error fetching chart data")
        return JSONResponse({"error": "Database unavailable"}, status_code=503)

    return JSONResponse(aggregate_rows(rows, query.range, query.date))
