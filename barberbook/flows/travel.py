# barberbook/flows/travel.py

import logging
from typing import List

from pydantic import BaseModel, Field

from barberbook import maps
from barberbook.exceptions import FlowError, MapsError, NotConfiguredError
from barberbook.schemas import GeoPoint, TravelInfo

logger = logging.getLogger(__name__)

FLOW_NAME = "getTravelInfo"


class GetTravelInfoInput(BaseModel):
    origin: GeoPoint = Field(description="The origin coordinates.")
    destinations: List[GeoPoint] = Field(description="An array of destination coordinates.")


def get_travel_info(data: GetTravelInfoInput) -> List[TravelInfo]:
    """Distance and duration from the origin to each destination, in order."""
    logger.info(f"Running flow {FLOW_NAME} for {len(data.destinations)} destination(s)")
    try:
        rows = maps.distance_matrix(
            data.origin.model_dump(),
            [d.model_dump() for d in data.destinations],
        )
    except NotConfiguredError as e:
        raise FlowError(FLOW_NAME, e.message, status_code=503)
    except MapsError as e:
        raise FlowError(FLOW_NAME, e.message)
    return [TravelInfo(**row) for row in rows]
