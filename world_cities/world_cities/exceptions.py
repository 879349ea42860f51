from enum import Enum

from starlette.status import HTTP_400_BAD_REQUEST

from commons.exceptions import ServiceError


class ErrorCode(str, Enum):
    """
    An enumeration of error codes for the world cities service.
    """

    UNKNOWN_COUNTRY = "unknown_country"


class WorldCitiesError(ServiceError):
    pass


class UnknownCountryError(WorldCitiesError):
    def __init__(self, country_id: int):
        self.country_id = country_id
        super().__init__(
            status_code=HTTP_400_BAD_REQUEST,
            code=ErrorCode.UNKNOWN_COUNTRY,  # type: ignore[arg-type]
            detail=f"Country with id '{country_id}' does not exist.",
        )
