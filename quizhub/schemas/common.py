from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator

from quizhub.db.base import as_utc

# Response timestamps are always timezone-aware UTC, whatever the backend returned
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]
