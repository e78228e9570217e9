from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel

from urlshortener.utils.timeutils import format_timestamp

class URLStatsResponse(BaseModel):
    id: str
    original_url: str
    short_code: str
    created_at: datetime
    updated_at: datetime
    expires_at: Optional[datetime] = None
    access_count: int = 0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_serializer("created_at", "updated_at", "expires_at")
    def serialize_timestamp(self, value: Optional[datetime]) -> Optional[str]:
        return format_timestamp(value)
