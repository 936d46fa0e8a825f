import json
import enum
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_serializer

class WorldStatus(str, enum.Enum):
    OPEN = "open"
    MAINTENANCE = "maintenance"
    CLOSED = "closed"

    def __str__(self):
        return self.value

    @property
    def message(self) -> str:
        return STATUS_MESSAGES[self]

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

# Text shown on the website for each status
STATUS_MESSAGES: dict[WorldStatus, str] = {
    WorldStatus.OPEN: "ワールドは開放中です",
    WorldStatus.MAINTENANCE: "ワールドはメンテナンス中です",
    WorldStatus.CLOSED: "ワールドは未開放です",
}

STATUS_LABELS: dict[WorldStatus, str] = {
    WorldStatus.OPEN: "開放中",
    WorldStatus.MAINTENANCE: "メンテ中",
    WorldStatus.CLOSED: "未開放",
}

class StatusStyle(str, enum.Enum):
    """How the status field is rendered in the published file"""
    CODE = "code"  # "maintenance"
    LABEL = "label"  # "メンテ中"

    def __str__(self):
        return self.value

def format_timestamp(dt: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a `Z` suffix"""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

class StatusRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: WorldStatus
    human_message: str = Field(alias="message")
    last_updated: datetime = Field(alias="lastUpdated")
    epoch_millis: int = Field(alias="timestamp")

    @classmethod
    def create(cls, status: WorldStatus, epoch_millis: int):
        return cls(
            status=status,
            human_message=status.message,
            last_updated=datetime.fromtimestamp(epoch_millis / 1000, tz=timezone.utc),
            epoch_millis=epoch_millis
        )

    @field_serializer("last_updated")
    def serialize_last_updated(self, value: datetime) -> str:
        return format_timestamp(value)

    def to_json(self, style: StatusStyle=StatusStyle.CODE, indent: int | None=2) -> str:
        data = self.model_dump(mode="json", by_alias=True)
        if style == StatusStyle.LABEL:
            data["status"] = self.status.label
        return json.dumps(data, ensure_ascii=False, indent=indent)
