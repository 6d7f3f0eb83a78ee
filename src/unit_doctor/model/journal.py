"""Journal record model - one line of `journalctl --output=json`."""

from pydantic import BaseModel, ConfigDict, Field


class LogEntry(BaseModel):
    """A single journald record.

    Only MESSAGE is needed by the matchers today; every other journal
    field is ignored on parse.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    message: str = Field(alias="MESSAGE")

    @classmethod
    def from_json_line(cls, line: str | bytes) -> "LogEntry":
        """Parse one JSON record. Raises pydantic.ValidationError when malformed."""
        return cls.model_validate_json(line)
