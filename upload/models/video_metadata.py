"""
Video Metadata Models

Data class describing the YouTube resource created by an upload.

Metadata comes from two places:
- Command line flags
- An optional JSON file (camelCase keys, as the YouTube API uses)

Values from the JSON file win; flags fill whatever the file left blank.

Example JSON file:
    {
        "title": "My Video",
        "description": "Shot on a Tuesday",
        "tags": ["travel", "vlog"],
        "privacyStatus": "private",
        "publishAt": "2026-11-01T10:00:00+01:00",
        "recordingDate": "2026-10-18",
        "playlistIds": ["PLxxxxxxxxxx"]
    }
"""

import json
import logging
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from upload.constants import (
    INPUT_DATE_FORMAT,
    INPUT_DATETIME_FORMAT,
    SCHEDULED_PRIVACY_STATUS,
    YOUTUBE_DATE_FORMAT,
)

logger = logging.getLogger(__name__)

# JSON key -> VideoMetadata attribute
JSON_FIELDS = {
    "title": "title",
    "description": "description",
    "tags": "tags",
    "categoryId": "category_id",
    "privacyStatus": "privacy_status",
    "language": "language",
    "embeddable": "embeddable",
    "license": "license",
    "publicStatsViewable": "public_stats_viewable",
    "publishAt": "publish_at",
    "recordingDate": "recording_date",
    "locationDescription": "location_description",
    "playlistIds": "playlist_ids",
}


@dataclass
class VideoMetadata:
    """
    Metadata of one video upload.

    Empty values (None, "", []) mean "not set" and are left out of the
    request body.
    """

    # Snippet
    title: str = ""
    description: str = ""
    tags: List[str] = field(default_factory=list)
    category_id: str = ""
    language: str = ""  # defaultLanguage / defaultAudioLanguage

    # Status
    privacy_status: str = ""
    embeddable: bool = False
    license: str = ""
    public_stats_viewable: bool = False
    publish_at: Optional[datetime] = None  # Only honored for private videos

    # Recording details
    recording_date: Optional[datetime] = None
    location_description: str = ""

    # Post-upload
    playlist_ids: List[str] = field(default_factory=list)
    notify_subscribers: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VideoMetadata":
        """
        Create VideoMetadata from a parsed JSON document.

        Raises:
            ValueError: If a date is malformed or the document isn't an object
        """
        if not isinstance(data, dict):
            raise ValueError("Metadata JSON must be an object")

        values: Dict[str, Any] = {}
        for key, attribute in JSON_FIELDS.items():
            if key not in data or data[key] is None:
                continue
            value = data[key]
            if attribute in ("publish_at", "recording_date"):
                value = parse_date(value)
            values[attribute] = value

        return cls(**values)

    @classmethod
    def from_json_file(cls, path: Path) -> "VideoMetadata":
        """
        Load metadata from a JSON file.

        Args:
            path: Path to JSON file

        Returns:
            VideoMetadata with whatever the file sets

        Raises:
            OSError: If the file can't be read
            ValueError: If the file isn't valid metadata JSON
        """
        with open(path) as f:
            data = json.load(f)
        return cls.from_dict(data)

    def merge(self, defaults: "VideoMetadata") -> "VideoMetadata":
        """
        Fill blank fields from `defaults`.

        Args:
            defaults: Usually the values given as command line flags

        Returns:
            New VideoMetadata; fields set on self are kept
        """
        updates = {}
        for f in fields(self):
            if f.name == "notify_subscribers":
                continue
            if _is_blank(getattr(self, f.name)):
                updates[f.name] = getattr(defaults, f.name)
        updates["notify_subscribers"] = (
            self.notify_subscribers and defaults.notify_subscribers
        )
        return replace(self, **updates)

    def to_resource_body(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Build the body of a videos.insert request.

        Args:
            now: Current time (injectable for tests)

        Returns:
            Dictionary with snippet, status and recordingDetails parts
        """
        snippet: Dict[str, Any] = {
            "title": self.title,
            "description": self.description,
        }
        if self.tags:
            snippet["tags"] = list(self.tags)
        if self.category_id:
            snippet["categoryId"] = self.category_id
        if self.language:
            snippet["defaultLanguage"] = self.language
            snippet["defaultAudioLanguage"] = self.language

        status: Dict[str, Any] = {}
        if self.privacy_status:
            status["privacyStatus"] = self.privacy_status
        if self.embeddable:
            status["embeddable"] = True
        if self.license:
            status["license"] = self.license
        if self.public_stats_viewable:
            status["publicStatsViewable"] = True

        publish_at = self.resolve_publish_at(now)
        if publish_at is not None:
            status["publishAt"] = format_youtube_date(publish_at)

        recording_details: Dict[str, Any] = {}
        if self.recording_date is not None:
            recording_details["recordingDate"] = format_youtube_date(
                self.recording_date,
            )
        if self.location_description:
            recording_details["locationDescription"] = self.location_description

        return {
            "snippet": snippet,
            "status": status,
            "recordingDetails": recording_details,
        }

    def resolve_publish_at(self, now: Optional[datetime] = None) -> Optional[datetime]:
        """
        Scheduled publish time actually sent to YouTube.

        Returns:
            None if unset or the video isn't private; `now` if the requested
            time has already passed
        """
        if self.publish_at is None:
            return None

        if self.privacy_status != SCHEDULED_PRIVACY_STATUS:
            logger.warning(
                "publishAt can only be used when privacyStatus is 'private'. "
                "Ignoring publishAt...",
            )
            return None

        now = now or datetime.now(timezone.utc)
        if self.publish_at < now:
            logger.warning(
                f"publishAt ({self.publish_at}) is in the past. Publishing now instead",
            )
            return now

        return self.publish_at


def parse_date(value: str) -> datetime:
    """
    Parse a metadata date.

    Accepts "YYYY-MM-DD" (taken as UTC midnight) or
    "YYYY-MM-DDTHH:MM:SS+HH:MM".

    Raises:
        ValueError: If the value matches neither format
    """
    if not isinstance(value, str):
        raise ValueError(f"Date must be a string: {value!r}")
    if ":" in value:
        return datetime.strptime(value, INPUT_DATETIME_FORMAT)
    return datetime.strptime(value, INPUT_DATE_FORMAT).replace(tzinfo=timezone.utc)


def format_youtube_date(value: datetime) -> str:
    """Format an aware datetime as the API's UTC timestamp"""
    return value.astimezone(timezone.utc).strftime(YOUTUBE_DATE_FORMAT)


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == [] or value is False
