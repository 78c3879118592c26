"""
Video Metadata Tests

Tests for VideoMetadata showing:
- Loading camelCase JSON documents
- Merging file values over flags
- Building the videos.insert body
- publishAt rules

To run these tests:
    pytest tests/upload/test_video_metadata.py -v
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from upload.models.video_metadata import VideoMetadata, format_youtube_date, parse_date

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# LOADING TESTS
# =============================================================================


@pytest.mark.unit
def test_from_dict_maps_camel_case_keys():
    metadata = VideoMetadata.from_dict(
        {
            "title": "Holiday",
            "tags": ["beach", "sun"],
            "categoryId": "22",
            "privacyStatus": "unlisted",
            "publicStatsViewable": True,
            "recordingDate": "2026-08-01",
            "playlistIds": ["PL1", "PL2"],
            "unknownKey": "ignored",
        },
    )

    assert metadata.title == "Holiday"
    assert metadata.tags == ["beach", "sun"]
    assert metadata.category_id == "22"
    assert metadata.privacy_status == "unlisted"
    assert metadata.public_stats_viewable is True
    assert metadata.recording_date == datetime(2026, 8, 1, tzinfo=timezone.utc)
    assert metadata.playlist_ids == ["PL1", "PL2"]


@pytest.mark.unit
def test_from_dict_rejects_non_objects():
    with pytest.raises(ValueError):
        VideoMetadata.from_dict(["not", "an", "object"])


@pytest.mark.unit
def test_from_dict_rejects_bad_dates():
    with pytest.raises(ValueError):
        VideoMetadata.from_dict({"publishAt": "next tuesday"})


@pytest.mark.unit
def test_from_json_file(tmp_path):
    path = tmp_path / "meta.json"
    path.write_text(json.dumps({"title": "From file", "language": "fr"}))

    metadata = VideoMetadata.from_json_file(path)

    assert metadata.title == "From file"
    assert metadata.language == "fr"


@pytest.mark.unit
def test_from_json_file_invalid_json(tmp_path):
    path = tmp_path / "meta.json"
    path.write_text("{")

    with pytest.raises(ValueError):
        VideoMetadata.from_json_file(path)


# =============================================================================
# MERGE TESTS
# =============================================================================


@pytest.mark.unit
def test_merge_keeps_set_fields_and_fills_blanks():
    from_file = VideoMetadata(title="File title", tags=[])
    flags = VideoMetadata(title="Flag title", description="Flag text", tags=["flag"])

    merged = from_file.merge(flags)

    assert merged.title == "File title"
    assert merged.description == "Flag text"
    assert merged.tags == ["flag"]
    assert from_file.description == ""  # original untouched


@pytest.mark.unit
def test_merge_notify_subscribers_requires_both():
    quiet_flags = VideoMetadata(notify_subscribers=False)

    assert VideoMetadata().merge(quiet_flags).notify_subscribers is False
    assert VideoMetadata().merge(VideoMetadata()).notify_subscribers is True


# =============================================================================
# RESOURCE BODY TESTS
# =============================================================================


@pytest.mark.unit
def test_resource_body_full():
    metadata = VideoMetadata(
        title="Holiday",
        description="Sun",
        tags=["beach"],
        category_id="22",
        language="en",
        privacy_status="public",
        embeddable=True,
        license="creativeCommon",
        recording_date=datetime(2026, 8, 1, tzinfo=timezone.utc),
        location_description="Beach",
    )

    body = metadata.to_resource_body(now=NOW)

    assert body["snippet"] == {
        "title": "Holiday",
        "description": "Sun",
        "tags": ["beach"],
        "categoryId": "22",
        "defaultLanguage": "en",
        "defaultAudioLanguage": "en",
    }
    assert body["status"] == {
        "privacyStatus": "public",
        "embeddable": True,
        "license": "creativeCommon",
    }
    assert body["recordingDetails"] == {
        "recordingDate": "2026-08-01T00:00:00.000Z",
        "locationDescription": "Beach",
    }


@pytest.mark.unit
def test_resource_body_leaves_out_blank_fields():
    body = VideoMetadata(title="Bare").to_resource_body(now=NOW)

    assert body["snippet"] == {"title": "Bare", "description": ""}
    assert body["status"] == {}
    assert body["recordingDetails"] == {}


# =============================================================================
# PUBLISH AT TESTS
# =============================================================================


@pytest.mark.unit
def test_publish_at_private_future():
    later = NOW + timedelta(days=2)
    metadata = VideoMetadata(privacy_status="private", publish_at=later)

    body = metadata.to_resource_body(now=NOW)

    assert body["status"]["publishAt"] == format_youtube_date(later)


@pytest.mark.unit
def test_publish_at_in_the_past_publishes_now():
    metadata = VideoMetadata(privacy_status="private", publish_at=NOW - timedelta(days=1))

    assert metadata.resolve_publish_at(NOW) == NOW


@pytest.mark.unit
def test_publish_at_ignored_unless_private(caplog):
    metadata = VideoMetadata(privacy_status="public", publish_at=NOW + timedelta(days=1))

    body = metadata.to_resource_body(now=NOW)

    assert "publishAt" not in body["status"]
    assert "publishAt can only be used" in caplog.text


# =============================================================================
# DATE TESTS
# =============================================================================


@pytest.mark.unit
def test_parse_date_with_offset():
    parsed = parse_date("2026-11-01T10:00:00+01:00")

    assert format_youtube_date(parsed) == "2026-11-01T09:00:00.000Z"


@pytest.mark.unit
def test_parse_date_requires_string():
    with pytest.raises(ValueError):
        parse_date(20261101)
