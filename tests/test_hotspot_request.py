"""
test_hotspot_request.py — Prompt, radius and response-schema contract.
"""

from gigmate.ai.hotspot_request import (
    FORECAST_RADIUS_KM,
    HOTSPOT_RESPONSE_SCHEMA,
    LIVE_RADIUS_KM,
    build_hotspot_request,
    serialize_location,
)
from gigmate.models.hotspot import FetchMode
from gigmate.models.location import DefaultLocation, Named, Precise


class TestSerializeLocation:

    def test_named_is_free_text(self):
        assert serialize_location(Named("Pune")) == "Pune"

    def test_precise_is_coordinate_pair(self):
        assert serialize_location(Precise(19.076, 72.8777)) == "19.076, 72.8777"

    def test_default_is_default_centroid(self):
        assert serialize_location(DefaultLocation()) == "30.7333, 76.7794"


class TestLiveRequest:

    def setup_method(self):
        self.request = build_hotspot_request(Named("Mumbai"), ["Zomato", "Swiggy"], FetchMode.LIVE)

    def test_radius(self):
        assert self.request.radius_km == LIVE_RADIUS_KM == 35
        assert "35km radius of Mumbai" in self.request.prompt

    def test_platforms_in_prompt(self):
        assert "Zomato, Swiggy hotspots" in self.request.prompt

    def test_no_platforms_defaults_to_gig_worker(self):
        request = build_hotspot_request(Named("Mumbai"), [], FetchMode.LIVE)
        assert "gig worker hotspots" in request.prompt

    def test_mock_key(self):
        assert self.request.response_key == "hotspots_live"


class TestForecastRequest:

    def setup_method(self):
        self.request = build_hotspot_request(Precise(12.97, 77.59), ["Uber"], FetchMode.PREDICTED)

    def test_radius(self):
        assert self.request.radius_km == FORECAST_RADIUS_KM == 100
        assert "100km radius of 12.97, 77.59" in self.request.prompt

    def test_mentions_time_weather_events(self):
        prompt = self.request.prompt
        assert "next 4 hours" in prompt
        assert "weather" in prompt and "time of day" in prompt and "events" in prompt

    def test_platform_line(self):
        assert "Platforms: Uber." in self.request.prompt

    def test_no_platform_line_when_empty(self):
        request = build_hotspot_request(Named("Pune"), [], FetchMode.PREDICTED)
        assert "Platforms:" not in request.prompt


class TestResponseSchema:

    def test_generation_config_forces_json(self):
        request = build_hotspot_request(Named("Pune"), [], FetchMode.LIVE)
        assert request.generation_config["response_mime_type"] == "application/json"
        assert request.generation_config["response_schema"] is HOTSPOT_RESPONSE_SCHEMA

    def test_schema_declares_every_hotspot_field(self):
        item = HOTSPOT_RESPONSE_SCHEMA["items"]
        assert HOTSPOT_RESPONSE_SCHEMA["type"] == "ARRAY"
        assert set(item["properties"]) == {
            "area", "intensity", "demandReason", "expectedIncentive", "distance", "coordinates",
        }
        assert set(item["required"]) == set(item["properties"])

    def test_schema_types(self):
        props = HOTSPOT_RESPONSE_SCHEMA["items"]["properties"]
        assert props["intensity"]["type"] == "NUMBER"
        assert props["expectedIncentive"]["type"] == "STRING"
        assert props["coordinates"]["properties"] == {"lat": {"type": "NUMBER"}, "lng": {"type": "NUMBER"}}
