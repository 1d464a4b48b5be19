from gigmate.models.hotspot import Coordinates, Hotspot
from gigmate.services.result_view import marker_tone, top_hotspots


def _spot(area, intensity):
    return Hotspot(area=area, intensity=intensity, coordinates=Coordinates(lat=30.7, lng=76.7))


class TestTopHotspots:

    def test_ranked_by_intensity_and_truncated(self):
        spots = [_spot("A", 5), _spot("B", 9), _spot("C", 7), _spot("D", 10)]
        assert [h.area for h in top_hotspots(spots, 3)] == ["D", "B", "C"]

    def test_ties_keep_original_order(self):
        spots = [_spot("A", 7), _spot("B", 7), _spot("C", 7)]
        assert [h.area for h in top_hotspots(spots, 2)] == ["A", "B"]

    def test_short_list(self):
        assert len(top_hotspots([_spot("A", 3)], 3)) == 1


class TestMarkerTone:

    def test_hot_above_eight(self):
        assert marker_tone(_spot("A", 9)) == "hot"
        assert marker_tone(_spot("A", 8)) == "normal"
