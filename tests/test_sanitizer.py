"""Tests for payload sanitizing and decoding."""

import json

import pytest

from prediction_client.sanitizer import ResponseDecodeError, decode_prediction, sanitize

from tests.conftest import prediction_payload


class TestSanitize:
    """Test cases for extended-JSON key rewriting."""

    def test_renames_wrapper_keys_inside_detections(self):
        """$oid and $date keys nested in detections are renamed."""
        raw = (
            '{"filename": "a.jpg", "detections": [{"label": "x", "confidence": 0.5,'
            ' "_id": {"$oid": "1"}, "seen": {"$date": "2024-01-01"}}]}'
        )

        result = sanitize(raw)

        data = json.loads(result)
        det = data["detections"][0]
        assert det["_id"] == {"oid": "1"}
        assert det["seen"] == {"date": "2024-01-01"}
        assert "$oid" not in result
        assert "$date" not in result

    def test_string_values_are_untouched(self):
        """Values containing wrapper-like text are not rewritten."""
        raw = '{"note": "price in $oid and $date", "tags": ["$oid"]}'

        data = json.loads(sanitize(raw))

        assert data["note"] == "price in $oid and $date"
        assert data["tags"] == ["$oid"]

    def test_other_dollar_keys_are_untouched(self):
        """Only the two known wrapper keys are renamed."""
        data = json.loads(sanitize('{"$numberLong": "5"}'))
        assert data == {"$numberLong": "5"}

    def test_invalid_json_raises(self):
        """Invalid JSON raises ResponseDecodeError."""
        with pytest.raises(ResponseDecodeError, match="Invalid JSON"):
            sanitize("<html>502 Bad Gateway</html>")

    def test_deeply_nested_json_raises(self):
        """Nesting beyond the parser's depth limit is a decode error."""
        with pytest.raises(ResponseDecodeError, match="nested too deeply"):
            sanitize("[" * 100000 + "]" * 100000)


class TestDecodePrediction:
    """Test cases for decode_prediction."""

    def test_decodes_payload_with_wrapper_keys(self):
        """A payload with MongoDB wrapper keys decodes."""
        response = decode_prediction(
            prediction_payload("capture.jpg", ["Fuel Lid Close", "Fuel Lid Open"])
        )

        assert response.filename == "capture.jpg"
        assert [d.label for d in response.detections] == [
            "Fuel Lid Close",
            "Fuel Lid Open",
        ]
        assert response.detections[0].bounding_box.x2 == 110.0

    def test_empty_detections_decode(self):
        """An empty detections array is a valid response."""
        response = decode_prediction('{"filename": "a.jpg", "detections": []}')
        assert response.detections == ()

    def test_decode_error_is_value_error(self):
        """ResponseDecodeError can be caught as ValueError."""
        with pytest.raises(ValueError):
            decode_prediction("{not json")

    def test_non_object_root_raises(self):
        """A JSON array at the root is rejected."""
        with pytest.raises(ResponseDecodeError, match="JSON object"):
            decode_prediction('[{"label": "x"}]')

    def test_missing_detections_raises(self):
        """A response without detections does not match the schema."""
        with pytest.raises(ResponseDecodeError, match="shape"):
            decode_prediction('{"filename": "a.jpg"}')

    def test_detection_without_label_raises(self):
        """A detection missing its label is rejected, not dropped."""
        with pytest.raises(ResponseDecodeError):
            decode_prediction('{"detections": [{"confidence": 0.5}]}')
